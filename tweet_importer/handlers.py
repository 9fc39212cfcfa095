"""
Request handlers for the admin screens.

Each handler takes the decoded request payload and the set of capabilities
held by the current user, and returns ``(body, status)`` where ``body`` is a
JSON-ready envelope::

    {"success": True, "data": {...}}
    {"success": False, "data": {"message": "...", "code": "..."}}

The capability gate runs before anything else.  Failures of the underlying
operation are reported in the envelope; nothing is raised to the caller.
"""

from __future__ import annotations

import functools
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .import_tool import MediaImportTool, summarize_results
from .models import ImportResult, MediaDescriptor
from .utils.errors import ImporterError, UnauthorizedError

Response = Tuple[Dict[str, Any], int]


def json_success(data: Any = None) -> Response:
    return {"success": True, "data": data}, 200


def json_error(message: str, status: int = 200, code: Optional[str] = None) -> Response:
    data: Dict[str, Any] = {"message": message}
    if code:
        data["code"] = code
    return {"success": False, "data": data}, status


def require_capability(capabilities: Iterable[str], capability: str) -> None:
    if capability not in set(capabilities):
        raise UnauthorizedError()


def _decode(value: Any, default: Any) -> Any:
    # The browser posts nested data as JSON strings.
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value if value is not None else default


def _guarded(capability: str):
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(tool: MediaImportTool, payload: Dict[str, Any], capabilities: Iterable[str]) -> Response:
            try:
                require_capability(capabilities, capability)
            except UnauthorizedError as e:
                return json_error(e.message, 403, e.code)
            try:
                return fn(tool, payload or {})
            except ImporterError as e:
                return json_error(e.message, code=e.code)

        return wrapper

    return decorator


@_guarded("manage_options")
def search_videos(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    """Search the API and return results flagged with their import state."""
    results = tool.search_videos(str(payload.get("type", "")), str(payload.get("query", "")))
    return json_success({"videos": [r.model_dump(by_alias=True) for r in results]})


@_guarded("manage_options")
def import_single_video(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    data = _decode(payload.get("video_data"), None)
    if not data:
        return json_error("No video data provided.", code="missing_data")
    result = tool.import_from_descriptor(MediaDescriptor.from_search_payload(data))
    if not result.success:
        return json_error(result.error_message or "", code=result.error_code)
    return json_success({"post_id": result.post_id, "post_url": result.post_url})


@_guarded("manage_options")
def import_multiple_videos(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    items = _decode(payload.get("videos_data"), []) or []
    tool.settings.require_api_base_url()
    results: List[ImportResult] = []
    for data in items:
        try:
            descriptor = MediaDescriptor.from_search_payload(data)
        except ImporterError as e:
            remote_id = str((data or {}).get("id") or "")
            results.append(
                ImportResult(remote_id=remote_id, success=False, error_code=e.code, error_message=e.message)
            )
            continue
        results.append(tool.import_from_descriptor(descriptor))
    return json_success({"results": [r.to_payload() for r in results], **summarize_results(results)})


@_guarded("edit_posts")
def fetch_media_for_editor(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    value = str(payload.get("value") or "").strip()
    if not value:
        return json_error("No value provided.", 400, "missing_data")
    if payload.get("type") == "user":
        descriptor = tool.get_media_by_user(value)
    else:
        descriptor = tool.get_media_by_status(value)
    return json_success(descriptor.to_content_dict())


@_guarded("upload_files")
def media_library_import(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    url = str(payload.get("url") or "").strip()
    if not url:
        return json_error("Please provide a valid URL.", 400, "missing_data")
    attachment_id = tool.import_to_media_library(url)
    return json_success({"message": "Import successful!", "attachment_id": attachment_id})


@_guarded("edit_posts")
def save_post(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    """Run the featured image detection for a post that was just saved."""
    try:
        post_id = int(payload.get("post_id") or 0)
    except (TypeError, ValueError):
        post_id = 0
    if post_id <= 0:
        return json_error("No post ID provided.", 400, "missing_data")
    attachment_id = tool.set_thumbnail_from_content(post_id)
    return json_success({"post_id": post_id, "thumbnail_id": attachment_id})


@_guarded("publish_posts")
def bulk_import(tool: MediaImportTool, payload: Dict[str, Any]) -> Response:
    """Import ``url|title`` lines from the bulk importer form."""
    summary = tool.import_from_lines(str(payload.get("import_data") or ""))
    return json_success(summary)


__all__ = [
    "bulk_import",
    "fetch_media_for_editor",
    "import_multiple_videos",
    "import_single_video",
    "media_library_import",
    "save_post",
    "search_videos",
]
