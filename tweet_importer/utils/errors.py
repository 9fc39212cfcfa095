"""
Error types and structured logging helpers for media imports.

Every failure raised by the importer derives from :class:`ImporterError` and
carries a short machine ``code`` plus a human readable message.  Callers that
need to keep going after a failure (bulk imports, request handlers) catch the
base class and turn it into a result entry.

Two reporting functions are provided:

``report_error``
    Record an error that occurred for an item.  An optional exception can be
    supplied and will be serialized to the log.

``report_ok``
    Record a successful step for an item.  Additional key/value information
    can be attached to the entry via the ``extra`` parameter.

Entries are appended to JSON Lines files under the report directory so that
the information can be reviewed after a run.  The ``ERRORS`` dictionary maps
error or event codes to messages; unknown codes fall back to the code itself.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ERRORS: Dict[str, str] = {
    "missing_api_url": "API URL is not configured.",
    "transport_error": "Failed to reach the media API.",
    "json_decode_error": "Failed to decode API response.",
    "no_media_found": "Could not find media for this request.",
    "unsupported_media": "No compatible media found in the response.",
    "invalid_search_type": "Invalid search type provided.",
    "missing_data": "No video data provided.",
    "duplicate": "This video has already been imported.",
    "download_failed": "Failed to download file.",
    "attach_failed": "Failed to register the downloaded file.",
    "video_download_failed": "Failed to download video file.",
    "no_content": "Could not generate post content.",
    "storage_error": "The site storage rejected the operation.",
    "unauthorized": "Unauthorized",
    "POST_IMPORTED": "Post imported successfully",
    "POST_CREATED": "Post created successfully",
    "MEDIA_IMPORTED": "Media imported successfully",
}

DEFAULT_REPORT_DIR = os.path.join("reports", "import")


class ImporterError(Exception):
    """Base class for every failure surfaced by the importer."""

    code = "importer_error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        if code is not None:
            self.code = code
        self.message = message or ERRORS.get(self.code, self.code)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class ConfigError(ImporterError):
    code = "missing_api_url"


class TransportError(ImporterError):
    code = "transport_error"


class DecodeError(ImporterError):
    code = "json_decode_error"


class NoMediaFoundError(ImporterError):
    code = "no_media_found"


class UnsupportedMediaError(ImporterError):
    code = "unsupported_media"


class InvalidSearchTypeError(ImporterError):
    code = "invalid_search_type"


class MissingDataError(ImporterError):
    code = "missing_data"


class DuplicateError(ImporterError):
    code = "duplicate"


class DownloadFailedError(ImporterError):
    code = "download_failed"


class AttachFailedError(ImporterError):
    code = "attach_failed"


class VideoDownloadFailedError(ImporterError):
    code = "video_download_failed"


class NoContentError(ImporterError):
    code = "no_content"


class StorageError(ImporterError):
    code = "storage_error"


class UnauthorizedError(ImporterError):
    code = "unauthorized"


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def report_error(
    code: str,
    item: Dict[str, Any],
    exc: Optional[Exception] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> None:
    """Log an error event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    item:
        The media item associated with the error.  Only the ``id`` and
        ``title`` keys are referenced if present.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    report_dir:
        Directory holding ``errors.jsonl``.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "id": item.get("id"),
        "title": item.get("title"),
    }
    if exc is not None:
        entry["error"] = str(exc)
    logger.error("%s - %s", message, item.get("id", ""))
    _write_jsonl(os.path.join(report_dir, "errors.jsonl"), entry)


def report_ok(
    code: str,
    item: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> None:
    """Log a successful event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    item:
        The media item associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    report_dir:
        Directory holding ``success.jsonl``.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "id": item.get("id"),
        "title": item.get("title"),
    }
    if extra:
        entry.update(extra)
    logger.info("%s - %s", message, item.get("id", ""))
    _write_jsonl(os.path.join(report_dir, "success.jsonl"), entry)
