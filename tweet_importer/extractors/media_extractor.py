"""
Normalization of media API payloads.

The API answers in three shapes:

* list endpoints (``timeline/``, ``search/``, ``media/``) return an array of
  items carrying a ``tweet_id`` key, either at the top level or nested one
  level down under an arbitrary key;
* single-item endpoints (``media2/``, ``latest/``) return
  ``{"response": {"type": ..., "download_url": ..., "thumbnail": ...}}``.

Functions here turn those into :class:`~tweet_importer.models.MediaDescriptor`
and :class:`~tweet_importer.models.SearchResult` objects, and render the post
content that references a descriptor.
"""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlparse

from ..models import MediaDescriptor, SearchResult
from ..utils.errors import NoMediaFoundError, UnsupportedMediaError

ID_FIELD = "tweet_id"

STATUS_URL_RE = re.compile(
    r"https?://(?:(?:www|m(?:obile)?)\.)?(?:x|twitter)\.com/(?:#!/)?(\w+)/status(?:es)?/(?P<id>\d+)"
)

POSTER_ATTR_RE = re.compile(r"""poster=['"](https?://[^'"]+)['"]""")


def extract_status_id(id_or_url: str) -> str:
    """Reduce a status URL to its numeric id; anything else is returned as-is."""
    value = (id_or_url or "").strip()
    match = STATUS_URL_RE.search(value)
    if match:
        return match.group("id")
    return value


def _has_id_field(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and isinstance(value[0], dict)
        and ID_FIELD in value[0]
    )


def find_media_list(payload: Any) -> List[Dict[str, Any]]:
    """Locate the list of media items in a list-endpoint payload.

    The list is accepted at the top level or as the first nested value whose
    first element has a ``tweet_id``.  An empty list is returned when nothing
    matches.
    """
    if _has_id_field(payload):
        return payload
    if isinstance(payload, dict):
        for value in payload.values():
            if _has_id_field(value):
                return value
    return []


def search_results_from_list(
    items: List[Dict[str, Any]], existing: Mapping[str, str]
) -> List[SearchResult]:
    """Convert raw list items to search results flagged with their import state."""
    results: List[SearchResult] = []
    for item in items:
        remote_id = str(item.get(ID_FIELD) or "")
        if not remote_id:
            continue
        post_url = existing.get(remote_id)
        results.append(
            SearchResult(
                id=remote_id,
                views=item.get("views") or 0,
                user_name=item.get("username") or "",
                thumbnail=item.get("thumbnail") or "",
                download_url=item.get("download_url") or "",
                is_imported=post_url is not None,
                post_url=post_url,
            )
        )
    return results


def _clean_url(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    url = value.strip()
    if urlparse(url).scheme not in ("http", "https"):
        return ""
    return url


def format_media_response(
    response: Any,
    *,
    remote_id: str = "",
    username: Optional[str] = None,
) -> MediaDescriptor:
    """Turn the ``response`` object of a single-item endpoint into a descriptor.

    :raises NoMediaFoundError: if ``response`` is empty or not an object.
    :raises UnsupportedMediaError: for unknown types or missing URLs.
    """
    if not response or not isinstance(response, dict):
        raise NoMediaFoundError()

    media_type = response.get("type") or ""
    src = _clean_url(response.get("download_url"))
    if media_type == "video":
        poster = _clean_url(response.get("thumbnail"))
        if not src or not poster:
            raise UnsupportedMediaError()
        return MediaDescriptor(id=remote_id, type="video", src=src, poster=poster, username=username)
    if media_type == "image":
        if not src:
            raise UnsupportedMediaError()
        return MediaDescriptor(id=remote_id, type="image", src=src, username=username)
    raise UnsupportedMediaError()


def normalize_single(payload: Any, **kwargs: Any) -> MediaDescriptor:
    """Normalize a ``{"response": {...}}`` payload."""
    response = payload.get("response") if isinstance(payload, dict) else None
    return format_media_response(response, **kwargs)


def content_as_string(descriptor: MediaDescriptor, title: str = "") -> str:
    """Render post content for ``descriptor``: a video shortcode or an img tag."""
    if descriptor.type == "video":
        return '[video src="{}" poster="{}"]'.format(
            html.escape(descriptor.src), html.escape(descriptor.poster or "")
        )
    if descriptor.type == "image":
        return '<img src="{}" alt="{}" />'.format(
            html.escape(descriptor.src), html.escape(title)
        )
    return ""


def find_poster_url(content: str) -> Optional[str]:
    match = POSTER_ATTR_RE.search(content or "")
    if not match:
        return None
    return html.unescape(match.group(1))
