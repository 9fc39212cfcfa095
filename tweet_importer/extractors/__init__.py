"""
Payload normalizers.

This subpackage exposes helpers to extract status ids from URLs and to map
the media API's list and single-item responses to uniform descriptors.
"""

from .media_extractor import (
    content_as_string,
    extract_status_id,
    find_media_list,
    find_poster_url,
    format_media_response,
    normalize_single,
    search_results_from_list,
)

__all__ = [
    "content_as_string",
    "extract_status_id",
    "find_media_list",
    "find_poster_url",
    "format_media_response",
    "normalize_single",
    "search_results_from_list",
]
