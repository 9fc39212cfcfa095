"""
High-level orchestration of media imports.

This module defines :class:`MediaImportTool`, the service object that ties
together the API client, the payload normalizers, the duplicate tracker, the
sideloader and the site storage.  It is built once from
:class:`~tweet_importer.settings.ImporterSettings` and handed to the request
handlers and the command line interface.

An import of one descriptor goes through these states::

    validated -> duplicate checked -> post created (draft, remote id recorded)
      -> poster attached (optional) -> asset attached -> published

If the primary asset cannot be downloaded once the post exists, the post, its
metadata and any poster already attached are removed again and the import
fails with ``video_download_failed``.

Detailed success and failure information is recorded using the
:mod:`tweet_importer.utils.errors` module.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from .clients.api_client import RemoteApiClient
from .duplicates import DuplicateTracker
from .extractors.media_extractor import (
    content_as_string,
    extract_status_id,
    find_media_list,
    find_poster_url,
    normalize_single,
    search_results_from_list,
)
from .models import REMOTE_ID_META_KEY, ImportResult, MediaDescriptor, SearchResult
from .settings import ImporterSettings, load_settings
from .sideloader import MediaSideloader
from .storage.base import HostStorage
from .utils.errors import (
    DuplicateError,
    ImporterError,
    InvalidSearchTypeError,
    MissingDataError,
    NoContentError,
    StorageError,
    VideoDownloadFailedError,
    report_error,
    report_ok,
)

logger = logging.getLogger(__name__)

SEARCH_ENDPOINTS: Dict[str, str] = {
    "username": "timeline/",
    "keywords": "search/",
    "tweet": "media/",
}


class MediaImportTool:
    """
    Encapsulates the state and behavior required to search the media API and
    import its results into the site.  Collaborators can be injected; by
    default they are built from the settings.
    """

    def __init__(
        self,
        settings: Optional[ImporterSettings] = None,
        *,
        config_file: Optional[str] = None,
        storage: Optional[HostStorage] = None,
        client: Optional[RemoteApiClient] = None,
        sideloader: Optional[MediaSideloader] = None,
    ) -> None:
        if settings is None:
            settings = load_settings(config_file) if config_file else load_settings()
        self.settings = settings

        if storage is None:
            from .storage.duckdb_storage import DuckDBStorage

            storage = DuckDBStorage(
                settings.storage.database,
                site_url=settings.storage.site_url,
                media_dir=settings.storage.media_dir,
            )
        self.storage = storage
        self.client = client or RemoteApiClient(
            settings.api_base_url,
            timeout=settings.api_timeout,
            user_agent=settings.user_agent,
        )
        self.sideloader = sideloader or MediaSideloader(
            storage,
            timeout=settings.download_timeout,
            user_agent=settings.user_agent,
        )
        self.duplicates = DuplicateTracker(storage)

    def log_message(self, message: str, level: str = "INFO") -> None:
        logger.log(logging.getLevelName(level), message)
        os.makedirs(self.settings.report_dir, exist_ok=True)
        with open(os.path.join(self.settings.report_dir, "import.log"), "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    def _require_api(self) -> None:
        self.settings.require_api_base_url()

    # ------------------------------------------------------------------
    # Remote lookups
    # ------------------------------------------------------------------

    def search_videos(self, search_type: str, query: str) -> List[SearchResult]:
        """Search by ``username``, ``keywords`` or ``tweet`` and flag imported hits."""
        self._require_api()
        endpoint = SEARCH_ENDPOINTS.get(search_type)
        if endpoint is None:
            raise InvalidSearchTypeError()

        payload = self.client.get(endpoint + quote(query.strip(), safe=""))
        items = find_media_list(payload)
        if not items:
            return []
        existing = self.duplicates.find_existing(str(item.get("tweet_id")) for item in items)
        return search_results_from_list(items, existing)

    def get_media_by_status(self, id_or_url: str) -> MediaDescriptor:
        """Fetch the media attached to one status, given its id or URL."""
        self._require_api()
        status_id = extract_status_id(id_or_url)
        if not status_id:
            raise MissingDataError("No value provided.")
        payload = self.client.get("media2/" + quote(status_id, safe=""))
        return normalize_single(payload, remote_id=status_id)

    def get_media_by_user(self, username: str) -> MediaDescriptor:
        """Fetch the most recent media posted by ``username``."""
        self._require_api()
        username = username.strip()
        if not username:
            raise MissingDataError("No value provided.")
        payload = self.client.get("latest/" + quote(username, safe=""))
        return normalize_single(payload, username=username)

    # ------------------------------------------------------------------
    # Imports from search results
    # ------------------------------------------------------------------

    def _create_post_from_descriptor(self, descriptor: MediaDescriptor) -> int:
        """Import ``descriptor`` as a published post and return the post id.

        :raises MissingDataError: if the id, source or (for videos) poster URL
            is missing.
        :raises DuplicateError: if the remote id was imported before.  No
            download is attempted.
        :raises VideoDownloadFailedError: if the primary asset cannot be
            sideloaded.  The post created for it is deleted again.
        """
        if not descriptor.id:
            raise MissingDataError("Missing video ID.")
        if not descriptor.src or (descriptor.type == "video" and not descriptor.poster):
            raise MissingDataError("Missing video or poster URL.")
        if self.duplicates.is_duplicate(descriptor.id):
            raise DuplicateError()

        label = "Video" if descriptor.type == "video" else "Image"
        title = (f"{descriptor.username} - " if descriptor.username else "") + f"{label} {descriptor.id}"

        post_id = self.storage.create_post(title=title, status="draft")
        thumbnail_id: Optional[int] = None
        asset_id: Optional[int] = None
        try:
            self.storage.add_post_meta(post_id, REMOTE_ID_META_KEY, descriptor.id)

            if descriptor.poster:
                try:
                    thumbnail_id = self.sideloader.sideload(descriptor.poster, post_id)
                    self.storage.set_post_thumbnail(post_id, thumbnail_id)
                except ImporterError as e:
                    self.log_message(f"Poster for {descriptor.id} not imported: {e.message}", "WARNING")

            try:
                asset_id = self.sideloader.sideload(descriptor.src, post_id)
            except ImporterError as e:
                raise VideoDownloadFailedError(f"Failed to download video file: {e.message}") from e

            local = MediaDescriptor(
                id=descriptor.id,
                type=descriptor.type,
                src=self.storage.get_attachment_url(asset_id),
                poster=self.storage.get_attachment_url(thumbnail_id) if thumbnail_id else "",
            )
            self.storage.update_post(post_id, content=content_as_string(local, title), status="publish")
        except (VideoDownloadFailedError, StorageError):
            self._roll_back(post_id, thumbnail_id, asset_id)
            raise
        return post_id

    def _roll_back(self, post_id: int, *attachment_ids: Optional[int]) -> None:
        self.log_message(f"Rolling back post {post_id}", "WARNING")
        for attachment_id in attachment_ids:
            if attachment_id is not None:
                self.storage.delete_attachment(attachment_id)
        self.storage.delete_post(post_id)

    def import_from_descriptor(self, descriptor: MediaDescriptor) -> ImportResult:
        """Import one descriptor and describe the outcome instead of raising.

        A missing API URL still raises ``ConfigError`` before any work starts.
        """
        self._require_api()
        item = {"id": descriptor.id, "title": descriptor.username}
        try:
            post_id = self._create_post_from_descriptor(descriptor)
        except ImporterError as e:
            report_error(e.code, item, e, report_dir=self.settings.report_dir)
            return ImportResult(
                remote_id=descriptor.id, success=False, error_code=e.code, error_message=e.message
            )
        post_url = self.storage.get_permalink(post_id)
        report_ok("POST_IMPORTED", item, {"post_id": post_id, "url": post_url}, report_dir=self.settings.report_dir)
        return ImportResult(remote_id=descriptor.id, success=True, post_id=post_id, post_url=post_url)

    def import_multiple(self, descriptors: Iterable[MediaDescriptor]) -> List[ImportResult]:
        """Import each descriptor in order; one failure does not stop the rest."""
        self._require_api()
        results = [self.import_from_descriptor(d) for d in descriptors]
        counts = summarize_results(results)
        self.log_message(f"Imported {counts['success']} item(s), {counts['failed']} failed.")
        return results

    # ------------------------------------------------------------------
    # Imports from status URLs and usernames
    # ------------------------------------------------------------------

    def create_post_from_bulk(self, url: str, title: str) -> int:
        """Create a published post embedding the remote media of ``url``."""
        descriptor = self.get_media_by_status(url)
        content = content_as_string(descriptor, title)
        if not content:
            raise NoContentError()
        return self.storage.create_post(title=title, content=content, status="publish")

    def import_from_lines(self, text: str) -> Dict[str, Any]:
        """Run the bulk importer over ``url|title`` lines.

        Returns ``success`` and ``failed`` counts plus one entry per line.
        """
        self._require_api()
        success = failed = 0
        results: List[Dict[str, Any]] = []
        for line in text.strip().splitlines():
            parts = line.strip().split("|")
            if len(parts) != 2:
                failed += 1
                results.append({"line": line, "success": False, "message": "Expected 'url|title'."})
                continue
            url, title = parts[0].strip(), parts[1].strip()
            try:
                post_id = self.create_post_from_bulk(url, title)
            except ImporterError as e:
                failed += 1
                report_error(e.code, {"id": url, "title": title}, e, report_dir=self.settings.report_dir)
                results.append({"line": line, "success": False, "code": e.code, "message": e.message})
                continue
            success += 1
            report_ok("POST_CREATED", {"id": url, "title": title}, {"post_id": post_id}, report_dir=self.settings.report_dir)
            results.append({"line": line, "success": True, "post_id": post_id})
        return {"success": success, "failed": failed, "results": results}

    def import_to_media_library(self, url: str) -> int:
        """Sideload the media of a status into the library without a post."""
        descriptor = self.get_media_by_status(url)
        attachment_id = self.sideloader.sideload(descriptor.src)
        report_ok("MEDIA_IMPORTED", {"id": descriptor.id}, {"attachment_id": attachment_id}, report_dir=self.settings.report_dir)
        return attachment_id

    def create_post_from_user(
        self,
        username: str,
        post_title: Optional[str] = None,
        post_status: str = "draft",
        post_author: int = 1,
    ) -> int:
        descriptor = self.get_media_by_user(username)
        title = post_title or f"Media from {username} on {datetime.now(timezone.utc):%Y-%m-%d}"
        content = content_as_string(descriptor, title)
        if not content:
            raise NoContentError("Could not generate post content from the fetched media.")
        return self.storage.create_post(title=title, content=content, status=post_status, author=post_author)

    # ------------------------------------------------------------------
    # Featured image detection
    # ------------------------------------------------------------------

    def set_thumbnail_from_content(self, post_id: int) -> Optional[int]:
        """Use the first ``poster=`` URL in a saved post as its featured image.

        Runs only when ``set_featured_image`` is on, and skips auto-drafts and
        posts that already have a thumbnail.  Returns the new attachment id.
        """
        if not self.settings.featured_image_enabled:
            return None
        post = self.storage.get_post(post_id)
        if post is None or post.status == "auto-draft" or post.thumbnail_id:
            return None
        poster_url = find_poster_url(post.content)
        if not poster_url:
            return None
        try:
            attachment_id = self.sideloader.sideload(poster_url, post_id)
        except ImporterError as e:
            self.log_message(f"Featured image for post {post_id} not set: {e.message}", "WARNING")
            return None
        self.storage.set_post_thumbnail(post_id, attachment_id)
        return attachment_id


def summarize_results(results: Iterable[ImportResult]) -> Dict[str, int]:
    counts = {"success": 0, "failed": 0}
    for result in results:
        counts["success" if result.success else "failed"] += 1
    return counts
