"""
Download remote files and register them as local attachments.

:class:`MediaSideloader` streams a URL into a temporary file with a bounded
timeout and hands the file to the host storage.  Failures are reported as:

* :class:`~tweet_importer.utils.errors.DownloadFailedError` – nothing was
  downloaded, no local file is left behind;
* :class:`~tweet_importer.utils.errors.AttachFailedError` – the download
  worked but the storage refused it; the temporary file is removed.

Every successful call creates a new attachment, even for a URL that was
sideloaded before.
"""

from __future__ import annotations

import logging
import os
import posixpath
import tempfile
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from .settings import DOWNLOAD_TIMEOUT
from .storage.base import HostStorage
from .utils.errors import AttachFailedError, DownloadFailedError, ImporterError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def filename_from_url(url: str) -> str:
    name = posixpath.basename(unquote(urlparse(url).path))
    cleaned = "".join(ch if ch.isalnum() or ch in {"-", "_", "."} else "_" for ch in name)
    return cleaned or "download"


class MediaSideloader:
    def __init__(
        self,
        storage: HostStorage,
        *,
        timeout: float = DOWNLOAD_TIMEOUT,
        user_agent: str = "TweetImporter/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.storage = storage
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()

    def download(self, url: str) -> str:
        """Download ``url`` to a temporary file and return its path."""
        fd, tmp_path = tempfile.mkstemp(prefix="tweet-importer-")
        try:
            with os.fdopen(fd, "wb") as f:
                with self.session.get(
                    url, headers={"User-Agent": self.user_agent}, timeout=self.timeout, stream=True
                ) as resp:
                    resp.raise_for_status()
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except (requests.RequestException, OSError) as e:
            _remove_quietly(tmp_path)
            raise DownloadFailedError(f"Failed to download {url}: {e}") from e
        return tmp_path

    def sideload(self, url: str, post_id: Optional[int] = None) -> int:
        """Download ``url`` and register it, optionally owned by ``post_id``."""
        tmp_path = self.download(url)
        try:
            attachment_id = self.storage.register_attachment(tmp_path, filename_from_url(url), post_id)
        except ImporterError as e:
            _remove_quietly(tmp_path)
            raise AttachFailedError(f"Failed to register {url}: {e.message}") from e
        except OSError as e:
            _remove_quietly(tmp_path)
            raise AttachFailedError(f"Failed to register {url}: {e}") from e
        # Backends that copy instead of move leave the temporary file behind.
        _remove_quietly(tmp_path)
        logger.info("Sideloaded %s as attachment %s", url, attachment_id)
        return attachment_id


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
