"""
Host storage interface.

Posts, post metadata and media attachments belong to the site the importer
writes into.  Everything the importer needs from that site goes through
:class:`HostStorage`, so the import workflow can run against a database
backend or the in-memory fake used in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from ..models import StoredPost


class HostStorage(ABC):
    @abstractmethod
    def create_post(
        self,
        *,
        title: str,
        content: str = "",
        status: str = "draft",
        author: int = 1,
        post_type: str = "post",
    ) -> int:
        """Insert a post and return its id.  Raises ``StorageError`` on refusal."""

    @abstractmethod
    def update_post(
        self,
        post_id: int,
        *,
        content: Optional[str] = None,
        status: Optional[str] = None,
    ) -> None: ...

    @abstractmethod
    def get_post(self, post_id: int) -> Optional[StoredPost]: ...

    @abstractmethod
    def add_post_meta(self, post_id: int, key: str, value: str) -> None: ...

    @abstractmethod
    def find_posts_by_meta(self, key: str, values: Iterable[str]) -> Dict[str, int]:
        """Return ``{meta value: post id}`` for every value that has a post.

        Implementations answer with a single query regardless of how many
        values are asked for.
        """

    @abstractmethod
    def get_permalink(self, post_id: int) -> str: ...

    @abstractmethod
    def register_attachment(self, path: str, filename: str, post_id: Optional[int] = None) -> int:
        """Take ownership of the file at ``path`` and return an attachment id."""

    @abstractmethod
    def get_attachment_url(self, attachment_id: int) -> str: ...

    @abstractmethod
    def delete_attachment(self, attachment_id: int) -> None:
        """Remove the attachment record and its file."""

    @abstractmethod
    def set_post_thumbnail(self, post_id: int, attachment_id: int) -> None: ...

    @abstractmethod
    def delete_post(self, post_id: int) -> None:
        """Delete the post and all of its metadata."""
