from __future__ import annotations

import itertools
import os
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import StoredPost
from ..utils.errors import StorageError
from .base import HostStorage


class InMemoryStorage(HostStorage):
    """Dict-backed storage.  Attachment files are read into memory and removed."""

    def __init__(self, site_url: str = "http://example.test") -> None:
        self.site_url = site_url.rstrip("/")
        self.posts: Dict[int, StoredPost] = {}
        self.meta: List[Tuple[int, str, str]] = []
        self.attachments: Dict[int, Dict[str, object]] = {}
        self.meta_queries = 0
        self._ids = itertools.count(1)

    def create_post(self, *, title, content="", status="draft", author=1, post_type="post") -> int:
        post_id = next(self._ids)
        self.posts[post_id] = StoredPost(
            id=post_id, title=title, content=content, status=status, author=author, post_type=post_type
        )
        return post_id

    def update_post(self, post_id, *, content=None, status=None) -> None:
        post = self.posts.get(post_id)
        if post is None:
            raise StorageError(f"Post {post_id} does not exist.")
        if content is not None:
            post.content = content
        if status is not None:
            post.status = status

    def get_post(self, post_id) -> Optional[StoredPost]:
        return self.posts.get(post_id)

    def add_post_meta(self, post_id, key, value) -> None:
        if post_id not in self.posts:
            raise StorageError(f"Post {post_id} does not exist.")
        self.meta.append((post_id, key, value))

    def find_posts_by_meta(self, key: str, values: Iterable[str]) -> Dict[str, int]:
        self.meta_queries += 1
        wanted = set(values)
        found: Dict[str, int] = {}
        for post_id, meta_key, meta_value in self.meta:
            if meta_key == key and meta_value in wanted:
                found.setdefault(meta_value, post_id)
        return found

    def get_permalink(self, post_id) -> str:
        return f"{self.site_url}/?p={post_id}"

    def register_attachment(self, path, filename, post_id=None) -> int:
        with open(path, "rb") as f:
            data = f.read()
        os.remove(path)
        attachment_id = next(self._ids)
        self.attachments[attachment_id] = {"filename": filename, "post_id": post_id, "data": data}
        return attachment_id

    def get_attachment_url(self, attachment_id) -> str:
        return f"{self.site_url}/wp-content/uploads/{self.attachments[attachment_id]['filename']}"

    def delete_attachment(self, attachment_id) -> None:
        self.attachments.pop(attachment_id, None)
        for post in self.posts.values():
            if post.thumbnail_id == attachment_id:
                post.thumbnail_id = None

    def set_post_thumbnail(self, post_id, attachment_id) -> None:
        self.posts[post_id].thumbnail_id = attachment_id

    def delete_post(self, post_id) -> None:
        self.posts.pop(post_id, None)
        self.meta = [m for m in self.meta if m[0] != post_id]
