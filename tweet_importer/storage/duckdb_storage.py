"""
DuckDB-backed site storage.

Posts, post metadata and attachment records live in three tables of a DuckDB
database file; attachment files are moved into a media directory.  URLs are
built the way a default WordPress install exposes them: ``/?p=<id>`` for
posts and ``/wp-content/uploads/<file>`` for media.  Pass ``":memory:"`` as the
database to get a throwaway store.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Dict, Iterable, Optional

import duckdb

from ..models import StoredPost
from ..utils.errors import StorageError
from .base import HostStorage

logger = logging.getLogger(__name__)

SCHEMA = [
    "CREATE SEQUENCE IF NOT EXISTS object_ids START 1",
    """
    CREATE TABLE IF NOT EXISTS posts (
        id BIGINT PRIMARY KEY DEFAULT nextval('object_ids'),
        title VARCHAR NOT NULL,
        content VARCHAR NOT NULL DEFAULT '',
        status VARCHAR NOT NULL DEFAULT 'draft',
        author BIGINT NOT NULL DEFAULT 1,
        post_type VARCHAR NOT NULL DEFAULT 'post',
        thumbnail_id BIGINT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS postmeta (
        post_id BIGINT NOT NULL,
        meta_key VARCHAR NOT NULL,
        meta_value VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attachments (
        id BIGINT PRIMARY KEY DEFAULT nextval('object_ids'),
        post_id BIGINT,
        filename VARCHAR NOT NULL,
        path VARCHAR NOT NULL
    )
    """,
]


class DuckDBStorage(HostStorage):
    def __init__(self, database: str, *, site_url: str, media_dir: str) -> None:
        if database != ":memory:":
            os.makedirs(os.path.dirname(database) or ".", exist_ok=True)
        self.con = duckdb.connect(database=database, read_only=False)
        self.site_url = site_url.rstrip("/")
        self.media_dir = media_dir
        for statement in SCHEMA:
            self.con.execute(statement)

    def close(self) -> None:
        self.con.close()

    def create_post(self, *, title, content="", status="draft", author=1, post_type="post") -> int:
        try:
            row = self.con.execute(
                "INSERT INTO posts (title, content, status, author, post_type) "
                "VALUES (?, ?, ?, ?, ?) RETURNING id",
                [title, content, status, int(author), post_type],
            ).fetchone()
        except (duckdb.Error, ValueError) as e:
            raise StorageError(f"Could not create post: {e}") from e
        return int(row[0])

    def update_post(self, post_id, *, content=None, status=None) -> None:
        if self.get_post(post_id) is None:
            raise StorageError(f"Post {post_id} does not exist.")
        if content is not None:
            self.con.execute("UPDATE posts SET content = ? WHERE id = ?", [content, post_id])
        if status is not None:
            self.con.execute("UPDATE posts SET status = ? WHERE id = ?", [status, post_id])

    def get_post(self, post_id) -> Optional[StoredPost]:
        row = self.con.execute(
            "SELECT id, title, content, status, author, post_type, thumbnail_id FROM posts WHERE id = ?",
            [post_id],
        ).fetchone()
        if row is None:
            return None
        return StoredPost(
            id=row[0], title=row[1], content=row[2], status=row[3],
            author=row[4], post_type=row[5], thumbnail_id=row[6],
        )

    def add_post_meta(self, post_id, key, value) -> None:
        if self.get_post(post_id) is None:
            raise StorageError(f"Post {post_id} does not exist.")
        self.con.execute(
            "INSERT INTO postmeta (post_id, meta_key, meta_value) VALUES (?, ?, ?)",
            [post_id, key, value],
        )

    def find_posts_by_meta(self, key: str, values: Iterable[str]) -> Dict[str, int]:
        wanted = sorted(set(values))
        if not wanted:
            return {}
        rows = self.con.execute(
            "SELECT meta_value, min(post_id) FROM postmeta "
            "WHERE meta_key = ? AND list_contains(?, meta_value) GROUP BY meta_value",
            [key, wanted],
        ).fetchall()
        return {value: int(post_id) for value, post_id in rows}

    def get_permalink(self, post_id) -> str:
        return f"{self.site_url}/?p={post_id}"

    def register_attachment(self, path, filename, post_id=None) -> int:
        os.makedirs(self.media_dir, exist_ok=True)
        target = self._unique_target(filename)
        try:
            shutil.move(path, target)
        except OSError as e:
            raise StorageError(f"Could not store {filename}: {e}") from e
        try:
            row = self.con.execute(
                "INSERT INTO attachments (post_id, filename, path) VALUES (?, ?, ?) RETURNING id",
                [post_id, os.path.basename(target), target],
            ).fetchone()
        except duckdb.Error as e:
            os.remove(target)
            raise StorageError(f"Could not register {filename}: {e}") from e
        logger.debug("Stored attachment %s at %s", row[0], target)
        return int(row[0])

    def _unique_target(self, filename: str) -> str:
        base, ext = os.path.splitext(filename)
        target = os.path.join(self.media_dir, filename)
        n = 1
        while os.path.exists(target):
            target = os.path.join(self.media_dir, f"{base}-{n}{ext}")
            n += 1
        return target

    def get_attachment_url(self, attachment_id) -> str:
        row = self.con.execute("SELECT filename FROM attachments WHERE id = ?", [attachment_id]).fetchone()
        if row is None:
            raise StorageError(f"Attachment {attachment_id} does not exist.")
        return f"{self.site_url}/wp-content/uploads/{row[0]}"

    def delete_attachment(self, attachment_id) -> None:
        row = self.con.execute("SELECT path FROM attachments WHERE id = ?", [attachment_id]).fetchone()
        if row is None:
            return
        if os.path.exists(row[0]):
            os.remove(row[0])
        self.con.execute("UPDATE posts SET thumbnail_id = NULL WHERE thumbnail_id = ?", [attachment_id])
        self.con.execute("DELETE FROM attachments WHERE id = ?", [attachment_id])

    def set_post_thumbnail(self, post_id, attachment_id) -> None:
        self.con.execute("UPDATE posts SET thumbnail_id = ? WHERE id = ?", [attachment_id, post_id])

    def delete_post(self, post_id) -> None:
        self.con.execute("DELETE FROM postmeta WHERE post_id = ?", [post_id])
        self.con.execute("DELETE FROM posts WHERE id = ?", [post_id])
