from __future__ import annotations

from typing import Dict, Iterable, List

from .models import REMOTE_ID_META_KEY, ImportRecord
from .storage.base import HostStorage


class DuplicateTracker:
    """Read-only lookup of remote ids that already have a local post."""

    def __init__(self, storage: HostStorage, meta_key: str = REMOTE_ID_META_KEY) -> None:
        self.storage = storage
        self.meta_key = meta_key

    def find_records(self, remote_ids: Iterable[str]) -> List[ImportRecord]:
        """Return the import records for ``remote_ids`` with one storage query."""
        ids = {str(i) for i in remote_ids if i}
        if not ids:
            return []
        found = self.storage.find_posts_by_meta(self.meta_key, ids)
        return [ImportRecord(post_id=post_id, remote_id=remote_id) for remote_id, post_id in found.items()]

    def find_existing(self, remote_ids: Iterable[str]) -> Dict[str, str]:
        """Map every already-imported id in ``remote_ids`` to its post URL."""
        return {
            record.remote_id: self.storage.get_permalink(record.post_id)
            for record in self.find_records(remote_ids)
        }

    def is_duplicate(self, remote_id: str) -> bool:
        return bool(self.find_records([remote_id]))
