"""
Site storage backends.

:class:`HostStorage` is the interface the import workflow writes through;
:class:`DuckDBStorage` persists to a DuckDB file and :class:`InMemoryStorage`
keeps everything in dictionaries.
"""

from .base import HostStorage
from .duckdb_storage import DuckDBStorage
from .memory import InMemoryStorage

__all__ = ["HostStorage", "DuckDBStorage", "InMemoryStorage"]
