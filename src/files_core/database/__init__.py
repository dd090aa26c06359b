"""
Database layer for file records.

``FileDatabase`` is the interface the persistence router consumes;
``SQLiteFileAdapter`` is the embedded implementation.
"""

from typing import Optional, Protocol

from files_core.models import ContentFilter, InlineContent, LogicalFileRecord
from files_core.settings import get_settings
from .sqlite_adapter import SQLiteFileAdapter


class FileDatabase(Protocol):
    """Row-level operations on file records and their content rows"""

    def persist(self, record: LogicalFileRecord, full_refresh: bool = True) -> LogicalFileRecord: ...

    def delete(self, file_id: int) -> None: ...

    def delete_content(self, content_id: int) -> None: ...

    def find_unique_match(self, query: ContentFilter) -> Optional[InlineContent]: ...


def get_file_database(db_path: Optional[str] = None) -> SQLiteFileAdapter:
    """Get a SQLite adapter for ``db_path`` (defaults to the configured path) with tables created"""
    adapter = SQLiteFileAdapter(db_path or get_settings().db_path)
    adapter.init_tables()
    return adapter


__all__ = ['FileDatabase', 'SQLiteFileAdapter', 'get_file_database']
