"""
SQLite adapter for file records and their inline content rows.
Metadata lives in ``files``; inline payloads live in ``file_contents``.
"""

import sqlite3
import logging
from datetime import datetime
from typing import Optional

from files_core.errors import FilesCriticalError
from files_core.models import (
    Compression,
    ContentFilter,
    InlineContent,
    LogicalFileRecord,
    PersistenceKind,
)

logger = logging.getLogger(__name__)

_FILE_COLUMNS = (
    "name", "persistence_kind", "compression", "encoding", "size", "base_path",
    "external_uuid", "external_version", "tag_id", "created_at", "modified_at",
)


class SQLiteFileAdapter:
    """Database adapter used by the persistence router"""

    def __init__(self, db_path: str = "files.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with foreign keys enforced"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_tables(self) -> None:
        """Create the files and file_contents tables"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS files (
                    file_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name VARCHAR(255) NOT NULL,
                    persistence_kind VARCHAR(20) NOT NULL,
                    compression VARCHAR(30) NOT NULL,
                    encoding VARCHAR(50),
                    size INTEGER,
                    base_path VARCHAR(500),
                    external_uuid VARCHAR(36),
                    external_version VARCHAR(1024),
                    tag_id VARCHAR(100),
                    created_at TIMESTAMP,
                    modified_at TIMESTAMP
                )
            ''')

            # No UNIQUE(file_id): stale rows from partial writes are reconciled by the router
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS file_contents (
                    content_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    file_id INTEGER NOT NULL,
                    content BLOB NOT NULL,
                    FOREIGN KEY (file_id) REFERENCES files(file_id) ON DELETE CASCADE
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_file_contents_file_id
                ON file_contents(file_id)
            ''')

            conn.commit()
            logger.info("File tables initialized successfully")
        finally:
            conn.close()

    @staticmethod
    def _file_values(record: LogicalFileRecord) -> tuple:
        return (
            record.name,
            record.persistence_kind.value,
            record.compression.value,
            record.encoding,
            record.size,
            record.base_path,
            record.external_uuid,
            record.external_version,
            record.tag_id,
            record.created_at.isoformat() if record.created_at else None,
            record.modified_at.isoformat() if record.modified_at else None,
        )

    def persist(self, record: LogicalFileRecord, full_refresh: bool = True) -> LogicalFileRecord:
        """Insert or update a record in one transaction.

        Args:
            record: Record to write; its ``id`` (and inline content ``id``) are set on return
            full_refresh: Also write the inline content row; when False only metadata is written

        Returns:
            The same record, now carrying its database id
        """
        if record.compression == Compression.UNRESOLVED:
            raise FilesCriticalError(f"Refusing to store {record.name} with unresolved compression")

        values = self._file_values(record)
        conn = self._get_connection()
        try:
            with conn:
                cursor = conn.cursor()
                updated = 0
                if record.id is not None:
                    assignments = ", ".join(f"{col} = ?" for col in _FILE_COLUMNS)
                    cursor.execute(
                        f"UPDATE files SET {assignments} WHERE file_id = ?",
                        values + (record.id,),
                    )
                    updated = cursor.rowcount
                if not updated:
                    columns = ("file_id",) + _FILE_COLUMNS
                    placeholders = ", ".join("?" for _ in columns)
                    cursor.execute(
                        f"INSERT INTO files ({', '.join(columns)}) VALUES ({placeholders})",
                        (record.id,) + values,
                    )
                    record.id = cursor.lastrowid

                content = record.inline_content
                if full_refresh and content is not None:
                    written = 0
                    if content.id is not None:
                        cursor.execute(
                            "UPDATE file_contents SET file_id = ?, content = ? WHERE content_id = ?",
                            (record.id, content.data, content.id),
                        )
                        written = cursor.rowcount
                    if not written:
                        cursor.execute(
                            "INSERT INTO file_contents (content_id, file_id, content) VALUES (?, ?, ?)",
                            (content.id, record.id, content.data),
                        )
                        content.id = cursor.lastrowid
        except sqlite3.Error as e:
            logger.error(f"Error persisting file {record.name}: {e}")
            raise FilesCriticalError(f"Database error while persisting {record.name}: {e}") from e
        finally:
            conn.close()

        logger.debug(f"Persisted file {record.id} ({record.persistence_kind.value})")
        return record

    def delete(self, file_id: int) -> None:
        """Delete a file row together with all its content rows"""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM file_contents WHERE file_id = ?", (file_id,))
                conn.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
        except sqlite3.Error as e:
            raise FilesCriticalError(f"Database error while deleting file {file_id}: {e}") from e
        finally:
            conn.close()

    def delete_content(self, content_id: int) -> None:
        """Delete a single content row"""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM file_contents WHERE content_id = ?", (content_id,))
        except sqlite3.Error as e:
            raise FilesCriticalError(f"Database error while deleting content {content_id}: {e}") from e
        finally:
            conn.close()

    def find_unique_match(self, query: ContentFilter) -> Optional[InlineContent]:
        """Find the oldest content row matching ``query``, or None"""
        sql = "SELECT content_id, content FROM file_contents WHERE file_id = ?"
        params = [query.file_id]
        if query.exclude_content_id is not None:
            sql += " AND content_id != ?"
            params.append(query.exclude_content_id)
        sql += " ORDER BY content_id LIMIT 1"

        conn = self._get_connection()
        try:
            row = conn.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise FilesCriticalError(f"Database error while querying content of file {query.file_id}: {e}") from e
        finally:
            conn.close()

        if row is None:
            return None
        return InlineContent(id=row["content_id"], data=bytes(row["content"]))

    def count_contents(self, file_id: int) -> int:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM file_contents WHERE file_id = ?", (file_id,)
            ).fetchone()
            return row["n"]
        finally:
            conn.close()

    def load(self, file_id: int) -> Optional[LogicalFileRecord]:
        """Load a record, restoring its newest inline content row if any"""
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT * FROM files WHERE file_id = ?", (file_id,)).fetchone()
            if row is None:
                return None
            content_row = conn.execute(
                "SELECT content_id, content FROM file_contents WHERE file_id = ? "
                "ORDER BY content_id DESC LIMIT 1",
                (file_id,),
            ).fetchone()
        finally:
            conn.close()

        record = LogicalFileRecord(
            id=row["file_id"],
            name=row["name"],
            persistence_kind=PersistenceKind(row["persistence_kind"]),
            compression=Compression(row["compression"]),
            encoding=row["encoding"],
            size=row["size"],
            base_path=row["base_path"],
            external_uuid=row["external_uuid"],
            external_version=row["external_version"],
            tag_id=row["tag_id"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
            modified_at=datetime.fromisoformat(row["modified_at"]) if row["modified_at"] else None,
        )
        if content_row is not None:
            record.attach_inline(InlineContent(id=content_row["content_id"], data=bytes(content_row["content"])))
        return record
