"""
Create/update pipeline for file records.

The pipeline resolves compression once, applies it to the content and places
the stored representation where the target backend expects it: inline bytes
for INLINE records, a staged file with a fresh object identity for
OBJECT_STORE records.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from files_core.compression import resolve
from files_core.errors import FilesCriticalError
from files_core.keys import ARCHIVE_EXTENSION
from files_core.models import Compression, LogicalFileRecord, PersistenceKind
from files_core.staging import NO_EXPIRY, ContentStager

logger = logging.getLogger(__name__)

UTF8 = "utf-8"


def create_file_record(
    persistence_kind: PersistenceKind,
    content: bytes,
    encoding: Optional[str],
    name: str,
    tag_id: Optional[str] = None,
    compression: Compression = Compression.UNRESOLVED,
    base_path: Optional[str] = None,
    stager: Optional[ContentStager] = None,
) -> LogicalFileRecord:
    """Create a record for ``content``, ready to be handed to the router.

    Args:
        persistence_kind: Backend the record will be persisted to
        content: Raw file content (compressed here if the mode calls for it)
        encoding: Text encoding label, stored as-is
        name: File name, must have an extension
        tag_id: Optional caller tag
        compression: Requested mode; UNRESOLVED lets the size heuristic decide
        base_path: Optional object key prefix, must end with '/'
        stager: Stager used for OBJECT_STORE content

    Returns:
        A new record whose compression is resolved
    """
    record = LogicalFileRecord(
        name=name,
        persistence_kind=persistence_kind,
        compression=compression,
        tag_id=tag_id,
        base_path=base_path,
        created_at=datetime.now(timezone.utc),
    )
    return update_file_record(record, content, encoding, stager=stager)


def create_file_record_from_text(
    persistence_kind: PersistenceKind,
    text: str,
    name: str,
    tag_id: Optional[str] = None,
    compression: Compression = Compression.UNRESOLVED,
    base_path: Optional[str] = None,
    stager: Optional[ContentStager] = None,
) -> LogicalFileRecord:
    """Create a record from text content encoded as UTF-8."""
    return create_file_record(
        persistence_kind,
        text.encode(UTF8),
        UTF8,
        name,
        tag_id=tag_id,
        compression=compression,
        base_path=base_path,
        stager=stager,
    )


def update_file_record(
    record: LogicalFileRecord,
    content: bytes,
    encoding: Optional[str],
    stager: Optional[ContentStager] = None,
) -> LogicalFileRecord:
    """Replace the content of ``record`` and prepare it for persistence."""
    if record is None:
        raise FilesCriticalError("A file record is required")
    if content is None:
        raise FilesCriticalError(f"Content is required to update {record.name}")

    record.modified_at = datetime.now(timezone.utc)
    record.encoding = encoding
    stager = stager or ContentStager()
    previous_staged = record.staged_path

    result = resolve(content, record.compression, record.name)
    record.compression = result.mode
    stored = result.stored_bytes(content)

    if record.persistence_kind == PersistenceKind.INLINE:
        record.clear_external_identity()
        record.set_inline_data(stored)
    else:
        if result.mode == Compression.MAXIMUM_COMPRESSION:
            staged_name = f"{record.stem}.{ARCHIVE_EXTENSION}"
        else:
            staged_name = record.name
        record.set_staged_path(stager.write_temp_file(staged_name, stored, NO_EXPIRY))
        record.external_uuid = str(uuid.uuid4())
        # A null version makes the router write this content to the backend
        record.external_version = None

    if previous_staged is not None and previous_staged != record.staged_path:
        stager.delete_temp_file(previous_staged)

    record.size = len(stored)
    logger.debug(
        f"Prepared {record.name} for {record.persistence_kind.value} "
        f"({record.compression.value}, {record.size} bytes stored)"
    )
    return record
