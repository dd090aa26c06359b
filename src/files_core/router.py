"""
Persistence router.

Lifecycle of a record:
    NEW (no id) -> AWAITING_BACKEND_WRITE (OBJECT_STORE, no version) -> PERSISTED

``persist`` resolves compression for records that have not been through the
create/update pipeline, validates, and hands the record to the backend for its
PersistenceKind. Errors propagate unchanged; nothing is retried here.
"""

import logging
from typing import Dict, Optional

from files_core.backends import Backend, InlineBackend, ObjectStoreBackend
from files_core.database import FileDatabase
from files_core.errors import FilesValidationError
from files_core.models import Compression, LogicalFileRecord, PersistenceKind
from files_core.records import update_file_record
from files_core.s3 import ClientIdentity, S3ClientRegistry
from files_core.staging import ContentStager
from files_core.validation import RecordValidator, Validator

logger = logging.getLogger(__name__)


class PersistenceRouter:
    """Routes file records to the backend matching their persistence kind"""

    def __init__(
        self,
        db: FileDatabase,
        bucket: Optional[str] = None,
        validator: Optional[Validator] = None,
        identity: Optional[ClientIdentity] = None,
        registry: Optional[S3ClientRegistry] = None,
        stager: Optional[ContentStager] = None,
        backends: Optional[Dict[PersistenceKind, Backend]] = None,
    ):
        self.db = db
        self.validator = validator or RecordValidator()
        self.stager = stager or ContentStager()
        object_backend = ObjectStoreBackend(db, bucket, identity, registry, self.stager)
        self.backends: Dict[PersistenceKind, Backend] = {
            PersistenceKind.INLINE: InlineBackend(db, object_backend.retriever),
            PersistenceKind.OBJECT_STORE: object_backend,
        }
        if backends:
            self.backends.update(backends)

    def backend_for(self, record: LogicalFileRecord) -> Backend:
        try:
            return self.backends[record.persistence_kind]
        except KeyError:
            raise FilesValidationError(f"No backend for persistence kind {record.persistence_kind!r}")

    def persist(self, record: LogicalFileRecord) -> LogicalFileRecord:
        """Persist a record and its content.

        Args:
            record: Record to persist

        Returns:
            The persisted record (id set; external_version set for OBJECT_STORE)
        """
        if record is None:
            raise FilesValidationError("A file record is required")

        if record.persistence_kind == PersistenceKind.INLINE:
            record.clear_external_identity()

        # A set external_version means this revision is already stored; leave it alone
        needs_pipeline = (
            record.compression == Compression.UNRESOLVED
            and record.has_content
            and (record.persistence_kind == PersistenceKind.INLINE or record.external_version is None)
        )
        if needs_pipeline:
            staged = record.staged_path
            self.stager.unstage_to_inline(record)
            update_file_record(record, record.inline_data, record.encoding, stager=self.stager)
            if staged is not None:
                self.stager.delete_temp_file(staged)

        self.validator.validate_for_persist(record)

        state = record.state
        persisted = self.backend_for(record).write(record)
        logger.info(
            f"Persisted {persisted.name} as file {persisted.id} "
            f"({persisted.persistence_kind.value}, {state.value} -> {persisted.state.value})"
        )
        return persisted

    def read_content(self, record: LogicalFileRecord) -> bytes:
        """Return the original content of a record from its backend."""
        return self.backend_for(record).read(record)

    def remove(self, record: LogicalFileRecord, purge_backend: bool = True) -> None:
        """Delete a record: its staged temp file, its database rows and its backend object."""
        self.stager.discard_staged_file(record)
        self.backend_for(record).remove(record, purge_backend)
