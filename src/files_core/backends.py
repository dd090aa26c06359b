"""
Storage backends for file records.

Each backend knows how to write, read and remove the content of a record for
one PersistenceKind. The router picks the backend; adding a kind means adding
a backend, not another branch in the router.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from files_core.database import FileDatabase
from files_core.errors import BackendError, FilesCriticalError, FilesValidationError
from files_core.keys import build_key
from files_core.models import ContentFilter, LogicalFileRecord
from files_core.retrieval import RetrievalCoordinator
from files_core.s3 import ClientIdentity, S3ClientRegistry, S3ObjectStore, get_object_store
from files_core.settings import get_settings
from files_core.staging import ContentStager

logger = logging.getLogger(__name__)


class Backend(ABC):
    """Base class for storage backends"""

    def __init__(self, db: FileDatabase, retriever: Optional[RetrievalCoordinator] = None):
        self.db = db
        self.retriever = retriever or RetrievalCoordinator()

    @abstractmethod
    def write(self, record: LogicalFileRecord) -> LogicalFileRecord:
        """Store the record's content and metadata; returns the persisted record."""

    def read(self, record: LogicalFileRecord) -> bytes:
        """Return the original (uncompressed) content of the record."""
        return self.retriever.read_content(record)

    @abstractmethod
    def remove(self, record: LogicalFileRecord, purge_backend: bool = True) -> None:
        """Delete everything stored for the record."""


class InlineBackend(Backend):
    """Content stored as a blob row next to the record in the embedded database"""

    def write(self, record: LogicalFileRecord) -> LogicalFileRecord:
        if not record.has_inline_data:
            raise FilesValidationError(f"Content required for inline persistence of {record.name}")

        record.clear_external_identity()

        # At most one content row per record: drop rows left behind by partial writes
        if record.id is not None:
            query = ContentFilter(file_id=record.id, exclude_content_id=record.inline_content.id)
            stale = self.db.find_unique_match(query)
            while stale is not None:
                logger.info(f"Removing stale content row {stale.id} of file {record.id}")
                self.db.delete_content(stale.id)
                stale = self.db.find_unique_match(query)

        record.size = len(record.inline_data)
        return self.db.persist(record, True)

    def remove(self, record: LogicalFileRecord, purge_backend: bool = True) -> None:
        if record.id is not None:
            self.db.delete(record.id)
            logger.info(f"Deleted inline file {record.id}")


class ObjectStoreBackend(Backend):
    """Content stored in S3 under a key derived from the record, metadata in the database"""

    def __init__(
        self,
        db: FileDatabase,
        bucket: Optional[str] = None,
        identity: Optional[ClientIdentity] = None,
        registry: Optional[S3ClientRegistry] = None,
        stager: Optional[ContentStager] = None,
    ):
        self.bucket = bucket or get_settings().s3_bucket_name
        self.identity = identity
        self.registry = registry
        self.stager = stager or ContentStager()
        super().__init__(db, RetrievalCoordinator(self.bucket, identity, registry))

    @property
    def store(self) -> S3ObjectStore:
        return get_object_store(self.identity, self.registry)

    def write(self, record: LogicalFileRecord) -> LogicalFileRecord:
        if record.external_version is not None:
            # This content revision is already in the bucket
            return record

        if not record.external_uuid:
            raise FilesValidationError(f"external_uuid is required for object-store persistence of {record.name}")
        if not record.has_content:
            raise FilesValidationError(f"No content to persist for {record.name}")

        # Uploads always start from a file so the SDK can resume and retry the transfer
        self.stager.stage_to_file(record)
        path = record.staged_path
        if not os.path.exists(path):
            raise FilesCriticalError(f"Staged file of {record.name} not found: {path}")

        key = build_key(record)
        store = self.store
        version = store.put_object(self.bucket, key, path)
        if version is None:
            raise BackendError(f"Bucket {self.bucket} did not return a version for {key}; enable versioning")
        record.external_version = version

        store.put_object_tags(self.bucket, key, {
            "compression": record.compression.name,
            "fileName": record.name,
        })

        record.size = os.path.getsize(path)

        # Database row only after the backend holds the version it references
        return self.db.persist(record, True)

    def remove(self, record: LogicalFileRecord, purge_backend: bool = True) -> None:
        if record.id is not None:
            self.db.delete(record.id)
            logger.info(f"Deleted object-store file {record.id}")
        if purge_backend and record.external_version is not None:
            key = build_key(record)
            self.store.delete_object_versions(self.bucket, [(key, record.external_version)])
            logger.info(f"Deleted s3://{self.bucket}/{key} version {record.external_version}")
            record.external_version = None
