"""
Retrieval of stored content.

``retrieve`` downloads the exact object version of an OBJECT_STORE record into
a temp file named after its stored form; ``resolve_usable_file`` turns that
staged file into the original content, unpacking the archive when needed.
"""

import logging
from typing import Optional

from files_core.archive import extract_single_entry, read_single_entry
from files_core.errors import FilesCriticalError
from files_core.keys import ARCHIVE_EXTENSION, build_key
from files_core.models import Compression, LogicalFileRecord, PersistenceKind
from files_core.s3 import ClientIdentity, S3ClientRegistry, S3ObjectStore, get_object_store
from files_core.settings import get_settings
from files_core.staging import create_temp_file

logger = logging.getLogger(__name__)


def resolve_usable_file(record: LogicalFileRecord) -> str:
    """Return the path of a file holding the original (uncompressed) content.

    For MAXIMUM_COMPRESSION the single archive entry is unpacked into a fresh
    temp file; for NONE the staged path is returned unchanged.
    """
    if record.persistence_kind != PersistenceKind.OBJECT_STORE:
        raise FilesCriticalError(f"{record.name} is not stored in the object store")
    staged = record.staged_path
    if staged is None:
        raise FilesCriticalError(f"{record.name} has no staged file to resolve")

    if record.compression == Compression.MAXIMUM_COMPRESSION:
        dest = create_temp_file(record.name)
        return extract_single_entry(staged, record.name, dest)
    if record.compression == Compression.NONE:
        return staged
    raise FilesCriticalError(f"{record.name} has unresolved compression")


class RetrievalCoordinator:
    """Reads content back from whichever backend holds it."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        identity: Optional[ClientIdentity] = None,
        registry: Optional[S3ClientRegistry] = None,
    ):
        self.bucket = bucket or get_settings().s3_bucket_name
        self.identity = identity
        self.registry = registry

    @property
    def store(self) -> S3ObjectStore:
        return get_object_store(self.identity, self.registry)

    def retrieve(self, record: LogicalFileRecord) -> LogicalFileRecord:
        """Download the record's object version into a new temp file and stage it.

        The temp file is not reaped; the caller owns its cleanup.
        """
        if record is None:
            raise FilesCriticalError("A file record is required")
        if record.external_version is None:
            raise FilesCriticalError(f"{record.name} has no version to retrieve")

        key = build_key(record)
        if record.compression == Compression.MAXIMUM_COMPRESSION:
            local_name = f"{record.stem}.{ARCHIVE_EXTENSION}"
        else:
            local_name = record.name
        dest = create_temp_file(local_name)

        self.store.get_object(self.bucket, key, record.external_version, dest)
        record.set_staged_path(dest)
        logger.info(f"Retrieved {record.name} (version {record.external_version}) to {dest}")
        return record

    def resolve_usable_file(self, record: LogicalFileRecord) -> str:
        return resolve_usable_file(record)

    def read_content(self, record: LogicalFileRecord) -> bytes:
        """Return the original bytes of a record, from memory, a staged file or the backend."""
        if record.persistence_kind == PersistenceKind.INLINE or record.has_inline_data:
            data = record.inline_data
            if data is None:
                raise FilesCriticalError(f"{record.name} has no inline content")
            if record.compression == Compression.MAXIMUM_COMPRESSION:
                return read_single_entry(data, record.name)
            return data

        if record.staged_path is None:
            self.retrieve(record)
        path = resolve_usable_file(record)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise FilesCriticalError(f"Could not read {path}: {e}") from e
