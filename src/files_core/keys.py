"""Object-store key construction."""
from files_core.errors import ConfigurationError, FilesValidationError
from files_core.models import Compression, LogicalFileRecord

KEY_SEPARATOR = "/"
ARCHIVE_EXTENSION = "zip"


def build_key(record: LogicalFileRecord) -> str:
    """
    Build the S3 key of a record: ``[base_path]<external_uuid>.<ext>``.

    The extension is ``zip`` for MAXIMUM_COMPRESSION and the original file
    extension for NONE, so the key is reproducible from record state alone.
    """
    if record.base_path is not None and not record.base_path.endswith(KEY_SEPARATOR):
        raise ConfigurationError(
            f"base_path must end with '{KEY_SEPARATOR}': {record.base_path!r}"
        )
    if not record.external_uuid:
        raise FilesValidationError(f"external_uuid is required to build the key of {record.name}")

    if record.compression == Compression.MAXIMUM_COMPRESSION:
        extension = ARCHIVE_EXTENSION
    elif record.compression == Compression.NONE:
        extension = record.extension
    else:
        raise FilesValidationError(f"Compression of {record.name} must be resolved before building its key")

    return f"{record.base_path or ''}{record.external_uuid}.{extension}"
