"""Business-rule validation run before a record is persisted."""
from typing import Protocol

from files_core.errors import ConfigurationError, FilesValidationError
from files_core.keys import KEY_SEPARATOR
from files_core.models import LogicalFileRecord


class Validator(Protocol):
    """Raises FilesValidationError when a record breaks a rule."""

    def validate_for_persist(self, record: LogicalFileRecord) -> None: ...


class RecordValidator:
    """Default rules for file records."""

    def validate_for_persist(self, record: LogicalFileRecord) -> None:
        if record is None:
            raise FilesValidationError("A file record is required")
        if not record.extension:
            raise FilesValidationError(f"File name must have an extension: {record.name!r}")
        if record.base_path is not None and not record.base_path.endswith(KEY_SEPARATOR):
            raise ConfigurationError(
                f"base_path must end with '{KEY_SEPARATOR}': {record.base_path!r}"
            )
        if record.size is not None and record.size < 0:
            raise FilesValidationError(f"size cannot be negative: {record.size}")
