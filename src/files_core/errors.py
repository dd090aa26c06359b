"""Exception taxonomy for the file persistence core.

Validation errors are caller-correctable: fix the input and call again.
Critical errors are not expected to be fixable by the caller; the not-found
variants let callers detect content that is already gone.
"""

from typing import Optional


class FilesError(Exception):
    """Base class for every error raised by files_core."""

    code = "FILES_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class FilesValidationError(FilesError):
    """A required field is missing or malformed."""

    code = "FILES_VALIDATION"


class ConfigurationError(FilesValidationError):
    """The caller configured a record in a way the core cannot use (e.g. base_path)."""

    code = "FILES_CONFIGURATION"


class FilesCriticalError(FilesError):
    """System failure: missing local files, broken archives, backend trouble."""

    code = "FILES_CRITICAL"


class BackendError(FilesCriticalError):
    """Generic object-store failure (credentials, connectivity, service errors)."""

    code = "FILES_BACKEND"


class ObjectNotFoundError(FilesCriticalError):
    """The object store reports that the requested key or version does not exist."""

    code = "FILES_OBJECT_NOT_FOUND"


class BucketNotFoundError(FilesCriticalError):
    """The object store reports that the bucket does not exist."""

    code = "FILES_BUCKET_NOT_FOUND"
