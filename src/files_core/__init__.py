"""
File persistence core.

Routes file records to an embedded database (inline content) or to S3
(content referenced by key and version), choosing compression, staging
content to local files and pooling S3 clients along the way.
"""

from files_core.errors import (
    BackendError,
    BucketNotFoundError,
    ConfigurationError,
    FilesCriticalError,
    FilesError,
    FilesValidationError,
    ObjectNotFoundError,
)
from files_core.models import (
    Compression,
    InlineContent,
    LogicalFileRecord,
    PersistenceKind,
    PersistenceState,
    StagedFile,
)
from files_core.records import create_file_record, create_file_record_from_text, update_file_record
from files_core.retrieval import RetrievalCoordinator, resolve_usable_file
from files_core.router import PersistenceRouter

__all__ = [
    'BackendError', 'BucketNotFoundError', 'ConfigurationError', 'FilesCriticalError',
    'FilesError', 'FilesValidationError', 'ObjectNotFoundError',
    'Compression', 'InlineContent', 'LogicalFileRecord', 'PersistenceKind',
    'PersistenceState', 'StagedFile',
    'create_file_record', 'create_file_record_from_text', 'update_file_record',
    'RetrievalCoordinator', 'resolve_usable_file', 'PersistenceRouter',
]
