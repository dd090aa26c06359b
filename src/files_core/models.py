"""
Data model for logical file records.

A record's content lives in exactly one place at a time: inline (bytes held in
memory and stored as a database row) or staged (a local file on disk). The
single ``content`` field makes the two mutually exclusive.
"""

from datetime import datetime
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class PersistenceKind(str, Enum):
    """Backend a record is persisted to"""
    INLINE = 'inline'              # content stored as a blob row in the embedded database
    OBJECT_STORE = 'object_store'  # content stored in S3, referenced by key + version


class Compression(str, Enum):
    """Compression applied to the stored representation of a record"""
    UNRESOLVED = 'unresolved'  # not decided yet; the selector measures the content
    NONE = 'none'
    MAXIMUM_COMPRESSION = 'maximum_compression'


class PersistenceState(str, Enum):
    """Where a record stands in the persistence lifecycle"""
    NEW = 'new'
    AWAITING_BACKEND_WRITE = 'awaiting_backend_write'
    PERSISTED = 'persisted'


class InlineContent(BaseModel):
    """Content held in memory, owned by exactly one record."""
    kind: Literal['inline'] = 'inline'
    id: Optional[int] = Field(None, description="Content row id once stored")
    data: bytes = Field(b"", description="Raw payload in its stored representation")

    _owner: Optional[Any] = PrivateAttr(default=None)

    def __eq__(self, other):
        # Ownership is not part of the value.
        if isinstance(other, InlineContent):
            return self.id == other.id and self.data == other.data
        return NotImplemented

    def __len__(self) -> int:
        return len(self.data)


class StagedFile(BaseModel):
    """Content staged to a local file."""
    kind: Literal['staged'] = 'staged'
    path: str = Field(..., min_length=1, description="Absolute path of the staged file")


ContentLocation = Annotated[Union[InlineContent, StagedFile], Field(discriminator='kind')]


class LogicalFileRecord(BaseModel):
    """Metadata and persistence state of one file."""
    model_config = ConfigDict(validate_assignment=False)

    id: Optional[int] = Field(None, description="Record id, set once persisted")
    name: str = Field(..., min_length=1, max_length=255, description="Display filename with extension")
    persistence_kind: PersistenceKind = Field(..., description="Target backend")
    compression: Compression = Field(Compression.UNRESOLVED, description="Compression of the stored representation")
    encoding: Optional[str] = Field(None, description="Text encoding label, informational only")
    size: Optional[int] = Field(None, ge=0, description="Byte length of the stored representation")
    base_path: Optional[str] = Field(None, description="Object key prefix, must end with '/'")
    external_uuid: Optional[str] = Field(None, description="Object identity in the object store")
    external_version: Optional[str] = Field(None, description="Version token issued by the object store")
    tag_id: Optional[str] = Field(None, max_length=100, description="Free caller tag")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    modified_at: Optional[datetime] = Field(None, description="Last content update timestamp")
    content: Optional[ContentLocation] = Field(None, description="Inline content or staged file")

    @field_validator('name')
    @classmethod
    def name_has_extension(cls, v):
        """Keys for uncompressed objects reuse the extension, so it must exist."""
        if not PurePath(v).suffix or PurePath(v).suffix == '.':
            raise ValueError(f"File name must have an extension: {v!r}")
        return v

    def model_post_init(self, __context) -> None:
        if isinstance(self.content, InlineContent):
            self.attach_inline(self.content)

    @property
    def extension(self) -> str:
        """Extension of the original file name, without the dot."""
        return PurePath(self.name).suffix[1:]

    @property
    def stem(self) -> str:
        return PurePath(self.name).stem

    @property
    def inline_content(self) -> Optional[InlineContent]:
        return self.content if isinstance(self.content, InlineContent) else None

    @property
    def inline_data(self) -> Optional[bytes]:
        return self.content.data if isinstance(self.content, InlineContent) else None

    @property
    def staged_path(self) -> Optional[str]:
        return self.content.path if isinstance(self.content, StagedFile) else None

    @property
    def has_inline_data(self) -> bool:
        """True when inline content with a non-empty payload is attached."""
        return isinstance(self.content, InlineContent) and len(self.content.data) > 0

    @property
    def has_content(self) -> bool:
        return self.has_inline_data or self.staged_path is not None

    @property
    def state(self) -> PersistenceState:
        if self.id is None:
            return PersistenceState.NEW
        if self.persistence_kind == PersistenceKind.OBJECT_STORE and self.external_version is None:
            return PersistenceState.AWAITING_BACKEND_WRITE
        return PersistenceState.PERSISTED

    def attach_inline(self, content: InlineContent) -> None:
        """Make this record the sole owner of ``content``.

        A previous owner loses the content; whatever this record held before
        (inline or staged) is replaced.
        """
        previous = content._owner
        if previous is not None and previous is not self and previous.content is content:
            previous.content = None
        if isinstance(self.content, InlineContent) and self.content is not content:
            self.content._owner = None
        content._owner = self
        self.content = content

    def set_inline_data(self, data: bytes) -> None:
        """Replace the content with inline bytes, keeping the content row id if any."""
        row_id = self.content.id if isinstance(self.content, InlineContent) else None
        self.attach_inline(InlineContent(id=row_id, data=data))

    def set_staged_path(self, path: str) -> None:
        if isinstance(self.content, InlineContent):
            self.content._owner = None
        self.content = StagedFile(path=path)

    def clear_content(self) -> None:
        if isinstance(self.content, InlineContent):
            self.content._owner = None
        self.content = None

    def clear_external_identity(self) -> None:
        self.external_uuid = None
        self.external_version = None


class ContentFilter(BaseModel):
    """Query for content rows owned by a record, optionally excluding one row."""
    file_id: int
    exclude_content_id: Optional[int] = None
