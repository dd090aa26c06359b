import pytest
from pydantic import ValidationError

from files_core.models import (
    InlineContent,
    LogicalFileRecord,
    PersistenceKind,
    PersistenceState,
    StagedFile,
)


def make_record(name="a.txt", kind=PersistenceKind.INLINE):
    return LogicalFileRecord(name=name, persistence_kind=kind)


def test_name_requires_extension():
    with pytest.raises(ValidationError):
        make_record(name="README")


def test_extension_and_stem():
    record = make_record(name="archive.tar.gz")

    assert record.extension == "gz"
    assert record.stem == "archive.tar"


def test_inline_and_staged_content_are_exclusive():
    record = make_record()
    record.set_inline_data(b"hello")
    assert record.inline_data == b"hello"
    assert record.staged_path is None

    record.set_staged_path("/tmp/x_a.txt")
    assert record.inline_content is None
    assert record.staged_path == "/tmp/x_a.txt"

    record.set_inline_data(b"again")
    assert record.staged_path is None


def test_attach_inline_moves_ownership():
    first = make_record()
    second = make_record(name="b.txt")
    content = InlineContent(data=b"shared")

    first.attach_inline(content)
    second.attach_inline(content)

    assert second.inline_content is content
    assert first.content is None


def test_set_inline_data_keeps_content_row_id():
    record = make_record()
    record.attach_inline(InlineContent(id=7, data=b"old"))

    record.set_inline_data(b"new")

    assert record.inline_content.id == 7
    assert record.inline_data == b"new"


def test_empty_inline_payload_is_not_content():
    record = make_record()
    record.set_inline_data(b"")

    assert not record.has_inline_data
    assert not record.has_content


def test_content_from_dict_is_discriminated():
    record = LogicalFileRecord(
        name="a.txt",
        persistence_kind=PersistenceKind.OBJECT_STORE,
        content={"kind": "staged", "path": "/tmp/a.txt"},
    )

    assert isinstance(record.content, StagedFile)


def test_state_transitions():
    record = make_record(kind=PersistenceKind.OBJECT_STORE)
    assert record.state == PersistenceState.NEW

    record.id = 1
    assert record.state == PersistenceState.AWAITING_BACKEND_WRITE

    record.external_version = "v1"
    assert record.state == PersistenceState.PERSISTED


def test_inline_record_with_id_is_persisted():
    record = make_record()
    record.id = 3

    assert record.state == PersistenceState.PERSISTED


def test_constructing_with_owned_content_moves_ownership():
    content = InlineContent(data=b"hello")
    first = LogicalFileRecord(name="a.txt", persistence_kind=PersistenceKind.INLINE, content=content)
    second = LogicalFileRecord(name="b.txt", persistence_kind=PersistenceKind.INLINE, content=content)

    assert second.content is content
    assert first.content is None
