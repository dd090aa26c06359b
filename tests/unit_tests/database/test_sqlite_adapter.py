import sqlite3

import pytest

from files_core.database import get_file_database
from files_core.errors import FilesCriticalError
from files_core.models import (
    Compression,
    ContentFilter,
    InlineContent,
    LogicalFileRecord,
    PersistenceKind,
)


def make_record(data=b"hello", compression=Compression.NONE):
    record = LogicalFileRecord(name="a.txt", persistence_kind=PersistenceKind.INLINE, compression=compression)
    if data is not None:
        record.attach_inline(InlineContent(data=data))
    return record


def add_content_row(db, file_id, data):
    conn = sqlite3.connect(db.db_path)
    with conn:
        cursor = conn.execute("INSERT INTO file_contents (file_id, content) VALUES (?, ?)", (file_id, data))
    conn.close()
    return cursor.lastrowid


def test_init_tables(db):
    conn = sqlite3.connect(db.db_path)
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()

    assert {"files", "file_contents"} <= tables


def test_get_file_database_uses_configured_path(tmp_path):
    adapter = get_file_database()

    assert adapter.db_path.startswith(str(tmp_path))


def test_persist_inserts_record_and_content(db):
    record = db.persist(make_record())

    assert record.id is not None
    assert record.inline_content.id is not None
    assert db.count_contents(record.id) == 1


def test_persist_updates_in_place(db):
    record = db.persist(make_record())
    file_id, content_id = record.id, record.inline_content.id

    record.set_inline_data(b"changed")
    record.tag_id = "tag-1"
    db.persist(record)

    loaded = db.load(file_id)
    assert loaded.id == file_id
    assert loaded.tag_id == "tag-1"
    assert loaded.inline_content.id == content_id
    assert loaded.inline_data == b"changed"
    assert db.count_contents(file_id) == 1


def test_persist_without_full_refresh_skips_content(db):
    record = db.persist(make_record())
    record.set_inline_data(b"not written")

    db.persist(record, full_refresh=False)

    assert db.load(record.id).inline_data == b"hello"


def test_persist_refuses_unresolved_compression(db):
    with pytest.raises(FilesCriticalError):
        db.persist(make_record(compression=Compression.UNRESOLVED))


def test_find_unique_match_excludes_current_row(db):
    record = db.persist(make_record())
    stale_id = add_content_row(db, record.id, b"stale")

    match = db.find_unique_match(ContentFilter(file_id=record.id, exclude_content_id=record.inline_content.id))

    assert match.id == stale_id
    assert match.data == b"stale"


def test_find_unique_match_none_when_no_rows(db):
    record = db.persist(make_record())

    query = ContentFilter(file_id=record.id, exclude_content_id=record.inline_content.id)

    assert db.find_unique_match(query) is None


def test_delete_removes_rows(db):
    record = db.persist(make_record())
    add_content_row(db, record.id, b"stale")

    db.delete(record.id)

    assert db.load(record.id) is None
    assert db.count_contents(record.id) == 0


def test_load_missing_record(db):
    assert db.load(12345) is None


def test_load_round_trips_metadata(db):
    record = make_record(data=None)
    record.persistence_kind = PersistenceKind.OBJECT_STORE
    record.base_path = "logs/"
    record.external_uuid = "abc"
    record.external_version = "v1"
    record.size = 42
    db.persist(record)

    loaded = db.load(record.id)

    assert loaded.persistence_kind == PersistenceKind.OBJECT_STORE
    assert loaded.compression == Compression.NONE
    assert (loaded.base_path, loaded.external_uuid, loaded.external_version, loaded.size) == ("logs/", "abc", "v1", 42)
    assert loaded.content is None
