import os
import uuid

import pytest

from files_core.archive import read_single_entry
from files_core.errors import FilesCriticalError
from files_core.models import Compression, PersistenceKind
from files_core.records import create_file_record, create_file_record_from_text, update_file_record

ZEROS = bytes(10000)


def test_inline_record_holds_raw_bytes(stager):
    record = create_file_record(PersistenceKind.INLINE, b"hello", "utf-8", "a.txt", stager=stager)

    assert record.compression == Compression.NONE
    assert record.inline_data == b"hello"
    assert record.size == 5
    assert record.external_uuid is None
    assert record.created_at is not None


def test_inline_record_holds_archive_when_compressed(stager):
    record = create_file_record(PersistenceKind.INLINE, ZEROS, None, "big.log", stager=stager)

    assert record.compression == Compression.MAXIMUM_COMPRESSION
    assert record.size == len(record.inline_data)
    assert read_single_entry(record.inline_data, "big.log") == ZEROS


def test_object_store_record_is_staged_with_new_identity(stager, reaper):
    record = create_file_record(
        PersistenceKind.OBJECT_STORE, ZEROS, None, "big.log", base_path="logs/", stager=stager
    )

    assert record.compression == Compression.MAXIMUM_COMPRESSION
    assert record.staged_path.endswith("_big.zip")
    assert os.path.getsize(record.staged_path) == record.size
    assert uuid.UUID(record.external_uuid)
    assert record.external_version is None
    # Pipeline files belong to the caller until the backend write
    assert reaper.scheduled == []


def test_object_store_uncompressed_staged_under_original_name(stager):
    record = create_file_record(
        PersistenceKind.OBJECT_STORE, b"hello", None, "a.txt",
        compression=Compression.NONE, stager=stager,
    )

    assert record.staged_path.endswith("_a.txt")
    with open(record.staged_path, "rb") as f:
        assert f.read() == b"hello"


def test_update_assigns_fresh_uuid_and_clears_version(stager):
    record = create_file_record(PersistenceKind.OBJECT_STORE, b"one", None, "a.txt", stager=stager)
    record.external_version = "v1"
    first_uuid = record.external_uuid

    update_file_record(record, b"two", None, stager=stager)

    assert record.external_uuid != first_uuid
    assert record.external_version is None


def test_update_keeps_resolved_compression(stager):
    record = create_file_record(PersistenceKind.INLINE, ZEROS, None, "big.log", stager=stager)

    update_file_record(record, b"hi", None, stager=stager)

    # Once decided, the mode sticks across updates
    assert record.compression == Compression.MAXIMUM_COMPRESSION
    assert read_single_entry(record.inline_data, "big.log") == b"hi"


def test_text_record_is_utf8(stager):
    record = create_file_record_from_text(PersistenceKind.INLINE, "héllo", "a.txt", stager=stager)

    assert record.encoding == "utf-8"
    assert record.inline_data == "héllo".encode("utf-8")


def test_update_requires_content(stager):
    record = create_file_record(PersistenceKind.INLINE, b"hello", None, "a.txt", stager=stager)

    with pytest.raises(FilesCriticalError):
        update_file_record(record, None, None, stager=stager)


def test_update_deletes_previous_staged_file(stager):
    record = create_file_record(PersistenceKind.OBJECT_STORE, b"one", None, "a.txt", stager=stager)
    first_path = record.staged_path

    update_file_record(record, b"two", None, stager=stager)

    assert record.staged_path != first_path
    assert not os.path.exists(first_path)
    assert os.path.exists(record.staged_path)
