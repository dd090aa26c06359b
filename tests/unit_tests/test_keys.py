import pytest

from files_core.errors import ConfigurationError, FilesValidationError
from files_core.keys import build_key
from files_core.models import Compression, LogicalFileRecord, PersistenceKind

TEST_UUID = "3f1c2a9e-6a0b-4d4b-9a57-2f0f7f6a1b11"


def make_record(name="big.log", compression=Compression.NONE, base_path=None, external_uuid=TEST_UUID):
    return LogicalFileRecord(
        name=name,
        persistence_kind=PersistenceKind.OBJECT_STORE,
        compression=compression,
        base_path=base_path,
        external_uuid=external_uuid,
    )


def test_key_for_uncompressed_record_keeps_extension():
    assert build_key(make_record()) == f"{TEST_UUID}.log"


def test_key_for_compressed_record_uses_zip():
    assert build_key(make_record(compression=Compression.MAXIMUM_COMPRESSION)) == f"{TEST_UUID}.zip"


def test_key_includes_base_path():
    record = make_record(compression=Compression.MAXIMUM_COMPRESSION, base_path="logs/")

    assert build_key(record) == f"logs/{TEST_UUID}.zip"


def test_key_is_deterministic():
    assert build_key(make_record(base_path="a/b/")) == build_key(make_record(base_path="a/b/"))


def test_changing_compression_changes_only_the_extension():
    record = make_record(base_path="logs/")
    plain = build_key(record)
    record.compression = Compression.MAXIMUM_COMPRESSION
    archived = build_key(record)

    assert plain.rsplit(".", 1)[0] == archived.rsplit(".", 1)[0]
    assert plain.endswith(".log")
    assert archived.endswith(".zip")


def test_base_path_without_separator_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_key(make_record(base_path="logs"))


def test_missing_uuid_is_a_validation_error():
    with pytest.raises(FilesValidationError):
        build_key(make_record(external_uuid=None))


def test_unresolved_compression_is_a_validation_error():
    with pytest.raises(FilesValidationError):
        build_key(make_record(compression=Compression.UNRESOLVED))
