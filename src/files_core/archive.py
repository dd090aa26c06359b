"""Single-entry zip archives used for MAXIMUM_COMPRESSION content."""
import io
import logging
import shutil
import zipfile

from files_core.errors import FilesCriticalError

logger = logging.getLogger(__name__)

MAXIMUM_LEVEL = 9


def create_single_entry_archive(entry_name: str, data: bytes) -> bytes:
    """Build an in-memory zip holding ``data`` as ``entry_name`` at maximum compression."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=MAXIMUM_LEVEL) as zf:
        zf.writestr(entry_name, data)
    return buffer.getvalue()


def read_single_entry(archive: bytes, entry_name: str) -> bytes:
    """Return the content of ``entry_name`` from an in-memory archive."""
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            return zf.read(entry_name)
    except KeyError as e:
        raise FilesCriticalError(f"Archive has no entry named {entry_name!r}") from e
    except zipfile.BadZipFile as e:
        raise FilesCriticalError(f"Corrupted archive while reading {entry_name!r}: {e}") from e


def extract_single_entry(archive_path: str, entry_name: str, dest_path: str) -> str:
    """Unpack ``entry_name`` from the zip at ``archive_path`` into ``dest_path``.

    Args:
        archive_path: Path of the zip file
        entry_name: Name of the entry to extract
        dest_path: File to write the entry content to

    Returns:
        dest_path
    """
    try:
        with zipfile.ZipFile(archive_path) as zf:
            with zf.open(entry_name) as src, open(dest_path, 'wb') as dst:
                shutil.copyfileobj(src, dst)
    except FileNotFoundError as e:
        raise FilesCriticalError(f"Archive not found: {archive_path}") from e
    except KeyError as e:
        raise FilesCriticalError(f"Archive {archive_path} has no entry named {entry_name!r}") from e
    except zipfile.BadZipFile as e:
        raise FilesCriticalError(f"Corrupted archive {archive_path}: {e}") from e
    except OSError as e:
        raise FilesCriticalError(f"Failed to extract {entry_name!r} from {archive_path}: {e}") from e

    logger.debug(f"Extracted {entry_name} from {archive_path} to {dest_path}")
    return dest_path
