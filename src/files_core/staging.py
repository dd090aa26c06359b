"""
Content staging between inline bytes and local temp files.

Object-store writes always start from a file on disk, while callers crossing
process boundaries need the content in memory. The stager moves content
between the two representations of a record and owns temp-file creation.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from files_core.errors import FilesCriticalError
from files_core.models import LogicalFileRecord
from files_core.settings import get_settings

logger = logging.getLogger(__name__)

# Retention value meaning "never reaped; the caller owns cleanup"
NO_EXPIRY = -1


class TempFileReaper(Protocol):
    """Deletes temp files after a delay."""

    def schedule_deletion(self, path: str, delay_seconds: float) -> None: ...


class TimerTempFileReaper:
    """Reaper backed by daemon ``threading.Timer``s."""

    def __init__(self):
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def schedule_deletion(self, path: str, delay_seconds: float) -> None:
        timer = threading.Timer(delay_seconds, self._delete, args=(path,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(path, None)
            if previous is not None:
                previous.cancel()
            self._timers[path] = timer
        timer.start()
        logger.debug(f"Scheduled deletion of {path} in {delay_seconds}s")

    def _delete(self, path: str) -> None:
        with self._lock:
            self._timers.pop(path, None)
        try:
            os.remove(path)
            logger.debug(f"Reaped temp file {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not reap temp file {path}: {e}")

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel_all(self) -> None:
        """Cancel every pending deletion (the files are left on disk)."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()


_default_reaper: Optional[TimerTempFileReaper] = None
_reaper_lock = threading.Lock()


def get_reaper() -> TimerTempFileReaper:
    """Get the process-wide reaper, creating it on first use."""
    global _default_reaper
    with _reaper_lock:
        if _default_reaper is None:
            _default_reaper = TimerTempFileReaper()
        return _default_reaper


def create_temp_file(name: str) -> str:
    """Create an empty temp file whose name ends with ``name``; returns its absolute path."""
    settings = get_settings()
    try:
        fd, path = tempfile.mkstemp(suffix=f"_{Path(name).name}", dir=settings.temp_dir)
        os.close(fd)
    except OSError as e:
        raise FilesCriticalError(f"Could not create temp file for {name}: {e}") from e
    return os.path.abspath(path)


class ContentStager:
    """Moves record content between inline bytes and staged temp files."""

    def __init__(self, reaper: Optional[TempFileReaper] = None, retention_seconds: Optional[float] = None):
        self.reaper = reaper or get_reaper()
        if retention_seconds is None:
            retention_seconds = get_settings().temp_file_retention_seconds
        self.retention_seconds = retention_seconds

    def write_temp_file(self, name: str, data: bytes, retention_seconds: Optional[float] = None) -> str:
        """Write ``data`` to a new temp file.

        Args:
            name: File name used as suffix of the temp file
            data: Content to write
            retention_seconds: Seconds before the file is reaped; NO_EXPIRY to keep it

        Returns:
            Absolute path of the temp file
        """
        path = create_temp_file(name)
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise FilesCriticalError(f"Could not write temp file {path}: {e}") from e

        if retention_seconds is None:
            retention_seconds = self.retention_seconds
        if retention_seconds != NO_EXPIRY:
            self.reaper.schedule_deletion(path, retention_seconds)
        return path

    def stage_to_file(self, record: LogicalFileRecord) -> None:
        """Move inline content to a temp file reaped after the retention window.

        No-op when the record has no inline payload or is already staged.
        """
        if record.staged_path is not None or not record.has_inline_data:
            return
        path = self.write_temp_file(record.name, record.inline_data)
        record.set_staged_path(path)
        logger.debug(f"Staged {record.name} to {path}")

    def unstage_to_inline(self, record: LogicalFileRecord) -> None:
        """Read the staged file back into inline content. No-op when nothing is staged."""
        path = record.staged_path
        if path is None:
            return
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise FilesCriticalError(f"Could not read staged file {path}: {e}") from e
        record.set_inline_data(data)
        logger.debug(f"Unstaged {path} into inline content of {record.name}")

    def discard_staged_file(self, record: LogicalFileRecord) -> None:
        """Delete the record's staged file, if any, and clear the reference."""
        path = record.staged_path
        if path is None:
            return
        self.delete_temp_file(path)
        record.clear_content()

    def delete_temp_file(self, path: str) -> None:
        """Delete a temp file; an already missing file is ignored."""
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FilesCriticalError(f"Could not delete staged file {path}: {e}") from e
