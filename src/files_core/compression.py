"""Compression mode selection.

The selector decides between NONE and MAXIMUM_COMPRESSION. An explicit request
is honored as-is; an UNRESOLVED request is decided by trial compression: the
content is archived at maximum level and the archive wins only when it is
strictly smaller than the raw bytes.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from files_core.archive import create_single_entry_archive
from files_core.models import Compression

logger = logging.getLogger(__name__)


@dataclass
class CompressionResult:
    """Outcome of a compression decision."""
    mode: Compression
    archive: Optional[bytes] = None

    def stored_bytes(self, content: bytes) -> bytes:
        """Bytes to persist: the archive when compressed, the raw content otherwise."""
        if self.mode == Compression.MAXIMUM_COMPRESSION:
            return self.archive
        return content


def resolve(content: bytes, requested: Compression, entry_name: str) -> CompressionResult:
    """Resolve the compression mode for ``content``.

    Args:
        content: Raw payload
        requested: Caller request; UNRESOLVED triggers the size heuristic
        entry_name: Name of the archive entry (the original file name)

    Returns:
        CompressionResult with the resolved mode and, for MAXIMUM_COMPRESSION,
        the archive bytes to reuse for the actual write
    """
    if requested == Compression.NONE:
        return CompressionResult(Compression.NONE)

    archive = create_single_entry_archive(entry_name, content)

    if requested == Compression.MAXIMUM_COMPRESSION:
        return CompressionResult(Compression.MAXIMUM_COMPRESSION, archive)

    if len(archive) < len(content):
        mode = Compression.MAXIMUM_COMPRESSION
    else:
        mode = Compression.NONE
        archive = None

    logger.debug(f"Resolved compression for {entry_name}: {mode.value} ({len(content)} bytes raw)")
    return CompressionResult(mode, archive)
