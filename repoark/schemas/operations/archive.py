"""
Archive operation schemas.

Models for repository enumeration and archive creation.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from repoark.schemas.base import StrictModel
from repoark.schemas.types import ArchivePath, EntryKind, EpochSeconds

# ==============================================================================
# Enumeration Work Item
# ==============================================================================


class RootDir(StrictModel):
    """
    One repository (or submodule) awaiting enumeration.

    The top-level repository has an empty prefix. A submodule's prefix is its
    archive path inside the parent, so its files land under that path.
    """

    prefix: str
    dir: Path

    def archive_path(self, relative: str) -> str:
        """Archive path for a slash-separated path relative to this root."""
        return f'{self.prefix}/{relative}' if self.prefix else relative


# ==============================================================================
# Archive Entry
# ==============================================================================


class ArchiveEntry(StrictModel):
    """
    Single entry in an archive.

    Entries produced by enumeration carry `source`, the filesystem path whose
    content is streamed into the archive. Entries read back from an archive
    have no source; their content comes from the container stream.
    """

    path: ArchivePath
    size: int
    mode: int  # Permission bits only (e.g. 0o644)
    mtime: EpochSeconds
    kind: EntryKind = 'file'
    source: Path | None = None


# ==============================================================================
# Archive Result (CLI Response)
# ==============================================================================


class ArchiveResult(StrictModel):
    """Result of an archive operation."""

    archive_path: str
    repo_path: str
    archived_at: datetime
    file_count: int
    total_bytes: int  # Uncompressed content bytes
    size_mb: float  # Archive size in megabytes, rounded to 2 decimal places
    submodule_count: int
