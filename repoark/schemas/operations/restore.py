"""
Restore operation schemas.

Models for restore decisions and results.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from repoark.schemas.base import StrictModel

# Per-entry outcome:
# - skip: existing file has the same mtime (one-second resolution), untouched
# - overwrite: something exists at the target path, removed then written
# - create: nothing at the target path, written
RestoreDecision = Literal['skip', 'overwrite', 'create']


class RestoreResult(StrictModel):
    """Result of a restore operation.

    Counts cover regular-file entries only; directory entries in foreign
    archives are ignored and not counted.
    """

    target_path: str
    archive_path: str
    restored_at: datetime

    # Entry outcomes
    files_created: int
    files_overwritten: int
    files_skipped: int

    # Reconciliation (untracked files absent from the archive)
    removed_paths: Sequence[str]

    @property
    def files_written(self) -> int:
        return self.files_created + self.files_overwritten
