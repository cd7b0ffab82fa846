"""
Operation schemas for service results.

This package contains Pydantic models for the data passed between services
and the results they return.
"""

from __future__ import annotations

from repoark.schemas.operations.archive import ArchiveEntry, ArchiveResult, RootDir
from repoark.schemas.operations.restore import RestoreDecision, RestoreResult

__all__ = [
    # Archive
    'ArchiveEntry',
    'ArchiveResult',
    'RootDir',
    # Restore
    'RestoreDecision',
    'RestoreResult',
]
