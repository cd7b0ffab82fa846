"""
Schema definitions for repoark.

This package contains Pydantic models:
- operations: enumeration, archive and restore schemas
"""

from __future__ import annotations

from repoark.schemas.base import StrictModel
from repoark.schemas.types import ArchivePath, EntryKind, EpochSeconds

__all__ = [
    'StrictModel',
    'ArchivePath',
    'EntryKind',
    'EpochSeconds',
]
