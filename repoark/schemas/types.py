"""
Shared type definitions for schemas.

Centralizes common type annotations used across the operations schemas.
"""

from __future__ import annotations

import posixpath
from typing import Annotated, Literal

import pydantic

# ==============================================================================
# Base Strict Model (Foundation)
# ==============================================================================


class BaseStrictModel(pydantic.BaseModel):
    """
    Foundation strict model - schema packages inherit from this.

    Uses extra='forbid' to reject unknown fields - any field not modeled
    causes immediate validation failure (fail-fast).
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Reject unknown fields (fail-fast)
        strict=True,  # Strict type coercion
        frozen=True,  # Immutable after creation
    )


# ==============================================================================
# Archive Path
# ==============================================================================


def _validate_archive_path(value: str) -> str:
    """Archive paths are relative, slash-separated and never empty."""
    if not value:
        raise ValueError('archive path must not be empty')
    if value.startswith('/'):
        raise ValueError(f'archive path must be relative: {value!r}')
    if '..' in value.split('/'):
        raise ValueError(f'archive path must not contain "..": {value!r}')
    return posixpath.normpath(value)


# Slash-separated path relative to the archive root (e.g. 'sub/.git/config')
ArchivePath = Annotated[str, pydantic.AfterValidator(_validate_archive_path)]

# Seconds since the epoch; accepts int from tar headers with whole-second precision
EpochSeconds = Annotated[float, pydantic.Field(strict=False)]

# Only regular files are written; directories may appear when reading foreign archives
EntryKind = Literal['file', 'directory']
