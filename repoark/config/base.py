"""
Base configuration for repoark.

Shared settings and helper functions. Values come from REPOARK_-prefixed
environment variables or an optional .env file.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='BaseRepoArkSettings')


class BaseRepoArkSettings(pydantic_settings.BaseSettings):
    """Shared configuration across repoark entry points."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='REPOARK_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown REPOARK_ variables
    )

    # Application metadata
    APP_NAME: str = 'repoark'
    VERSION: str = '0.1.0'

    # gzip compression level for written archives
    COMPRESSION_LEVEL: int = 6

    # Version-control collaborator
    GIT_EXECUTABLE: str = 'git'
    GIT_TIMEOUT_SECONDS: float | None = None

    # Repository control-data subtree, archived verbatim
    METADATA_DIR_NAME: str = '.git'

    @pydantic.field_validator('COMPRESSION_LEVEL')
    @classmethod
    def validate_compression_level(cls, v: int) -> int:
        """Validate compression level is within gzip bounds."""
        if not 0 <= v <= 9:
            raise ValueError('COMPRESSION_LEVEL must be between 0-9')
        return v

    @pydantic.field_validator('GIT_TIMEOUT_SECONDS')
    @classmethod
    def validate_git_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError('GIT_TIMEOUT_SECONDS must be positive')
        return v

    @pydantic.field_validator('METADATA_DIR_NAME')
    @classmethod
    def validate_metadata_dir_name(cls, v: str) -> str:
        if not v or '/' in v or v in ('.', '..'):
            raise ValueError('METADATA_DIR_NAME must be a single path component')
        return v


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables (and ./.env if present).

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))
