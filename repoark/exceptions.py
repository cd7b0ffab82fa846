"""
Shared exceptions for repoark.

Domain-specific exceptions used across services. Every error is fatal to the
running command; the CLI turns them into a message and exit status 1.

Exception Hierarchy:
    RepoArkError (base)
    ├── InputValidationError (bad repository path)
    │   ├── RepoPathNotFoundError
    │   ├── RepoPathNotDirectoryError
    │   └── NotARepositoryError
    ├── ExternalQueryError (git invocation failed)
    ├── UnexpectedDirectoryError (file query returned a plain directory)
    ├── ArchiveIOError (filesystem or container I/O failure)
    ├── RemovalError (delete failed even after permission retry)
    └── UnsupportedEntryKindError (archive entry is not a regular file or directory)
        └── UnsafeEntryPathError (entry path escapes the target directory)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class RepoArkError(Exception):
    """Base exception for all repoark errors."""


class InputValidationError(RepoArkError):
    """Base exception for invalid repository paths."""


class RepoPathNotFoundError(InputValidationError):
    """Raised when the repository path does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Path does not exist: {path}')


class RepoPathNotDirectoryError(InputValidationError):
    """Raised when the repository path is not a directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'{path} is not a directory')


class NotARepositoryError(InputValidationError):
    """Raised when the path is not inside a git working tree or lacks its metadata directory."""

    def __init__(self, path: Path, reason: str | None = None) -> None:
        self.path = path
        message = f'{path} is not a valid Git repository'
        if reason:
            message += f' ({reason})'
        super().__init__(message)


class ExternalQueryError(RepoArkError):
    """Raised when a git invocation fails, times out, or git is not installed."""

    def __init__(self, command: Sequence[str], detail: str) -> None:
        self.command = list(command)
        self.detail = detail
        super().__init__(f'Git query failed: {" ".join(self.command)}: {detail}')


class UnexpectedDirectoryError(RepoArkError):
    """Raised when the file query lists a directory that is not a registered submodule.

    Typically an embedded repository that was never added as a submodule.
    Its contents would otherwise be silently left out of the archive.
    """

    def __init__(self, path: Path, archive_path: str) -> None:
        self.path = path
        self.archive_path = archive_path
        super().__init__(
            f'{archive_path} is a directory but not a registered submodule: {path}\n'
            f'Register it with `git submodule add` or add it to .gitignore.'
        )


class ArchiveIOError(RepoArkError):
    """Raised on file create/open/read/write/stat failures and corrupt archives."""

    def __init__(self, action: str, path: Path | str, cause: BaseException) -> None:
        self.action = action
        self.path = path
        super().__init__(f'Error {action} {path}: {cause}')


class RemovalError(RepoArkError):
    """Raised when a path cannot be removed, even after forcing write permission."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        super().__init__(f'Error removing existing path {path}: {cause}')


class UnsupportedEntryKindError(RepoArkError):
    """Raised when the archive holds an entry that is neither a regular file nor a directory."""

    def __init__(self, name: str, kind: str) -> None:
        self.name = name
        self.kind = kind
        super().__init__(f'Unsupported archive entry {name!r}: {kind}')


class UnsafeEntryPathError(UnsupportedEntryKindError):
    """Raised when an entry path is absolute or climbs out of the target directory."""

    def __init__(self, name: str) -> None:
        super().__init__(name, 'path escapes the target directory')
