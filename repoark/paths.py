"""
Path utilities for archive naming and archive-relative paths.

Archive paths are always slash-separated, whatever the host platform uses.
"""

from __future__ import annotations

from pathlib import Path

__all__ = ['ARCHIVE_SUFFIX', 'find_available_archive_name', 'is_safe_archive_path', 'to_archive_path']

ARCHIVE_SUFFIX = '.tar.gz'


def to_archive_path(relative: Path | str) -> str:
    """
    Convert a host-relative path to its archive form.

    Examples:
        >>> to_archive_path(Path('sub') / '.git' / 'HEAD')
        'sub/.git/HEAD'
    """
    return Path(relative).as_posix()


def is_safe_archive_path(name: str) -> bool:
    """
    Check that an archive entry name stays inside the target directory.

    Rejects empty names, absolute paths and any `..` component.
    """
    if not name or name.startswith('/'):
        return False
    return '..' not in name.split('/')


def find_available_archive_name(repo_path: Path, directory: Path) -> Path:
    """
    Pick a default archive path for a repository.

    Uses `<basename>.tar.gz`, or `<basename>-N.tar.gz` with the first free N
    when the plain name is taken.

    Args:
        repo_path: Repository being archived (its resolved directory name is the basename)
        directory: Directory the archive will be written to

    Returns:
        Path inside `directory` that does not exist yet
    """
    base_name = repo_path.resolve().name
    candidate = directory / f'{base_name}{ARCHIVE_SUFFIX}'
    if not candidate.exists():
        return candidate

    i = 1
    while True:
        candidate = directory / f'{base_name}-{i}{ARCHIVE_SUFFIX}'
        if not candidate.exists():
            return candidate
        i += 1
