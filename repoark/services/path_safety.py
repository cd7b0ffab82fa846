"""
Path safety guard - removal of locked paths and type conflicts.

Git stores object files read-only (mode 444). On platforms and filesystems
where that blocks deletion, a plain recursive remove fails; removal is retried
once after forcing the target writable.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from repoark.exceptions import ArchiveIOError, RemovalError

__all__ = ['blocking_ancestor', 'ensure_parent_dirs', 'remove_path']

logger = logging.getLogger(__name__)

WRITABLE_FILE_MODE = 0o666
WRITABLE_DIR_MODE = 0o777
NEW_DIR_MODE = 0o755


def remove_path(path: Path) -> None:
    """
    Remove a file, symlink or directory tree. Missing paths are not an error.

    On PermissionError, forces write permission on the target (recursively
    for directories) and tries exactly once more.

    Raises:
        RemovalError: If removal fails, or fails again after the permission retry
    """
    try:
        _remove(path)
    except PermissionError as first_error:
        logger.debug('Permission denied removing %s, retrying writable: %s', path, first_error)
        try:
            _force_writable(path)
            _remove(path)
        except OSError as e:
            raise RemovalError(path, e) from e
    except OSError as e:
        raise RemovalError(path, e) from e


def ensure_parent_dirs(root: Path, target: Path) -> None:
    """
    Create the parent directories of `target`, below `root`.

    Any non-directory (file, symlink) occupying one of those directory
    positions is removed first.

    Raises:
        RemovalError: If a blocking path cannot be removed
        ArchiveIOError: If a directory cannot be created
    """
    blocker = blocking_ancestor(root, target)
    if blocker is not None:
        remove_path(blocker)

    try:
        target.parent.mkdir(mode=NEW_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveIOError('creating directory', target.parent, e) from e


def blocking_ancestor(root: Path, target: Path) -> Path | None:
    """
    Return the first path between `root` and `target` that is not a real directory.

    A symlink blocks even when it points at a directory. Positions below the
    first missing component are not inspected.
    """
    current = root
    for part in target.parent.relative_to(root).parts:
        current = current / part
        if not os.path.lexists(current):
            return None
        if current.is_symlink() or not current.is_dir():
            return current
    return None


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def _force_writable(path: Path) -> None:
    """Grant broad write permission on `path` and, for a directory, everything below it."""
    if path.is_symlink():
        return
    if not path.is_dir():
        os.chmod(path, WRITABLE_FILE_MODE)
        return

    os.chmod(path, WRITABLE_DIR_MODE)
    for dirpath, dirnames, filenames in os.walk(path):
        for name in dirnames:
            child = os.path.join(dirpath, name)
            if not os.path.islink(child):
                os.chmod(child, WRITABLE_DIR_MODE)
        for name in filenames:
            child = os.path.join(dirpath, name)
            if not os.path.islink(child):
                os.chmod(child, WRITABLE_FILE_MODE)
