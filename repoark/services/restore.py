"""
Repository restore service - differential restore of an archive into a working tree.

Per regular-file entry:
1. Record the path as extracted (even when skipped)
2. Treat it as new if an ancestor inside the target is a file or symlink
3. Skip if a regular file with the same mtime (one-second resolution) exists
4. Otherwise remove whatever is in the way, write content, then chmod, then utime

Afterwards, untracked-not-ignored files in the target that the archive did
not contain are deleted. Tracked and ignored files are never deleted.
"""

from __future__ import annotations

import math
import os
import shutil
import stat
from datetime import UTC, datetime
from pathlib import Path

from repoark.exceptions import ArchiveIOError
from repoark.protocols import LoggerProtocol, NullLogger
from repoark.schemas.operations import ArchiveEntry, RestoreDecision, RestoreResult
from repoark.services.container import ArchiveReader, EntryStream
from repoark.services.git import GitClient
from repoark.services.path_safety import blocking_ancestor, ensure_parent_dirs, remove_path

__all__ = ['RepoRestoreService', 'round_mtime']

TARGET_DIR_MODE = 0o755


def round_mtime(timestamp: float) -> int:
    """
    Round a timestamp to the nearest second, halves away from zero.

    Container and filesystem timestamp precision differ by platform; comparing
    at one-second resolution avoids spurious changes from sub-second truncation.
    """
    if timestamp < 0:
        return -math.floor(-timestamp + 0.5)
    return math.floor(timestamp + 0.5)


class RepoRestoreService:
    """
    Service for restoring repository archives.

    Assumes exclusive access to the target directory for the whole restore.
    """

    def __init__(self, git: GitClient) -> None:
        """
        Initialize restore service.

        Args:
            git: Git query client, used for the post-restore cleanup query
        """
        self.git = git

    def restore_archive(
        self,
        archive_path: Path,
        target_path: Path,
        logger: LoggerProtocol | None = None,
    ) -> RestoreResult:
        """
        Restore an archive into a target directory.

        Args:
            archive_path: .tar.gz archive created by RepoArchiveService
            target_path: Directory to restore into (created if missing)
            logger: Progress logger

        Returns:
            Restore result with per-decision counts and removed paths

        Raises:
            ArchiveIOError: If the archive cannot be read or a file cannot be written
            UnsupportedEntryKindError: If the archive holds links, devices or unsafe paths
            RemovalError: If an existing path cannot be removed
            ExternalQueryError: If the cleanup query fails
        """
        logger = logger or NullLogger()
        target = target_path.absolute()

        try:
            target.mkdir(mode=TARGET_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveIOError('creating repository directory', target, e) from e

        extracted_paths: set[str] = set()
        counts: dict[RestoreDecision, int] = {'create': 0, 'overwrite': 0, 'skip': 0}

        with ArchiveReader(archive_path) as reader:
            for entry, stream in reader.entries():
                if entry.kind == 'directory' or stream is None:
                    continue

                extracted_paths.add(entry.path)
                target_file = target / entry.path
                if blocking_ancestor(target, target_file) is not None:
                    # Whatever lies behind a file or symlink ancestor is not part of the target
                    decision: RestoreDecision = 'create'
                else:
                    decision = self.decide(target_file, entry)
                counts[decision] += 1

                if decision == 'skip':
                    logger.info(f'skip {target_file}')
                    continue
                if decision == 'overwrite':
                    remove_path(target_file)

                self._write_file(target, target_file, entry, stream)
                logger.info(f'restore {target_file}')

        removed = self.remove_stale_files(target, extracted_paths, logger)

        logger.info(f'Successfully restored repository to: {target}')
        return RestoreResult(
            target_path=str(target),
            archive_path=str(archive_path.absolute()),
            restored_at=datetime.now(UTC),
            files_created=counts['create'],
            files_overwritten=counts['overwrite'],
            files_skipped=counts['skip'],
            removed_paths=removed,
        )

    @staticmethod
    def decide(target_file: Path, entry: ArchiveEntry) -> RestoreDecision:
        """
        Decide what to do with one entry.

        Only an existing regular file can be skipped; a directory, symlink or
        anything else at the path is replaced.
        """
        try:
            st = target_file.lstat()
        except FileNotFoundError:
            return 'create'
        except NotADirectoryError:
            # A file occupies a parent directory position
            return 'create'

        if stat.S_ISREG(st.st_mode) and round_mtime(st.st_mtime) == round_mtime(entry.mtime):
            return 'skip'
        return 'overwrite'

    def remove_stale_files(self, target: Path, extracted_paths: set[str], logger: LoggerProtocol) -> list[str]:
        """
        Delete untracked-not-ignored files that the archive did not contain.

        Git reports an untracked nested repository as `dir/`; it is kept when
        any extracted path lies beneath it.

        Returns:
            Removed paths, relative to target
        """
        extracted_dirs = {parent for path in extracted_paths for parent in _parents(path)}
        removed: list[str] = []

        for relative in self.git.list_files(target, include_tracked=False):
            if relative.endswith('/'):
                relative = relative.rstrip('/')
                if relative in extracted_dirs:
                    continue
            if relative in extracted_paths:
                continue

            stale = target / relative
            logger.info(f'remove {stale}')
            remove_path(stale)
            removed.append(relative)

        return removed

    @staticmethod
    def _write_file(target: Path, target_file: Path, entry: ArchiveEntry, stream: EntryStream) -> None:
        """Write content, then permission bits, then mtime; each step fails distinctly."""
        ensure_parent_dirs(target, target_file)

        try:
            with open(target_file, 'wb') as f:
                shutil.copyfileobj(stream, f)
        except OSError as e:
            raise ArchiveIOError('writing file content to', target_file, e) from e

        try:
            os.chmod(target_file, entry.mode)
        except OSError as e:
            raise ArchiveIOError('setting file permission on', target_file, e) from e

        try:
            os.utime(target_file, (entry.mtime, entry.mtime))
        except OSError as e:
            raise ArchiveIOError('setting file modification time on', target_file, e) from e


def _parents(path: str) -> list[str]:
    """Slash-separated ancestors of an archive path: 'a/b/c' -> ['a', 'a/b']."""
    parts = path.split('/')
    return ['/'.join(parts[:i]) for i in range(1, len(parts))]
