"""
Repository entry enumeration - decides exactly which files go into an archive.

The file set is the union of, for the repository and every submodule below it:
- tracked files
- untracked files not excluded by ignore rules
- everything inside the metadata directory (.git), never filtered

Submodules are traversed breadth-first through an explicit work queue, each
contributing its files under its own path prefix.
"""

from __future__ import annotations

import os
import stat
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from repoark.exceptions import (
    ArchiveIOError,
    NotARepositoryError,
    RepoPathNotDirectoryError,
    RepoPathNotFoundError,
    UnexpectedDirectoryError,
)
from repoark.paths import to_archive_path
from repoark.protocols import LoggerProtocol, NullLogger
from repoark.schemas.operations import ArchiveEntry, RootDir
from repoark.services.git import GitClient

__all__ = ['RepoEntryEnumerator', 'validate_repo_path']


def validate_repo_path(repo_path: Path, git: GitClient) -> Path:
    """
    Check that `repo_path` is an existing directory inside a git working tree.

    Returns:
        The resolved repository path

    Raises:
        RepoPathNotFoundError: If the path does not exist
        RepoPathNotDirectoryError: If the path is not a directory
        NotARepositoryError: If git does not recognize it as a working tree
    """
    if not repo_path.exists():
        raise RepoPathNotFoundError(repo_path)
    if not repo_path.is_dir():
        raise RepoPathNotDirectoryError(repo_path)
    if not git.is_inside_work_tree(repo_path):
        raise NotARepositoryError(repo_path)
    return repo_path.resolve()


class RepoEntryEnumerator:
    """
    Enumerates the archive entries of a repository and its submodules.

    Enumeration is best-effort against a live filesystem: paths that vanish
    between the git query and the stat are skipped. Git failures abort.
    """

    def __init__(self, git: GitClient, metadata_dir_name: str = '.git') -> None:
        """
        Initialize enumerator.

        Args:
            git: Git query client
            metadata_dir_name: Name of the repository control-data directory
        """
        self.git = git
        self.metadata_dir_name = metadata_dir_name

    def enumerate_entries(self, repo_root: Path, logger: LoggerProtocol | None = None) -> list[ArchiveEntry]:
        """
        Enumerate every file to archive, in deterministic order.

        Order: breadth-first by repository root, then git's query order, then
        the sorted metadata-directory walk. Paths are unique.

        Args:
            repo_root: Top-level repository directory
            logger: Progress logger

        Returns:
            Ordered archive entries, each carrying its source path

        Raises:
            RepoPathNotFoundError / RepoPathNotDirectoryError / NotARepositoryError: Invalid repo_root
            ExternalQueryError: If any git query fails
            UnexpectedDirectoryError: If git lists a directory that is not a submodule
        """
        entries: list[ArchiveEntry] = []
        for _root, root_entries in self.walk_roots(repo_root, logger):
            entries.extend(root_entries)
        return entries

    def walk_roots(
        self, repo_root: Path, logger: LoggerProtocol | None = None
    ) -> Iterator[tuple[RootDir, list[ArchiveEntry]]]:
        """
        Yield each repository root with its own entries, breadth-first.

        The first root is the top-level repository; every later one is a
        submodule discovered while processing an earlier root.
        """
        logger = logger or NullLogger()
        repo_root = validate_repo_path(repo_root, self.git)

        seen: set[str] = set()
        queue: deque[RootDir] = deque([RootDir(prefix='', dir=repo_root)])

        while queue:
            root = queue.popleft()
            logger.info(f'Enumerating {root.dir}' + (f' (as {root.prefix})' if root.prefix else ''))

            root_entries: list[ArchiveEntry] = []
            queue.extend(self._collect_worktree_files(root, root_entries, seen, logger))
            self._collect_metadata_files(root, root_entries, seen)
            yield root, root_entries

    def _collect_worktree_files(
        self,
        root: RootDir,
        entries: list[ArchiveEntry],
        seen: set[str],
        logger: LoggerProtocol,
    ) -> list[RootDir]:
        """Add tracked and untracked-not-ignored files of one root; return its submodules."""
        submodules: list[RootDir] = []

        for relative in self.git.list_files(root.dir, include_tracked=True):
            relative = relative.rstrip('/')
            if not relative:
                continue
            full_path = root.dir / relative
            archive_path = root.archive_path(relative)

            try:
                st = full_path.stat()
            except OSError:
                continue  # Vanished (or dangling symlink) since the query

            if stat.S_ISDIR(st.st_mode):
                if full_path.is_symlink():
                    logger.warning(f'Skipping symlink to directory {archive_path}')
                    continue
                if not self.git.is_submodule(root.dir, relative):
                    raise UnexpectedDirectoryError(full_path, archive_path)
                if not os.path.lexists(full_path / self.metadata_dir_name):
                    logger.warning(f'Skipping uninitialized submodule {archive_path}')
                    continue
                submodules.append(RootDir(prefix=archive_path, dir=full_path))
            elif stat.S_ISREG(st.st_mode):
                self._add(entries, seen, archive_path, full_path, st)

        return submodules

    def _collect_metadata_files(self, root: RootDir, entries: list[ArchiveEntry], seen: set[str]) -> None:
        """
        Add every regular file under the metadata directory, unfiltered.

        In a submodule the metadata entry is usually a file (`gitdir: ...`)
        pointing into the parent's metadata directory, which the parent's own
        walk captures.
        """
        metadata_path = root.dir / self.metadata_dir_name
        try:
            st = metadata_path.stat()
        except OSError as e:
            raise NotARepositoryError(root.dir, f'cannot read {self.metadata_dir_name}: {e}') from e

        if stat.S_ISREG(st.st_mode):
            self._add(entries, seen, root.archive_path(self.metadata_dir_name), metadata_path, st)
            return

        def _raise(error: OSError) -> None:
            raise error

        try:
            for dirpath, dirnames, filenames in os.walk(metadata_path, onerror=_raise):
                dirnames.sort()
                for filename in sorted(filenames):
                    full_path = Path(dirpath) / filename
                    try:
                        file_st = full_path.stat()
                    except FileNotFoundError:
                        continue  # Lock files come and go
                    if not stat.S_ISREG(file_st.st_mode):
                        continue
                    relative = to_archive_path(full_path.relative_to(root.dir))
                    self._add(entries, seen, root.archive_path(relative), full_path, file_st)
        except OSError as e:
            raise ArchiveIOError('walking', metadata_path, e) from e

    @staticmethod
    def _add(entries: list[ArchiveEntry], seen: set[str], archive_path: str, source: Path, st: os.stat_result) -> None:
        if archive_path in seen:
            return
        seen.add(archive_path)
        entries.append(
            ArchiveEntry(
                path=archive_path,
                size=st.st_size,
                mode=stat.S_IMODE(st.st_mode),
                mtime=st.st_mtime,
                source=source,
            )
        )
