"""
Repository archive service - framework-agnostic domain logic.

Validates the repository, enumerates its complete file set (submodules and
metadata directories included), then streams it into a .tar.gz archive.
Enumeration finishes before the archive file is created, so a git failure
never leaves a partial archive behind.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from repoark.protocols import LoggerProtocol, NullLogger
from repoark.schemas.operations import ArchiveEntry, ArchiveResult
from repoark.services.container import ArchiveWriter
from repoark.services.enumerator import RepoEntryEnumerator
from repoark.services.git import GitClient


class RepoArchiveService:
    """
    Service for creating repository archives.

    Pure domain logic - no CLI dependencies. Collaborators are injected so
    tests can point git at a fixture repository.
    """

    def __init__(
        self,
        git: GitClient,
        metadata_dir_name: str = '.git',
        compression_level: int = 6,
    ) -> None:
        """
        Initialize archive service.

        Args:
            git: Git query client
            metadata_dir_name: Repository control-data directory name
            compression_level: gzip level 0-9
        """
        self.git = git
        self.enumerator = RepoEntryEnumerator(git, metadata_dir_name=metadata_dir_name)
        self.compression_level = compression_level

    def create_archive(
        self,
        repo_path: Path,
        output_path: Path,
        logger: LoggerProtocol | None = None,
    ) -> ArchiveResult:
        """
        Archive a repository.

        Args:
            repo_path: Repository root to archive
            output_path: Archive file to create (overwritten if present)
            logger: Progress logger

        Returns:
            Archive result

        Raises:
            InputValidationError: If repo_path is missing, not a directory, or not a repository
            ExternalQueryError: If a git query fails
            UnexpectedDirectoryError: If git lists a plain directory
            ArchiveIOError: If reading a source file or writing the archive fails
        """
        logger = logger or NullLogger()
        logger.info(f'Archiving repository {repo_path}')

        entries: list[ArchiveEntry] = []
        root_count = 0
        for _root, root_entries in self.enumerator.walk_roots(repo_path, logger):
            root_count += 1
            entries.extend(root_entries)
        logger.info(f'Found {len(entries)} files in {root_count} repositories')

        entries = self._exclude_output(entries, output_path, logger)

        with ArchiveWriter(output_path, compression_level=self.compression_level) as writer:
            total_bytes = writer.write_all(entries, logger)

        size_mb = round(output_path.stat().st_size / (1024 * 1024), 2)
        logger.info(f'Successfully created archive: {output_path}')

        return ArchiveResult(
            archive_path=str(output_path.absolute()),
            repo_path=str(repo_path.resolve()),
            archived_at=datetime.now(UTC),
            file_count=len(entries),
            total_bytes=total_bytes,
            size_mb=size_mb,
            submodule_count=root_count - 1,
        )

    @staticmethod
    def _exclude_output(entries: list[ArchiveEntry], output_path: Path, logger: LoggerProtocol) -> list[ArchiveEntry]:
        """Drop the archive file itself when it is written inside the repository."""
        target = output_path.resolve()
        kept = [entry for entry in entries if entry.source is None or entry.source.resolve() != target]
        if len(kept) != len(entries):
            logger.warning(f'Not archiving the output file itself: {output_path}')
        return kept
