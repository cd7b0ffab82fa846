"""Service layer for repository archive operations."""

from repoark.services.archive import RepoArchiveService
from repoark.services.container import ArchiveReader, ArchiveWriter, EntryStream
from repoark.services.enumerator import RepoEntryEnumerator, validate_repo_path
from repoark.services.git import GitClient
from repoark.services.path_safety import ensure_parent_dirs, remove_path
from repoark.services.restore import RepoRestoreService, round_mtime

__all__ = [
    'ArchiveReader',
    'ArchiveWriter',
    'EntryStream',
    'GitClient',
    'RepoArchiveService',
    'RepoEntryEnumerator',
    'RepoRestoreService',
    'ensure_parent_dirs',
    'remove_path',
    'round_mtime',
    'validate_repo_path',
]
