"""Tests for archive creation end to end."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoark.exceptions import ExternalQueryError, NotARepositoryError, UnexpectedDirectoryError
from repoark.services.archive import RepoArchiveService
from repoark.services.container import ArchiveReader
from repoark.services.git import GitClient
from tests.conftest import git, requires_git, write


def _archived_paths(archive_path: Path) -> list[str]:
    with ArchiveReader(archive_path) as reader:
        return [entry.path for entry, _ in reader.entries()]


@requires_git
def test_create_archive_result(tmp_path: Path, repo: Path, git_client: GitClient) -> None:
    output = tmp_path / 'repo.tar.gz'

    result = RepoArchiveService(git_client).create_archive(repo, output)

    paths = _archived_paths(output)
    assert result.file_count == len(paths)
    assert result.archive_path == str(output.absolute())
    assert result.repo_path == str(repo.resolve())
    assert result.submodule_count == 0
    assert result.total_bytes >= len('alpha\n') + len('bravo\n') + len('charlie\n')
    assert result.size_mb >= 0
    assert {'a.txt', 'dir/b.txt', 'c.txt', '.gitignore'} <= set(paths)
    assert 'ignored.txt' not in paths


@requires_git
def test_submodules_counted(tmp_path: Path, repo_with_submodule: Path, git_client: GitClient) -> None:
    output = tmp_path / 'repo.tar.gz'

    result = RepoArchiveService(git_client).create_archive(repo_with_submodule, output)

    assert result.submodule_count == 1
    assert 'libs/sub/lib.txt' in _archived_paths(output)


@requires_git
def test_output_inside_repository_is_not_archived(repo: Path, git_client: GitClient) -> None:
    output = repo / 'snapshot.tar.gz'
    service = RepoArchiveService(git_client)
    service.create_archive(repo, output)

    # The first archive is now an untracked file the second run would pick up
    result = service.create_archive(repo, output)

    paths = _archived_paths(output)
    assert 'snapshot.tar.gz' not in paths
    assert result.file_count == len(paths)


@requires_git
def test_compression_level_is_configurable(tmp_path: Path, repo: Path, git_client: GitClient) -> None:
    write(repo / 'big.txt', 'compressible line\n' * 5000)
    stored = RepoArchiveService(git_client, compression_level=0).create_archive(repo, tmp_path / 'stored.tar.gz')
    packed = RepoArchiveService(git_client, compression_level=9).create_archive(repo, tmp_path / 'packed.tar.gz')

    assert stored.file_count == packed.file_count
    assert (tmp_path / 'stored.tar.gz').stat().st_size > (tmp_path / 'packed.tar.gz').stat().st_size


@requires_git
def test_query_failure_leaves_no_archive(tmp_path: Path, repo: Path) -> None:
    nested = repo / 'vendor' / 'nested'
    nested.mkdir(parents=True)
    git(nested, 'init', '-q')
    write(nested / 'x.txt', 'x')
    output = tmp_path / 'repo.tar.gz'

    with pytest.raises(UnexpectedDirectoryError):
        RepoArchiveService(GitClient()).create_archive(repo, output)
    assert not output.exists()


@requires_git
def test_missing_git_executable(tmp_path: Path, repo: Path) -> None:
    with pytest.raises(ExternalQueryError):
        RepoArchiveService(GitClient(executable='git-does-not-exist')).create_archive(repo, tmp_path / 'x.tar.gz')
    assert not (tmp_path / 'x.tar.gz').exists()


@requires_git
def test_not_a_repository(tmp_path: Path, git_client: GitClient) -> None:
    plain = tmp_path / 'plain'
    plain.mkdir()

    with pytest.raises(NotARepositoryError):
        RepoArchiveService(git_client).create_archive(plain, tmp_path / 'x.tar.gz')
