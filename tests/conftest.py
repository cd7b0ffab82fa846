"""
Shared fixtures for repoark tests.

Fixture repositories are real git repositories built in tmp_path with an
isolated git configuration, so results don't depend on the developer's
global settings.
"""

from __future__ import annotations

import io
import os
import shutil
import subprocess
import tarfile
from collections.abc import Mapping
from pathlib import Path

import pytest

from repoark.schemas.operations import ArchiveEntry
from repoark.services.container import ArchiveWriter
from repoark.services.git import GitClient

# Tests that drive real repositories; a missing git fails them instead of skipping
requires_git = pytest.mark.usefixtures('git_executable')

# Fixed timestamp for deterministic mtime comparisons
T0 = 1_700_000_000.0


@pytest.fixture(scope='session')
def git_executable() -> str:
    """Path to git; the repository-level tests cannot run without it."""
    executable = shutil.which('git')
    if executable is None:
        pytest.fail('git is required on PATH to run the repository tests', pytrace=False)
    return executable


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point git at a throwaway global config with an identity and local submodule transport."""
    config = tmp_path_factory.mktemp('gitconfig') / 'config'
    config.write_text(
        '[user]\n\tname = Repoark Tests\n\temail = tests@example.com\n'
        '[init]\n\tdefaultBranch = main\n'
        '[protocol "file"]\n\tallow = always\n'
        '[commit]\n\tgpgsign = false\n',
        encoding='utf-8',
    )
    monkeypatch.setenv('GIT_CONFIG_GLOBAL', str(config))
    monkeypatch.setenv('GIT_CONFIG_NOSYSTEM', '1')


def git(cwd: Path, *args: str) -> str:
    """Run git in `cwd`, failing the test on error."""
    result = subprocess.run(['git', *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout


def write(path: Path, content: str, mtime: float | None = None, mode: int | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    if mode is not None:
        os.chmod(path, mode)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def git_client(git_executable: str) -> GitClient:
    return GitClient()


@pytest.fixture
def repo(tmp_path: Path, git_executable: str) -> Path:
    """
    Repository with tracked, untracked and ignored files.

    Layout:
        a.txt, dir/b.txt, .gitignore   tracked
        c.txt                          untracked
        ignored.txt, build.log, config ignored
    """
    root = tmp_path / 'repo'
    root.mkdir()
    git(root, 'init', '-q')
    write(root / '.gitignore', 'ignored.txt\n*.log\nconfig\nHEAD\n')
    write(root / 'a.txt', 'alpha\n')
    write(root / 'dir' / 'b.txt', 'bravo\n')
    git(root, 'add', '.')
    git(root, 'commit', '-q', '-m', 'initial')

    write(root / 'c.txt', 'charlie\n')
    write(root / 'ignored.txt', 'ignored\n')
    write(root / 'build.log', 'log\n')
    write(root / 'config', 'worktree file named like a metadata file\n')
    return root


@pytest.fixture
def repo_with_submodule(tmp_path: Path, repo: Path) -> Path:
    """`repo` plus a submodule at `libs/sub` with its own untracked file."""
    upstream = tmp_path / 'sub-upstream'
    upstream.mkdir()
    git(upstream, 'init', '-q')
    write(upstream / 'lib.txt', 'library\n')
    git(upstream, 'add', '.')
    git(upstream, 'commit', '-q', '-m', 'library')

    git(repo, 'submodule', 'add', '-q', str(upstream), 'libs/sub')
    git(repo, 'commit', '-q', '-m', 'add submodule')
    write(repo / 'libs' / 'sub' / 'notes.txt', 'untracked in submodule\n')
    return repo


def make_archive(archive_path: Path, files: Mapping[str, tuple[bytes, float, int]], staging: Path) -> Path:
    """
    Build an archive from {path: (content, mtime, mode)} via ArchiveWriter.

    Source files are staged under `staging`.
    """
    entries = []
    for name, (content, mtime, mode) in files.items():
        source = staging / name
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_bytes(content)
        os.chmod(source, mode)
        os.utime(source, (mtime, mtime))
        entries.append(ArchiveEntry(path=name, size=len(content), mode=mode, mtime=mtime, source=source))

    with ArchiveWriter(archive_path) as writer:
        writer.write_all(entries)
    return archive_path


def add_raw_member(archive_path: Path, info: tarfile.TarInfo, data: bytes | None = None) -> Path:
    """Write a single-member archive bypassing ArchiveWriter (for foreign/hostile archives)."""
    with tarfile.open(archive_path, 'w:gz') as tar:
        tar.addfile(info, io.BytesIO(data) if data is not None else None)
    return archive_path


class StubGit:
    """
    In-memory stand-in for GitClient.

    Args:
        files: {repo dir: paths list_files returns}
        untracked: {repo dir: paths list_files(include_tracked=False) returns}
        submodules: {(repo dir, relative path)} registered as submodules
    """

    def __init__(
        self,
        files: Mapping[Path, list[str]] | None = None,
        untracked: Mapping[Path, list[str]] | None = None,
        submodules: set[tuple[Path, str]] | None = None,
    ) -> None:
        self.files = {k.resolve(): v for k, v in (files or {}).items()}
        self.untracked = {k.resolve(): v for k, v in (untracked or {}).items()}
        self.submodules = {(k.resolve(), v) for k, v in (submodules or set())}
        self.calls: list[tuple[str, Path]] = []

    def is_inside_work_tree(self, path: Path) -> bool:
        return True

    def list_files(self, repo_dir: Path, *, include_tracked: bool = True) -> list[str]:
        self.calls.append(('list_files', repo_dir.resolve()))
        source = self.files if include_tracked else self.untracked
        return list(source.get(repo_dir.resolve(), []))

    def is_submodule(self, repo_dir: Path, relative_path: str) -> bool:
        return (repo_dir.resolve(), relative_path) in self.submodules
