"""
Git query client - the version-control collaborator.

Thin wrapper over the `git` CLI. Only the three queries repoark needs:
working-tree validity, the file list (tracked and/or untracked-not-ignored),
and submodule registration. Every failure except a negative answer to a
yes/no query is raised as ExternalQueryError.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from repoark.exceptions import ExternalQueryError

__all__ = ['GitClient']

logger = logging.getLogger(__name__)


class GitClient:
    """Runs git queries against a repository directory, one at a time."""

    def __init__(self, executable: str = 'git', timeout: float | None = None) -> None:
        """
        Initialize git client.

        Args:
            executable: git binary name or path
            timeout: Per-invocation timeout in seconds (None = wait forever)
        """
        self.executable = executable
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> GitClient:
        """Build a client from the lazily loaded CLI settings."""
        from repoark.config.cli import settings

        return cls(executable=settings.GIT_EXECUTABLE, timeout=settings.GIT_TIMEOUT_SECONDS)

    def is_inside_work_tree(self, path: Path) -> bool:
        """Check whether `path` is inside a git working tree."""
        result = self._run(path, ['rev-parse', '--is-inside-work-tree'])
        return result.returncode == 0 and result.stdout.strip() == 'true'

    def list_files(self, repo_dir: Path, *, include_tracked: bool = True) -> list[str]:
        """
        List repository files as slash-separated paths relative to `repo_dir`.

        Always includes untracked files not excluded by ignore rules; with
        `include_tracked` also includes every path in the index. Paths are
        NUL-delimited on the wire so names needing quoting survive intact.

        Args:
            repo_dir: Repository root to query
            include_tracked: Add tracked (cached) files to the untracked ones

        Returns:
            Paths in git's output order, empty entries dropped

        Raises:
            ExternalQueryError: If git fails
        """
        args = ['ls-files', '-z', '--others', '--exclude-standard']
        if include_tracked:
            args.append('--cached')
        result = self._run(repo_dir, args)
        if result.returncode != 0:
            raise ExternalQueryError(self._command(repo_dir, args), self._describe_failure(result))
        return [entry for entry in result.stdout.split('\0') if entry]

    def is_submodule(self, repo_dir: Path, relative_path: str) -> bool:
        """
        Check whether `relative_path` is a registered submodule of `repo_dir`.

        `git submodule status -- <dir>` also succeeds, silently, for ordinary
        directories holding tracked files, so the path must appear in the
        status output (`<flag><sha1> <path>[ (<describe>)]`).
        """
        result = self._run(repo_dir, ['submodule', 'status', '--', relative_path])
        if result.returncode != 0:
            return False
        for line in result.stdout.splitlines():
            _, _, listed = line[1:].partition(' ')
            if listed == relative_path or listed.startswith(f'{relative_path} ('):
                return True
        return False

    def _command(self, repo_dir: Path, args: Sequence[str]) -> list[str]:
        return [self.executable, '-C', str(repo_dir), *args]

    def _run(self, repo_dir: Path, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        """
        Run a git command synchronously.

        Non-zero exit is returned to the caller (yes/no queries use it as the
        answer). Missing git and timeouts are raised.
        """
        command = self._command(repo_dir, args)
        logger.debug('Running %s', ' '.join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='surrogateescape',
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ExternalQueryError(command, f'{self.executable} not found') from e
        except subprocess.TimeoutExpired as e:
            raise ExternalQueryError(command, f'timed out after {self.timeout}s') from e
        logger.debug('Exit status %d: %s', result.returncode, ' '.join(command))
        return result

    @staticmethod
    def _describe_failure(result: subprocess.CompletedProcess[str]) -> str:
        stderr = result.stderr.strip()
        return f'exit status {result.returncode}' + (f': {stderr}' if stderr else '')
