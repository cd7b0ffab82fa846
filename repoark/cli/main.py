#!/usr/bin/env python3
"""
Command-line interface for repoark.

Provides commands to archive and restore git working trees.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

import typer

from repoark.cli.logger import CLILogger
from repoark.config.cli import settings
from repoark.exceptions import RepoArkError
from repoark.paths import find_available_archive_name
from repoark.services.archive import RepoArchiveService
from repoark.services.git import GitClient
from repoark.services.restore import RepoRestoreService

app = typer.Typer(
    name='repoark',
    help='Archive and restore git working trees, including untracked files, .git and submodules',
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    """Route internal diagnostics (git invocations) to stderr when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


@app.command()
def archive(
    repo_path: Path = typer.Argument(..., help='Repository to archive'),
    output: Path | None = typer.Argument(
        None, help='Output archive (default: <repo-name>.tar.gz in the current directory)'
    ),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Archive a repository: tracked, untracked-not-ignored, .git and submodules."""
    _configure_logging(verbose)
    logger = CLILogger(verbose=verbose)

    try:
        output_path = output if output is not None else find_available_archive_name(repo_path, Path.cwd())
        logger.info(f'Creating archive: {output_path}')

        service = RepoArchiveService(
            git=GitClient.from_settings(),
            metadata_dir_name=settings.METADATA_DIR_NAME,
            compression_level=settings.COMPRESSION_LEVEL,
        )
        result = service.create_archive(repo_path, output_path, logger=logger)

        typer.secho('✓ Archive created successfully!', fg=typer.colors.GREEN)
        typer.echo(f'  Path: {result.archive_path}')
        typer.echo(f'  Files: {result.file_count:,}')
        if result.submodule_count:
            typer.echo(f'  Submodules: {result.submodule_count}')
        typer.echo(f'  Content: {result.total_bytes:,} bytes')
        typer.echo(f'  Size: {result.size_mb} MB')
        typer.echo()
        typer.echo('To restore, use:')
        typer.secho(f'  repoark restore {result.repo_path} {result.archive_path}', fg=typer.colors.CYAN)

    except RepoArkError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except Exception as e:
        logger.error(f'Failed to create archive: {e}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)


@app.command()
def restore(
    repo_path: Path = typer.Argument(..., help='Directory to restore into (created if missing)'),
    archive: Path = typer.Argument(..., help='Archive created by `repoark archive`'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Restore a repository archive, rewriting only files that changed.

    Files whose modification time matches the archive are left untouched.
    Untracked files (not ignored) that are absent from the archive are removed.
    """
    _configure_logging(verbose)
    logger = CLILogger(verbose=verbose)

    try:
        if not archive.exists():
            typer.secho(f'Error: Archive not found: {archive}', fg=typer.colors.RED, err=True)
            raise typer.Exit(1)

        logger.info(f'Restoring {archive} to {repo_path}')
        service = RepoRestoreService(git=GitClient.from_settings())
        result = service.restore_archive(archive, repo_path, logger=logger)

        typer.secho('✓ Repository restored successfully!', fg=typer.colors.GREEN)
        typer.echo(f'  Path: {result.target_path}')
        typer.echo(f'  Written: {result.files_written:,} ({result.files_created:,} new)')
        typer.echo(f'  Unchanged: {result.files_skipped:,}')
        typer.echo(f'  Removed: {len(result.removed_paths):,}')
        if verbose:
            for path in result.removed_paths:
                typer.echo(f'    - {path}')

    except typer.Exit:
        raise
    except RepoArkError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except Exception as e:
        logger.error(f'Failed to restore repository: {e}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
