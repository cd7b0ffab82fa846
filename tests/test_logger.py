"""Tests for progress reporters."""

from __future__ import annotations

import pytest

from repoark.cli.logger import CLILogger
from repoark.protocols import NullLogger


def test_cli_logger_hides_per_file_lines_unless_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    logger = CLILogger()

    logger.info('add a.txt')
    logger.warning('Skipping uninitialized submodule libs/sub')
    logger.error('Failed to create archive: boom')

    assert capsys.readouterr().out.splitlines() == [
        '[WARNING] Skipping uninitialized submodule libs/sub',
        '[ERROR] Failed to create archive: boom',
    ]


def test_cli_logger_verbose_shows_per_file_lines(capsys: pytest.CaptureFixture[str]) -> None:
    CLILogger(verbose=True).info('restore /tmp/target/a.txt')

    assert capsys.readouterr().out == '[INFO] restore /tmp/target/a.txt\n'


def test_null_logger_is_silent(capsys: pytest.CaptureFixture[str]) -> None:
    logger = NullLogger()
    logger.info('add a.txt')
    logger.warning('w')
    logger.error('e')

    assert capsys.readouterr().out == ''
