"""
Terminal progress reporter for `repoark archive` and `repoark restore`.
"""

from __future__ import annotations


class CLILogger:
    """
    Prints service progress to stdout with a level tag.

    Per-file lines (`[INFO] add .git/HEAD`, `[INFO] skip ...`) only appear with
    `--verbose`; a repository with a large object store would otherwise flood
    the terminal. Warnings and errors always print.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def info(self, message: str) -> None:
        if self.verbose:
            print(f'[INFO] {message}')

    def warning(self, message: str) -> None:
        print(f'[WARNING] {message}')

    def error(self, message: str) -> None:
        print(f'[ERROR] {message}')
