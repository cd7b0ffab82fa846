"""
Progress reporting interface shared by the archive and restore services.

Services never print. They report per-file progress (`add <path>` while
archiving; `skip`, `restore` and `remove <path>` while restoring) plus
warnings about entries they leave out, through whatever reporter the caller
hands them.
"""

from __future__ import annotations

from typing import Protocol


class LoggerProtocol(Protocol):
    """
    Receiver for service progress messages.

    `info` carries the per-file lines and can be high volume on large
    repositories. `warning` marks something skipped that the user should know
    about, such as an uninitialized submodule. `error` is for failures a
    caller reports before giving up.
    """

    def info(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class NullLogger:
    """Discards every message; the services' default when no reporter is passed."""

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass
