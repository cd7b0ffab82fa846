"""
Archive container - gzip-compressed tar stream of regular files.

Each entry carries a slash-separated path, size, permission bits and
modification time. Modification times keep sub-second precision (PAX headers)
so a restore can put back exactly what was archived.
"""

from __future__ import annotations

import os
import stat
import tarfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType
from typing import IO

from repoark.exceptions import ArchiveIOError, UnsafeEntryPathError, UnsupportedEntryKindError
from repoark.paths import is_safe_archive_path
from repoark.protocols import LoggerProtocol, NullLogger
from repoark.schemas.operations import ArchiveEntry

__all__ = ['ArchiveReader', 'ArchiveWriter', 'EntryStream']

# Tar member types other than regular files and directories, for error messages
ENTRY_KIND_NAMES = {
    tarfile.SYMTYPE: 'symbolic link',
    tarfile.LNKTYPE: 'hard link',
    tarfile.CHRTYPE: 'character device',
    tarfile.BLKTYPE: 'block device',
    tarfile.FIFOTYPE: 'fifo',
}


class ArchiveWriter:
    """
    Writes regular-file entries to a new .tar.gz archive, in the order given.

    Use as a context manager; the archive is complete only after close.
    """

    def __init__(self, archive_path: Path, compression_level: int = 6) -> None:
        self.archive_path = archive_path
        self.compression_level = compression_level
        self._tar: tarfile.TarFile | None = None

    def __enter__(self) -> ArchiveWriter:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Create (or truncate) the archive file."""
        try:
            self._tar = tarfile.open(
                self.archive_path,
                mode='w:gz',
                compresslevel=self.compression_level,
                format=tarfile.PAX_FORMAT,
            )
        except OSError as e:
            raise ArchiveIOError('creating archive file', self.archive_path, e) from e

    def close(self) -> None:
        if self._tar is None:
            return
        tar, self._tar = self._tar, None
        try:
            tar.close()
        except OSError as e:
            raise ArchiveIOError('finishing archive file', self.archive_path, e) from e

    def write_all(self, entries: Iterable[ArchiveEntry], logger: LoggerProtocol | None = None) -> int:
        """
        Write every entry; return the total content bytes written.

        Raises:
            ArchiveIOError: If a source file cannot be read or the archive cannot be written
        """
        logger = logger or NullLogger()
        return sum(self.write_entry(entry, logger) for entry in entries)

    def write_entry(self, entry: ArchiveEntry, logger: LoggerProtocol | None = None) -> int:
        """
        Write one regular file: header (path, size, mode, mtime), then content.

        Size, mode and mtime are taken from the open source file, so the
        header always matches the bytes streamed even if the file changed
        since enumeration.

        Returns:
            Content bytes written
        """
        if self._tar is None:
            raise RuntimeError('ArchiveWriter is not open')
        if entry.source is None:
            raise ValueError(f'Entry {entry.path} has no source file')

        try:
            with open(entry.source, 'rb') as f:
                st = os.fstat(f.fileno())
                info = tarfile.TarInfo(name=entry.path)
                info.type = tarfile.REGTYPE
                info.size = st.st_size
                info.mode = stat.S_IMODE(st.st_mode)
                info.mtime = st.st_mtime

                (logger or NullLogger()).info(f'add {entry.path}')
                self._tar.addfile(info, f)
        except OSError as e:
            raise ArchiveIOError('archiving', entry.source, e) from e

        return info.size


class EntryStream:
    """Content of one archive entry; decompression and truncation errors surface as ArchiveIOError."""

    def __init__(self, stream: IO[bytes], archive_path: Path, name: str) -> None:
        self._stream = stream
        self.archive_path = archive_path
        self.name = name

    def read(self, size: int = -1) -> bytes:
        try:
            return self._stream.read(size)
        except (OSError, EOFError, tarfile.TarError) as e:
            raise ArchiveIOError('reading archive entry', f'{self.archive_path}:{self.name}', e) from e


class ArchiveReader:
    """
    Reads entries back from a .tar.gz archive in stream order.

    Yields regular files with their content stream, and directories (from
    archives written by other tools) with no stream. Any other entry kind,
    or a path escaping the archive root, is rejected.
    """

    def __init__(self, archive_path: Path) -> None:
        self.archive_path = archive_path
        self._tar: tarfile.TarFile | None = None

    def __enter__(self) -> ArchiveReader:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        try:
            self._tar = tarfile.open(self.archive_path, mode='r:gz')
        except (OSError, tarfile.TarError) as e:
            raise ArchiveIOError('opening archive file', self.archive_path, e) from e

    def close(self) -> None:
        if self._tar is not None:
            self._tar.close()
            self._tar = None

    def entries(self) -> Iterator[tuple[ArchiveEntry, EntryStream | None]]:
        """
        Iterate entries in stream order.

        A content stream is only valid until the next entry is requested.

        Raises:
            ArchiveIOError: If the archive is truncated or corrupt
            UnsupportedEntryKindError: On links, devices, fifos
            UnsafeEntryPathError: On absolute paths or `..` components
        """
        if self._tar is None:
            raise RuntimeError('ArchiveReader is not open')

        members = iter(self._tar)
        while True:
            try:
                member = next(members)
            except StopIteration:
                return
            except (OSError, EOFError, tarfile.TarError) as e:
                raise ArchiveIOError('reading archive file', self.archive_path, e) from e

            entry = self._to_entry(member)
            if entry.kind == 'directory':
                yield entry, None
                continue

            try:
                stream = self._tar.extractfile(member)
            except (OSError, tarfile.TarError) as e:
                raise ArchiveIOError('reading archive entry', member.name, e) from e
            if stream is None:
                raise ArchiveIOError('reading archive entry', member.name, ValueError('no content stream'))
            yield entry, EntryStream(stream, self.archive_path, member.name)

    @staticmethod
    def _to_entry(member: tarfile.TarInfo) -> ArchiveEntry:
        if not is_safe_archive_path(member.name):
            raise UnsafeEntryPathError(member.name)

        if member.isreg():
            kind = 'file'
        elif member.isdir():
            kind = 'directory'
        else:
            raise UnsupportedEntryKindError(member.name, ENTRY_KIND_NAMES.get(member.type, f'type {member.type!r}'))

        return ArchiveEntry(
            path=member.name,
            size=member.size,
            mode=stat.S_IMODE(member.mode),
            mtime=float(member.mtime),
            kind=kind,
        )
