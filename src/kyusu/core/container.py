"""Streaming access to ZIP archives.

The central directory is parsed when the archive is opened; entry payloads are
only decompressed when read, in a worker thread, so archives much larger than
available memory can be browsed entry by entry.
"""

import asyncio
import io
import logging
import os
import zipfile
import zlib
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple, Union

from ..errors import ArchiveError

logger = logging.getLogger(__name__)

ArchiveSource = Union[bytes, bytearray, memoryview, str, os.PathLike, BinaryIO]
IndexProgress = Callable[[int, int, str], None]

_READ_ERRORS = (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError, EOFError)


class Blob:
    """Binary payload tagged with a caller-declared MIME type.

    The owner must call :meth:`release` once the payload is no longer needed;
    releasing twice is harmless.
    """

    def __init__(self, data: bytes, mime_type: str = "application/octet-stream"):
        self._data: Optional[bytes] = data
        self.mime_type = mime_type
        self.size = len(data)

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise ValueError("Blob has been released")
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    def release(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.size} bytes"
        return f"<Blob {self.mime_type} {state}>"


def _is_bytes(source: ArchiveSource) -> bool:
    return isinstance(source, (bytes, bytearray, memoryview))


def _open_zip(source: ArchiveSource) -> Tuple[zipfile.ZipFile, bool]:
    """Open ``source`` and report whether it can be opened again later."""
    if _is_bytes(source):
        return zipfile.ZipFile(io.BytesIO(bytes(source))), True
    if isinstance(source, (str, os.PathLike)):
        return zipfile.ZipFile(os.fspath(source)), True
    return zipfile.ZipFile(source), False


class ZipArchive:
    """Handle over an open ZIP archive.

    Use :meth:`open` to create one and :meth:`close` (or ``async with``) to
    release the underlying file.
    """

    def __init__(self, zip_file: zipfile.ZipFile, entries: Dict[str, zipfile.ZipInfo],
                 source: Optional[ArchiveSource] = None):
        self._zip: Optional[zipfile.ZipFile] = zip_file
        self._entries = entries
        self._source = source

    @classmethod
    async def open(cls, source: ArchiveSource,
                   on_progress: Optional[IndexProgress] = None) -> 'ZipArchive':
        try:
            zip_file, reopenable = await asyncio.to_thread(_open_zip, source)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
            raise ArchiveError.container("Failed to open ZIP archive", cause=e, operation="open") from e

        infos = zip_file.infolist()
        entries = {}
        for index, info in enumerate(infos, 1):
            if not info.is_dir():
                entries[info.filename] = info
            if on_progress is not None:
                on_progress(index, len(infos), info.filename)

        logger.debug(f"Indexed {len(entries)} entries")
        return cls(zip_file, entries, source if reopenable else None)

    @property
    def closed(self) -> bool:
        return self._zip is None

    @property
    def reopenable(self) -> bool:
        """Whether entries stay addressable after this handle is closed."""
        return self._source is not None

    async def reopen(self) -> 'ZipArchive':
        """Open a fresh handle over the same source."""
        if self._source is None:
            raise ArchiveError.container("Archive source cannot be reopened", operation="open")
        return await ZipArchive.open(self._source)

    def list_paths(self) -> List[str]:
        return list(self._entries)

    def exists(self, path: str) -> bool:
        return path in self._entries

    def entry_size(self, path: str) -> int:
        """Uncompressed size of an entry."""
        return self._entry(path).file_size

    def _entry(self, path: str) -> zipfile.ZipInfo:
        info = self._entries.get(path)
        if info is None:
            raise ArchiveError.missing(path)
        return info

    async def _read_bytes(self, path: str) -> bytes:
        if self._zip is None:
            raise ArchiveError.container("Archive is closed", file_name=path)
        info = self._entry(path)
        try:
            return await asyncio.to_thread(self._zip.read, info)
        except _READ_ERRORS as e:
            raise ArchiveError.container(f"Failed to read {path}", file_name=path, cause=e) from e

    async def read_text(self, path: str) -> str:
        """Read an entry as UTF-8 text."""
        raw = await self._read_bytes(path)
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ArchiveError.container(f"{path} is not valid UTF-8", file_name=path,
                                         cause=e, operation="decode") from e

    async def read_binary(self, path: str, mime_type: str = "application/octet-stream") -> Blob:
        """Read an entry as a :class:`Blob`; ZIP carries no MIME type so the caller declares it."""
        return Blob(await self._read_bytes(path), mime_type)

    async def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None
            logger.debug("Archive closed")

    async def __aenter__(self) -> 'ZipArchive':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{len(self._entries)} entries"
        return f"<ZipArchive {state}>"
