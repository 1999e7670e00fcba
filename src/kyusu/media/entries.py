"""Media attached to tweets and profiles.

A media entry is either :class:`EagerMedia`, whose bytes were read during
ingestion, or :class:`LazyMedia`, which only knows where its bytes live and
reads them on :meth:`LazyMedia.materialize`. Both expose ``await read()`` and
``release()`` so consumers need not care which one they hold.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..core.container import Blob, ZipArchive
from ..errors import ArchiveError

logger = logging.getLogger(__name__)


@dataclass
class EagerMedia:
    type: str
    data: Blob
    filename: str
    mime_type: str
    kind: str = field(default="eager", init=False)

    async def read(self) -> Blob:
        if self.data.released:
            raise ArchiveError.container("Media has been released", file_name=self.filename)
        return self.data

    def release(self) -> None:
        self.data.release()

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'type': self.type, 'filename': self.filename,
                'mimeType': self.mime_type, 'size': self.data.size}


@dataclass
class LazyMedia:
    """Media whose payload is read from the archive on first use.

    The entry owns the materialized blob; :meth:`release` drops it and a later
    :meth:`materialize` reads the archive again. If the archive handle has
    been closed, the entry reopens the archive source when the source allows
    it (bytes or a filesystem path) and fails otherwise.
    """
    type: str
    filename: str
    mime_type: str
    archive_path: str
    archive: ZipArchive = field(repr=False)
    kind: str = field(default="lazy", init=False)
    _blob: Optional[Blob] = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def materialized(self) -> bool:
        return self._blob is not None and not self._blob.released

    async def materialize(self, handle: Optional[ZipArchive] = None) -> Blob:
        """Read the payload, reusing ``handle`` when it is an open handle on the same source.

        Without one, a closed archive is reopened for this entry alone, which
        re-reads the central directory. Use
        :meth:`kyusu.models.IngestionResult.materialize_media` for many entries.
        """
        async with self._lock:
            if self.materialized:
                return self._blob
            if handle is not None and not handle.closed:
                self._blob = await handle.read_binary(self.archive_path, self.mime_type)
            elif not self.archive.closed:
                self._blob = await self.archive.read_binary(self.archive_path, self.mime_type)
            elif self.archive.reopenable:
                logger.debug(f"Reopening archive to materialize {self.archive_path}")
                async with await self.archive.reopen() as archive:
                    self._blob = await archive.read_binary(self.archive_path, self.mime_type)
            else:
                raise ArchiveError.container(
                    "Archive was closed before media could be materialized",
                    file_name=self.archive_path,
                )
            return self._blob

    async def read(self) -> Blob:
        return await self.materialize()

    def release(self) -> None:
        if self._blob is not None:
            self._blob.release()
            self._blob = None

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'type': self.type, 'filename': self.filename,
                'mimeType': self.mime_type, 'archivePath': self.archive_path}


MediaEntry = Union[EagerMedia, LazyMedia]
