"""Resources for entries of a zip container."""

from __future__ import annotations

import zipfile
import zlib

from ..core.model import Link, ResourceUnavailableError
from .base import Resource


class ZipEntryResource(Resource):
    """One entry of an open ``zipfile.ZipFile``; the archive is owned by the fetcher."""

    def __init__(self, link: Link, archive: zipfile.ZipFile, info: zipfile.ZipInfo):
        super().__init__(link)
        self._archive = archive
        self._info = info

    def _length(self) -> int:
        return self._info.file_size

    def _read(self, start: int, length: int | None) -> bytes:
        if start >= self._info.file_size:
            return b""
        try:
            with self._archive.open(self._info) as entry:
                if start:
                    entry.seek(start)
                return entry.read(-1 if length is None else length)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise ResourceUnavailableError(
                f"Corrupted zip entry {self._info.filename!r}: {e}", href=self.link.href) from e
