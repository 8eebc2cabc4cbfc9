"""Local file resources using mmap."""

from __future__ import annotations

import io
import mmap
import threading
from pathlib import Path
from typing import BinaryIO, Union

from ..core.model import Link, ResourceNotFoundError
from .base import Resource


class FileResource(Resource):
    """Resource backed by a local file (or an already-open binary stream).

    The file is opened and mapped on first access, not at construction.
    """

    def __init__(self, link: Link, source: Union[Path, str, BinaryIO]):
        super().__init__(link)
        self._source = source
        self._file = None
        self._mmap = None
        self._data = None  # For in-memory sources and empty files
        self._should_close_file = False
        self._lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        if hasattr(self._source, "read"):
            return None
        return Path(self._source)

    def _ensure_open(self):
        """Open and mmap the source on first access."""
        if self._mmap is not None or self._data is not None:
            return
        with self._lock:
            if self._mmap is not None or self._data is not None:
                return
            if hasattr(self._source, "read"):
                self._file = self._source
            else:
                try:
                    self._file = open(self._source, "rb")
                except (FileNotFoundError, IsADirectoryError) as e:
                    raise ResourceNotFoundError(f"File not found: {self._source}", href=self.link.href) from e
                self._should_close_file = True

            if isinstance(self._file, io.BytesIO):
                self._data = self._file.getvalue()
                return
            if not self._file.seekable():
                raise IOError("File is not seekable, cannot use mmap")
            self._file.seek(0, 2)  # Seek to end
            if self._file.tell() == 0:
                self._data = b""
                return
            try:
                self._mmap = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
            except (io.UnsupportedOperation, OSError):
                # Fallback for streams without a usable fileno()
                self._file.seek(0)
                self._data = self._file.read()

    def _buffer(self):
        self._ensure_open()
        return self._mmap if self._mmap is not None else self._data

    def _length(self) -> int:
        return len(self._buffer())

    def _read(self, start: int, length: int | None) -> bytes:
        source = self._buffer()
        end = len(source) if length is None else min(start + length, len(source))
        if start >= end:
            return b""
        return bytes(source[start:end])

    def _release(self) -> None:
        """Close mmap and file if we opened it."""
        with self._lock:
            if self._mmap is not None:
                self._mmap.close()
                self._mmap = None
            if self._should_close_file and self._file is not None:
                self._file.close()
            self._file = None
            self._data = None


def open_file_resource(path: Union[Path, str], href: str | None = None) -> FileResource:
    """Create a resource for a local file, linked by its file name unless `href` is given."""
    return FileResource(Link(href or Path(path).name), path)
