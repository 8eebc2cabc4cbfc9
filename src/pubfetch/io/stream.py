"""File-like view over a Resource, for libraries that want a seekable stream."""

from __future__ import annotations

import errno
import io

from .base import Resource


class ResourceIO(io.RawIOBase):
    """Read-only, seekable stream over a Resource; does not close the resource."""

    def __init__(self, resource: Resource):
        super().__init__()
        self._resource = resource
        self._pos = 0
        self._size: int | None = None

    def _length(self) -> int:
        if self._size is None:
            self._size = self._resource.length()
        return self._size

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            pos = offset
        elif whence == io.SEEK_CUR:
            pos = self._pos + offset
        elif whence == io.SEEK_END:
            pos = self._length() + offset
        else:
            raise ValueError(f"Invalid whence ({whence})")
        if pos < 0:
            raise OSError(errno.EINVAL, "Negative seek position")
        self._pos = pos
        return pos

    def readinto(self, buffer) -> int:
        data = self._resource.read(self._pos, len(buffer))
        buffer[:len(data)] = data
        self._pos += len(data)
        return len(data)

    def read(self, size: int = -1) -> bytes:
        data = self._resource.read(self._pos, None if size is None or size < 0 else size)
        self._pos += len(data)
        return data
