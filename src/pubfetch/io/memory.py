"""In-memory and failure resources."""

from __future__ import annotations

import threading
from typing import Callable

from ..core.model import Link, ResourceError, ResourceNotFoundError
from .base import Resource


class BytesResource(Resource):
    """Resource serving a byte string, optionally produced on first read by `factory`."""

    def __init__(self, link: Link, data: bytes | None = None, *,
                 factory: Callable[[], bytes] | None = None):
        super().__init__(link)
        if (data is None) == (factory is None):
            raise ValueError("Pass exactly one of `data` or `factory`")
        self._data = data
        self._factory = factory
        self._lock = threading.Lock()

    def _content(self) -> bytes:
        if self._data is None:
            with self._lock:
                if self._data is None:
                    self._data = bytes(self._factory())
        return self._data

    def _length(self) -> int:
        return len(self._content())

    def _read(self, start: int, length: int | None) -> bytes:
        data = self._content()
        end = len(data) if length is None else start + length
        return data[start:end]


class FailureResource(Resource):
    """Resource whose every access raises `error`.

    Returned by fetchers for links they cannot serve, so that ``resolve``
    itself never fails.
    """

    def __init__(self, link: Link, error: ResourceError | None = None):
        super().__init__(link)
        self.error = error or ResourceNotFoundError(
            f"No resource found for {link.href!r}", href=link.href)

    def _length(self) -> int:
        raise self.error

    def _read(self, start: int, length: int | None) -> bytes:
        raise self.error

