"""Resource contract shared by every fetcher backend."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from ..core.model import Link, ResourceClosedError


class Resource(ABC):
    """Lazy, closable byte source bound to one ``Link``.

    Obtaining a Resource is cheap; I/O happens on ``length()``/``read()``,
    which may block and should be kept off latency-sensitive threads.
    A resource is owned by whoever obtained it and must be closed by that
    owner. ``close()`` is idempotent; reading afterwards raises
    ``ResourceClosedError``.
    """

    def __init__(self, link: Link):
        self.link = link
        self.bytes_fetched = 0  # running total
        self._closed = False
        self._close_lock = threading.Lock()

    # --- subclass hooks ---
    @abstractmethod
    def _length(self) -> int:
        ...

    @abstractmethod
    def _read(self, start: int, length: int | None) -> bytes:
        """Return up to `length` bytes at `start` (everything left if None)."""
        ...

    def _release(self) -> None:
        """Free backing handles; called once by ``close()``."""

    # --- public API ---
    @property
    def closed(self) -> bool:
        return self._closed

    def length(self) -> int:
        """Total size of the resource in bytes."""
        self._check_open()
        return self._length()

    def read(self, start: int = 0, length: int | None = None) -> bytes:
        """Return up to `length` bytes starting at absolute offset `start`.

        Fewer bytes are returned when the range runs past the end, and
        ``b""`` when `start` is at or beyond it.
        """
        self._check_open()
        if start < 0:
            raise IOError("Start offset cannot be negative")
        if length is not None and length < 0:
            raise IOError("Length cannot be negative")
        if length == 0:
            return b""
        data = self._read(start, length)
        self.bytes_fetched += len(data)
        return data

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._release()

    def _check_open(self) -> None:
        if self._closed:
            raise ResourceClosedError(f"Resource {self.link.href!r} is closed", href=self.link.href)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.link.href!r} ({state})>"


class SliceResource(Resource):
    """Window of ``length`` bytes at ``start`` inside another resource (owned)."""

    def __init__(self, inner: Resource, start: int, length: int | None = None):
        super().__init__(inner.link)
        if start < 0:
            raise ValueError("Start offset cannot be negative")
        self._inner = inner
        self._start = start
        self._window = length

    def _length(self) -> int:
        available = max(self._inner.length() - self._start, 0)
        return available if self._window is None else min(self._window, available)

    def _read(self, start: int, length: int | None) -> bytes:
        if self._window is not None:
            if start >= self._window:
                return b""
            remaining = self._window - start
            length = remaining if length is None else min(length, remaining)
        return self._inner.read(self._start + start, length)

    def _release(self) -> None:
        self._inner.close()
