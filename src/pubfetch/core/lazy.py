from __future__ import annotations
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_PENDING = object()


class Once(Generic[T]):
    """Compute-once cell.

    The first computation that completes is published and returned to every
    later caller; concurrent first callers wait on the lock instead of
    computing again. A computation that raises leaves the cell pending, so a
    later call retries it.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = _PENDING

    @property
    def done(self) -> bool:
        return self._value is not _PENDING

    def get(self, compute: Callable[[], T]) -> T:
        value = self._value
        if value is not _PENDING:
            return value
        with self._lock:
            if self._value is _PENDING:
                self._value = compute()
            return self._value
