from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Format:
    """Canonical identity of a content type."""
    name: str
    media_type: str
    file_extension: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Link:
    """Logical address of a resource within a publication."""
    href: str
    media_type: str | None = None
    rel: tuple[str, ...] = ()
    title: str | None = None

    @property
    def extension(self) -> str | None:
        # strip query/fragment before looking at the last path segment
        path = self.href.split("#", 1)[0].split("?", 1)[0]
        last = path.rstrip("/").rsplit("/", 1)[-1]
        if "." not in last:
            return None
        return last.rsplit(".", 1)[1].lower() or None


def _frozen(values: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class LinkParameters:
    """Open, read-only bag of resolution hints (byte range, variant...)."""
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen(self.values))

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @property
    def range(self) -> tuple[int, int | None] | None:
        """Requested ``(start, length)`` window, if any."""
        rng = self.values.get("range")
        if rng is None:
            return None
        start, length = rng
        return int(start), (None if length is None else int(length))

    def __bool__(self) -> bool:
        return bool(self.values)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.values.items())))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinkParameters):
            return NotImplemented
        return dict(self.values) == dict(other.values)


NO_PARAMETERS = LinkParameters()


class UnknownFormatError(RuntimeError):
    """Raised when a caller requires a format and none can be sniffed."""
    pass


class ResourceError(RuntimeError):
    """Base class for failures reported by a Resource."""

    def __init__(self, message: str, *, href: str | None = None):
        super().__init__(message)
        self.href = href


class ResourceNotFoundError(ResourceError):
    """Raised when reading a resource whose link could not be resolved."""
    pass


class ResourceClosedError(ResourceError):
    """Raised when reading a resource that was already closed."""
    pass


class FetcherClosedError(ResourceError):
    """Raised when reading a resource obtained from a closed fetcher."""
    pass


class ResourceUnavailableError(ResourceError):
    """Raised when the backing store fails to deliver the resource."""
    pass


class RangeNotSupportedError(ResourceUnavailableError):
    """Raised when server rejects Range and file size > RANGE_FALLBACK_MAX."""
    pass
