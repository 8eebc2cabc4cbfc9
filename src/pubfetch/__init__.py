"""pubfetch - resource fetching and format sniffing for digital publications."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable

from .core.model import (                                             # re-export
    Format, Link, LinkParameters, NO_PARAMETERS,
    UnknownFormatError, ResourceError, ResourceNotFoundError, ResourceClosedError,
    FetcherClosedError, ResourceUnavailableError, RangeNotSupportedError,
)
from .core import formats
from .core.probe import PEEK_SIZE, ContentProbe, DirectoryProbe, ResourceProbe
from .core.registry import FormatRegistry, _REGISTRY                 # singleton
from .core.sniffer_base import ContentSniffer
from .core.util import extension_of
from .file import File
from .io import (
    Resource, BytesResource, FailureResource, FileResource, HTTPResource, AsyncHTTPResource,
    RANGE_FALLBACK_MAX, open_resource, open_http_resource_async,
)
from .fetch import (
    Fetcher, EmptyFetcher, ProxyFetcher, FileFetcher, ArchiveFetcher, HTTPFetcher,
    RoutingFetcher, Route, open_fetcher,
)

# Import sniffers to trigger registration
from . import sniffers  # noqa: F401


def _is_url(source) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def _hints(source, media_type, media_types, extensions) -> tuple[list[str], list[str]]:
    mts = ([media_type] if media_type else []) + [m for m in media_types if m]
    exts = [e for e in extensions if e]
    if source is not None and not isinstance(source, (bytes, bytearray)) and not hasattr(source, "read"):
        if (ext := extension_of(source)):
            exts.append(ext)
    return mts, exts


def _open_probe(source) -> ContentProbe:
    if isinstance(source, (bytes, bytearray)):
        return ResourceProbe(BytesResource(Link("bytes"), bytes(source)), owns_resource=True)
    if not _is_url(source) and not hasattr(source, "read") and Path(source).is_dir():
        return DirectoryProbe(source)
    return ResourceProbe(open_resource(source), owns_resource=True)


def sniff_format(source=None, *, media_type: str | None = None, media_types: Iterable[str] = (),
                 extensions: Iterable[str] = (), format: Format | None = None,
                 registry: FormatRegistry | None = None) -> Format | None:
    """Sniff the format of a path, URL, byte string or binary stream.

    A known `format` is returned unchanged. Otherwise media-type hints win
    over extension hints (explicit ones, then the source's own), which win
    over the content; the content is read only when no hint matched.
    """
    if format is not None:
        return format
    registry = registry or _REGISTRY
    mts, exts = _hints(source, media_type, media_types, extensions)
    content = None if source is None else (lambda: _open_probe(source))
    return registry.sniff(mts, exts, content)


def sniff_resource(resource: Resource, *, media_types: Iterable[str] = (),
                   extensions: Iterable[str] = (),
                   registry: FormatRegistry | None = None) -> Format | None:
    """Sniff an open resource, using its link's media type and extension as hints.

    The resource is not closed.
    """
    registry = registry or _REGISTRY
    link = resource.link
    mts = [m for m in media_types if m] + ([link.media_type] if link.media_type else [])
    exts = [e for e in extensions if e] + ([link.extension] if link.extension else [])
    return registry.sniff(mts, exts, lambda: ResourceProbe(resource))


def require_format(source=None, **kwargs) -> Format:
    """Like ``sniff_format`` but raise ``UnknownFormatError`` when nothing matches."""
    fmt = sniff_format(source, **kwargs)
    if fmt is None:
        raise UnknownFormatError(f"No known format for {source!s}")
    return fmt


async def sniff_format_async(source=None, *, media_type: str | None = None,
                             media_types: Iterable[str] = (), extensions: Iterable[str] = (),
                             format: Format | None = None,
                             registry: FormatRegistry | None = None) -> Format | None:
    """Asynchronous ``sniff_format``.

    URLs are read with httpx: files up to ``RANGE_FALLBACK_MAX`` are
    downloaded and inspected fully, larger ones by their leading bytes only,
    so the zip-based formats of a large file are only known from its hints.
    Local sources are sniffed in a worker thread.
    """
    if format is not None:
        return format
    if not _is_url(source):
        return await asyncio.to_thread(
            sniff_format, source, media_type=media_type, media_types=media_types,
            extensions=extensions, registry=registry)

    registry = registry or _REGISTRY
    mts, exts = _hints(source, media_type, media_types, extensions)
    if (fmt := registry.match_hints(mts, exts)) is not None:
        return fmt
    async with open_http_resource_async(source) as remote:
        size = await remote.length()
        structural = size <= RANGE_FALLBACK_MAX
        data = await remote.read(0, None if structural else PEEK_SIZE)
    local = BytesResource(Link(source), data)
    with ResourceProbe(local, structural=structural, owns_resource=True) as probe:
        return registry.sniff(mts, exts, probe)


__all__ = [
    "sniff_format", "sniff_format_async", "sniff_resource", "require_format",
    "Format", "Link", "LinkParameters", "formats", "File", "FormatRegistry", "ContentSniffer",
    "Resource", "BytesResource", "FailureResource", "FileResource", "HTTPResource", "AsyncHTTPResource",
    "Fetcher", "EmptyFetcher", "ProxyFetcher", "FileFetcher", "ArchiveFetcher", "HTTPFetcher",
    "RoutingFetcher", "Route", "open_fetcher", "open_resource",
    "UnknownFormatError", "ResourceError", "ResourceNotFoundError", "ResourceClosedError",
    "FetcherClosedError", "ResourceUnavailableError", "RangeNotSupportedError",
]
