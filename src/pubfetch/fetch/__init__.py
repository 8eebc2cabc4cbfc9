"""Fetchers: resolve publication links to resources."""

from pathlib import Path

from .archive import ArchiveFetcher, is_zip_path
from .base import EmptyFetcher, Fetcher, apply_range, as_link
from .file import FileFetcher, normalize_href
from .http import HTTPFetcher
from .proxy import ProxyFetcher
from .routing import Route, RoutingFetcher


def open_fetcher(source) -> Fetcher:
    """Factory function to create appropriate Fetcher based on source type.

    URLs get an ``HTTPFetcher`` rooted at the URL, zip containers an
    ``ArchiveFetcher``, directories and other files a ``FileFetcher``
    (a single file is served under its own name).
    """
    if hasattr(source, 'read'):  # BinaryIO
        return ArchiveFetcher(source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return HTTPFetcher(source_str)

    path = Path(source)
    if path.is_dir():
        return FileFetcher(path)
    if path.is_file() and is_zip_path(path):
        return ArchiveFetcher(path)
    return FileFetcher(path, href="/" + path.name)


__all__ = [
    "Fetcher", "EmptyFetcher", "ProxyFetcher", "FileFetcher", "ArchiveFetcher",
    "HTTPFetcher", "RoutingFetcher", "Route", "open_fetcher",
    "apply_range", "as_link", "normalize_href", "is_zip_path",
]
