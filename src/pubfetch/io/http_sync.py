"""Synchronous HTTP resources using requests."""

from __future__ import annotations

import threading
import warnings
from typing import Mapping, Optional

import requests

from ..core.model import (
    Link, RangeNotSupportedError, ResourceNotFoundError, ResourceUnavailableError,
)
from .base import Resource

RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB
HEAD_TIMEOUT = 30
GET_TIMEOUT = 60

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def _decide_full_get(content_length: Optional[int], accept_ranges: bool) -> bool:
    """Return True only when not accept_ranges and content_length and content_length < RANGE_FALLBACK_MAX."""
    return (not accept_ranges and
            content_length is not None and
            content_length < RANGE_FALLBACK_MAX)


def _raise_for_status(response, url: str, href: str) -> None:
    if response.status_code == 404 or response.status_code == 410:
        raise ResourceNotFoundError(f"{url} not found (HTTP {response.status_code})", href=href)
    if response.status_code >= 400:
        raise ResourceUnavailableError(f"Request to {url} failed with status {response.status_code}", href=href)


class HTTPResource(Resource):
    """Remote resource read with HTTP Range requests.

    The HEAD request is deferred to the first ``length()``/``read()`` call.
    Servers without Range support are downloaded in full when the file is
    smaller than ``RANGE_FALLBACK_MAX``.
    """

    def __init__(self, link: Link, url: str, *, session: requests.Session | None = None,
                 headers: Mapping[str, str] | None = None):
        super().__init__(link)
        self.url = url
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._headers = dict(headers or {})
        self._session = session or _get_session()
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._initialized = False
        self._lock = threading.Lock()

    def _perform_head(self):
        """Perform HEAD request to check capabilities."""
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            try:
                self.requests_made += 1
                response = self._session.head(self.url, headers=self._headers,
                                              timeout=HEAD_TIMEOUT, allow_redirects=True)
            except requests.RequestException as e:
                raise ResourceUnavailableError(f"HEAD request failed: {e}", href=self.link.href) from e
            _raise_for_status(response, self.url, self.link.href)

            content_length_header = response.headers.get("content-length")
            if content_length_header:
                self.content_length = int(content_length_header)

            accept_ranges = response.headers.get("accept-ranges", "").lower()
            self._accept_ranges = accept_ranges == "bytes"
            self._initialized = True

    def _fetch_full_content(self) -> bytes:
        """Download entire file content for small files without range support."""
        if self._full_content is not None:
            return self._full_content
        try:
            self.requests_made += 1
            response = self._session.get(self.url, headers=self._headers, timeout=GET_TIMEOUT)
        except requests.RequestException as e:
            raise ResourceUnavailableError(f"GET request failed: {e}", href=self.link.href) from e
        _raise_for_status(response, self.url, self.link.href)
        self._full_content = response.content
        return self._full_content

    def _fetch_range(self, start: int, length: int | None) -> bytes:
        """Fetch a specific byte range."""
        end = "" if length is None else str(start + length - 1)
        headers = {**self._headers, "Range": f"bytes={start}-{end}"}
        try:
            self.requests_made += 1
            response = self._session.get(self.url, headers=headers, timeout=GET_TIMEOUT)
        except requests.RequestException as e:
            raise ResourceUnavailableError(f"Range request failed: {e}", href=self.link.href) from e

        if response.status_code == 416:
            return b""
        if response.status_code == 200:
            # Server ignored the Range header and sent everything
            if self.content_length and self.content_length >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError("Server doesn't support ranges and file is too large",
                                             href=self.link.href)
            warnings.warn(f"{self.url} ignored the Range header, caching the full response")
            self._full_content = response.content
            return self._slice(self._full_content, start, length)
        if response.status_code == 206:
            return response.content
        _raise_for_status(response, self.url, self.link.href)
        raise ResourceUnavailableError(
            f"Range request failed with status {response.status_code}", href=self.link.href)

    @staticmethod
    def _slice(data: bytes, start: int, length: int | None) -> bytes:
        return data[start:] if length is None else data[start:start + length]

    def _length(self) -> int:
        self._perform_head()
        if self.content_length is None:
            return len(self._fetch_full_content())
        return self.content_length

    def _read(self, start: int, length: int | None) -> bytes:
        self._perform_head()

        # If we already have full content, serve from it
        if self._full_content is not None:
            return self._slice(self._full_content, start, length)

        if self.content_length is not None:
            if start >= self.content_length:
                return b""
            if length is not None:
                length = min(length, self.content_length - start)

        # Decide strategy based on server capabilities
        if self.content_length is None or _decide_full_get(self.content_length, self._accept_ranges):
            return self._slice(self._fetch_full_content(), start, length)

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large",
                                         href=self.link.href)

        return self._fetch_range(start, length)


def open_http_resource(url: str, href: str | None = None, **kwargs) -> HTTPResource:
    """Create a synchronous HTTP resource."""
    return HTTPResource(Link(href or url), url, **kwargs)
