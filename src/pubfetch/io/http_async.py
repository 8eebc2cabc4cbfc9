"""Asynchronous HTTP resources using httpx."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Mapping, Optional

import httpx

from ..core.model import (
    Link, RangeNotSupportedError, ResourceClosedError, ResourceNotFoundError,
    ResourceUnavailableError,
)
from .http_sync import GET_TIMEOUT, RANGE_FALLBACK_MAX, _decide_full_get

# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=GET_TIMEOUT, follow_redirects=True)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


def _raise_for_status(response: httpx.Response, url: str, href: str) -> None:
    if response.status_code in (404, 410):
        raise ResourceNotFoundError(f"{url} not found (HTTP {response.status_code})", href=href)
    if response.status_code >= 400:
        raise ResourceUnavailableError(f"Request to {url} failed with status {response.status_code}", href=href)


class AsyncHTTPResource:
    """Asynchronous counterpart of ``HTTPResource`` (same read semantics)."""

    def __init__(self, link: Link, url: str, *, headers: Mapping[str, str] | None = None):
        self.link = link
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._headers = dict(headers or {})
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._initialized = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ResourceClosedError(f"Resource {self.link.href!r} is closed", href=self.link.href)

    async def _ensure_initialized(self):
        """Perform HEAD request to check capabilities if not already done."""
        if self._initialized:
            return

        async with _get_client() as client:
            try:
                self.requests_made += 1
                response = await client.head(self.url, headers=self._headers)
            except httpx.RequestError as e:
                raise ResourceUnavailableError(f"HEAD request failed: {e}", href=self.link.href) from e
        _raise_for_status(response, self.url, self.link.href)

        content_length_header = response.headers.get("content-length")
        if content_length_header:
            self.content_length = int(content_length_header)

        accept_ranges = response.headers.get("accept-ranges", "").lower()
        self._accept_ranges = accept_ranges == "bytes"
        self._initialized = True

    async def _fetch_full_content(self) -> bytes:
        """Download entire file content for small files without range support."""
        if self._full_content is not None:
            return self._full_content

        async with _get_client() as client:
            try:
                self.requests_made += 1
                response = await client.get(self.url, headers=self._headers)
            except httpx.RequestError as e:
                raise ResourceUnavailableError(f"GET request failed: {e}", href=self.link.href) from e
        _raise_for_status(response, self.url, self.link.href)
        self._full_content = response.content
        return self._full_content

    async def _fetch_range(self, start: int, length: int | None) -> bytes:
        """Fetch a specific byte range."""
        end = "" if length is None else str(start + length - 1)
        headers = {**self._headers, "Range": f"bytes={start}-{end}"}

        async with _get_client() as client:
            try:
                self.requests_made += 1
                response = await client.get(self.url, headers=headers)
            except httpx.RequestError as e:
                raise ResourceUnavailableError(f"Range request failed: {e}", href=self.link.href) from e

        if response.status_code == 416:
            return b""
        if response.status_code == 200:
            if self.content_length and self.content_length >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError("Server doesn't support ranges and file is too large",
                                             href=self.link.href)
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

    async def length(self) -> int:
        self._check_open()
        await self._ensure_initialized()
        if self.content_length is None:
            return len(await self._fetch_full_content())
        return self.content_length

    async def read(self, start: int = 0, length: int | None = None) -> bytes:
        """Return up to `length` bytes starting at absolute offset `start`."""
        self._check_open()
        if start < 0:
            raise IOError("Start offset cannot be negative")
        if length is not None and length < 0:
            raise IOError("Length cannot be negative")
        if length == 0:
            return b""
        data = await self._read(start, length)
        self.bytes_fetched += len(data)
        return data

    async def _read(self, start: int, length: int | None) -> bytes:
        await self._ensure_initialized()

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
            return self._slice(await self._fetch_full_content(), start, length)

        if not self._accept_ranges:
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large",
                                         href=self.link.href)

        return await self._fetch_range(start, length)

    async def close(self):
        self._closed = True
        self._full_content = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def open_http_resource_async(url: str, href: str | None = None, **kwargs) -> AsyncHTTPResource:
    """Create an asynchronous HTTP resource."""
    return AsyncHTTPResource(Link(href or url), url, **kwargs)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
