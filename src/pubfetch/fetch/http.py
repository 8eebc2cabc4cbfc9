from __future__ import annotations

from typing import Mapping
from urllib.parse import urljoin, urlparse

import requests

from ..core.model import Link, LinkParameters
from ..io.base import Resource
from ..io.http_sync import HTTPResource
from ..io.memory import FailureResource
from .base import Fetcher, apply_range


class HTTPFetcher(Fetcher):
    """Serves resources over HTTP(S).

    Hrefs are resolved relative to `base_url` (a leading ``/`` is ignored);
    absolute http(s) hrefs are fetched as is. The requests session is shared
    and not closed with the fetcher unless one was passed in with
    ``owns_session=True``.
    """

    def __init__(self, base_url: str | None = None, *, session: requests.Session | None = None,
                 headers: Mapping[str, str] | None = None, owns_session: bool = False):
        super().__init__()
        self.base_url = base_url
        self._session = session
        self._headers = dict(headers or {})
        self._owns_session = owns_session and session is not None

    def url_for(self, href: str) -> str | None:
        if urlparse(href).scheme in ("http", "https"):
            return href
        if not self.base_url:
            return None
        return urljoin(self.base_url, href.lstrip("/"))

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        url = self.url_for(link.href)
        if url is None:
            return FailureResource(link)
        resource = HTTPResource(link, url, session=self._session, headers=self._headers)
        return apply_range(resource, parameters)

    def _release(self) -> None:
        if self._owns_session:
            self._session.close()
