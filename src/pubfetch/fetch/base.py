"""Fetcher contract: resolve a Link to a Resource."""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from typing import Union

from ..core.model import NO_PARAMETERS, FetcherClosedError, Link, LinkParameters, ResourceUnavailableError
from ..io.base import Resource, SliceResource
from ..io.memory import FailureResource

LinkLike = Union[Link, str]


def as_link(link: LinkLike) -> Link:
    return link if isinstance(link, Link) else Link(str(link))


def apply_range(resource: Resource, parameters: LinkParameters) -> Resource:
    """Wrap `resource` in the byte window requested by ``parameters.range``.

    A malformed window gives a resource failing with ``ResourceUnavailableError``.
    """
    try:
        window = parameters.range
        if window is None:
            return resource
        start, length = window
        if length is not None and length < 0:
            raise ValueError("Length cannot be negative")
        return SliceResource(resource, start, length)
    except (TypeError, ValueError) as e:
        resource.close()
        href = resource.link.href
        return FailureResource(resource.link, ResourceUnavailableError(
            f"Invalid byte range {parameters.get('range')!r} for {href!r}: {e}", href=href))


class Fetcher(ABC):
    """Resolves links to resources for one backing store.

    ``resolve`` never raises for a link it cannot serve: it returns a
    ``FailureResource`` whose reads raise ``ResourceNotFoundError``.

    A fetcher owns its backing handles and is closed once by its owner;
    ``close()`` is idempotent. Once closed, ``resolve`` returns resources
    failing with ``FetcherClosedError``, and resources it issued earlier are
    closed too, so their reads raise ``ResourceClosedError``. Close a fetcher
    only after the resources it issued have been released.
    """

    def __init__(self) -> None:
        self._closed = False
        self._state_lock = threading.Lock()
        self._issued: weakref.WeakSet[Resource] = weakref.WeakSet()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def links(self) -> tuple[Link, ...]:
        """Links known to be served by this fetcher, when it can list them."""
        return ()

    def resolve(self, link: LinkLike, parameters: LinkParameters | None = None) -> Resource:
        link = as_link(link)
        parameters = parameters or NO_PARAMETERS
        with self._state_lock:
            if self._closed:
                return FailureResource(link, FetcherClosedError(
                    f"Cannot resolve {link.href!r}: fetcher is closed", href=link.href))
            resource = self._get(link, parameters)
            self._issued.add(resource)
        return resource

    @abstractmethod
    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        ...

    def _release(self) -> None:
        """Free backing handles; called once by ``close()``."""

    def close(self) -> None:
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            issued = list(self._issued)
            self._issued.clear()
        for resource in issued:
            resource.close()
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class EmptyFetcher(Fetcher):
    """Serves nothing."""

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        return FailureResource(link)
