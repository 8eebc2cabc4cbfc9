from __future__ import annotations

from typing import Callable

from ..core.model import Link, LinkParameters
from ..io.base import Resource
from .base import Fetcher

Resolver = Callable[[Link, LinkParameters], Resource]


class ProxyFetcher(Fetcher):
    """Delegates the creation of resources to `resolver`.

    Adapts ad-hoc or computed resources (and test doubles) to the Fetcher
    contract. ``close()`` does nothing: whatever the resolver captures belongs
    to the resolver's owner, and resources it returned belong to the caller
    that obtained them.
    """

    def __init__(self, resolver: Resolver):
        super().__init__()
        self.resolver = resolver

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        return self.resolver(link, parameters)

    def close(self) -> None:
        pass
