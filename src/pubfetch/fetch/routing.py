from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List

from ..core.model import Link, LinkParameters
from ..io.base import Resource
from ..io.memory import FailureResource
from .base import Fetcher


@dataclass(frozen=True)
class Route:
    """Sends the links accepted by `accepts` (all of them by default) to `fetcher`."""
    fetcher: Fetcher
    accepts: Callable[[Link], bool] = lambda link: True


class RoutingFetcher(Fetcher):
    """Delegates each link to the first route accepting it.

    Closing the routing fetcher closes every routed fetcher.
    """

    def __init__(self, routes: Iterable[Route | Fetcher]):
        super().__init__()
        self._routes: List[Route] = [r if isinstance(r, Route) else Route(r) for r in routes]

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        for route in self._routes:
            if route.accepts(link):
                return route.fetcher.resolve(link, parameters)
        return FailureResource(link)

    @property
    def links(self) -> tuple[Link, ...]:
        return tuple(link for route in self._routes for link in route.fetcher.links)

    def _release(self) -> None:
        for route in self._routes:
            route.fetcher.close()
