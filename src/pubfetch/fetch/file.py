from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Mapping, Union
from urllib.parse import unquote

from ..core.model import Link, LinkParameters
from ..io.base import Resource
from ..io.local import FileResource
from ..io.memory import FailureResource
from .base import Fetcher, apply_range

PathLike = Union[str, os.PathLike]


def normalize_href(href: str) -> str | None:
    """Absolute, percent-decoded POSIX path for `href`; None if it climbs above the root."""
    path = unquote(href.split("#", 1)[0].split("?", 1)[0])
    rel = posixpath.normpath(path.lstrip("/"))
    if rel == ".." or rel.startswith("../"):
        return None
    return "/" if rel == "." else "/" + rel


class FileFetcher(Fetcher):
    """Serves local files and exploded directories.

    `paths` maps href prefixes to files or directories, e.g.
    ``{"/": "book/"}`` or ``{"/cover.jpg": "cover.jpg"}``; a single path is
    mounted at `href`. Resolution does no I/O: a missing file surfaces as
    ``ResourceNotFoundError`` when the resource is read.
    """

    def __init__(self, paths: Union[Mapping[str, PathLike], PathLike], href: str = "/"):
        super().__init__()
        if isinstance(paths, Mapping):
            mounts = {normalize_href(k) or "/": Path(v) for k, v in paths.items()}
        else:
            mounts = {normalize_href(href) or "/": Path(paths)}
        # longest prefix first
        self._mounts = dict(sorted(mounts.items(), key=lambda kv: len(kv[0]), reverse=True))

    def _locate(self, href: str) -> Path | None:
        norm = normalize_href(href)
        if norm is None:
            return None
        for prefix, root in self._mounts.items():
            if norm == prefix:
                return root
            base = prefix.rstrip("/") + "/"
            if norm.startswith(base):
                return root.joinpath(*norm[len(base):].split("/"))
        return None

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        path = self._locate(link.href)
        if path is None:
            return FailureResource(link)
        return apply_range(FileResource(link, path), parameters)

    @property
    def links(self) -> tuple[Link, ...]:
        """Every file reachable through the mounts (walks the file system)."""
        found = []
        for prefix, root in self._mounts.items():
            if root.is_dir():
                base = prefix.rstrip("/")
                for p in sorted(root.rglob("*")):
                    if p.is_file():
                        found.append(Link(f"{base}/{p.relative_to(root).as_posix()}"))
            elif root.is_file():
                found.append(Link(prefix))
        return tuple(found)
