"""Memoized facts about a path on the local file system."""

from __future__ import annotations

import asyncio
import os
import stat
from pathlib import Path
from typing import Union

from .core.lazy import Once
from .core.model import Format, Link
from .core.probe import ContentProbe, DirectoryProbe, ResourceProbe
from .core.registry import FormatRegistry, _REGISTRY
from .core.util import extension_of
from .io.local import FileResource


class File:
    """A path on the file system, caching whether it is a directory and its format.

    Construction performs no I/O. ``is_directory()`` and ``format()`` hit the
    file system on first call only and may block: call them from a worker
    thread (or use the ``*_async`` variants) when the calling thread must stay
    responsive.

    A ``format`` given at construction is trusted as is; a ``media_type``
    hint takes precedence over the extension and the content.
    """

    def __init__(self, path: Union[str, os.PathLike], source_url: str | None = None,
                 media_type: str | None = None, format: Format | None = None,
                 *, registry: FormatRegistry | None = None):
        self.path = Path(path)
        self.source_url = source_url
        self.media_type_hint = media_type
        self.known_format = format
        self._registry = registry or _REGISTRY
        self._is_directory: Once[bool] = Once()
        self._format: Once[Format | None] = Once()

    @property
    def name(self) -> str:
        """Last path component."""
        return self.path.name

    def is_directory(self) -> bool:
        """Whether the path is a directory (a missing path is not). Blocking, cached."""
        return self._is_directory.get(self._stat_is_directory)

    def _stat_is_directory(self) -> bool:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return False
        return stat.S_ISDIR(st.st_mode)

    def format(self) -> Format | None:
        """Sniffed format of this file, None when unknown. Blocking, cached.

        I/O errors raised while reading the content propagate and are not
        cached.
        """
        if self.known_format is not None:
            return self.known_format
        return self._format.get(self._sniff)

    def _sniff(self) -> Format | None:
        media_types = (self.media_type_hint,) if self.media_type_hint else ()
        ext = extension_of(self.path)
        return self._registry.sniff(
            media_types=media_types,
            extensions=(ext,) if ext else (),
            content=self._open_probe,
        )

    def _open_probe(self) -> ContentProbe:
        if self.is_directory():
            return DirectoryProbe(self.path)
        resource = FileResource(Link(self.name), self.path)
        return ResourceProbe(resource, owns_resource=True)

    async def is_directory_async(self) -> bool:
        return await asyncio.to_thread(self.is_directory)

    async def format_async(self) -> Format | None:
        return await asyncio.to_thread(self.format)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, File):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"File({str(self.path)!r})"
