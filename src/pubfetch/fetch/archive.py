from __future__ import annotations

import os
import threading
import zipfile
from typing import BinaryIO, Union

from ..core.model import Link, LinkParameters, ResourceUnavailableError
from ..core.util import extension_of
from ..io.base import Resource
from ..io.memory import FailureResource
from ..io.zip import ZipEntryResource
from .base import Fetcher, apply_range
from .file import normalize_href


class ArchiveFetcher(Fetcher):
    """Serves the entries of a zip container (EPUB, CBZ, LPF...).

    The archive is opened on first use and closed with the fetcher. Entry
    hrefs are paths relative to the archive root; a leading ``/`` is
    optional.
    """

    def __init__(self, source: Union[str, os.PathLike, BinaryIO, zipfile.ZipFile]):
        super().__init__()
        self._source = source
        self._archive: zipfile.ZipFile | None = source if isinstance(source, zipfile.ZipFile) else None
        self._open_lock = threading.Lock()

    def _zip(self) -> zipfile.ZipFile:
        if self._archive is None:
            with self._open_lock:
                if self._archive is None:
                    try:
                        self._archive = zipfile.ZipFile(self._source)
                    except zipfile.BadZipFile as e:
                        raise ResourceUnavailableError(f"Not a zip archive: {self._source}: {e}") from e
        return self._archive

    def _get(self, link: Link, parameters: LinkParameters) -> Resource:
        href = normalize_href(link.href)
        if href is None:
            return FailureResource(link)
        try:
            archive = self._zip()
        except (OSError, ResourceUnavailableError) as e:
            error = e if isinstance(e, ResourceUnavailableError) else ResourceUnavailableError(
                f"Cannot open archive {self._source}: {e}", href=link.href)
            return FailureResource(link, error)
        try:
            info = archive.getinfo(href.lstrip("/"))
        except KeyError:
            return FailureResource(link)
        if info.is_dir():
            return FailureResource(link)
        return apply_range(ZipEntryResource(link, archive, info), parameters)

    @property
    def links(self) -> tuple[Link, ...]:
        return tuple(
            Link("/" + info.filename) for info in self._zip().infolist() if not info.is_dir()
        )

    def _release(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None


def is_zip_path(path: Union[str, os.PathLike]) -> bool:
    """Cheap check used to pick a backend: zip extension or zip magic number."""
    if extension_of(path) in ("zip", "epub", "cbz", "lpf", "zab", "webpub", "audiobook", "divina", "lcpa", "lcpdf"):
        return True
    return zipfile.is_zipfile(path)
