"""Lazy content accessors handed to content sniffers.

A probe reads nothing until a sniffer asks for it, and caches what it read
for the remaining sniffers of the same ``sniff`` call. I/O errors raised by
the underlying resource or path propagate; malformed structure (bad zip,
XML or JSON) is reported as "nothing there".
"""

from __future__ import annotations

import codecs
import json
import os
import warnings
import zipfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from xml.etree import ElementTree

from ..io.base import Resource
from ..io.stream import ResourceIO

PEEK_SIZE = 4096                 # leading bytes handed to every sniffer
JSON_SNIFF_MAX = 1024 * 1024     # largest document/entry parsed while sniffing

ZIP_MAGIC = (b"PK\x03\x04", b"PK\x05\x06")
_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def decode_text(data: bytes) -> str | None:
    """Best-effort decoding of a (possibly truncated) text prefix; None for binary data."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(encoding, errors="ignore")
    if b"\x00" in data:
        return None
    return data.decode("utf-8", errors="ignore")


def parse_xml_root(data: bytes) -> tuple[str, str] | None:
    """Return ``(namespace, local name)`` of the first element, or None."""
    text = decode_text(data)
    if text is None or not text.lstrip().startswith("<"):
        return None
    parser = ElementTree.XMLPullParser(events=("start",))
    try:
        parser.feed(text.lstrip())
        for _, elem in parser.read_events():
            tag = elem.tag
            if tag.startswith("{"):
                ns, _, local = tag[1:].partition("}")
                return ns, local
            return "", tag
    except ElementTree.ParseError:
        return None
    return None


def parse_json(data: bytes) -> Any | None:
    text = decode_text(data)
    if text is None or not text.lstrip().startswith(("{", "[")):
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


class ContentProbe(ABC):
    """Bounded, lazy view of some content: leading bytes plus structural accessors."""

    def __init__(self) -> None:
        self._prefix: bytes | None = None
        self._json_loaded = False
        self._json: Any = None

    @abstractmethod
    def _read_prefix(self) -> bytes:
        ...

    @abstractmethod
    def _read_document(self) -> bytes | None:
        """Whole content when small enough to parse, else None."""
        ...

    @abstractmethod
    def entries(self) -> frozenset[str] | None:
        """Entry paths when the content is a container (zip or directory)."""
        ...

    @abstractmethod
    def read_entry(self, name: str, limit: int = JSON_SNIFF_MAX) -> bytes | None:
        ...

    @property
    def prefix(self) -> bytes:
        if self._prefix is None:
            self._prefix = self._read_prefix()
        return self._prefix

    @property
    def is_container(self) -> bool:
        return self.entries() is not None

    def text(self) -> str | None:
        return decode_text(self.prefix)

    def xml_root(self) -> tuple[str, str] | None:
        return parse_xml_root(self.prefix)

    def json(self) -> Any | None:
        if not self._json_loaded:
            text = self.text()
            if text is not None and text.lstrip().startswith(("{", "[")):
                data = self._read_document()
                self._json = parse_json(data) if data is not None else None
            self._json_loaded = True
        return self._json

    def entry_json(self, name: str) -> Any | None:
        data = self.read_entry(name)
        return parse_json(data) if data is not None else None

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ResourceProbe(ContentProbe):
    """Probe over a Resource; zip structure is read through the resource itself.

    With ``structural=False`` only the leading bytes are inspected, e.g. when
    the resource holds a truncated download.
    """

    def __init__(self, resource: Resource, *, structural: bool = True, owns_resource: bool = False):
        super().__init__()
        self.resource = resource
        self._structural = structural
        self._owns_resource = owns_resource
        self._zip: zipfile.ZipFile | None = None
        self._zip_checked = False

    def _read_prefix(self) -> bytes:
        return self.resource.read(0, PEEK_SIZE)

    def _read_document(self) -> bytes | None:
        if len(self.prefix) < PEEK_SIZE:
            return self.prefix
        if self.resource.length() > JSON_SNIFF_MAX:
            return None
        return self.resource.read()

    def _archive(self) -> zipfile.ZipFile | None:
        if not self._zip_checked:
            self._zip_checked = True
            if self._structural and self.prefix.startswith(ZIP_MAGIC):
                try:
                    self._zip = zipfile.ZipFile(ResourceIO(self.resource))
                except (zipfile.BadZipFile, ValueError, EOFError) as e:
                    warnings.warn(f"{self.resource.link.href}: zip signature but unreadable archive ({e})")
        return self._zip

    def entries(self) -> frozenset[str] | None:
        archive = self._archive()
        if archive is None:
            return None
        return frozenset(n for n in archive.namelist() if not n.endswith("/"))

    def read_entry(self, name: str, limit: int = JSON_SNIFF_MAX) -> bytes | None:
        archive = self._archive()
        if archive is None:
            return None
        try:
            info = archive.getinfo(name)
        except KeyError:
            return None
        if info.file_size > limit:
            return None
        try:
            return archive.read(info)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            warnings.warn(f"{self.resource.link.href}: cannot read zip entry {name!r} ({e})")
            return None

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None
        if self._owns_resource:
            self.resource.close()


class DirectoryProbe(ContentProbe):
    """Probe over an exploded container on disk."""

    def __init__(self, root: str | os.PathLike):
        super().__init__()
        self.root = Path(root)
        self._entries: frozenset[str] | None = None

    def _read_prefix(self) -> bytes:
        return b""

    def _read_document(self) -> bytes | None:
        return None

    def entries(self) -> frozenset[str]:
        if self._entries is None:
            self._entries = frozenset(
                p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file()
            )
        return self._entries

    def read_entry(self, name: str, limit: int = JSON_SNIFF_MAX) -> bytes | None:
        if name not in self.entries():
            return None
        path = self.root / name
        if path.stat().st_size > limit:
            return None
        return path.read_bytes()
