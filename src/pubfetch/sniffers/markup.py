from __future__ import annotations

from typing import ClassVar

from ..core import formats
from ..core.model import Format
from ..core.probe import ContentProbe
from ..core.sniffer_base import ContentSniffer

XHTML_NS = "http://www.w3.org/1999/xhtml"
ATOM_NS = "http://www.w3.org/2005/Atom"


class HTMLSniffer(ContentSniffer):
    """HTML and XHTML documents, by root element or doctype."""

    formats: ClassVar = (formats.HTML, formats.XHTML)
    priority: ClassVar = 10

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        root = content.xml_root()
        if root is not None:
            ns, name = root
            if name.lower() == "html":
                return formats.XHTML if ns == XHTML_NS else formats.HTML
            return None
        text = content.text()
        if text is None:
            return None
        head = text.lstrip()[:64].lower()
        if head.startswith("<!doctype html") or head.startswith("<html"):
            return formats.HTML
        return None


class OPDS1Sniffer(ContentSniffer):
    """OPDS 1 catalogs are Atom feeds/entries."""

    formats: ClassVar = (formats.OPDS1_FEED, formats.OPDS1_ENTRY)
    priority: ClassVar = 12

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        root = content.xml_root()
        if root is None or root[0] != ATOM_NS:
            return None
        if root[1] == "feed":
            return formats.OPDS1_FEED
        if root[1] == "entry":
            return formats.OPDS1_ENTRY
        return None
