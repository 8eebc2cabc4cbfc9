from __future__ import annotations

from typing import ClassVar

from ..core import formats
from ..core.model import Format
from ..core.probe import ContentProbe
from ..core.sniffer_base import ContentSniffer


class PDFSniffer(ContentSniffer):
    formats: ClassVar = (formats.PDF,)
    signatures: ClassVar = ((0, b"%PDF-"),)
    priority: ClassVar = 60

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return formats.PDF
