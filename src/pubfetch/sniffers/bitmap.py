from __future__ import annotations

from typing import ClassVar

from ..core import formats
from ..core.model import Format
from ..core.probe import ContentProbe
from ..core.sniffer_base import ContentSniffer


class _MagicSniffer(ContentSniffer, register=False):
    """Matches on signatures alone."""

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return cls.formats[0]


class PNGSniffer(_MagicSniffer):
    formats: ClassVar = (formats.PNG,)
    signatures: ClassVar = ((0, b"\x89PNG\r\n\x1a\n"),)
    priority: ClassVar = 30


class JPEGSniffer(_MagicSniffer):
    formats: ClassVar = (formats.JPEG,)
    signatures: ClassVar = ((0, b"\xff\xd8\xff"),)
    priority: ClassVar = 30


class GIFSniffer(_MagicSniffer):
    formats: ClassVar = (formats.GIF,)
    signatures: ClassVar = ((0, b"GIF87a"), (0, b"GIF89a"))
    priority: ClassVar = 30


class TIFFSniffer(_MagicSniffer):
    formats: ClassVar = (formats.TIFF,)
    signatures: ClassVar = ((0, b"II*\x00"), (0, b"MM\x00*"))
    priority: ClassVar = 30


class BMPSniffer(_MagicSniffer):
    formats: ClassVar = (formats.BMP,)
    signatures: ClassVar = ((0, b"BM"),)
    priority: ClassVar = 32  # weakest signature of the family


class WebPSniffer(ContentSniffer):
    formats: ClassVar = (formats.WEBP,)
    signatures: ClassVar = ((8, b"WEBP"),)
    priority: ClassVar = 30

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return formats.WEBP if prefix.startswith(b"RIFF") else None
