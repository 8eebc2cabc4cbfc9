"""Zip packages and exploded directories, recognized by their entries."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import ClassVar

from ..core import formats
from ..core.model import Format
from ..core.probe import ZIP_MAGIC, ContentProbe
from ..core.sniffer_base import ContentSniffer
from .manifests import has_w3c_context, manifest_profile

IMAGE_EXTENSIONS = frozenset({"bmp", "dib", "gif", "jif", "jfi", "jfif", "jpg", "jpeg", "png", "tif", "tiff", "webp"})
AUDIO_EXTENSIONS = frozenset({"aac", "aiff", "alac", "flac", "m4a", "m4b", "mp3", "ogg", "oga", "mogg", "opus", "wav", "webm"})
# entries tolerated inside an otherwise homogeneous archive
IGNORED_EXTENSIONS = frozenset({"asx", "bio", "m3u", "m3u8", "pla", "pls", "smil", "txt", "vlc", "wpl", "xspf", "zpl"})
IGNORED_NAMES = frozenset({"comicinfo.xml", "thumbs.db", ".ds_store"})


def _is_ignored(entry: str) -> bool:
    path = PurePosixPath(entry)
    if any(part.startswith(".") or part == "__MACOSX" for part in path.parts):
        return True
    if path.name.lower() in IGNORED_NAMES:
        return True
    return path.suffix.lower().lstrip(".") in IGNORED_EXTENSIONS


class EPUBSniffer(ContentSniffer):
    formats: ClassVar = (formats.EPUB,)
    priority: ClassVar = 40

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        mimetype = content.read_entry("mimetype", limit=256)
        if mimetype is not None:
            if mimetype.strip() == formats.EPUB.media_type.encode("ascii"):
                return formats.EPUB
            return None
        # exploded EPUBs often lose their mimetype file
        entries = content.entries()
        if entries is not None and not prefix.startswith(ZIP_MAGIC) and "META-INF/container.xml" in entries:
            return formats.EPUB
        return None


class ReadiumPackageSniffer(ContentSniffer):
    """Packaged Readium manifests, optionally protected with LCP."""

    formats: ClassVar = (formats.READIUM_WEBPUB, formats.READIUM_AUDIOBOOK, formats.DIVINA,
                         formats.LCP_PROTECTED_PDF, formats.LCP_PROTECTED_AUDIOBOOK)
    priority: ClassVar = 42

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        entries = content.entries()
        if entries is None or "manifest.json" not in entries:
            return None
        manifest = content.entry_json("manifest.json")
        profile = manifest_profile(manifest)
        if profile is None:
            return None
        protected = "license.lcpl" in entries
        if profile == formats.READIUM_AUDIOBOOK_MANIFEST:
            return formats.LCP_PROTECTED_AUDIOBOOK if protected else formats.READIUM_AUDIOBOOK
        if profile == formats.DIVINA_MANIFEST:
            return formats.DIVINA
        if protected and _reading_order_is_pdf(manifest):
            return formats.LCP_PROTECTED_PDF
        return formats.READIUM_WEBPUB


def _reading_order_is_pdf(manifest: dict) -> bool:
    items = manifest.get("readingOrder") or []
    return bool(items) and all(
        isinstance(item, dict) and item.get("type") == formats.PDF.media_type for item in items
    )


class LPFSniffer(ContentSniffer):
    formats: ClassVar = (formats.LPF,)
    priority: ClassVar = 44

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        entries = content.entries()
        if entries is None:
            return None
        if "index.html" in entries:
            return formats.LPF
        if "publication.json" in entries and has_w3c_context(content.entry_json("publication.json")):
            return formats.LPF
        return None


class ArchiveSniffer(ContentSniffer):
    """Archives holding only bitmaps (CBZ) or only audio files (ZAB)."""

    formats: ClassVar = (formats.CBZ, formats.ZAB)
    priority: ClassVar = 50

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        entries = content.entries()
        if not entries:
            return None
        extensions = {
            PurePosixPath(e).suffix.lower().lstrip(".") for e in entries if not _is_ignored(e)
        }
        if not extensions:
            return None
        if extensions <= IMAGE_EXTENSIONS:
            return formats.CBZ
        if extensions <= AUDIO_EXTENSIONS:
            return formats.ZAB
        return None


class ZipSniffer(ContentSniffer):
    """Any other zip archive."""

    formats: ClassVar = (formats.ZIP,)
    signatures: ClassVar = tuple((0, magic) for magic in ZIP_MAGIC)
    priority: ClassVar = 100

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        # the magic alone is not enough: truncated or unreadable archives are unknown
        return formats.ZIP if content.is_container else None
