"""Seed table of the formats known to pubfetch.

Each row is ``(format, extra media types, extra extensions)``; the format's own
``media_type`` and ``file_extension`` are always registered. Adding a format
means adding a row here (and, when it can be recognized from its bytes, a
content sniffer under ``pubfetch.sniffers``).
"""

from __future__ import annotations

from .model import Format

# --- publications --------------------------------------------------------- #
EPUB = Format("EPUB", "application/epub+zip", "epub")
PDF = Format("PDF", "application/pdf", "pdf")
LCP_PROTECTED_PDF = Format("LCP Protected PDF", "application/pdf+lcp", "lcpdf")
LCP_PROTECTED_AUDIOBOOK = Format("LCP Protected Audiobook", "application/audiobook+lcp", "lcpa")
LCP_LICENSE = Format("LCP License", "application/vnd.readium.lcp.license.v1.0+json", "lcpl")
CBZ = Format("Comic Book Archive", "application/vnd.comicbook+zip", "cbz")
ZAB = Format("Zipped Audio Book", "application/x.readium.zab+zip", "zab")
LPF = Format("Lightweight Packaging Format", "application/lpf+zip", "lpf")
READIUM_WEBPUB = Format("Readium Web Publication", "application/webpub+zip", "webpub")
READIUM_WEBPUB_MANIFEST = Format("Readium Web Publication", "application/webpub+json", "json")
READIUM_AUDIOBOOK = Format("Readium Audiobook", "application/audiobook+zip", "audiobook")
READIUM_AUDIOBOOK_MANIFEST = Format("Readium Audiobook", "application/audiobook+json", "json")
DIVINA = Format("Digital Visual Narratives", "application/divina+zip", "divina")
DIVINA_MANIFEST = Format("Digital Visual Narratives", "application/divina+json", "json")
W3C_WPUB_MANIFEST = Format("Web Publication", "application/x.readium.w3c.wpub+json", "json")

# --- catalogs ------------------------------------------------------------- #
OPDS1_FEED = Format("OPDS", "application/atom+xml;profile=opds-catalog", "atom")
OPDS1_ENTRY = Format("OPDS", "application/atom+xml;type=entry;profile=opds-catalog", "atom")
OPDS2_FEED = Format("OPDS", "application/opds+json", "json")
OPDS2_PUBLICATION = Format("OPDS", "application/opds-publication+json", "json")
OPDS_AUTHENTICATION = Format("OPDS Authentication Document", "application/opds-authentication+json", "json")

# --- documents and bitmaps ------------------------------------------------ #
HTML = Format("HTML", "text/html", "html")
XHTML = Format("XHTML", "application/xhtml+xml", "xhtml")
PNG = Format("PNG", "image/png", "png")
JPEG = Format("JPEG", "image/jpeg", "jpg")
GIF = Format("GIF", "image/gif", "gif")
WEBP = Format("WebP", "image/webp", "webp")
BMP = Format("BMP", "image/bmp", "bmp")
TIFF = Format("TIFF", "image/tiff", "tiff")
JSON = Format("JSON", "application/json", "json")
ZIP = Format("ZIP", "application/zip", "zip")

# Order matters where an extension is shared: the first row claiming an
# extension owns it (".atom" -> OPDS 1 feed).
SEED: tuple[tuple[Format, tuple[str, ...], tuple[str, ...]], ...] = (
    (EPUB, (), ()),
    (PDF, (), ()),
    (LCP_PROTECTED_PDF, (), ()),
    (LCP_PROTECTED_AUDIOBOOK, (), ()),
    (LCP_LICENSE, (), ()),
    (CBZ, ("application/x-cbz",), ()),
    (ZAB, (), ()),
    (LPF, (), ()),
    (READIUM_WEBPUB, (), ()),
    (READIUM_AUDIOBOOK, (), ()),
    (DIVINA, (), ()),
    (JSON, (), ()),
    (READIUM_WEBPUB_MANIFEST, (), ()),
    (READIUM_AUDIOBOOK_MANIFEST, (), ()),
    (DIVINA_MANIFEST, (), ()),
    (W3C_WPUB_MANIFEST, (), ()),
    (OPDS1_FEED, (), ()),
    (OPDS1_ENTRY, (), ()),
    (OPDS2_FEED, (), ()),
    (OPDS2_PUBLICATION, (), ()),
    (OPDS_AUTHENTICATION, ("application/vnd.opds.authentication.v1.0+json",), ()),
    (HTML, (), ("htm",)),
    (XHTML, (), ("xht",)),
    (PNG, (), ()),
    (JPEG, (), ("jpeg", "jpe", "jif", "jfif", "jfi")),
    (GIF, (), ()),
    (WEBP, (), ()),
    (BMP, ("image/x-bmp",), ("dib",)),
    (TIFF, (), ("tif",)),
    (ZIP, ("application/x-zip-compressed",), ()),
)

# Extensions shared by a generic container and the specific formats built on
# it. They only decide the format when the content is unknown or unavailable.
WEAK_EXTENSIONS = frozenset({"json", "zip"})
