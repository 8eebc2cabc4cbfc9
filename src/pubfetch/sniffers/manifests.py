"""JSON documents: LCP licenses, OPDS 2, Readium and W3C manifests."""

from __future__ import annotations

from typing import Any, ClassVar

from ..core import formats
from ..core.model import Format
from ..core.probe import ContentProbe
from ..core.sniffer_base import ContentSniffer

W3C_PUB_CONTEXT = "https://www.w3.org/ns/pub-context"
AUDIOBOOK_PROFILE = "https://readium.org/webpub-manifest/profiles/audiobook"
DIVINA_PROFILE = "https://readium.org/webpub-manifest/profiles/divina"
SCHEMA_AUDIOBOOK = "http://schema.org/Audiobook"
OPDS_ACQUISITION_REL = "http://opds-spec.org/acquisition"


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _rels(links: Any) -> set[str]:
    rels: set[str] = set()
    for link in _as_list(links):
        if isinstance(link, dict):
            rels.update(r for r in _as_list(link.get("rel")) if isinstance(r, str))
    return rels


def has_w3c_context(doc: Any) -> bool:
    return isinstance(doc, dict) and W3C_PUB_CONTEXT in _as_list(doc.get("@context"))


def manifest_profile(doc: Any) -> Format | None:
    """Classify a Readium Web Publication Manifest by its declared profile."""
    if not isinstance(doc, dict):
        return None
    metadata = doc.get("metadata")
    if not isinstance(metadata, dict):
        return None
    if "readingOrder" not in doc and "spine" not in doc:
        return None
    profiles = set(_as_list(metadata.get("conformsTo")))
    if AUDIOBOOK_PROFILE in profiles or metadata.get("@type") == SCHEMA_AUDIOBOOK:
        return formats.READIUM_AUDIOBOOK_MANIFEST
    if DIVINA_PROFILE in profiles:
        return formats.DIVINA_MANIFEST
    return formats.READIUM_WEBPUB_MANIFEST


class LCPLicenseSniffer(ContentSniffer):
    formats: ClassVar = (formats.LCP_LICENSE,)
    priority: ClassVar = 20

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        doc = content.json()
        if isinstance(doc, dict) and {"id", "issued", "provider", "encryption"} <= doc.keys():
            return formats.LCP_LICENSE
        return None


class OPDS2Sniffer(ContentSniffer):
    formats: ClassVar = (formats.OPDS2_FEED, formats.OPDS2_PUBLICATION, formats.OPDS_AUTHENTICATION)
    priority: ClassVar = 22

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        doc = content.json()
        if not isinstance(doc, dict):
            return None
        if {"id", "title", "authentication"} <= doc.keys():
            return formats.OPDS_AUTHENTICATION
        if not isinstance(doc.get("metadata"), dict):
            return None
        if any(k in doc for k in ("navigation", "publications", "groups", "facets")):
            return formats.OPDS2_FEED
        if any(r.startswith(OPDS_ACQUISITION_REL) for r in _rels(doc.get("links"))):
            return formats.OPDS2_PUBLICATION
        return None


class W3CManifestSniffer(ContentSniffer):
    formats: ClassVar = (formats.W3C_WPUB_MANIFEST,)
    priority: ClassVar = 24

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return formats.W3C_WPUB_MANIFEST if has_w3c_context(content.json()) else None


class ReadiumManifestSniffer(ContentSniffer):
    formats: ClassVar = (formats.READIUM_WEBPUB_MANIFEST, formats.READIUM_AUDIOBOOK_MANIFEST,
                         formats.DIVINA_MANIFEST)
    priority: ClassVar = 26

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return manifest_profile(content.json())


class JSONSniffer(ContentSniffer):
    """Any other JSON document."""

    formats: ClassVar = (formats.JSON,)
    priority: ClassVar = 90

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return formats.JSON if content.json() is not None else None
