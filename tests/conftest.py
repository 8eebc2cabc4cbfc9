import json
import zipfile

import pytest

EPUB_CONTAINER = b"""<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles><rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/></rootfiles>
</container>"""


def write_zip(path, entries: dict, *, stored_first: str | None = None):
    """Write a zip at `path`; `stored_first` is written first and uncompressed."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        if stored_first is not None:
            zf.writestr(zipfile.ZipInfo(stored_first), entries[stored_first])
        for name, data in entries.items():
            if name != stored_first:
                zf.writestr(name, data)
    return path


@pytest.fixture
def epub_path(tmp_path):
    """A minimal EPUB container."""
    return write_zip(tmp_path / "book.epub", {
        "mimetype": b"application/epub+zip",
        "META-INF/container.xml": EPUB_CONTAINER,
        "OEBPS/content.opf": b"<package/>",
        "OEBPS/chapter1.xhtml": b"<html xmlns='http://www.w3.org/1999/xhtml'><body>Hello</body></html>",
    }, stored_first="mimetype")


@pytest.fixture
def make_zip(tmp_path):
    def _make(name: str, entries: dict, stored_first: str | None = None):
        return write_zip(tmp_path / name, entries, stored_first=stored_first)
    return _make


def manifest(profile: str | None = None, reading_order=None) -> bytes:
    metadata = {"title": "Test"}
    if profile:
        metadata["conformsTo"] = profile
    return json.dumps({
        "@context": "https://readium.org/webpub-manifest/context.jsonld",
        "metadata": metadata,
        "readingOrder": reading_order or [{"href": "chapter1.html", "type": "text/html"}],
    }).encode()
