import pytest
from typing import ClassVar, Sequence

from pubfetch import formats
from pubfetch.core.model import Format, Link, LinkParameters
from pubfetch.core.probe import ContentProbe, ResourceProbe
from pubfetch.core.registry import _REGISTRY, FormatRegistry
from pubfetch.core.sniffer_base import ContentSniffer, Signature
from pubfetch.core.util import (
    canonical_media_type, extension_of, format_asdict, media_type_essence,
)
from pubfetch.io.memory import BytesResource

TEST_FORMAT = Format("Test", "application/x-test", "test")
HIGH_FORMAT = Format("High", "application/x-high", "high")


class DummySniffer(ContentSniffer, register=False):
    """Test sniffer for unit tests."""
    formats: ClassVar = (TEST_FORMAT,)
    signatures: ClassVar[Sequence[Signature]] = [(0, b"TEST")]
    priority: ClassVar[int] = 50

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return TEST_FORMAT


class HighPrioritySniffer(ContentSniffer, register=False):
    """Higher priority test sniffer, matching anything."""
    formats: ClassVar = (HIGH_FORMAT,)
    priority: ClassVar[int] = 10

    @classmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        return HIGH_FORMAT if prefix.startswith(b"TESTHIGH") else None


class ExplodingProbe(ContentProbe):
    """Fails the test if any content is read."""

    def _read_prefix(self) -> bytes:
        raise AssertionError("content must not be read")

    def _read_document(self):
        raise AssertionError("content must not be read")

    def entries(self):
        raise AssertionError("content must not be read")

    def read_entry(self, name, limit=0):
        raise AssertionError("content must not be read")


def probe_of(data: bytes, href: str = "data") -> ResourceProbe:
    return ResourceProbe(BytesResource(Link(href), data))


def make_registry() -> FormatRegistry:
    registry = FormatRegistry([
        (TEST_FORMAT, ("application/vnd.test",), ("tst",)),
        (HIGH_FORMAT, (), ()),
        (formats.OPDS1_FEED, (), ()),
        (formats.PDF, (), ()),
    ])
    registry.register(DummySniffer)
    return registry


class TestMediaTypeHints:
    """Media-type hints are matched exactly, then normalized."""

    def test_exact_match(self):
        assert make_registry().sniff(media_types=["application/x-test"]) == TEST_FORMAT

    def test_alias_media_type(self):
        assert make_registry().sniff(media_types=["application/vnd.test"]) == TEST_FORMAT

    def test_case_and_charset_ignored(self):
        registry = make_registry()
        assert registry.sniff(media_types=["Application/X-Test; charset=UTF-8"]) == TEST_FORMAT

    def test_significant_parameters(self):
        """OPDS 1 needs its profile parameter; bare Atom is not OPDS."""
        registry = make_registry()
        hint = "application/atom+xml; charset=utf-8; profile=opds-catalog"
        assert registry.sniff(media_types=[hint]) == formats.OPDS1_FEED
        assert registry.sniff(media_types=["application/atom+xml"]) is None

    def test_unknown_parameters_fall_back_to_essence(self):
        assert make_registry().sniff(media_types=["application/pdf;version=1.7"]) == formats.PDF

    def test_hint_order_decides(self):
        registry = make_registry()
        assert registry.sniff(media_types=["application/pdf", "application/x-test"]) == formats.PDF
        assert registry.sniff(media_types=["text/unknown", "application/x-test"]) == TEST_FORMAT

    def test_media_type_beats_extension(self):
        registry = make_registry()
        assert registry.sniff(media_types=["application/pdf"], extensions=["test"]) == formats.PDF


class TestExtensionHints:
    """Extension hints are matched case-insensitively."""

    def test_extension_match(self):
        registry = make_registry()
        assert registry.sniff(extensions=["test"]) == TEST_FORMAT
        assert registry.sniff(extensions=[".TST"]) == TEST_FORMAT

    def test_extension_order(self):
        registry = make_registry()
        assert registry.sniff(extensions=["nope", "pdf", "test"]) == formats.PDF

    def test_extension_of(self):
        assert extension_of("dir/Book.EPUB") == "epub"
        assert extension_of("https://example.com/a/b.pdf?x=1#frag") == "pdf"
        assert extension_of("noext") is None
        assert extension_of("archive.tar.gz") == "gz"

    def test_weak_extension_defers_to_content(self):
        registry = FormatRegistry([(formats.JSON, (), ()), (TEST_FORMAT, (), ())], weak_extensions=[".JSON"])
        registry.register(DummySniffer)
        assert registry.match_hints(extensions=["json"]) is None
        assert registry.sniff(extensions=["json"], content=probe_of(b"TEST")) == TEST_FORMAT
        assert registry.sniff(extensions=["json"], content=probe_of(b"????")) == formats.JSON
        assert registry.sniff(extensions=["json"]) == formats.JSON
        assert registry.sniff(media_types=["application/x-test"], extensions=["json"]) == TEST_FORMAT


class TestContentSniffing:
    """Content sniffers run last, in priority order."""

    def test_signature_detection(self):
        registry = make_registry()
        assert registry.sniff(content=probe_of(b"TEST" + b"\x00" * 100)) == TEST_FORMAT
        assert registry.sniff(content=probe_of(b"WRONG" + b"\x00" * 100)) is None

    def test_signature_bounds_checking(self):
        """Short buffers never match longer signatures."""
        assert not DummySniffer.matches_signature(b"TE")
        assert make_registry().sniff(content=probe_of(b"TE")) is None

    def test_priority_ordering(self):
        registry = make_registry()
        registry.register(HighPrioritySniffer)
        assert registry.sniffers == (HighPrioritySniffer, DummySniffer)
        assert registry.sniff(content=probe_of(b"TESTHIGH")) == HIGH_FORMAT
        assert registry.sniff(content=probe_of(b"TEST")) == TEST_FORMAT

    def test_hints_short_circuit_content(self):
        """A matching hint never reads the content."""
        registry = make_registry()
        assert registry.sniff(media_types=["application/x-test"], content=ExplodingProbe()) == TEST_FORMAT
        assert registry.sniff(extensions=["pdf"], content=ExplodingProbe()) == formats.PDF

    def test_lazy_content_factory_not_called(self):
        calls = []

        def factory():
            calls.append(1)
            return probe_of(b"TEST")

        registry = make_registry()
        assert registry.sniff(media_types=["application/pdf"], content=factory) == formats.PDF
        assert calls == []
        assert registry.sniff(media_types=["text/unknown"], content=factory) == TEST_FORMAT
        assert calls == [1]

    def test_content_wins_over_unknown_hints(self):
        registry = make_registry()
        fmt = registry.sniff(media_types=["text/unknown"], extensions=["xyz"], content=probe_of(b"TEST"))
        assert fmt == TEST_FORMAT

    def test_nothing_matches(self):
        assert make_registry().sniff() is None
        assert make_registry().sniff(media_types=["a/b"], extensions=["c"]) is None

    def test_io_error_propagates(self):
        class FailingProbe(ExplodingProbe):
            def _read_prefix(self):
                raise OSError("disk on fire")

        with pytest.raises(OSError, match="disk on fire"):
            make_registry().sniff(content=FailingProbe())

    def test_deterministic(self):
        registry = make_registry()
        results = {registry.sniff(extensions=["xyz"], content=probe_of(b"TEST")) for _ in range(20)}
        assert results == {TEST_FORMAT}


class TestRegistration:
    """Sniffer subclasses register themselves with the project-wide registry."""

    def test_bundled_sniffers_registered(self):
        names = {s.__name__ for s in _REGISTRY.sniffers}
        assert {"EPUBSniffer", "PDFSniffer", "PNGSniffer", "HTMLSniffer", "ZipSniffer"} <= names

    def test_opt_out(self):
        assert DummySniffer not in _REGISTRY.sniffers

    def test_seed_table(self):
        assert _REGISTRY.format_for_extension("jpeg") == formats.JPEG
        assert _REGISTRY.format_for_extension("json") == formats.JSON
        assert _REGISTRY.format_for_media_type("application/webpub+json") == formats.READIUM_WEBPUB_MANIFEST
        assert formats.EPUB in _REGISTRY.formats


class TestModel:
    """Value types."""

    def test_format_value_equality(self):
        assert Format("EPUB", "application/epub+zip", "epub") == formats.EPUB
        assert len({formats.EPUB, Format("EPUB", "application/epub+zip", "epub")}) == 1

    def test_link_extension(self):
        assert Link("OEBPS/ch1.XHTML#p3").extension == "xhtml"
        assert Link("images/").extension is None

    def test_parameters_are_read_only(self):
        source = {"range": (10, 20)}
        params = LinkParameters(source)
        source["range"] = (0, 1)
        assert params.range == (10, 20)
        with pytest.raises(TypeError):
            params.values["variant"] = "hd"
        assert not LinkParameters()
        assert LinkParameters({"a": 1}) == LinkParameters({"a": 1})


class TestUtil:
    """Helpers."""

    def test_canonical_media_type(self):
        assert canonical_media_type("Text/HTML; Charset=UTF-8") == "text/html"
        assert canonical_media_type("a/b; y=2; x=1") == "a/b;x=1;y=2"
        assert media_type_essence("a/b; y=2") == "a/b"

    def test_format_asdict(self):
        assert format_asdict(formats.PDF) == {
            "found": True, "name": "PDF", "media_type": "application/pdf", "file_extension": "pdf",
        }
        assert format_asdict(None, source="x") == {"found": False, "source": "x"}
        assert format_asdict(formats.PDF, fields=["name"]) == {"found": True, "name": "PDF"}
