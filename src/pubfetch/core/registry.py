from __future__ import annotations
import bisect
import threading
from typing import Callable, Dict, Iterable, List, Type, Union

from .formats import SEED, WEAK_EXTENSIONS
from .model import Format
from .probe import ContentProbe
from .sniffer_base import ContentSniffer
from .util import canonical_media_type, media_type_essence, normalize_extension

ContentSource = Union[ContentProbe, Callable[[], ContentProbe], None]


class FormatRegistry:
    """Known formats plus the content sniffers used to recognize them.

    ``sniff`` applies a fixed precedence: media-type hints, then extension
    hints, then content sniffers in priority order. The first confident
    match wins. Weak extensions (".json", ".zip") are shared with more
    specific formats, so they are only used when the content gives no answer.
    """

    def __init__(self, seed: Iterable[tuple[Format, Iterable[str], Iterable[str]]] = (),
                 weak_extensions: Iterable[str] = ()) -> None:
        self._formats: List[Format] = []
        self._by_media_type: Dict[str, Format] = {}     # as registered
        self._by_canonical: Dict[str, Format] = {}      # lower-cased, sorted params
        self._by_essence: Dict[str, Format] = {}        # type/subtype only
        self._by_ext: Dict[str, Format] = {}
        self._by_weak_ext: Dict[str, Format] = {}
        self._weak_extensions = frozenset(normalize_extension(e) for e in weak_extensions)
        self._sniffers: tuple[tuple[int, str, Type[ContentSniffer]], ...] = ()   # sorted by priority
        self._lock = threading.Lock()
        for fmt, media_types, extensions in seed:
            self.add_format(fmt, media_types=media_types, extensions=extensions)

    # --- table ---
    def add_format(self, fmt: Format, *, media_types: Iterable[str] = (),
                   extensions: Iterable[str] = ()) -> None:
        """Register `fmt`; the first format claiming a media type or extension keeps it."""
        with self._lock:
            if fmt not in self._formats:
                self._formats.append(fmt)
            for mt in (fmt.media_type, *media_types):
                self._by_media_type.setdefault(mt, fmt)
                canonical = canonical_media_type(mt)
                self._by_canonical.setdefault(canonical, fmt)
                # only parameter-less types claim their bare essence
                if ";" not in canonical:
                    self._by_essence.setdefault(canonical, fmt)
            for ext in map(normalize_extension, (fmt.file_extension, *extensions)):
                table = self._by_weak_ext if ext in self._weak_extensions else self._by_ext
                table.setdefault(ext, fmt)

    @property
    def formats(self) -> tuple[Format, ...]:
        return tuple(self._formats)

    # called from ContentSniffer.__init_subclass__
    def register(self, sniffer_cls: Type[ContentSniffer]) -> None:
        # Use (priority, class_name, sniffer_cls) to ensure stable sorting
        entry = (sniffer_cls.priority, sniffer_cls.__qualname__, sniffer_cls)
        with self._lock:
            sniffers = list(self._sniffers)
            bisect.insort(sniffers, entry, key=lambda e: e[:2])
            self._sniffers = tuple(sniffers)
            for fmt in getattr(sniffer_cls, "formats", ()):
                if fmt not in self._formats:
                    self._formats.append(fmt)

    @property
    def sniffers(self) -> tuple[Type[ContentSniffer], ...]:
        return tuple(s for _, _, s in self._sniffers)

    # --- detection helpers ---
    def format_for_media_type(self, media_type: str) -> Format | None:
        """Exact match first, then ignoring case and irrelevant parameters."""
        fmt = self._by_media_type.get(media_type)
        if fmt is None:
            fmt = self._by_canonical.get(canonical_media_type(media_type))
        if fmt is None:
            fmt = self._by_essence.get(media_type_essence(media_type))
        return fmt

    def format_for_extension(self, extension: str) -> Format | None:
        ext = normalize_extension(extension)
        return self._by_ext.get(ext) or self._by_weak_ext.get(ext)

    def _sniff_content(self, content: ContentProbe) -> Format | None:
        prefix = content.prefix
        for _, _, s in self._sniffers:
            if not s.matches_signature(prefix):
                continue
            fmt = s.probe(prefix, content)
            if fmt is not None:
                return fmt
        return None

    def match_hints(self, media_types: Iterable[str] = (), extensions: Iterable[str] = ()) -> Format | None:
        """Format named by the media-type hints, else by a non-weak extension hint."""
        # 1) declared media types, in caller order
        for mt in media_types:
            if mt and (fmt := self.format_for_media_type(mt)):
                return fmt
        # 2) extensions, in caller order
        for ext in extensions:
            if ext and (fmt := self._by_ext.get(normalize_extension(ext))):
                return fmt
        return None

    def sniff(self, media_types: Iterable[str] = (), extensions: Iterable[str] = (),
              content: ContentSource = None) -> Format | None:
        """Return the best-matching format, or None when nothing is confident.

        `content` is a probe or a zero-argument callable producing one; it is
        only consulted when no hint matched. A probe produced by a callable is
        closed before returning.
        """
        extensions = [normalize_extension(e) for e in extensions if e]
        if (fmt := self.match_hints(media_types, extensions)) is not None:
            return fmt
        # 3) content
        if isinstance(content, ContentProbe):
            fmt = self._sniff_content(content)
        elif content is not None:
            with content() as probe:
                fmt = self._sniff_content(probe)
        if fmt is None:
            # 4) generic format of a weak extension
            fmt = next((self._by_weak_ext[e] for e in extensions if e in self._by_weak_ext), None)
        return fmt


# singleton used project-wide
_REGISTRY = FormatRegistry(SEED, weak_extensions=WEAK_EXTENSIONS)
