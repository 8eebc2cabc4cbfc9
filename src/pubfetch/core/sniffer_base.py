from abc import ABC, abstractmethod
from typing import ClassVar, Sequence, Tuple

from .model import Format
from .probe import ContentProbe

Signature = Tuple[int, bytes]          # (offset, byte-pattern)


class ContentSniffer(ABC):
    """Recognizes formats from content when hints were inconclusive.

    Subclasses register themselves with the project-wide registry when they
    are defined; pass ``register=False`` in the class statement to opt out.
    """

    # --- required by subclasses ---
    formats: ClassVar[tuple[Format, ...]]        # formats this sniffer may return
    signatures: ClassVar[Sequence[Signature]] = ()  # magic bytes; empty = always asked
    priority: ClassVar[int] = 100                # lower = examined earlier

    @classmethod
    @abstractmethod
    def probe(cls, prefix: bytes, content: ContentProbe) -> Format | None:
        """Return a confident match, or None for "no opinion"."""
        ...

    @classmethod
    def matches_signature(cls, prefix: bytes) -> bool:
        if not cls.signatures:
            return True
        for offset, pat in cls.signatures:
            if prefix[offset:offset + len(pat)] == pat:
                return True
        return False

    # --- registry hook ---
    def __init_subclass__(cls, register: bool = True, **kw):
        super().__init_subclass__(**kw)
        if register:
            from .registry import _REGISTRY
            _REGISTRY.register(cls)           # noqa: E402
