from __future__ import annotations
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable
from urllib.parse import unquote, urlparse

from .model import Format

# parameters that never change which format a media type denotes
_IGNORED_PARAMS = frozenset({"charset"})


def split_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Split ``"type/sub; k=v"`` into a lower-cased essence and its parameters."""
    essence, *raw_params = value.split(";")
    params: dict[str, str] = {}
    for raw in raw_params:
        key, sep, val = raw.partition("=")
        key = key.strip().lower()
        if not sep or not key:
            continue
        params[key] = val.strip().strip('"').lower()
    return essence.strip().lower(), params


def canonical_media_type(value: str) -> str:
    """Lower-case, drop ignorable parameters and sort the remaining ones."""
    essence, params = split_media_type(value)
    kept = sorted((k, v) for k, v in params.items() if k not in _IGNORED_PARAMS)
    return ";".join([essence, *(f"{k}={v}" for k, v in kept)])


def media_type_essence(value: str) -> str:
    return split_media_type(value)[0]


def normalize_extension(value: str) -> str:
    return value.strip().lstrip(".").lower()


def extension_of(source: Any) -> str | None:
    """Return the lower-cased extension of a path or URL, without the dot."""
    text = str(source)
    parsed = urlparse(text)
    if parsed.scheme in ("http", "https", "file"):
        text = unquote(parsed.path)
    suffix = PurePosixPath(text.replace("\\", "/")).suffix
    return normalize_extension(suffix) or None


def format_asdict(fmt: Format | None, *, source: str | None = None,
                  fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict for a sniffing outcome, optionally filtered."""
    if fmt is None:
        payload: Dict[str, Any] = {"found": False}
    else:
        payload = {
            "found": True,
            "name": fmt.name,
            "media_type": fmt.media_type,
            "file_extension": fmt.file_extension,
        }
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted or k == "found"}
    if source is not None:
        payload["source"] = source
    return payload
