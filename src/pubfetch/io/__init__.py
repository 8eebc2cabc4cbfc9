"""Resources - lazily read byte sources bound to a Link."""

# Re-export these for import convenience
from .base import Resource, SliceResource
from .memory import BytesResource, FailureResource
from .local import FileResource, open_file_resource
from .zip import ZipEntryResource
from .stream import ResourceIO
from .http_sync import HTTPResource, open_http_resource, RANGE_FALLBACK_MAX
from .http_async import AsyncHTTPResource, open_http_resource_async, close_global_client


def open_resource(source, href: str | None = None) -> Resource:
    """Factory function to create a Resource for a path, URL or file-like object."""
    from pathlib import Path
    from ..core.model import Link

    if hasattr(source, 'read'):  # BinaryIO
        return FileResource(Link(href or str(getattr(source, "name", None) or "stream")), source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return open_http_resource(source_str, href)
    return open_file_resource(Path(source), href)
