"""CLI implementation for pubfetch."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from . import sniff_format, sniff_format_async
from .core.model import Format, ResourceError
from .core.util import format_asdict
from .fetch import open_fetcher
from .io.http_async import close_global_client

app = typer.Typer(add_completion=False, help="Sniff publication formats and read their resources.")

Outcome = tuple[str, Optional[Format], Optional[str]]   # (source, format, error)


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        return [ln.strip() for ln in sys.stdin if ln.strip()]
    elif files:
        return list(files)
    return []


def _normalize(src: str) -> str:
    parsed_url = urlparse(src)
    if parsed_url.scheme and parsed_url.netloc:  # It's a URL
        return src
    return str(Path(src).resolve())


async def _batch_sniff(sources: list[str], media_type: Optional[str]) -> list[Outcome]:
    """Asynchronously sniff a list of sources."""
    tasks = [sniff_format_async(_normalize(src), media_type=media_type) for src in sources]
    try:
        results = await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        await close_global_client()
    outcomes: list[Outcome] = []
    for src, res in zip(sources, results):
        if isinstance(res, Exception):
            outcomes.append((src, None, str(res)))
        else:
            outcomes.append((src, res, None))
    return outcomes


def _sniff_sync(sources: list[str], media_type: Optional[str]) -> list[Outcome]:
    outcomes: list[Outcome] = []
    for src in sources:
        try:
            outcomes.append((src, sniff_format(_normalize(src), media_type=media_type), None))
        except (OSError, ResourceError) as e:
            outcomes.append((src, None, str(e)))
    return outcomes


def _cat(source: str, href: str, output: Optional[Path]) -> None:
    """Write the resource at `href` inside `source` to `output` or stdout."""
    with open_fetcher(_normalize(source)) as fetcher:
        with fetcher.resolve(href) as resource:
            try:
                data = resource.read()
            except (OSError, ResourceError) as e:
                typer.echo(f"{href}: {e}", err=True)
                raise typer.Exit(code=1)
    if output:
        output.write_bytes(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


@app.command()
def main(
    files: list[str] = typer.Argument(None, help="Files, directories or URLs to process, or '-' for stdin"),
    media_type: Optional[str] = typer.Option(None, "--media-type", "-m", help="Declared media type hint"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
    cat: Optional[str] = typer.Option(None, "--cat", help="Dump the resource at HREF of the (single) source"),
):
    """Sniff the format of one or many local paths or URLs."""
    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    if cat is not None:
        if len(sources) != 1:
            typer.echo("--cat takes exactly one source.", err=True)
            raise typer.Exit(code=2)
        _cat(sources[0], cat, output)
        return

    if sync:
        outcomes = _sniff_sync(sources, media_type)
    else:
        outcomes = asyncio.run(_batch_sniff(sources, media_type))

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        payloads = []
        for src, fmt, error in outcomes:
            obj = format_asdict(fmt, source=src, fields=sel_fields)
            if error is not None:
                obj["error"] = error
            payloads.append(obj)
        # choose output style
        if len(payloads) == 1 and not jsonl:
            json.dump(payloads[0], sink, indent=2)
            sink.write("\n")
        else:
            for obj in payloads:
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(fmt is None for _, fmt, _ in outcomes):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
