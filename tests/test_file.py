"""Tests for the memoizing File wrapper."""

import asyncio
import threading
import time

import pytest

from pubfetch import File, formats
from pubfetch.core.lazy import Once
from pubfetch.core.model import Format, ResourceNotFoundError

from conftest import manifest


class TestFileBasics:
    """Construction and name."""

    def test_name_without_io(self, tmp_path):
        file = File(tmp_path / "missing" / "book.epub", source_url="https://example.com/book.epub")
        assert file.name == "book.epub"
        assert file.source_url == "https://example.com/book.epub"

    def test_is_directory(self, tmp_path):
        (tmp_path / "dir").mkdir()
        (tmp_path / "file.txt").write_bytes(b"x")
        assert File(tmp_path / "dir").is_directory() is True
        assert File(tmp_path / "file.txt").is_directory() is False
        assert File(tmp_path / "missing").is_directory() is False


class TestFileFormat:
    """Format sniffing precedence."""

    def test_epub_by_content(self, epub_path):
        """A zip with an EPUB mimetype entry is an EPUB."""
        assert File(epub_path).format() == formats.EPUB
        renamed = epub_path.rename(epub_path.with_name("book.bin"))
        assert File(renamed).format() == formats.EPUB

    def test_media_type_hint_beats_content(self, tmp_path):
        """A declared media type wins even when the bytes disagree."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"This is plain text, not a PDF.\n")
        assert File(path, media_type="application/pdf").format() == formats.PDF

    def test_known_format_is_trusted(self, epub_path, monkeypatch):
        custom = Format("Custom", "application/x-custom", "custom")
        monkeypatch.setattr(File, "_sniff", lambda self: pytest.fail("must not sniff"))
        file = File(epub_path, media_type="application/pdf", format=custom)
        assert file.format() is custom

    def test_extension_beats_content(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"%PDF-1.4")
        assert File(path).format() == formats.PNG

    def test_unknown_format(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x01\x02\x03")
        assert File(path).format() is None

    def test_truncated_zip_is_unknown(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"PK\x03\x04hello")
        file = File(path)
        with pytest.warns(UserWarning, match="unreadable archive"):
            assert file.format() is None
        assert file.format() is None

    def test_manifest_json_by_content(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_bytes(manifest())
        assert File(path).format() == formats.READIUM_WEBPUB_MANIFEST

    def test_exploded_directory(self, tmp_path):
        root = tmp_path / "comic"
        root.mkdir()
        (root / "page1.jpg").write_bytes(b"\xff\xd8\xff")
        (root / "page2.jpg").write_bytes(b"\xff\xd8\xff")
        assert File(root).format() == formats.CBZ

    def test_missing_file_raises_and_is_not_cached(self, tmp_path):
        path = tmp_path / "later"
        file = File(path)
        with pytest.raises(ResourceNotFoundError):
            file.format()
        path.write_bytes(b"%PDF-1.7")
        assert file.format() == formats.PDF


class TestMemoization:
    """I/O happens once per File."""

    def test_is_directory_computed_once(self, tmp_path, monkeypatch):
        calls = []
        original = File._stat_is_directory

        def counting(self):
            calls.append(1)
            return original(self)

        monkeypatch.setattr(File, "_stat_is_directory", counting)
        file = File(tmp_path)
        assert all(file.is_directory() for _ in range(5))
        assert len(calls) == 1

    def test_format_computed_once_including_none(self, tmp_path, monkeypatch):
        path = tmp_path / "unknown.bin"
        path.write_bytes(b"\x01\x02")
        calls = []
        original = File._open_probe

        def counting(self):
            calls.append(1)
            return original(self)

        monkeypatch.setattr(File, "_open_probe", counting)
        file = File(path)
        assert [file.format() for _ in range(3)] == [None, None, None]
        assert len(calls) == 1

    def test_concurrent_first_access(self, epub_path, monkeypatch):
        calls = []
        original = File._sniff

        def slow(self):
            calls.append(1)
            time.sleep(0.05)
            return original(self)

        monkeypatch.setattr(File, "_sniff", slow)
        file = File(epub_path)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(file.format())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [formats.EPUB] * 8
        assert len(calls) == 1

    def test_concurrent_first_is_directory(self, tmp_path, monkeypatch):
        calls = []
        original = File._stat_is_directory

        def slow(self):
            calls.append(1)
            time.sleep(0.05)
            return original(self)

        monkeypatch.setattr(File, "_stat_is_directory", slow)
        file = File(tmp_path)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(file.is_directory())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [True] * 8
        assert len(calls) == 1

    def test_once_retries_after_failure(self):
        cell = Once()
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise OSError("transient")
            return 42

        with pytest.raises(OSError):
            cell.get(flaky)
        assert not cell.done
        assert cell.get(flaky) == 42
        assert cell.get(flaky) == 42
        assert len(attempts) == 2


class TestAsync:
    """Async accessors run the blocking work in a thread."""

    @pytest.mark.asyncio
    async def test_async_accessors(self, epub_path):
        file = File(epub_path)
        is_dir, fmt = await asyncio.gather(file.is_directory_async(), file.format_async())
        assert is_dir is False
        assert fmt == formats.EPUB
