"""Tests for file sources and directory discovery."""

from uuid import uuid4

import pytest

from core.exceptions import ValidationError
from core.types import IndexingStatus
from providers.sources import (
    DirectoryFileSourceProvider,
    InMemoryFileSource,
    LocalFileSource,
    file_id_for_path,
)
from tests import TWO_TOPIC_DOCUMENT, create_test_file


class TestLocalFileSource:
    def test_identity_is_relative_path(self, temp_dir):
        path = create_test_file(temp_dir, "docs/guide.md", "# Guide\n")
        source = LocalFileSource(path, root=temp_dir)

        assert source.file_name == "docs/guide.md"
        assert source.file_id == file_id_for_path("docs/guide.md")

    def test_id_survives_moving_the_root(self, temp_dir):
        first = create_test_file(temp_dir / "a", "notes.md", "text")
        second = create_test_file(temp_dir / "b", "notes.md", "other text")

        assert LocalFileSource(first, root=temp_dir / "a").file_id == \
            LocalFileSource(second, root=temp_dir / "b").file_id

    def test_explicit_file_id(self, temp_dir):
        file_id = uuid4()
        path = create_test_file(temp_dir, "notes.md", "text")
        assert LocalFileSource(path, file_id=file_id).file_id == file_id

    def test_stream_is_fresh_each_time(self, temp_dir):
        path = create_test_file(temp_dir, "notes.md", "hello")
        source = LocalFileSource(path, root=temp_dir)

        with source.open_read_stream() as stream:
            assert stream.read() == b"hello"
        with source.open_read_stream() as stream:
            assert stream.read() == b"hello"


class TestInMemoryFileSource:
    def test_text_is_utf8(self):
        source = InMemoryFileSource(uuid4(), "notes.md", "héllo")
        with source.open_read_stream() as stream:
            assert stream.read() == "héllo".encode("utf-8")

    def test_with_content_keeps_identity(self):
        source = InMemoryFileSource(uuid4(), "notes.md", "old")
        changed = source.with_content(b"new")

        assert changed.file_id == source.file_id
        assert changed.file_name == "notes.md"
        assert changed.content == b"new"
        assert source.content == b"old"


class TestDirectoryFileSourceProvider:
    def test_discovers_included_files(self, temp_dir):
        create_test_file(temp_dir, "b.md", "b")
        create_test_file(temp_dir, "a.txt", "a")
        create_test_file(temp_dir, "sub/c.markdown", "c")
        create_test_file(temp_dir, "image.png", "png")

        names = [s.file_name for s in DirectoryFileSourceProvider(temp_dir).get_all_files()]

        assert names == ["a.txt", "b.md", "sub/c.markdown"]

    def test_excluded_directories(self, temp_dir):
        create_test_file(temp_dir, "keep.md", "keep")
        create_test_file(temp_dir, ".git/notes.md", "git")
        create_test_file(temp_dir, "node_modules/pkg/README.md", "pkg")

        names = [s.file_name for s in DirectoryFileSourceProvider(temp_dir).get_all_files()]

        assert names == ["keep.md"]

    def test_custom_patterns(self, temp_dir):
        create_test_file(temp_dir, "keep.md", "keep")
        create_test_file(temp_dir, "drafts/skip.md", "skip")
        create_test_file(temp_dir, "notes.rst", "rst")

        provider = DirectoryFileSourceProvider(
            temp_dir, include_patterns=["*.md", "*.rst"], exclude_patterns=["drafts/*"]
        )

        assert [s.file_name for s in provider.get_all_files()] == ["keep.md", "notes.rst"]

    def test_overlapping_patterns_do_not_duplicate(self, temp_dir):
        create_test_file(temp_dir, "notes.md", "text")
        provider = DirectoryFileSourceProvider(temp_dir, include_patterns=["*.md", "notes.*"])
        assert len(provider.get_all_files()) == 1

    def test_missing_directory(self, temp_dir):
        with pytest.raises(ValidationError):
            DirectoryFileSourceProvider(temp_dir / "missing")

    @pytest.mark.asyncio
    async def test_index_directory(self, temp_dir, coordinator):
        docs = temp_dir / "docs"
        create_test_file(docs, "topics.md", TWO_TOPIC_DOCUMENT)
        create_test_file(docs, "short.txt", "A short note.\n")
        binary = docs / "blob.txt"
        binary.write_bytes(b"\x00\x01\x02binary")
        provider = DirectoryFileSourceProvider(docs)

        stats = await coordinator.consume_all(provider)

        assert stats == {"processed": 2, "skipped": 1, "errors": 0, "failed": []}
        assert await coordinator.get_status(file_id_for_path("blob.txt")) is \
            IndexingStatus.UNSUPPORTED_CONTENT_TYPE

        (docs / "short.txt").write_text("A longer note now.\n")
        stats = await coordinator.consume_all(provider)
        assert stats["processed"] == 1
        assert stats["skipped"] == 2
