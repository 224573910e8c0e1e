"""Tests for the incremental indexing pipeline."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.exceptions import DatabaseError, IndexingInvariantError, MissingEmbeddingError, ValidationError
from core.models import KnowledgeFileChunk
from core.types import IndexingStatus
from providers.sources import InMemoryFileSource
from providers.vector.duckdb_vector_store import DuckDBVectorStore
from services.indexing_coordinator import IndexingCoordinator
from tests import TWO_TOPIC_DOCUMENT, FakeTokenizer, HashingEmbeddingProvider

OTHER_DOCUMENT = (
    "## Gardens\n"
    "Gardens grow tomatoes and roses in spring.\n\n"
    "Water the gardens every morning.\n"
)


def make_source(content: str = TWO_TOPIC_DOCUMENT, name: str = "doc.md") -> InMemoryFileSource:
    return InMemoryFileSource(uuid4(), name, content)


async def all_chunk_ids(store, file_id) -> set:
    ids = set()
    index = 0
    while True:
        section = await store.sections.get_by_index(file_id, index)
        if section is None:
            return ids
        ids.update(chunk.id for chunk in section.chunks)
        index += 1


class TestConsume:
    """Tests for consume() on a single file source."""

    @pytest.mark.asyncio
    async def test_new_file_is_indexed(self, coordinator, memory_store, vector_store, embedder):
        source = make_source()

        assert await coordinator.consume(source) is True

        record = await memory_store.files.get(source.file_id)
        assert record.status is IndexingStatus.INDEXED
        assert len(record.content_hash) == 32
        assert record.processed_at is not None

        chunk_ids = await all_chunk_ids(memory_store, source.file_id)
        assert len(chunk_ids) == embedder.calls == 5
        assert await vector_store.count() == 5
        for chunk_id in chunk_ids:
            assert await vector_store.contains(chunk_id)

    @pytest.mark.asyncio
    async def test_sections_are_numbered_in_order(self, coordinator, memory_store):
        source = make_source()
        await coordinator.consume(source)

        first = await memory_store.sections.get_by_index(source.file_id, 0)
        second = await memory_store.sections.get_by_index(source.file_id, 1)
        assert first.to_string().startswith("## Cats")
        assert second.to_string().startswith("## Databases")
        assert first.to_string() + second.to_string() == TWO_TOPIC_DOCUMENT

    @pytest.mark.asyncio
    async def test_unchanged_file_is_skipped(self, coordinator, memory_store, vector_store, embedder):
        source = make_source()
        assert await coordinator.consume(source) is True
        calls = embedder.calls
        sections = dict(memory_store.sections.rows)

        assert await coordinator.consume(source) is False
        assert embedder.calls == calls
        assert memory_store.sections.rows == sections
        assert await vector_store.count() == 5

    @pytest.mark.asyncio
    async def test_changed_file_replaces_content(self, coordinator, memory_store, vector_store):
        source = make_source()
        await coordinator.consume(source)
        old_ids = await all_chunk_ids(memory_store, source.file_id)
        old_hash = (await memory_store.files.get(source.file_id)).content_hash

        changed = source.with_content(OTHER_DOCUMENT)
        assert await coordinator.consume(changed) is True

        new_ids = await all_chunk_ids(memory_store, source.file_id)
        assert new_ids and not (new_ids & old_ids)
        for chunk_id in old_ids:
            assert not await vector_store.contains(chunk_id)
            assert await memory_store.chunks.get(chunk_id) is None
        for chunk_id in new_ids:
            assert await vector_store.contains(chunk_id)
        assert await vector_store.count() == len(new_ids)

        record = await memory_store.files.get(source.file_id)
        assert record.content_hash != old_hash
        assert record.status is IndexingStatus.INDEXED

    @pytest.mark.asyncio
    async def test_other_files_are_untouched(self, coordinator, memory_store, vector_store):
        first = make_source(name="a.md")
        second = make_source(OTHER_DOCUMENT, name="b.md")
        await coordinator.consume(first)
        await coordinator.consume(second)
        second_ids = await all_chunk_ids(memory_store, second.file_id)

        await coordinator.consume(first.with_content("## Replaced\nNew text here.\n"))

        assert await all_chunk_ids(memory_store, second.file_id) == second_ids
        for chunk_id in second_ids:
            assert await vector_store.contains(chunk_id)

    @pytest.mark.asyncio
    async def test_reindex_after_row_deletion_uses_stored_hash(self, coordinator, memory_store, vector_store,
                                                               embedder):
        source = make_source()
        await coordinator.consume(source)
        await memory_store.chunks.delete_by_file(source.file_id)
        await memory_store.sections.delete_by_file(source.file_id)
        calls = embedder.calls

        assert await coordinator.consume(source) is False
        assert embedder.calls == calls
        assert await vector_store.count() == 5

    @pytest.mark.asyncio
    async def test_empty_file(self, coordinator, memory_store, embedder):
        source = make_source("")

        assert await coordinator.consume(source) is True
        assert embedder.calls == 0
        assert memory_store.sections.rows == {}
        assert (await memory_store.files.get(source.file_id)).is_indexed

    @pytest.mark.asyncio
    async def test_binary_file_is_unsupported(self, coordinator, memory_store, embedder):
        source = InMemoryFileSource(uuid4(), "image.png", b"\x89PNG\x00\x00data")

        assert await coordinator.consume(source) is False
        assert embedder.calls == 0
        record = await memory_store.files.get(source.file_id)
        assert record.status is IndexingStatus.UNSUPPORTED_CONTENT_TYPE
        assert len(record.content_hash) == 32

    @pytest.mark.asyncio
    async def test_unchanged_binary_file_is_skipped(self, coordinator, memory_store):
        source = InMemoryFileSource(uuid4(), "image.png", b"\x89PNG\x00\x00data")
        await coordinator.consume(source)
        first = await memory_store.files.get(source.file_id)
        coordinator._remove_file_content = AsyncMock()

        assert await coordinator.consume(source) is False
        coordinator._remove_file_content.assert_not_awaited()
        assert await memory_store.files.get(source.file_id) == first

        assert await coordinator.consume(source.with_content(b"\x89PNG\x00\x00other")) is False
        changed = await memory_store.files.get(source.file_id)
        assert changed.status is IndexingStatus.UNSUPPORTED_CONTENT_TYPE
        assert changed.content_hash != first.content_hash

    @pytest.mark.asyncio
    async def test_missing_source(self, coordinator):
        with pytest.raises(ValidationError):
            await coordinator.consume(None)

    @pytest.mark.asyncio
    async def test_missing_file_id(self, coordinator, memory_store):
        source = InMemoryFileSource(None, "doc.md", "text")
        with pytest.raises(ValidationError):
            await coordinator.consume(source)
        assert memory_store.files.rows == {}

    @pytest.mark.asyncio
    async def test_string_file_id_is_accepted(self, coordinator, memory_store):
        file_id = uuid4()
        source = InMemoryFileSource(str(file_id), "doc.md", "Some text.\n")
        assert await coordinator.consume(source) is True
        assert await memory_store.files.exists(file_id)

    @pytest.mark.asyncio
    async def test_embedding_failure_leaves_file_pending(self, memory_store, vector_store, tokenizer):
        embedder = HashingEmbeddingProvider()
        embedder.embed_single = AsyncMock(side_effect=RuntimeError("embedding service down"))
        coordinator = IndexingCoordinator(memory_store, vector_store, embedder, tokenizer)
        source = make_source()

        with pytest.raises(RuntimeError):
            await coordinator.consume(source)

        record = await memory_store.files.get(source.file_id)
        assert record.status is IndexingStatus.PENDING
        assert record.content_hash == b""

    @pytest.mark.asyncio
    async def test_failed_rebuild_is_redone_for_original_content(self, coordinator, memory_store, embedder):
        source = make_source()
        await coordinator.consume(source)
        original_hash = (await memory_store.files.get(source.file_id)).content_hash

        embedder.embed_single = AsyncMock(side_effect=RuntimeError("down"))
        with pytest.raises(RuntimeError):
            await coordinator.consume(source.with_content(OTHER_DOCUMENT))

        record = await memory_store.files.get(source.file_id)
        assert record.status is IndexingStatus.PENDING
        assert record.content_hash == original_hash
        assert memory_store.chunks.rows == {}

        del embedder.embed_single
        assert await coordinator.consume(source) is True
        assert len(memory_store.chunks.rows) == 5

    @pytest.mark.asyncio
    async def test_missing_embedding_is_rejected(self, coordinator, memory_store, vector_store, monkeypatch):
        class ReaderWithoutEmbeddings:
            async def read_sections(self):
                section_id = uuid4()
                yield [
                    KnowledgeFileChunk.create(section_id, 0, "no vector"),
                    KnowledgeFileChunk.create(section_id, 1, "embedded", embedding=[1.0, 0.0]),
                ]

        monkeypatch.setattr(
            "services.indexing_coordinator.create_section_reader",
            lambda *args, **kwargs: ReaderWithoutEmbeddings(),
        )
        source = make_source()

        with pytest.raises(MissingEmbeddingError):
            await coordinator.consume(source)

        assert memory_store.sections.rows == {}
        assert memory_store.chunks.rows == {}
        assert await vector_store.count() == 0
        assert await memory_store.sections.get_by_index(source.file_id, 0) is None
        assert not (await memory_store.files.get(source.file_id)).is_indexed

    @pytest.mark.asyncio
    async def test_chunk_store_failure_leaves_no_empty_section(self, coordinator, memory_store, vector_store,
                                                               monkeypatch):
        source = make_source()
        stored = memory_store.chunks.add
        calls = []

        async def fail_second_section(chunks):
            calls.append(chunks)
            if len(calls) == 2:
                raise DatabaseError("insert", "chunks", "disk full")
            await stored(chunks)

        monkeypatch.setattr(memory_store.chunks, "add", fail_second_section)

        with pytest.raises(DatabaseError):
            await coordinator.consume(source)

        assert memory_store.sections.rows == {}
        assert memory_store.chunks.rows == {}
        assert await vector_store.count() == 0
        assert await memory_store.sections.get_by_index(source.file_id, 1) is None
        assert (await memory_store.files.get(source.file_id)).status is IndexingStatus.PENDING

    @pytest.mark.asyncio
    async def test_file_record_removed_mid_run(self, coordinator, memory_store, monkeypatch):
        async def drop_record(self, file_id, file_source):
            await memory_store.files.delete(file_id)
            return 0, 0

        monkeypatch.setattr(IndexingCoordinator, "_index_sections", drop_record)
        with pytest.raises(IndexingInvariantError):
            await coordinator.consume(make_source())

    @pytest.mark.asyncio
    async def test_remove_file(self, coordinator, memory_store, vector_store):
        source = make_source()
        await coordinator.consume(source)

        assert await coordinator.remove_file(source.file_id)
        assert await coordinator.get_status(source.file_id) is None
        assert await vector_store.count() == 0
        assert memory_store.chunks.rows == {}


class TestConsumeAll:
    """Tests for consuming every source of a provider."""

    class ListProvider:
        def __init__(self, sources):
            self._sources = sources

        def get_all_files(self):
            return list(self._sources)

    @pytest.mark.asyncio
    async def test_summary(self, coordinator):
        first, second = make_source(name="a.md"), make_source(OTHER_DOCUMENT, name="b.md")
        provider = self.ListProvider([first, second])

        assert await coordinator.consume_all(provider) == {
            "processed": 2, "skipped": 0, "errors": 0, "failed": []
        }
        stats = await coordinator.consume_all(provider)
        assert stats["processed"] == 0
        assert stats["skipped"] == 2

    @pytest.mark.asyncio
    async def test_failure_marks_error_and_reraises(self, memory_store, vector_store, tokenizer):
        embedder = HashingEmbeddingProvider()
        embedder.embed_single = AsyncMock(side_effect=RuntimeError("boom"))
        coordinator = IndexingCoordinator(memory_store, vector_store, embedder, tokenizer)
        source = make_source()

        with pytest.raises(RuntimeError):
            await coordinator.consume_all(self.ListProvider([source]))
        assert await coordinator.get_status(source.file_id) is IndexingStatus.ERROR

    @pytest.mark.asyncio
    async def test_continue_on_error(self, memory_store, vector_store, tokenizer):
        embedder = HashingEmbeddingProvider()
        real_embed = embedder.embed_single

        async def flaky(text):
            if "Gardens" in text:
                raise RuntimeError("boom")
            return await real_embed(text)

        embedder.embed_single = flaky
        coordinator = IndexingCoordinator(memory_store, vector_store, embedder, tokenizer)
        good, bad = make_source(name="good.md"), make_source(OTHER_DOCUMENT, name="bad.md")

        stats = await coordinator.consume_all(self.ListProvider([bad, good]), continue_on_error=True)

        assert stats == {"processed": 1, "skipped": 0, "errors": 1, "failed": ["bad.md"]}
        assert await coordinator.get_status(bad.file_id) is IndexingStatus.ERROR
        assert await coordinator.get_status(good.file_id) is IndexingStatus.INDEXED

    @pytest.mark.asyncio
    async def test_error_file_is_retried(self, memory_store, vector_store, tokenizer):
        embedder = HashingEmbeddingProvider()
        real_embed = embedder.embed_single
        embedder.embed_single = AsyncMock(side_effect=RuntimeError("boom"))
        coordinator = IndexingCoordinator(memory_store, vector_store, embedder, tokenizer)
        source = make_source()

        await coordinator.consume_all(self.ListProvider([source]), continue_on_error=True)
        embedder.embed_single = real_embed

        assert await coordinator.consume(source) is True
        assert await coordinator.get_status(source.file_id) is IndexingStatus.INDEXED


class TestDuckDBPipeline:
    """The pipeline against the durable backend."""

    @pytest.mark.asyncio
    async def test_consume_and_change(self, duckdb_store, chunking_config):
        vector_store = DuckDBVectorStore(duckdb_store)
        embedder = HashingEmbeddingProvider()
        coordinator = IndexingCoordinator(
            duckdb_store, vector_store, embedder, FakeTokenizer(), chunking_config=chunking_config
        )
        source = make_source()

        assert await coordinator.consume(source) is True
        assert await coordinator.consume(source) is False
        assert duckdb_store.get_stats() == {"files": 1, "sections": 2, "chunks": 5}
        assert await vector_store.count() == 5

        assert await coordinator.consume(source.with_content(OTHER_DOCUMENT)) is True
        stats = duckdb_store.get_stats()
        assert stats["sections"] >= 1
        assert await vector_store.count() == stats["chunks"]
