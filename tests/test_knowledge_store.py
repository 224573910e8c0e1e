"""Tests for the in-memory and DuckDB knowledge stores."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from core.exceptions import DatabaseError
from core.models import KnowledgeFile, KnowledgeFileChunk, KnowledgeFileSection
from core.types import FileId, IndexingStatus, SectionId


@pytest.fixture(params=["memory", "duckdb"])
def store(request, memory_store, duckdb_store):
    return memory_store if request.param == "memory" else duckdb_store


def make_section(file_id: FileId, section_index: int, texts: list[str]) -> KnowledgeFileSection:
    section_id = SectionId(uuid4())
    chunks = [
        KnowledgeFileChunk.create(section_id, i, text, embedding=[float(i), 1.0])
        for i, text in enumerate(texts)
    ]
    return KnowledgeFileSection.create_from_chunks(chunks, file_id, section_index)


async def persist(store, section: KnowledgeFileSection) -> None:
    await store.sections.add(section)
    await store.chunks.add(section.chunks)


class TestFileStore:
    """Tests for KnowledgeFile persistence."""

    @pytest.mark.asyncio
    async def test_add_and_get(self, store):
        file = KnowledgeFile.create_pending(FileId(uuid4()), "notes.md")
        assert await store.files.add(file) == file.id

        loaded = await store.files.get(file.id)
        assert loaded.id == file.id
        assert loaded.name == "notes.md"
        assert loaded.status is IndexingStatus.PENDING
        assert loaded.content_hash == b""
        assert await store.files.exists(file.id)

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.files.get(FileId(uuid4())) is None
        assert not await store.files.exists(FileId(uuid4()))

    @pytest.mark.asyncio
    async def test_update_round_trips_hash_and_status(self, store):
        file = KnowledgeFile.create_pending(FileId(uuid4()), "notes.md")
        await store.files.add(file)
        processed_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        await store.files.update(file.mark_indexed(b"\x01" * 32, processed_at))

        loaded = await store.files.get(file.id)
        assert loaded.status is IndexingStatus.INDEXED
        assert loaded.content_hash == b"\x01" * 32
        assert loaded.processed_at == processed_at

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        with pytest.raises(DatabaseError):
            await store.files.update(KnowledgeFile.create_pending(FileId(uuid4()), "ghost.md"))

    @pytest.mark.asyncio
    async def test_duplicate_add_raises(self, store):
        file = KnowledgeFile.create_pending(FileId(uuid4()), "notes.md")
        await store.files.add(file)
        with pytest.raises(DatabaseError):
            await store.files.add(file)

    @pytest.mark.asyncio
    async def test_get_all_and_delete(self, store):
        first = KnowledgeFile.create_pending(FileId(uuid4()), "b.md")
        second = KnowledgeFile.create_pending(FileId(uuid4()), "a.md")
        await store.files.add(first)
        await store.files.add(second)

        assert [f.name for f in await store.files.get_all()] == ["a.md", "b.md"]
        assert await store.files.delete(first.id)
        assert not await store.files.delete(first.id)
        assert [f.name for f in await store.files.get_all()] == ["a.md"]


class TestSectionAndChunkStores:
    """Tests for section hydration and per-file deletion."""

    @pytest.mark.asyncio
    async def test_section_is_hydrated_in_order(self, store):
        file_id = FileId(uuid4())
        section = make_section(file_id, 0, ["one", "two", "three"])
        await persist(store, section)

        loaded = await store.sections.get(section.id)
        assert loaded.file_id == file_id
        assert [c.content for c in loaded.chunks] == ["one", "two", "three"]
        assert loaded.chunks[2].embedding == pytest.approx((2.0, 1.0))

    @pytest.mark.asyncio
    async def test_get_by_index(self, store):
        file_id = FileId(uuid4())
        first = make_section(file_id, 0, ["alpha"])
        second = make_section(file_id, 1, ["beta", "gamma"])
        await persist(store, first)
        await persist(store, second)

        assert (await store.sections.get_by_index(file_id, 1)).id == second.id
        assert await store.sections.get_by_index(file_id, 2) is None

        chunk = await store.chunks.get_by_index(second.id, 1)
        assert chunk.content == "gamma"
        assert await store.chunks.get_by_index(second.id, 5) is None

    @pytest.mark.asyncio
    async def test_get_many_skips_missing(self, store):
        section = make_section(FileId(uuid4()), 0, ["one", "two"])
        await persist(store, section)

        ids = [section.chunks[1].id, uuid4(), section.chunks[0].id]
        found = await store.chunks.get_many(ids)
        assert {c.content for c in found} == {"one", "two"}
        assert await store.chunks.get_many([]) == []

    @pytest.mark.asyncio
    async def test_delete_by_file_only_touches_that_file(self, store):
        file_a, file_b = FileId(uuid4()), FileId(uuid4())
        a0 = make_section(file_a, 0, ["a0", "a1"])
        a1 = make_section(file_a, 1, ["a2"])
        b0 = make_section(file_b, 0, ["b0"])
        for section in (a0, a1, b0):
            await persist(store, section)

        deleted = await store.chunks.delete_by_file(file_a)
        assert set(deleted) == {c.id for c in a0.chunks + a1.chunks}
        assert await store.sections.delete_by_file(file_a) == 2

        assert await store.sections.get(a0.id) is None
        assert await store.chunks.get(a0.chunks[0].id) is None
        assert (await store.sections.get(b0.id)).chunks[0].content == "b0"

    @pytest.mark.asyncio
    async def test_delete_by_file_without_content(self, store):
        assert await store.chunks.delete_by_file(FileId(uuid4())) == []
        assert await store.sections.delete_by_file(FileId(uuid4())) == 0

    @pytest.mark.asyncio
    async def test_chunk_without_embedding(self, store):
        section_id = SectionId(uuid4())
        chunk = KnowledgeFileChunk.create(section_id, 0, "plain")
        await store.chunks.add([chunk])

        loaded = await store.chunks.get(chunk.id)
        assert loaded.embedding is None
        assert not loaded.has_embedding


class TestDuckDBProvider:
    def test_stats_and_health(self, duckdb_store):
        assert duckdb_store.get_stats() == {"files": 0, "sections": 0, "chunks": 0}
        health = duckdb_store.health_check()
        assert health["connected"]
        assert health["errors"] == []

    def test_file_database(self, test_db_path):
        from providers.database.duckdb_provider import DuckDBProvider

        with DuckDBProvider(test_db_path) as provider:
            assert provider.is_connected
        assert test_db_path.exists()
        assert not provider.is_connected

    def test_execute_without_connection(self):
        from providers.database.duckdb_provider import DuckDBProvider

        with pytest.raises(DatabaseError):
            DuckDBProvider(":memory:").execute("query", "files", "SELECT 1")
