"""Shared fixtures for SectionHound tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from providers.database.duckdb_provider import DuckDBProvider
from providers.database.memory_provider import InMemoryProvider
from providers.vector.memory_vector_store import InMemoryVectorStore
from sectionhound.core.config import ChunkingConfig, SectioningConfig, reset_config
from services.indexing_coordinator import IndexingCoordinator
from services.search_service import SearchService
from tests import FakeTokenizer, HashingEmbeddingProvider


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(temp_dir: Path) -> Path:
    """Create a test database path."""
    return temp_dir / "test.duckdb"


@pytest.fixture(autouse=True)
def clean_global_config(monkeypatch):
    """Keep the global configuration and OpenAI env vars out of tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def embedder() -> HashingEmbeddingProvider:
    return HashingEmbeddingProvider()


@pytest.fixture
def chunking_config() -> ChunkingConfig:
    return ChunkingConfig(max_tokens_per_chunk=12)


@pytest.fixture
def sectioning_config() -> SectioningConfig:
    return SectioningConfig(max_tokens_per_section=1000)


@pytest.fixture
def memory_store() -> InMemoryProvider:
    store = InMemoryProvider()
    store.connect()
    return store


@pytest.fixture
def duckdb_store() -> Generator[DuckDBProvider, None, None]:
    store = DuckDBProvider(":memory:")
    store.connect()
    yield store
    store.disconnect()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def coordinator(memory_store, vector_store, embedder, tokenizer, chunking_config, sectioning_config):
    return IndexingCoordinator(
        knowledge_store=memory_store,
        vector_store=vector_store,
        embedding_provider=embedder,
        tokenizer=tokenizer,
        chunking_config=chunking_config,
        sectioning_config=sectioning_config,
    )


@pytest.fixture
def search_service(memory_store, vector_store, embedder):
    return SearchService(memory_store, vector_store, embedder)
