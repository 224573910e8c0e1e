"""Search service for SectionHound - semantic search over indexed chunks and sections."""

from typing import Dict, List, Tuple

from loguru import logger

from core.exceptions import ValidationError
from core.models import KnowledgeFileChunk, KnowledgeFileSection, KnowledgeSearchResult, RelevanceRatedEntry
from core.types import ChunkId, SectionId
from interfaces.embedding_provider import EmbeddingProvider
from interfaces.knowledge_store import KnowledgeStore
from interfaces.vector_store import KnowledgeVectorStore
from sectionhound.relevance import rate
from .base_service import BaseService


class SearchService(BaseService):
    """Service for semantic search across indexed documents."""

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        vector_store: KnowledgeVectorStore,
        embedding_provider: EmbeddingProvider,
    ):
        """Initialize search service.

        Args:
            knowledge_store: Store used to hydrate matching chunks and sections
            vector_store: Store searched by query embedding
            embedding_provider: Provider used to embed the query
        """
        super().__init__(knowledge_store, vector_store)
        self._embedding_provider = embedding_provider

    async def search(self, query: str, k: int = 10) -> List[RelevanceRatedEntry[KnowledgeFileChunk]]:
        """Find the chunks most similar to a query.

        Args:
            query: Natural language query
            k: Maximum number of chunks to return

        Returns:
            Rated chunks ordered by descending similarity
        """
        hits = await self._search_chunks(query, k)
        return rate(hits)

    async def search_sections(self, query: str, k: int = 10) -> List[RelevanceRatedEntry[KnowledgeFileSection]]:
        """Find the sections containing the chunks most similar to a query.

        A section scores the best similarity among its matching chunks.
        """
        hits = await self._search_chunks(query, k)
        sections = await self._sections_for(hits)
        return rate(sections)

    async def search_knowledge(self, query: str, k: int = 10) -> KnowledgeSearchResult:
        """Run one query and return both the rated chunks and their sections."""
        hits = await self._search_chunks(query, k)
        sections = await self._sections_for(hits)
        return KnowledgeSearchResult(query=query, chunks=rate(hits), sections=rate(sections))

    async def _search_chunks(self, query: str, k: int) -> List[Tuple[KnowledgeFileChunk, float]]:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query", query, "Query must be a non-empty string")
        if k <= 0:
            return []

        logger.debug(f"Performing semantic search for: '{query}' (k={k})")
        query_vector = await self._embedding_provider.embed_single(query)
        matches = await self._vectors.search(query_vector, k)

        chunks = await self._store.chunks.get_many([ChunkId(vector_id) for vector_id, _ in matches])
        by_id = {chunk.id: chunk for chunk in chunks}

        hits = []
        for vector_id, similarity in matches:
            chunk = by_id.get(vector_id)
            if chunk is None:
                logger.warning(f"Vector {vector_id} has no stored chunk, skipping")
                continue
            hits.append((chunk, similarity))

        logger.debug(f"Semantic search returned {len(hits)} chunks")
        return hits

    async def _sections_for(
        self, hits: List[Tuple[KnowledgeFileChunk, float]]
    ) -> List[Tuple[KnowledgeFileSection, float]]:
        best: Dict[SectionId, float] = {}
        for chunk, similarity in hits:
            if chunk.section_id not in best or similarity > best[chunk.section_id]:
                best[chunk.section_id] = similarity

        # Stable sort keeps first-hit order for equal scores
        ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)

        sections = []
        for section_id, similarity in ranked:
            section = await self._store.sections.get(section_id)
            if section is None:
                logger.warning(f"Section {section_id} not found, skipping")
                continue
            sections.append((section, similarity))
        return sections
