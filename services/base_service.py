"""Base service class for SectionHound services."""

from abc import ABC

from interfaces.knowledge_store import KnowledgeStore
from interfaces.vector_store import KnowledgeVectorStore


class BaseService(ABC):
    """Base service class providing common functionality and dependency management."""

    def __init__(self, knowledge_store: KnowledgeStore, vector_store: KnowledgeVectorStore):
        """Initialize service with store dependencies.

        Args:
            knowledge_store: Store for files, sections and chunks
            vector_store: Store for chunk embeddings
        """
        self._store = knowledge_store
        self._vectors = vector_store

    @property
    def knowledge_store(self) -> KnowledgeStore:
        """Get knowledge store instance."""
        return self._store

    @property
    def vector_store(self) -> KnowledgeVectorStore:
        """Get vector store instance."""
        return self._vectors
