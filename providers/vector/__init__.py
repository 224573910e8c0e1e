"""Vector store providers package for SectionHound - concrete KnowledgeVectorStore implementations."""

from .duckdb_vector_store import DuckDBVectorStore
from .memory_vector_store import InMemoryVectorStore

__all__ = [
    "DuckDBVectorStore",
    "InMemoryVectorStore",
]
