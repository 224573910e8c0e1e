"""Interfaces package for SectionHound - abstract protocols for provider implementations."""

from .embedding_provider import EmbeddingConfig, EmbeddingProvider
from .file_source import FileSource, FileSourceProvider
from .knowledge_store import (
    ChunkStore,
    ExplicitPersistence,
    FileStore,
    KnowledgeStore,
    SectionStore,
)
from .tokenizer import Tokenizer
from .vector_store import KnowledgeVectorStore

__all__ = [
    "EmbeddingConfig",
    "EmbeddingProvider",
    "FileSource",
    "FileSourceProvider",
    "FileStore",
    "SectionStore",
    "ChunkStore",
    "KnowledgeStore",
    "ExplicitPersistence",
    "KnowledgeVectorStore",
    "Tokenizer",
]
