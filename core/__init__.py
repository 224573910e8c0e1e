"""SectionHound Core Package - Domain models, types, and exceptions.

This package contains the core domain models and types that form the foundation
of the SectionHound architecture. These models are independent of storage and
embedding backends.

Modules:
    models: Domain models for files, sections, chunks and search results
    types: Common type definitions and aliases
    exceptions: Core exception classes for error handling
"""

from .exceptions import (
    DatabaseError,
    EmbeddingError,
    IndexingError,
    IndexingInvariantError,
    MissingEmbeddingError,
    ModelError,
    SectionHoundError,
    ValidationError,
)
from .models import (
    KnowledgeFile,
    KnowledgeFileChunk,
    KnowledgeFileSection,
    KnowledgeSearchResult,
    RelevanceMetrics,
    RelevanceRatedEntry,
)
from .types import ChunkId, FileId, IndexingStatus, SectionId

__all__ = [
    # Domain Models
    "KnowledgeFile",
    "KnowledgeFileSection",
    "KnowledgeFileChunk",
    "KnowledgeSearchResult",
    "RelevanceMetrics",
    "RelevanceRatedEntry",

    # Types
    "IndexingStatus",
    "FileId",
    "SectionId",
    "ChunkId",

    # Exceptions
    "SectionHoundError",
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "MissingEmbeddingError",
    "IndexingError",
    "IndexingInvariantError",
    "DatabaseError",
]

__version__ = "0.1.0"
