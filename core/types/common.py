"""SectionHound Core Types - Common type definitions and aliases.

This module contains type definitions, enums, and type aliases used throughout
the SectionHound system.
"""

from enum import Enum
from typing import List, NewType
from uuid import UUID


# Identifier aliases
FileId = NewType("FileId", UUID)           # KnowledgeFile identity
SectionId = NewType("SectionId", UUID)     # KnowledgeFileSection identity
ChunkId = NewType("ChunkId", UUID)         # KnowledgeFileChunk identity, also the vector id

# String-based type aliases for better semantic clarity
ProviderName = NewType("ProviderName", str)  # e.g., "openai"
ModelName = NewType("ModelName", str)        # e.g., "text-embedding-3-small"

# Numeric type aliases
TokenCount = NewType("TokenCount", int)
Similarity = NewType("Similarity", float)    # Cosine similarity in [-1, 1]
Dimensions = NewType("Dimensions", int)      # Embedding vector dimensions

# Complex types
EmbeddingVector = List[float]
ContentHash = bytes                          # SHA-256 digest, empty until indexed


class IndexingStatus(Enum):
    """Lifecycle status of a KnowledgeFile."""

    PENDING = "pending"
    INDEXED = "indexed"
    ERROR = "error"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"

    @classmethod
    def from_string(cls, value: str) -> "IndexingStatus":
        """Convert string to IndexingStatus, raising ValueError for unknown values."""
        return cls(value.lower())

    @property
    def is_terminal(self) -> bool:
        """Return True if the pipeline has finished with the file."""
        return self is not IndexingStatus.PENDING
