"""SectionHound Core Types Package - Common type definitions and aliases."""

from .common import (
    ChunkId,
    ContentHash,
    Dimensions,
    EmbeddingVector,
    FileId,
    IndexingStatus,
    ModelName,
    ProviderName,
    SectionId,
    Similarity,
    TokenCount,
)

__all__ = [
    # Enums
    "IndexingStatus",

    # Identifier types
    "FileId",
    "SectionId",
    "ChunkId",

    # String types
    "ProviderName",
    "ModelName",

    # Numeric types
    "TokenCount",
    "Similarity",
    "Dimensions",

    # Complex types
    "EmbeddingVector",
    "ContentHash",
]
