"""SectionHound Core Exceptions Package - Core exception classes for error handling.

This package contains the exception hierarchy for the SectionHound system.
Invariant violations (a chunk without an embedding, a vanished file record, an
empty section) get their own types so callers can tell them apart from
transient store or provider failures.
"""

from .core import (
    ConfigurationError,
    DatabaseError,
    EmbeddingError,
    IndexingError,
    IndexingInvariantError,
    MissingEmbeddingError,
    ModelError,
    ProviderError,
    SectionHoundError,
    ValidationError,
)

__all__ = [
    # Base exception
    "SectionHoundError",

    # Domain-specific exceptions
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "MissingEmbeddingError",
    "IndexingError",
    "IndexingInvariantError",
    "DatabaseError",
    "ConfigurationError",
    "ProviderError",
]
