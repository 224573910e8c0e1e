"""SectionHound Core Models Package - Domain model definitions.

This package contains the domain models of the SectionHound system: files,
the sections cut from them, the chunks that make up sections, and the
relevance-annotated results returned by searches.

The models follow these principles:
- Immutable data structures using dataclasses with frozen=True
- Validation in __post_init__ raising ValidationError or ModelError
- Copies through with_* / mark_* methods instead of mutation
"""

from .file import KnowledgeFile
from .chunk import KnowledgeFileChunk
from .section import KnowledgeFileSection
from .relevance import KnowledgeSearchResult, RelevanceMetrics, RelevanceRatedEntry

__all__ = [
    "KnowledgeFile",
    "KnowledgeFileChunk",
    "KnowledgeFileSection",
    "KnowledgeSearchResult",
    "RelevanceMetrics",
    "RelevanceRatedEntry",
]
