"""SectionHound Relevance Models - Search results annotated with confidence metrics.

These models are derived at query time and never persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

from ..exceptions import ValidationError
from .chunk import KnowledgeFileChunk
from .section import KnowledgeFileSection

T = TypeVar("T")

CONTEXT_SECTION_HEADER = "--- START OF NEW CONTEXT SECTION ---"
CONTEXT_RESULT_FOOTER = "--- END OF CONTEXT SEARCH RESULT ---"


@dataclass(frozen=True)
class RelevanceMetrics:
    """Per-result confidence metrics, relative to the result set of one query.

    Attributes:
        cosine_similarity: Raw similarity in [-1, 1]
        relevance_score: Similarity as a 0-100 integer, negatives clamped to 0
        normalized_score: Min-max rescaled similarity within the result set, 0-100
        standard_deviation: Population standard deviation of the result set similarities
    """

    cosine_similarity: float
    relevance_score: int
    normalized_score: float
    standard_deviation: float

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        # Small tolerance for float error in the similarity computation
        if not -1.0 - 1e-6 <= self.cosine_similarity <= 1.0 + 1e-6:
            raise ValidationError("cosine_similarity", self.cosine_similarity, "Must be within [-1, 1]")
        if not 0 <= self.relevance_score <= 100:
            raise ValidationError("relevance_score", self.relevance_score, "Must be within [0, 100]")
        if not 0.0 <= self.normalized_score <= 100.0:
            raise ValidationError("normalized_score", self.normalized_score, "Must be within [0, 100]")
        if self.standard_deviation < 0:
            raise ValidationError("standard_deviation", self.standard_deviation, "Cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cosine_similarity": self.cosine_similarity,
            "relevance_score": self.relevance_score,
            "normalized_score": self.normalized_score,
            "standard_deviation": self.standard_deviation,
        }


@dataclass(frozen=True)
class RelevanceRatedEntry(Generic[T]):
    """An item paired with its relevance metrics."""

    item: T
    relevance: RelevanceMetrics


@dataclass(frozen=True)
class KnowledgeSearchResult:
    """Result of a knowledge base query.

    Attributes:
        query: The query text
        chunks: Matching chunks ordered by descending similarity
        sections: Sections containing the matching chunks, ordered by descending similarity
    """

    query: str
    chunks: List[RelevanceRatedEntry[KnowledgeFileChunk]] = field(default_factory=list)
    sections: List[RelevanceRatedEntry[KnowledgeFileSection]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.chunks and not self.sections

    def to_context_string(self) -> str:
        """Render the matching sections as a context block for a prompt.

        Returns an empty string when nothing matched.
        """
        if not self.sections:
            return ""

        lines = []
        for entry in self.sections:
            lines.append(CONTEXT_SECTION_HEADER)
            if entry.item.additional_context is not None:
                lines.append(entry.item.additional_context)
            lines.append(entry.item.to_string())
        lines.append(CONTEXT_RESULT_FOOTER)
        return "\n".join(lines) + "\n"
