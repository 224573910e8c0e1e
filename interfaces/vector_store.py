"""KnowledgeVectorStore protocol for SectionHound - nearest-neighbour lookup by id."""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID


class KnowledgeVectorStore(Protocol):
    """Maps identifiers to fixed-dimension vectors and answers top-k cosine queries.

    Implementations may use an approximate index as long as the contract holds.
    """

    async def add(self, vector_id: UUID, vector: Sequence[float]) -> None:
        """Insert or replace the vector for ``vector_id``."""
        ...

    async def remove(self, vector_id: UUID) -> None:
        """Remove the vector for ``vector_id``; no-op if absent."""
        ...

    async def search(self, query_vector: Sequence[float], k: int) -> list[tuple[UUID, float]]:
        """Return up to ``k`` (id, cosine similarity) pairs.

        Results are ordered by descending similarity; equal similarities keep
        insertion order.
        """
        ...

    async def count(self) -> int:
        ...
