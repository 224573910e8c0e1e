"""In-memory vector store for SectionHound - exact cosine search with explicit JSON persistence."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Dict, List, Optional
from uuid import UUID

import numpy as np
from loguru import logger

from core.exceptions import DatabaseError, ValidationError


class InMemoryVectorStore:
    """Exact nearest-neighbour search over vectors held in memory.

    Vectors keep their first insertion position when replaced, which is the
    order used to break similarity ties. The dimension is fixed by the first
    vector unless given up front. Searches score every vector with one
    matrix-vector product; the matrix and its row norms are rebuilt lazily
    after the store changes.
    """

    def __init__(self, dims: Optional[int] = None):
        self._dims = dims
        self._vectors: Dict[UUID, np.ndarray] = {}
        self._ids: List[UUID] = []
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None

    @property
    def dims(self) -> Optional[int]:
        return self._dims

    async def add(self, vector_id: UUID, vector: Sequence[float]) -> None:
        values = self._check_vector(vector, "vector")
        if self._dims is None:
            self._dims = len(values)
        self._vectors[vector_id] = values
        self._matrix = None

    async def remove(self, vector_id: UUID) -> None:
        if self._vectors.pop(vector_id, None) is not None:
            self._matrix = None

    async def search(self, query_vector: Sequence[float], k: int) -> list[tuple[UUID, float]]:
        """Return the ``k`` most similar ids with their cosine similarity.

        Args:
            query_vector: Query embedding
            k: Maximum number of results; ``k <= 0`` returns nothing

        Raises:
            ValidationError: If the query dimension does not match the store
        """
        if k <= 0 or not self._vectors:
            return []

        query = self._check_vector(query_vector, "query_vector")
        matrix, norms = self._index()

        denominators = norms * np.linalg.norm(query)
        scores = np.divide(
            matrix @ query,
            denominators,
            out=np.zeros(len(self._ids)),
            where=denominators > 0.0,
        )
        np.clip(scores, -1.0, 1.0, out=scores)

        # Stable sort, so ties keep insertion order
        order = np.argsort(-scores, kind="stable")[:k]
        return [(self._ids[i], float(scores[i])) for i in order]

    async def count(self) -> int:
        return len(self._vectors)

    async def contains(self, vector_id: UUID) -> bool:
        return vector_id in self._vectors

    async def save(self, path: Path) -> None:
        """Write all vectors to a JSON file, preserving insertion order."""
        path = Path(path)
        payload = {
            "dims": self._dims,
            "vectors": [
                {"id": str(vector_id), "vector": values.tolist()}
                for vector_id, values in self._vectors.items()
            ],
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as e:
            raise DatabaseError("save", "vectors", f"Cannot write {path}: {e}", cause=e) from e
        logger.debug(f"Saved {len(self._vectors)} vectors to {path}")

    async def load(self, path: Path) -> None:
        """Replace the store contents with the vectors saved at ``path``."""
        path = Path(path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DatabaseError("load", "vectors", f"Cannot read {path}: {e}", cause=e) from e

        self._dims = payload.get("dims")
        self._vectors = {}
        self._matrix = None
        for entry in payload.get("vectors", []):
            await self.add(UUID(entry["id"]), entry["vector"])
        logger.debug(f"Loaded {len(self._vectors)} vectors from {path}")

    def _index(self):
        if self._matrix is None:
            self._ids = list(self._vectors)
            self._matrix = np.vstack(list(self._vectors.values()))
            self._norms = np.linalg.norm(self._matrix, axis=1)
            logger.debug(f"Rebuilt vector matrix: {self._matrix.shape}")
        return self._matrix, self._norms

    def _check_vector(self, vector: Sequence[float], field: str) -> np.ndarray:
        values = np.array(vector, dtype=np.float64)
        if values.ndim != 1 or values.size == 0:
            raise ValidationError(field, vector, "Vector must be a non-empty sequence of numbers")
        if self._dims is not None and values.size != self._dims:
            raise ValidationError(field, values.size, f"Expected {self._dims} dimensions, got {values.size}")
        return values
