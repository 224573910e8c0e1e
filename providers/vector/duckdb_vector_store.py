"""DuckDB vector store for SectionHound - durable vectors sharing the knowledge store connection."""

from collections.abc import Sequence
from typing import List, Optional
from uuid import UUID

from loguru import logger

from core.exceptions import ValidationError
from providers.database.duckdb_provider import DuckDBProvider


class DuckDBVectorStore:
    """Vectors in a ``chunk_vectors`` table, searched by exact cosine similarity in SQL.

    Each row carries a sequence number assigned on first insert, so replacing a
    vector keeps its position in the tie-breaking order.
    """

    def __init__(self, provider: DuckDBProvider):
        self._provider = provider
        self._schema_ready = False

    def create_schema(self) -> None:
        """Create the vector table and its insertion sequence."""
        self._provider.execute("create_schema", "chunk_vectors",
                               "CREATE SEQUENCE IF NOT EXISTS chunk_vectors_seq START 1")
        self._provider.execute("create_schema", "chunk_vectors", """
            CREATE TABLE IF NOT EXISTS chunk_vectors (
                id VARCHAR PRIMARY KEY,
                seq BIGINT NOT NULL,
                vector FLOAT[] NOT NULL
            )
        """)
        self._schema_ready = True

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            self.create_schema()

    async def add(self, vector_id: UUID, vector: Sequence[float]) -> None:
        self._ensure_schema()
        values = [float(v) for v in vector]
        self._check_dims(values, "vector")

        exists = self._provider.execute(
            "select", "chunk_vectors", "SELECT 1 FROM chunk_vectors WHERE id = ?", [str(vector_id)]
        ).fetchone()
        if exists:
            self._provider.execute(
                "update", "chunk_vectors", "UPDATE chunk_vectors SET vector = ? WHERE id = ?",
                [values, str(vector_id)]
            )
        else:
            self._provider.execute(
                "insert", "chunk_vectors",
                "INSERT INTO chunk_vectors (id, seq, vector) VALUES (?, nextval('chunk_vectors_seq'), ?)",
                [str(vector_id), values]
            )

    async def remove(self, vector_id: UUID) -> None:
        self._ensure_schema()
        self._provider.execute(
            "delete", "chunk_vectors", "DELETE FROM chunk_vectors WHERE id = ?", [str(vector_id)]
        )

    async def search(self, query_vector: Sequence[float], k: int) -> list[tuple[UUID, float]]:
        """Return the ``k`` most similar ids with their cosine similarity.

        Similarity is computed and ranked inside DuckDB. A zero vector on
        either side scores 0, and ties keep insertion order.

        Raises:
            ValidationError: If the query dimension does not match the stored vectors
        """
        self._ensure_schema()
        if k <= 0:
            return []

        query = [float(v) for v in query_vector]
        self._check_dims(query, "query_vector")

        rows = self._provider.execute("search", "chunk_vectors", """
            SELECT
                id,
                CASE
                    WHEN ? OR list_dot_product(vector, vector) = 0 THEN 0.0
                    ELSE greatest(-1.0, least(1.0, list_cosine_similarity(vector, ?::FLOAT[])::DOUBLE))
                END::DOUBLE AS similarity
            FROM chunk_vectors
            ORDER BY similarity DESC, seq ASC
            LIMIT ?
        """, [not any(query), query, k]).fetchall()
        logger.debug(f"Vector search returned {len(rows)} of top-{k}")

        return [(UUID(row[0]), float(row[1])) for row in rows]

    async def count(self) -> int:
        self._ensure_schema()
        row = self._provider.execute("count", "chunk_vectors", "SELECT COUNT(*) FROM chunk_vectors").fetchone()
        return row[0] if row else 0

    async def contains(self, vector_id: UUID) -> bool:
        self._ensure_schema()
        row = self._provider.execute(
            "select", "chunk_vectors", "SELECT 1 FROM chunk_vectors WHERE id = ?", [str(vector_id)]
        ).fetchone()
        return row is not None

    def _stored_dims(self) -> Optional[int]:
        row = self._provider.execute(
            "select", "chunk_vectors", "SELECT len(vector) FROM chunk_vectors LIMIT 1"
        ).fetchone()
        return row[0] if row else None

    def _check_dims(self, values: List[float], field: str) -> None:
        if not values:
            raise ValidationError(field, values, "Vector must not be empty")
        dims = self._stored_dims()
        if dims is not None and len(values) != dims:
            raise ValidationError(field, len(values), f"Expected {dims} dimensions, got {len(values)}")
