"""SectionHound Chunk Domain Model - Represents a token-bounded slice of a document.

A KnowledgeFileChunk is the smallest indexed unit. Its id doubles as the
identifier of its vector in the vector store.
"""

from dataclasses import dataclass, replace
from typing import Optional, Dict, Any, Sequence, Tuple
from uuid import UUID, uuid4

from ..types import ChunkId, SectionId
from ..exceptions import ValidationError


@dataclass(frozen=True)
class KnowledgeFileChunk:
    """Domain model representing a chunk of a section.

    Attributes:
        id: Unique chunk identifier (also the vector id)
        section_id: Identifier of the owning section
        chunk_index: Position of the chunk inside its section (0-based)
        content: Raw text of the chunk
        embedding: Embedding vector, None until the chunk has been embedded
    """

    id: ChunkId
    section_id: SectionId
    chunk_index: int
    content: str
    embedding: Optional[Tuple[float, ...]] = None

    def __post_init__(self):
        """Validate chunk model after initialization."""
        if self.embedding is not None and not isinstance(self.embedding, tuple):
            object.__setattr__(self, "embedding", tuple(float(v) for v in self.embedding))
        self._validate()

    def _validate(self) -> None:
        """Validate chunk model attributes."""
        if not isinstance(self.id, UUID):
            raise ValidationError("id", self.id, "Chunk id must be a UUID")

        if not isinstance(self.section_id, UUID):
            raise ValidationError("section_id", self.section_id, "Section id must be a UUID")

        if self.chunk_index < 0:
            raise ValidationError("chunk_index", self.chunk_index, "Chunk index cannot be negative")

        if self.content is None:
            raise ValidationError("content", self.content, "Content cannot be None")

        if self.embedding is not None and len(self.embedding) == 0:
            raise ValidationError("embedding", self.embedding, "Embedding cannot be empty")

    @classmethod
    def create(
        cls,
        section_id: SectionId,
        chunk_index: int,
        content: str,
        embedding: Optional[Sequence[float]] = None,
    ) -> "KnowledgeFileChunk":
        """Create a chunk with a fresh id."""
        return cls(
            id=ChunkId(uuid4()),
            section_id=section_id,
            chunk_index=chunk_index,
            content=content,
            embedding=tuple(embedding) if embedding is not None else None,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeFileChunk":
        """Create a KnowledgeFileChunk from a dictionary.

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        try:
            for key in ("id", "section_id", "chunk_index"):
                if data.get(key) is None:
                    raise ValidationError(key, None, f"{key} is required")

            embedding = data.get("embedding")
            return cls(
                id=ChunkId(UUID(str(data["id"]))),
                section_id=SectionId(UUID(str(data["section_id"]))),
                chunk_index=int(data["chunk_index"]),
                content=data.get("content", ""),
                embedding=tuple(embedding) if embedding is not None else None,
            )
        except (ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": str(self.id),
            "section_id": str(self.section_id),
            "chunk_index": self.chunk_index,
            "content": self.content,
        }
        if self.embedding is not None:
            result["embedding"] = list(self.embedding)
        return result

    @property
    def has_embedding(self) -> bool:
        """Check whether the chunk carries a vector."""
        return self.embedding is not None

    @property
    def dims(self) -> int:
        return len(self.embedding) if self.embedding is not None else 0

    def with_embedding(self, embedding: Sequence[float]) -> "KnowledgeFileChunk":
        """Create a new chunk instance carrying ``embedding``."""
        return replace(self, embedding=tuple(float(v) for v in embedding))

    def without_embedding(self) -> "KnowledgeFileChunk":
        return replace(self, embedding=None)

    def __str__(self) -> str:
        return self.content

    def __repr__(self) -> str:
        preview = self.content[:40].replace("\n", " ")
        return (
            f"KnowledgeFileChunk(id={self.id}, section_id={self.section_id}, "
            f"index={self.chunk_index}, dims={self.dims}, content='{preview}')"
        )
