"""SectionHound Section Domain Model - Represents a run of topically related chunks."""

from dataclasses import dataclass, replace
from typing import Optional, Dict, Any, Sequence, Tuple
from uuid import UUID

from ..types import FileId, SectionId
from ..exceptions import ValidationError, ModelError
from .chunk import KnowledgeFileChunk


@dataclass(frozen=True)
class KnowledgeFileSection:
    """Domain model representing a section of a file.

    A section always holds at least one chunk. Stores persist the section row
    separately from its chunks and rebuild the chunk tuple on read.

    Attributes:
        id: Unique section identifier
        file_id: Identifier of the owning file
        section_index: Position of the section inside its file (0-based)
        chunks: Ordered chunks of the section
        summary: Optional summary text
        additional_context: Optional text prepended when the section is used as context
    """

    id: SectionId
    file_id: FileId
    section_index: int
    chunks: Tuple[KnowledgeFileChunk, ...]
    summary: Optional[str] = None
    additional_context: Optional[str] = None

    def __post_init__(self):
        """Validate section model after initialization."""
        if not isinstance(self.chunks, tuple):
            object.__setattr__(self, "chunks", tuple(self.chunks))
        self._validate()

    def _validate(self) -> None:
        """Validate section model attributes."""
        if not isinstance(self.id, UUID):
            raise ValidationError("id", self.id, "Section id must be a UUID")

        if not isinstance(self.file_id, UUID):
            raise ValidationError("file_id", self.file_id, "File id must be a UUID")

        if self.section_index < 0:
            raise ValidationError("section_index", self.section_index, "Section index cannot be negative")

        if len(self.chunks) == 0:
            raise ModelError(
                "KnowledgeFileSection", "create", "A section must contain at least one chunk",
                context={"section_id": self.id, "file_id": self.file_id},
            )

        for chunk in self.chunks:
            if chunk.section_id != self.id:
                raise ModelError(
                    "KnowledgeFileSection", "create",
                    f"Chunk {chunk.id} belongs to section {chunk.section_id}",
                    context={"section_id": self.id},
                )

    @classmethod
    def create_from_chunks(
        cls,
        chunks: Sequence[KnowledgeFileChunk],
        file_id: FileId,
        section_index: int,
    ) -> "KnowledgeFileSection":
        """Build a section from chunks that were cut for it.

        The section takes its id from the chunks' ``section_id``.

        Raises:
            ModelError: If ``chunks`` is empty
        """
        if not chunks:
            raise ModelError(
                "KnowledgeFileSection", "create_from_chunks", "Cannot create a section from zero chunks",
                context={"file_id": file_id, "section_index": section_index},
            )
        return cls(
            id=chunks[0].section_id,
            file_id=file_id,
            section_index=section_index,
            chunks=tuple(chunks),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], chunks: Sequence[KnowledgeFileChunk]) -> "KnowledgeFileSection":
        """Create a section from a stored row and its hydrated chunks."""
        try:
            return cls(
                id=SectionId(UUID(str(data["id"]))),
                file_id=FileId(UUID(str(data["file_id"]))),
                section_index=int(data["section_index"]),
                chunks=tuple(sorted(chunks, key=lambda c: c.chunk_index)),
                summary=data.get("summary"),
                additional_context=data.get("additional_context"),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Row representation without chunks."""
        return {
            "id": str(self.id),
            "file_id": str(self.file_id),
            "section_index": self.section_index,
            "summary": self.summary,
            "additional_context": self.additional_context,
        }

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def to_string(self, separator: str = "") -> str:
        """Join the chunk contents with ``separator``."""
        return separator.join(chunk.content for chunk in self.chunks)

    def with_summary(self, summary: Optional[str]) -> "KnowledgeFileSection":
        return replace(self, summary=summary)

    def with_additional_context(self, additional_context: Optional[str]) -> "KnowledgeFileSection":
        return replace(self, additional_context=additional_context)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (
            f"KnowledgeFileSection(id={self.id}, file_id={self.file_id}, "
            f"index={self.section_index}, chunks={len(self.chunks)})"
        )
