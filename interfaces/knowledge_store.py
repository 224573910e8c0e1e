"""Store protocols for SectionHound - durable CRUD for files, sections and chunks."""

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from core.models import KnowledgeFile, KnowledgeFileChunk, KnowledgeFileSection
from core.types import ChunkId, FileId, SectionId


class FileStore(Protocol):
    """Persistence for KnowledgeFile records."""

    async def add(self, file: KnowledgeFile) -> FileId:
        """Insert a file record and return its id."""
        ...

    async def get(self, file_id: FileId) -> KnowledgeFile | None:
        """Get a file record by id."""
        ...

    async def exists(self, file_id: FileId) -> bool:
        ...

    async def get_all(self) -> list[KnowledgeFile]:
        """Get every file record."""
        ...

    async def update(self, file: KnowledgeFile) -> None:
        """Replace an existing file record.

        Raises:
            DatabaseError: If the record does not exist
        """
        ...

    async def delete(self, file_id: FileId) -> bool:
        """Delete a file record, returning True if it existed."""
        ...


class ChunkStore(Protocol):
    """Persistence for KnowledgeFileChunk records."""

    async def add(self, chunks: Iterable[KnowledgeFileChunk]) -> None:
        """Insert chunks."""
        ...

    async def get(self, chunk_id: ChunkId) -> KnowledgeFileChunk | None:
        ...

    async def get_many(self, chunk_ids: Iterable[ChunkId]) -> list[KnowledgeFileChunk]:
        """Get the chunks that exist among ``chunk_ids``; missing ids are skipped."""
        ...

    async def get_by_index(self, section_id: SectionId, chunk_index: int) -> KnowledgeFileChunk | None:
        ...

    async def get_by_section(self, section_id: SectionId) -> list[KnowledgeFileChunk]:
        """Get the chunks of a section ordered by chunk_index."""
        ...

    async def delete_by_file(self, file_id: FileId) -> list[ChunkId]:
        """Delete every chunk of a file and return the deleted ids."""
        ...


class SectionStore(Protocol):
    """Persistence for KnowledgeFileSection records.

    Sections are stored without their chunks; reads hydrate chunks from the
    chunk store.
    """

    async def add(self, section: KnowledgeFileSection) -> None:
        ...

    async def get(self, section_id: SectionId) -> KnowledgeFileSection | None:
        """Get a section with its chunks."""
        ...

    async def get_by_index(self, file_id: FileId, section_index: int) -> KnowledgeFileSection | None:
        ...

    async def delete_by_file(self, file_id: FileId) -> int:
        """Delete every section of a file and return how many were deleted."""
        ...


class KnowledgeStore(Protocol):
    """Bundle of the three stores sharing one backend."""

    @property
    def files(self) -> FileStore:
        ...

    @property
    def sections(self) -> SectionStore:
        ...

    @property
    def chunks(self) -> ChunkStore:
        ...


class ExplicitPersistence(Protocol):
    """Backends that keep state in memory and persist it on request."""

    async def load(self, path: Path) -> None:
        ...

    async def save(self, path: Path) -> None:
        ...
