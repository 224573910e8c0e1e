"""In-memory provider implementation for SectionHound - dict-backed stores for tests and scripts."""

from collections.abc import Iterable
from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import DatabaseError
from core.models import KnowledgeFile, KnowledgeFileChunk, KnowledgeFileSection
from core.types import ChunkId, FileId, SectionId


class InMemoryProvider:
    """In-memory implementation of the KnowledgeStore protocol.

    Sections are kept as rows without chunks, like the durable backend, so a
    read always rebuilds the chunk tuple from the chunk store.
    """

    def __init__(self):
        self._files = InMemoryFileStore()
        self._sections = InMemorySectionStore(self)
        self._chunks = InMemoryChunkStore(self)

    @property
    def files(self) -> "InMemoryFileStore":
        return self._files

    @property
    def sections(self) -> "InMemorySectionStore":
        return self._sections

    @property
    def chunks(self) -> "InMemoryChunkStore":
        return self._chunks

    @property
    def is_connected(self) -> bool:
        return True

    def connect(self) -> None:
        logger.debug("Using in-memory knowledge store")

    def disconnect(self) -> None:
        pass

    def get_stats(self) -> dict[str, int]:
        return {
            "files": len(self._files.rows),
            "sections": len(self._sections.rows),
            "chunks": len(self._chunks.rows),
        }


class InMemoryFileStore:
    def __init__(self):
        self.rows: Dict[FileId, KnowledgeFile] = {}

    async def add(self, file: KnowledgeFile) -> FileId:
        if file.id in self.rows:
            raise DatabaseError("insert", "files", f"File {file.id} already exists")
        self.rows[file.id] = file
        return file.id

    async def get(self, file_id: FileId) -> Optional[KnowledgeFile]:
        return self.rows.get(file_id)

    async def exists(self, file_id: FileId) -> bool:
        return file_id in self.rows

    async def get_all(self) -> List[KnowledgeFile]:
        return sorted(self.rows.values(), key=lambda f: (f.name, str(f.id)))

    async def update(self, file: KnowledgeFile) -> None:
        if file.id not in self.rows:
            raise DatabaseError("update", "files", f"File {file.id} does not exist")
        self.rows[file.id] = file

    async def delete(self, file_id: FileId) -> bool:
        return self.rows.pop(file_id, None) is not None


class InMemoryChunkStore:
    def __init__(self, provider: InMemoryProvider):
        self._provider = provider
        self.rows: Dict[ChunkId, KnowledgeFileChunk] = {}

    async def add(self, chunks: Iterable[KnowledgeFileChunk]) -> None:
        for chunk in chunks:
            if chunk.id in self.rows:
                raise DatabaseError("insert", "chunks", f"Chunk {chunk.id} already exists")
            self.rows[chunk.id] = chunk

    async def get(self, chunk_id: ChunkId) -> Optional[KnowledgeFileChunk]:
        return self.rows.get(chunk_id)

    async def get_many(self, chunk_ids: Iterable[ChunkId]) -> List[KnowledgeFileChunk]:
        return [self.rows[chunk_id] for chunk_id in chunk_ids if chunk_id in self.rows]

    async def get_by_index(self, section_id: SectionId, chunk_index: int) -> Optional[KnowledgeFileChunk]:
        for chunk in self.rows.values():
            if chunk.section_id == section_id and chunk.chunk_index == chunk_index:
                return chunk
        return None

    async def get_by_section(self, section_id: SectionId) -> List[KnowledgeFileChunk]:
        chunks = [c for c in self.rows.values() if c.section_id == section_id]
        return sorted(chunks, key=lambda c: c.chunk_index)

    async def delete_by_file(self, file_id: FileId) -> List[ChunkId]:
        section_ids = self._provider.sections.section_ids_of(file_id)
        deleted = [chunk_id for chunk_id, chunk in self.rows.items() if chunk.section_id in section_ids]
        for chunk_id in deleted:
            del self.rows[chunk_id]
        return deleted


class InMemorySectionStore:
    def __init__(self, provider: InMemoryProvider):
        self._provider = provider
        self.rows: Dict[SectionId, Dict[str, Any]] = {}

    async def add(self, section: KnowledgeFileSection) -> None:
        if section.id in self.rows:
            raise DatabaseError("insert", "sections", f"Section {section.id} already exists")
        self.rows[section.id] = section.to_dict()

    async def get(self, section_id: SectionId) -> Optional[KnowledgeFileSection]:
        row = self.rows.get(section_id)
        return await self._hydrate(section_id, row) if row else None

    async def get_by_index(self, file_id: FileId, section_index: int) -> Optional[KnowledgeFileSection]:
        for section_id, row in self.rows.items():
            if row["file_id"] == str(file_id) and row["section_index"] == section_index:
                return await self._hydrate(section_id, row)
        return None

    async def delete_by_file(self, file_id: FileId) -> int:
        section_ids = self.section_ids_of(file_id)
        for section_id in section_ids:
            del self.rows[section_id]
        return len(section_ids)

    def section_ids_of(self, file_id: FileId) -> set:
        return {sid for sid, row in self.rows.items() if row["file_id"] == str(file_id)}

    async def _hydrate(self, section_id: SectionId, row: Dict[str, Any]) -> KnowledgeFileSection:
        chunks = await self._provider.chunks.get_by_section(section_id)
        return KnowledgeFileSection.from_dict(row, chunks)
