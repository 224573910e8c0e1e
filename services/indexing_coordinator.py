"""Indexing coordinator service for SectionHound - orchestrates incremental file indexing."""

import hashlib
from typing import Any, BinaryIO, Dict, Optional, Tuple
from uuid import UUID

from loguru import logger

from core.exceptions import IndexingInvariantError, MissingEmbeddingError, ValidationError
from core.models import KnowledgeFile, KnowledgeFileSection
from core.types import ChunkId, ContentHash, FileId, IndexingStatus
from interfaces.embedding_provider import EmbeddingProvider
from interfaces.file_source import FileSource, FileSourceProvider
from interfaces.knowledge_store import KnowledgeStore
from interfaces.tokenizer import Tokenizer
from interfaces.vector_store import KnowledgeVectorStore
from sectionhound.chunking import create_section_reader
from sectionhound.core.config import ChunkingConfig, SectioningConfig
from .base_service import BaseService

HASH_BLOCK_SIZE = 64 * 1024


class IndexingCoordinator(BaseService):
    """Keeps the knowledge and vector stores in sync with file sources.

    ``consume`` is idempotent per content: a file whose SHA-256 matches the
    stored fingerprint is skipped without reading it a second time. Changed
    content replaces every section, chunk and vector previously derived from
    the file. The same file id must not be consumed concurrently.
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        vector_store: KnowledgeVectorStore,
        embedding_provider: EmbeddingProvider,
        tokenizer: Tokenizer,
        chunking_config: Optional[ChunkingConfig] = None,
        sectioning_config: Optional[SectioningConfig] = None,
    ):
        """Initialize indexing coordinator.

        Args:
            knowledge_store: Store for files, sections and chunks
            vector_store: Store for chunk embeddings, keyed by chunk id
            embedding_provider: Provider used to embed every chunk
            tokenizer: Tokenizer used for chunk and section budgets
            chunking_config: Chunk budget and stop signals
            sectioning_config: Section budget and split policy
        """
        super().__init__(knowledge_store, vector_store)
        self._embedding_provider = embedding_provider
        self._tokenizer = tokenizer
        self._chunking_config = chunking_config or ChunkingConfig()
        self._sectioning_config = sectioning_config or SectioningConfig()

    async def consume(self, file_source: FileSource) -> bool:
        """Index a file source if its content changed since the last run.

        Args:
            file_source: Source to index

        Returns:
            True if the file was (re)indexed, False if it was unchanged or
            its content is not text

        Raises:
            ValidationError: If the source or its id is missing
            EmbeddingError: If embedding a chunk fails
            IndexingInvariantError: If the file record vanished during indexing
            DatabaseError: If a store operation fails
        """
        file_id = self._validate_source(file_source)

        content_hash, is_binary = self._hash_content(file_source)
        logger.debug(f"Content hash for {file_source.file_name}: {content_hash.hex()}")

        files = self._store.files
        existing = await files.get(file_id)

        if existing is not None and existing.is_settled and existing.has_hash(content_hash):
            logger.debug(f"Skipping unchanged file: {file_source.file_name}")
            return False

        if existing is not None:
            await self._remove_file_content(file_id)
            await files.update(existing.with_name(file_source.file_name).mark_pending())
        else:
            await files.add(KnowledgeFile.create_pending(file_id, file_source.file_name))

        if is_binary:
            record = await self._require_file(file_id)
            await files.update(record.with_name(file_source.file_name).mark_unsupported(content_hash))
            logger.info(f"Unsupported content type, not indexed: {file_source.file_name}")
            return False

        section_count, chunk_count = await self._index_sections(file_id, file_source)

        record = await self._require_file(file_id)
        await files.update(record.with_name(file_source.file_name).mark_indexed(content_hash))

        logger.info(f"Indexed {file_source.file_name}: {section_count} sections, {chunk_count} chunks")
        return True

    async def consume_all(
        self,
        file_source_provider: FileSourceProvider,
        continue_on_error: bool = False,
    ) -> Dict[str, Any]:
        """Consume every source of a provider, one at a time.

        A failed file is recorded with ERROR status. The failure is re-raised
        unless ``continue_on_error`` is set.

        Returns:
            Dictionary with ``processed``, ``skipped`` and ``errors`` counts and
            the ``failed`` file names
        """
        sources = file_source_provider.get_all_files()
        stats: Dict[str, Any] = {"processed": 0, "skipped": 0, "errors": 0, "failed": []}

        for source in sources:
            try:
                if await self.consume(source):
                    stats["processed"] += 1
                else:
                    stats["skipped"] += 1
            except Exception as e:
                stats["errors"] += 1
                stats["failed"].append(source.file_name)
                logger.error(f"Failed to index {source.file_name}: {e}")
                await self._mark_error(source)
                if not continue_on_error:
                    raise

        logger.info(
            f"Indexing complete: {stats['processed']} processed, "
            f"{stats['skipped']} unchanged, {stats['errors']} errors"
        )
        return stats

    async def get_status(self, file_id: FileId) -> Optional[IndexingStatus]:
        """Get the indexing status of a file, or None if it was never seen."""
        record = await self._store.files.get(file_id)
        return record.status if record else None

    async def remove_file(self, file_id: FileId) -> bool:
        """Remove a file and everything derived from it.

        Returns:
            True if the file record existed
        """
        await self._remove_file_content(file_id)
        return await self._store.files.delete(file_id)

    def _validate_source(self, file_source: Optional[FileSource]) -> FileId:
        if file_source is None:
            raise ValidationError("file_source", None, "File source is required")
        file_id = getattr(file_source, "file_id", None)
        if file_id is None or not str(file_id).strip():
            raise ValidationError("file_id", file_id, "File source must have a file id")
        if not isinstance(file_id, UUID):
            try:
                file_id = UUID(str(file_id))
            except ValueError as e:
                raise ValidationError("file_id", file_id, "File id must be a UUID") from e
        return FileId(file_id)

    def _hash_content(self, file_source: FileSource) -> Tuple[ContentHash, bool]:
        """SHA-256 of the full content, and whether the first block looks binary."""
        digest = hashlib.sha256()
        is_binary = False
        with file_source.open_read_stream() as stream:
            first = True
            for block in _read_blocks(stream):
                if first:
                    is_binary = b"\x00" in block
                    first = False
                digest.update(block)
        return digest.digest(), is_binary

    async def _remove_file_content(self, file_id: FileId) -> None:
        """Tear down sections, chunks and vectors previously derived from a file."""
        chunk_ids = await self._store.chunks.delete_by_file(file_id)
        for chunk_id in chunk_ids:
            await self._vectors.remove(chunk_id)
        section_count = await self._store.sections.delete_by_file(file_id)
        logger.debug(f"Removed {section_count} sections and {len(chunk_ids)} chunks of file {file_id}")

    async def _index_sections(self, file_id: FileId, file_source: FileSource) -> Tuple[int, int]:
        section_count = 0
        chunk_count = 0

        with file_source.open_read_stream() as stream:
            reader = create_section_reader(
                stream,
                self._tokenizer,
                self._embedding_provider,
                chunking_config=self._chunking_config,
                sectioning_config=self._sectioning_config,
            )
            async for chunks in reader.read_sections():
                section = KnowledgeFileSection.create_from_chunks(chunks, file_id, section_count)
                for chunk in section.chunks:
                    if not chunk.has_embedding:
                        raise MissingEmbeddingError(chunk.id, context={"file_id": file_id})

                await self._store.sections.add(section)
                try:
                    await self._store.chunks.add(list(section.chunks))
                except Exception:
                    # A stored section must never be left without its chunks
                    await self._remove_file_content(file_id)
                    raise
                for chunk in section.chunks:
                    await self._vectors.add(ChunkId(chunk.id), chunk.embedding)

                section_count += 1
                chunk_count += len(section.chunks)
                logger.debug(f"Stored section {section.section_index} with {len(section.chunks)} chunks")

        return section_count, chunk_count

    async def _require_file(self, file_id: FileId) -> KnowledgeFile:
        record = await self._store.files.get(file_id)
        if record is None:
            raise IndexingInvariantError(file_id, "File record disappeared during indexing")
        return record

    async def _mark_error(self, file_source: FileSource) -> None:
        file_id = getattr(file_source, "file_id", None)
        if file_id is None:
            return
        record = await self._store.files.get(file_id)
        if record is not None:
            await self._store.files.update(record.mark_error())


def _read_blocks(stream: BinaryIO, block_size: int = HASH_BLOCK_SIZE):
    while True:
        block = stream.read(block_size)
        if not block:
            break
        yield block
