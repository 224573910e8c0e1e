"""DuckDB provider implementation for SectionHound - durable file, section and chunk stores."""

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union
from uuid import UUID

import duckdb
from loguru import logger

from core.exceptions import DatabaseError
from core.models import KnowledgeFile, KnowledgeFileChunk, KnowledgeFileSection
from core.types import ChunkId, FileId, IndexingStatus, SectionId


class DuckDBProvider:
    """DuckDB implementation of the KnowledgeStore protocol.

    One connection is shared by the file, section and chunk stores (and by a
    DuckDBVectorStore built on this provider). Identifiers are stored as UUID
    strings.
    """

    def __init__(self, db_path: Union[Path, str]):
        """Initialize DuckDB provider.

        Args:
            db_path: Path to DuckDB database file or ":memory:" for in-memory database
        """
        self._db_path = db_path
        self.connection: Optional[Any] = None

        self._files = DuckDBFileStore(self)
        self._sections = DuckDBSectionStore(self)
        self._chunks = DuckDBChunkStore(self)

    @property
    def db_path(self) -> Union[Path, str]:
        """Database connection path or identifier."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if database connection is active."""
        return self.connection is not None

    @property
    def files(self) -> "DuckDBFileStore":
        return self._files

    @property
    def sections(self) -> "DuckDBSectionStore":
        return self._sections

    @property
    def chunks(self) -> "DuckDBChunkStore":
        return self._chunks

    def connect(self) -> None:
        """Establish database connection and initialize schema."""
        if self.connection is not None:
            return

        logger.info(f"Connecting to DuckDB database: {self.db_path}")

        if str(self.db_path) != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.connection = duckdb.connect(str(self.db_path))
        except duckdb.Error as e:
            logger.error(f"DuckDB connection failed: {e}")
            raise DatabaseError("connect", reason=str(e), context={"db_path": str(self.db_path)}, cause=e)

        self.create_schema()
        self.create_indexes()
        logger.info("DuckDB provider initialization complete")

    def disconnect(self) -> None:
        """Close database connection and cleanup resources."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            logger.info("DuckDB connection closed")

    def create_schema(self) -> None:
        """Create tables for files, sections and chunks."""
        logger.debug("Creating DuckDB schema")

        self.execute("create_schema", "files", """
            CREATE TABLE IF NOT EXISTS files (
                id VARCHAR PRIMARY KEY,
                name VARCHAR NOT NULL,
                content_hash BLOB,
                processed_at DOUBLE,
                status VARCHAR NOT NULL
            )
        """)

        self.execute("create_schema", "sections", """
            CREATE TABLE IF NOT EXISTS sections (
                id VARCHAR PRIMARY KEY,
                file_id VARCHAR NOT NULL,
                section_index INTEGER NOT NULL,
                summary VARCHAR,
                additional_context VARCHAR
            )
        """)

        self.execute("create_schema", "chunks", """
            CREATE TABLE IF NOT EXISTS chunks (
                id VARCHAR PRIMARY KEY,
                section_id VARCHAR NOT NULL,
                chunk_index INTEGER NOT NULL,
                content VARCHAR NOT NULL,
                embedding FLOAT[]
            )
        """)

    def create_indexes(self) -> None:
        """Create lookup indexes used by the by-file and by-section queries."""
        self.execute("create_indexes", "sections",
                     "CREATE INDEX IF NOT EXISTS idx_sections_file_id ON sections(file_id)")
        self.execute("create_indexes", "chunks",
                     "CREATE INDEX IF NOT EXISTS idx_chunks_section_id ON chunks(section_id)")

    def execute(self, operation: str, table: str, query: str, params: Optional[List[Any]] = None):
        """Run a statement, translating driver errors into DatabaseError.

        Raises:
            DatabaseError: If not connected or the statement fails
        """
        if self.connection is None:
            raise DatabaseError(operation, table, "No database connection")
        try:
            return self.connection.execute(query, params or [])
        except duckdb.Error as e:
            logger.error(f"DuckDB {operation} on {table} failed: {e}")
            raise DatabaseError(operation, table, str(e), cause=e)

    def get_stats(self) -> dict[str, int]:
        """Get row counts for each table."""
        stats = {}
        for table in ("files", "sections", "chunks"):
            row = self.execute("stats", table, f"SELECT COUNT(*) FROM {table}").fetchone()
            stats[table] = row[0] if row else 0
        return stats

    def health_check(self) -> dict[str, Any]:
        """Perform health check and return status information."""
        status = {
            "provider": "duckdb",
            "connected": self.is_connected,
            "db_path": str(self.db_path),
            "errors": []
        }
        if not self.is_connected:
            status["errors"].append("Not connected")
            return status
        try:
            status.update(self.get_stats())
        except DatabaseError as e:
            status["errors"].append(str(e))
        return status

    def __enter__(self) -> "DuckDBProvider":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()


def _to_epoch(value: Optional[datetime]) -> Optional[float]:
    return value.timestamp() if value is not None else None


def _from_epoch(value: Optional[float]) -> Optional[datetime]:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value is not None else None


class DuckDBFileStore:
    """KnowledgeFile rows in the ``files`` table."""

    def __init__(self, provider: DuckDBProvider):
        self._provider = provider

    async def add(self, file: KnowledgeFile) -> FileId:
        self._provider.execute("insert", "files", """
            INSERT INTO files (id, name, content_hash, processed_at, status)
            VALUES (?, ?, ?, ?, ?)
        """, [str(file.id), file.name, bytes(file.content_hash),
              _to_epoch(file.processed_at), file.status.value])
        return file.id

    async def get(self, file_id: FileId) -> Optional[KnowledgeFile]:
        row = self._provider.execute("query", "files", """
            SELECT id, name, content_hash, processed_at, status FROM files WHERE id = ?
        """, [str(file_id)]).fetchone()
        return self._row_to_file(row) if row else None

    async def exists(self, file_id: FileId) -> bool:
        row = self._provider.execute("query", "files",
                                     "SELECT 1 FROM files WHERE id = ?", [str(file_id)]).fetchone()
        return row is not None

    async def get_all(self) -> List[KnowledgeFile]:
        rows = self._provider.execute("query", "files", """
            SELECT id, name, content_hash, processed_at, status FROM files ORDER BY name, id
        """).fetchall()
        return [self._row_to_file(row) for row in rows]

    async def update(self, file: KnowledgeFile) -> None:
        if not await self.exists(file.id):
            raise DatabaseError("update", "files", f"File {file.id} does not exist")
        self._provider.execute("update", "files", """
            UPDATE files SET name = ?, content_hash = ?, processed_at = ?, status = ?
            WHERE id = ?
        """, [file.name, bytes(file.content_hash), _to_epoch(file.processed_at),
              file.status.value, str(file.id)])

    async def delete(self, file_id: FileId) -> bool:
        existed = await self.exists(file_id)
        if existed:
            self._provider.execute("delete", "files", "DELETE FROM files WHERE id = ?", [str(file_id)])
        return existed

    @staticmethod
    def _row_to_file(row) -> KnowledgeFile:
        return KnowledgeFile.from_dict({
            "id": row[0],
            "name": row[1],
            "content_hash": bytes(row[2]) if row[2] is not None else b"",
            "processed_at": _from_epoch(row[3]),
            "status": IndexingStatus.from_string(row[4]),
        })


class DuckDBChunkStore:
    """KnowledgeFileChunk rows in the ``chunks`` table."""

    _COLUMNS = "id, section_id, chunk_index, content, embedding"

    def __init__(self, provider: DuckDBProvider):
        self._provider = provider

    async def add(self, chunks: Iterable[KnowledgeFileChunk]) -> None:
        rows = [
            [str(c.id), str(c.section_id), c.chunk_index, c.content,
             list(c.embedding) if c.embedding is not None else None]
            for c in chunks
        ]
        if not rows:
            return
        if self._provider.connection is None:
            raise DatabaseError("insert", "chunks", "No database connection")
        try:
            self._provider.connection.executemany(
                f"INSERT INTO chunks ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?)", rows
            )
        except duckdb.Error as e:
            raise DatabaseError("insert", "chunks", str(e), cause=e)

    async def get(self, chunk_id: ChunkId) -> Optional[KnowledgeFileChunk]:
        row = self._provider.execute("query", "chunks",
                                     f"SELECT {self._COLUMNS} FROM chunks WHERE id = ?",
                                     [str(chunk_id)]).fetchone()
        return self._row_to_chunk(row) if row else None

    async def get_many(self, chunk_ids: Iterable[ChunkId]) -> List[KnowledgeFileChunk]:
        ids = [str(chunk_id) for chunk_id in chunk_ids]
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        rows = self._provider.execute("query", "chunks",
                                      f"SELECT {self._COLUMNS} FROM chunks WHERE id IN ({placeholders})",
                                      ids).fetchall()
        return [self._row_to_chunk(row) for row in rows]

    async def get_by_index(self, section_id: SectionId, chunk_index: int) -> Optional[KnowledgeFileChunk]:
        row = self._provider.execute("query", "chunks", f"""
            SELECT {self._COLUMNS} FROM chunks WHERE section_id = ? AND chunk_index = ?
        """, [str(section_id), chunk_index]).fetchone()
        return self._row_to_chunk(row) if row else None

    async def get_by_section(self, section_id: SectionId) -> List[KnowledgeFileChunk]:
        rows = self._provider.execute("query", "chunks", f"""
            SELECT {self._COLUMNS} FROM chunks WHERE section_id = ? ORDER BY chunk_index
        """, [str(section_id)]).fetchall()
        return [self._row_to_chunk(row) for row in rows]

    async def delete_by_file(self, file_id: FileId) -> List[ChunkId]:
        rows = self._provider.execute("query", "chunks", """
            SELECT c.id FROM chunks c JOIN sections s ON c.section_id = s.id
            WHERE s.file_id = ?
        """, [str(file_id)]).fetchall()
        self._provider.execute("delete", "chunks", """
            DELETE FROM chunks WHERE section_id IN (SELECT id FROM sections WHERE file_id = ?)
        """, [str(file_id)])
        deleted = [ChunkId(UUID(row[0])) for row in rows]
        logger.debug(f"Deleted {len(deleted)} chunks of file {file_id}")
        return deleted

    @staticmethod
    def _row_to_chunk(row) -> KnowledgeFileChunk:
        return KnowledgeFileChunk.from_dict({
            "id": row[0],
            "section_id": row[1],
            "chunk_index": row[2],
            "content": row[3],
            "embedding": row[4],
        })


class DuckDBSectionStore:
    """KnowledgeFileSection rows in the ``sections`` table, hydrated with their chunks."""

    _COLUMNS = "id, file_id, section_index, summary, additional_context"

    def __init__(self, provider: DuckDBProvider):
        self._provider = provider

    async def add(self, section: KnowledgeFileSection) -> None:
        self._provider.execute("insert", "sections", f"""
            INSERT INTO sections ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?)
        """, [str(section.id), str(section.file_id), section.section_index,
              section.summary, section.additional_context])

    async def get(self, section_id: SectionId) -> Optional[KnowledgeFileSection]:
        row = self._provider.execute("query", "sections",
                                     f"SELECT {self._COLUMNS} FROM sections WHERE id = ?",
                                     [str(section_id)]).fetchone()
        return await self._hydrate(row) if row else None

    async def get_by_index(self, file_id: FileId, section_index: int) -> Optional[KnowledgeFileSection]:
        row = self._provider.execute("query", "sections", f"""
            SELECT {self._COLUMNS} FROM sections WHERE file_id = ? AND section_index = ?
        """, [str(file_id), section_index]).fetchone()
        return await self._hydrate(row) if row else None

    async def count_by_file(self, file_id: FileId) -> int:
        row = self._provider.execute("query", "sections",
                                     "SELECT COUNT(*) FROM sections WHERE file_id = ?",
                                     [str(file_id)]).fetchone()
        return row[0] if row else 0

    async def delete_by_file(self, file_id: FileId) -> int:
        count = await self.count_by_file(file_id)
        self._provider.execute("delete", "sections",
                               "DELETE FROM sections WHERE file_id = ?", [str(file_id)])
        return count

    async def _hydrate(self, row) -> KnowledgeFileSection:
        chunks = await self._provider.chunks.get_by_section(SectionId(UUID(row[0])))
        return KnowledgeFileSection.from_dict({
            "id": row[0],
            "file_id": row[1],
            "section_index": row[2],
            "summary": row[3],
            "additional_context": row[4],
        }, chunks)

