"""SectionHound File Domain Model - Represents an indexed document.

This module contains the KnowledgeFile domain model. A KnowledgeFile is created
the first time a file id is seen, is only ever changed by the indexing
pipeline, and carries the SHA-256 fingerprint used for change detection.
"""

import hashlib
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import UUID

from ..types import ContentHash, FileId, IndexingStatus
from ..exceptions import ValidationError, ModelError

HASH_SIZE = hashlib.sha256().digest_size


@dataclass(frozen=True)
class KnowledgeFile:
    """Domain model representing an indexed document.

    Attributes:
        id: Stable file identifier supplied by the file source
        name: Human-readable file name
        content_hash: SHA-256 digest of the content at the last successful index,
            empty until the file has been indexed once
        processed_at: When the file was last processed
        status: Current indexing status
    """

    id: FileId
    name: str
    content_hash: ContentHash = b""
    processed_at: Optional[datetime] = None
    status: IndexingStatus = IndexingStatus.PENDING

    def __post_init__(self):
        """Validate file model after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate file model attributes."""
        if not isinstance(self.id, UUID):
            raise ValidationError("id", self.id, "File id must be a UUID")

        if not self.name or not self.name.strip():
            raise ValidationError("name", self.name, "Name cannot be empty")

        if not isinstance(self.content_hash, (bytes, bytearray)):
            raise ValidationError("content_hash", self.content_hash, "Hash must be bytes")

        if len(self.content_hash) not in (0, HASH_SIZE):
            raise ValidationError(
                "content_hash",
                self.content_hash.hex(),
                f"Hash must be empty or {HASH_SIZE} bytes"
            )

        if not isinstance(self.status, IndexingStatus):
            raise ValidationError("status", self.status, "Status must be an IndexingStatus")

    @classmethod
    def create_pending(cls, file_id: FileId, name: str) -> "KnowledgeFile":
        """Create the record for a file seen for the first time."""
        return cls(
            id=file_id,
            name=name,
            content_hash=b"",
            processed_at=datetime.now(timezone.utc),
            status=IndexingStatus.PENDING,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeFile":
        """Create a KnowledgeFile model from a dictionary.

        Args:
            data: Dictionary containing file data

        Returns:
            KnowledgeFile model created from dictionary data

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        try:
            file_id = data.get("id")
            if file_id is None:
                raise ValidationError("id", file_id, "File id is required")
            if not isinstance(file_id, UUID):
                file_id = UUID(str(file_id))

            content_hash = data.get("content_hash") or b""
            if isinstance(content_hash, str):
                content_hash = bytes.fromhex(content_hash)

            processed_at = data.get("processed_at")
            if isinstance(processed_at, str):
                processed_at = datetime.fromisoformat(processed_at)
            elif isinstance(processed_at, (int, float)):
                processed_at = datetime.fromtimestamp(processed_at, tz=timezone.utc)

            status = data.get("status", IndexingStatus.PENDING)
            if isinstance(status, str):
                status = IndexingStatus.from_string(status)

            return cls(
                id=FileId(file_id),
                name=data.get("name", ""),
                content_hash=bytes(content_hash),
                processed_at=processed_at,
                status=status,
            )

        except (ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert KnowledgeFile model to a JSON-friendly dictionary."""
        return {
            "id": str(self.id),
            "name": self.name,
            "content_hash": self.content_hash.hex(),
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "status": self.status.value,
        }

    @property
    def is_indexed(self) -> bool:
        return self.status is IndexingStatus.INDEXED

    def has_hash(self, content_hash: ContentHash) -> bool:
        """Check whether the stored fingerprint equals ``content_hash``.

        An empty stored hash never matches, so a file whose last run did not
        finish is always re-processed.
        """
        return bool(self.content_hash) and self.content_hash == content_hash

    def mark_indexed(
        self, content_hash: ContentHash, processed_at: Optional[datetime] = None
    ) -> "KnowledgeFile":
        """Return a copy recording a successful index of ``content_hash``.

        Raises:
            ModelError: If the hash is empty
        """
        if not content_hash:
            raise ModelError("KnowledgeFile", "mark_indexed", "Content hash cannot be empty")
        return replace(
            self,
            content_hash=bytes(content_hash),
            processed_at=processed_at or datetime.now(timezone.utc),
            status=IndexingStatus.INDEXED,
        )

    def mark_pending(self) -> "KnowledgeFile":
        """Return a copy being re-indexed; the stale hash is kept."""
        return replace(self, status=IndexingStatus.PENDING)

    def mark_error(self) -> "KnowledgeFile":
        return replace(self, status=IndexingStatus.ERROR, processed_at=datetime.now(timezone.utc))

    def mark_unsupported(self, content_hash: Optional[ContentHash] = None) -> "KnowledgeFile":
        """Return a copy for content that is not text, fingerprinted when a hash is given."""
        return replace(
            self,
            content_hash=bytes(content_hash) if content_hash else self.content_hash,
            status=IndexingStatus.UNSUPPORTED_CONTENT_TYPE,
            processed_at=datetime.now(timezone.utc),
        )

    @property
    def is_settled(self) -> bool:
        """Whether the stored hash describes a finished run (indexed or unsupported)."""
        return self.status in (IndexingStatus.INDEXED, IndexingStatus.UNSUPPORTED_CONTENT_TYPE)

    def with_name(self, name: str) -> "KnowledgeFile":
        return replace(self, name=name)

    def __str__(self) -> str:
        return f"KnowledgeFile(id={self.id}, name={self.name}, status={self.status.value})"

    def __repr__(self) -> str:
        hash_display = self.content_hash.hex()[:12] if self.content_hash else "<empty>"
        return (
            f"KnowledgeFile(id={self.id}, name='{self.name}', "
            f"hash={hash_display}, processed_at={self.processed_at}, "
            f"status={self.status.value})"
        )
