"""FileSource protocols for SectionHound - where indexed content comes from."""

from typing import BinaryIO, Protocol
from uuid import UUID


class FileSource(Protocol):
    """A readable document with a stable identity.

    ``open_read_stream`` must return a fresh stream positioned at the start on
    every call; the indexing pipeline reads the content twice (hash, then chunk).
    """

    @property
    def file_id(self) -> UUID:
        ...

    @property
    def file_name(self) -> str:
        ...

    def open_read_stream(self) -> BinaryIO:
        """Open a new binary stream over the full content."""
        ...


class FileSourceProvider(Protocol):
    """Enumerates file sources, e.g. the files of a directory."""

    def get_all_files(self) -> list[FileSource]:
        ...
