"""File source providers package for SectionHound - where indexed documents come from."""

from .file_source import (
    DirectoryFileSourceProvider,
    InMemoryFileSource,
    LocalFileSource,
    file_id_for_path,
)

__all__ = [
    "DirectoryFileSourceProvider",
    "InMemoryFileSource",
    "LocalFileSource",
    "file_id_for_path",
]
