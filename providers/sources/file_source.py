"""File sources for SectionHound - local files, in-memory documents and directory discovery."""

import io
from fnmatch import fnmatch
from pathlib import Path
from typing import BinaryIO, List, Optional, Union
from uuid import NAMESPACE_URL, UUID, uuid5

from loguru import logger

from core.exceptions import ValidationError

DEFAULT_INCLUDE_PATTERNS = ["*.md", "*.markdown", "*.txt"]
DEFAULT_EXCLUDE_PATTERNS = ["*/.git/*", "*/node_modules/*", "*/__pycache__/*", "*/venv/*", "*/.venv/*"]


def file_id_for_path(relative_path: Union[Path, str]) -> UUID:
    """Stable file id for a path relative to the indexed root."""
    return uuid5(NAMESPACE_URL, f"sectionhound:{Path(relative_path).as_posix()}")


class LocalFileSource:
    """A file on disk, identified by its path relative to a root directory."""

    def __init__(self, path: Path, root: Optional[Path] = None, file_id: Optional[UUID] = None):
        self._path = Path(path)
        relative = self._path.relative_to(root) if root else Path(self._path.name)
        self._name = relative.as_posix()
        self._file_id = file_id or file_id_for_path(relative)

    @property
    def file_id(self) -> UUID:
        return self._file_id

    @property
    def file_name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def open_read_stream(self) -> BinaryIO:
        return self._path.open("rb")

    def __repr__(self) -> str:
        return f"LocalFileSource(file_id={self._file_id}, path={self._path})"


class InMemoryFileSource:
    """A document held in memory; text content is encoded as UTF-8."""

    def __init__(self, file_id: UUID, file_name: str, content: Union[str, bytes]):
        self._file_id = file_id
        self._name = file_name
        self._content = content.encode("utf-8") if isinstance(content, str) else bytes(content)

    @property
    def file_id(self) -> UUID:
        return self._file_id

    @property
    def file_name(self) -> str:
        return self._name

    @property
    def content(self) -> bytes:
        return self._content

    def open_read_stream(self) -> BinaryIO:
        return io.BytesIO(self._content)

    def with_content(self, content: Union[str, bytes]) -> "InMemoryFileSource":
        """Same identity, new content."""
        return InMemoryFileSource(self._file_id, self._name, content)


class DirectoryFileSourceProvider:
    """Discovers indexable files under a directory by glob patterns."""

    def __init__(
        self,
        root: Union[Path, str],
        include_patterns: Optional[List[str]] = None,
        exclude_patterns: Optional[List[str]] = None,
    ):
        self._root = Path(root)
        if not self._root.is_dir():
            raise ValidationError("root", str(root), "Directory does not exist")
        self._include = include_patterns or list(DEFAULT_INCLUDE_PATTERNS)
        self._exclude = exclude_patterns if exclude_patterns is not None else list(DEFAULT_EXCLUDE_PATTERNS)

    @property
    def root(self) -> Path:
        return self._root

    def get_all_files(self) -> List[LocalFileSource]:
        """Return sources for every matching file, sorted by path."""
        sources = [LocalFileSource(path, root=self._root) for path in self._discover_files()]
        logger.debug(f"Discovered {len(sources)} files under {self._root}")
        return sources

    def _discover_files(self) -> List[Path]:
        files = set()
        for pattern in self._include:
            for file_path in self._root.rglob(pattern):
                if file_path.is_file() and not self._is_excluded(file_path):
                    files.add(file_path)
        return sorted(files)

    def _is_excluded(self, file_path: Path) -> bool:
        # Match both relative and absolute paths
        rel_path = file_path.relative_to(self._root)
        return any(
            fnmatch(str(rel_path), pattern) or fnmatch(str(file_path), pattern)
            for pattern in self._exclude
        )
