"""Database providers package for SectionHound - concrete knowledge store implementations."""

from .duckdb_provider import DuckDBProvider
from .memory_provider import InMemoryProvider

__all__ = [
    "DuckDBProvider",
    "InMemoryProvider",
]
