"""SectionHound - Incremental document indexing into topical sections with semantic search."""

__version__ = "0.1.0"
__description__ = "Incremental document indexing into topical sections with semantic search"

# Import modules only when needed to avoid loading backends during setup
__all__ = [
    "IndexingCoordinator",
    "SearchService",
    "SectionHoundConfig",
    "create_section_reader",
]


def __getattr__(name: str):
    """Lazy import to avoid dependency issues during setup."""
    if name == "IndexingCoordinator":
        from services.indexing_coordinator import IndexingCoordinator
        return IndexingCoordinator
    elif name == "SearchService":
        from services.search_service import SearchService
        return SearchService
    elif name == "SectionHoundConfig":
        from .core.config import SectionHoundConfig
        return SectionHoundConfig
    elif name == "create_section_reader":
        from .chunking import create_section_reader
        return create_section_reader
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
