"""Service layer for SectionHound - indexing and search coordination."""

from .base_service import BaseService
from .indexing_coordinator import IndexingCoordinator
from .search_service import SearchService

__all__ = [
    'BaseService',
    'IndexingCoordinator',
    'SearchService',
]
