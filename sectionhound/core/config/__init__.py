"""
Configuration management package for SectionHound.

This package provides a unified configuration system that supports:
- Multiple configuration sources (environment variables, config files, runtime overrides)
- Type-safe configuration validation using Pydantic
- Secure handling of the embedding API key
"""

from .chunking_config import MARKDOWN_STOP_SIGNALS, ChunkingConfig, SectioningConfig
from .embedding_config import EmbeddingConfig
from .unified_config import (
    DatabaseConfig,
    IndexingConfig,
    SearchConfig,
    SectionHoundConfig,
    get_config,
    reset_config,
    set_config,
)

__all__ = [
    "MARKDOWN_STOP_SIGNALS",
    "ChunkingConfig",
    "SectioningConfig",
    "EmbeddingConfig",
    "DatabaseConfig",
    "IndexingConfig",
    "SearchConfig",
    "SectionHoundConfig",
    "get_config",
    "set_config",
    "reset_config",
]
