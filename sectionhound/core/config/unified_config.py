"""
Unified configuration system for SectionHound.

This module provides a single, type-safe configuration model covering the
chunking engine, sectioning policy, embedding provider, storage backend and
indexing run, with hierarchical loading from multiple sources.
"""

import json
import os
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .chunking_config import ChunkingConfig, SectioningConfig
from .embedding_config import EmbeddingConfig


class IndexingConfig(BaseModel):
    """Indexing run configuration."""

    include_patterns: list[str] = Field(
        default_factory=lambda: ['*.md', '*.markdown', '*.txt'],
        description="File patterns to include in indexing"
    )

    exclude_patterns: list[str] = Field(
        default_factory=lambda: ['*/.git/*', '*/node_modules/*', '*/__pycache__/*', '*/venv/*', '*/.venv/*'],
        description="File patterns to exclude from indexing"
    )

    continue_on_error: bool = Field(
        default=False,
        description="Keep indexing remaining files after a file fails"
    )


class DatabaseConfig(BaseModel):
    """Storage configuration."""

    provider: Literal['duckdb', 'memory'] = Field(
        default='duckdb',
        description="Store backend"
    )

    path: str = Field(
        default='.sectionhound.duckdb',
        description="Path to the DuckDB database file"
    )


class SearchConfig(BaseModel):
    """Query-time configuration."""

    max_results: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default number of nearest chunks returned by a search"
    )


class SectionHoundConfig(BaseSettings):
    """
    Unified configuration for SectionHound.

    Configuration Sources (in order of precedence):
    1. Runtime parameters (highest priority)
    2. Environment variables (SECTIONHOUND_*)
    3. Project config file (.sectionhound.json)
    4. User config file (~/.sectionhound/config.json)
    5. Default values (lowest priority)

    Environment Variable Examples:
        SECTIONHOUND_CHUNKING__MAX_TOKENS_PER_CHUNK=200
        SECTIONHOUND_SECTIONING__MAX_TOKENS_PER_SECTION=2000
        SECTIONHOUND_EMBEDDING__API_KEY=sk-...
        SECTIONHOUND_DATABASE__PATH=knowledge.duckdb
        SECTIONHOUND_DEBUG=true
    """

    model_config = SettingsConfigDict(
        env_prefix='SECTIONHOUND_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
        env_file=None,
    )

    chunking: ChunkingConfig = Field(
        default_factory=ChunkingConfig,
        description="Chunking configuration"
    )

    sectioning: SectioningConfig = Field(
        default_factory=SectioningConfig,
        description="Sectioning configuration"
    )

    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig,
        description="Embedding provider configuration"
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Database configuration"
    )

    indexing: IndexingConfig = Field(
        default_factory=IndexingConfig,
        description="Indexing configuration"
    )

    search: SearchConfig = Field(
        default_factory=SearchConfig,
        description="Search configuration"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    @classmethod
    def load_hierarchical(cls,
                          project_dir: Path | None = None,
                          **override_values: Any) -> 'SectionHoundConfig':
        """
        Load configuration from hierarchical sources.

        Args:
            project_dir: Project directory to search for .sectionhound.json
            **override_values: Runtime parameter overrides

        Returns:
            Loaded and validated configuration
        """
        config_data: dict[str, Any] = {}

        user_config_path = Path.home() / '.sectionhound' / 'config.json'
        config_data.update(_read_json_config(user_config_path))

        if project_dir is None:
            project_dir = Path.cwd()
        config_data.update(_read_json_config(project_dir / '.sectionhound.json'))

        config_data.update(override_values)

        if 'embedding' in config_data and isinstance(config_data['embedding'], dict):
            config_data['embedding'] = EmbeddingConfig(**config_data['embedding'])

        return cls(**config_data)

    @field_validator('embedding')
    def validate_embedding_config(cls, v: EmbeddingConfig) -> EmbeddingConfig:
        """Fall back to the standard OpenAI environment variables."""
        if not v.api_key and os.getenv('OPENAI_API_KEY'):
            config_dict = v.model_dump()
            config_dict['api_key'] = os.getenv('OPENAI_API_KEY')
            v = EmbeddingConfig(**config_dict)

        if not v.base_url and os.getenv('OPENAI_BASE_URL'):
            config_dict = v.model_dump()
            config_dict['base_url'] = os.getenv('OPENAI_BASE_URL')
            v = EmbeddingConfig(**config_dict)

        return v

    @model_validator(mode='after')
    def validate_token_budgets(self) -> 'SectionHoundConfig':
        """A section must be able to hold at least one full chunk."""
        if self.sectioning.max_tokens_per_section < self.chunking.max_tokens_per_chunk:
            raise ValueError(
                'sectioning.max_tokens_per_section must be >= chunking.max_tokens_per_chunk'
            )
        return self

    def get_missing_config(self) -> list[str]:
        """
        Get list of missing required configuration parameters.

        Returns:
            List of missing configuration parameter names
        """
        return [f'embedding.{item}' for item in self.embedding.get_missing_config()]

    def is_fully_configured(self) -> bool:
        return self.embedding.is_provider_configured()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert configuration to dictionary format.

        Returns:
            Configuration as dictionary
        """
        return self.model_dump(mode='json', exclude_none=True)

    def save_to_file(self, file_path: Path) -> None:
        """
        Save configuration to JSON file, leaving out the API key.

        Args:
            file_path: Path to save configuration file
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)
        config_dict = self.to_dict()

        if 'embedding' in config_dict and 'api_key' in config_dict['embedding']:
            del config_dict['embedding']['api_key']

        with open(file_path, 'w') as f:
            json.dump(config_dict, f, indent=2)

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.embedding.api_key else None
        return (
            f"SectionHoundConfig("
            f"chunking.max_tokens_per_chunk={self.chunking.max_tokens_per_chunk}, "
            f"sectioning.max_tokens_per_section={self.sectioning.max_tokens_per_section}, "
            f"embedding.model={self.embedding.get_default_model()}, "
            f"embedding.api_key={api_key_display}, "
            f"database.provider={self.database.provider}, "
            f"database.path={self.database.path})"
        )


def _read_json_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config {path}: {e}")
        return {}


# Global configuration instance
_config_instance: SectionHoundConfig | None = None


def get_config() -> SectionHoundConfig:
    """
    Get the global configuration instance.

    Returns:
        Global SectionHoundConfig instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SectionHoundConfig.load_hierarchical()
    return _config_instance


def set_config(config: SectionHoundConfig) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration instance to set as global
    """
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
