"""
Embedding configuration for SectionHound.

This module provides a validated configuration model for the embedding
provider and the tokenizer that goes with it. Values can come from runtime
parameters, environment variables or config files.
"""

from typing import Literal, Optional, Dict, Any
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingConfig(BaseSettings):
    """
    Configuration for the embedding provider.

    Configuration Sources (in order of precedence):
    1. Runtime parameters (highest priority)
    2. Environment variables (SECTIONHOUND_EMBEDDING_*)
    3. Configuration files (.sectionhound.json)
    4. Default values (lowest priority)

    Environment Variable Examples:
        SECTIONHOUND_EMBEDDING_PROVIDER=openai
        SECTIONHOUND_EMBEDDING_API_KEY=sk-...
        SECTIONHOUND_EMBEDDING_MODEL=text-embedding-3-small
        SECTIONHOUND_EMBEDDING_BASE_URL=https://api.openai.com/v1
    """

    model_config = SettingsConfigDict(
        env_prefix='SECTIONHOUND_EMBEDDING_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
    )

    provider: Literal['openai', 'openai-compatible'] = Field(
        default='openai',
        description="Embedding provider to use"
    )

    model: Optional[str] = Field(
        default=None,
        description="Embedding model name (uses provider default if not specified)"
    )

    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for authentication"
    )

    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the embedding API"
    )

    batch_size: int = Field(
        default=100,
        ge=1,
        le=2048,
        description="Batch size for embedding generation"
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts"
    )

    dimensions: Optional[int] = Field(
        default=None,
        ge=1,
        le=8192,
        description="Embedding dimensions (for openai-compatible provider)"
    )

    tokenizer_encoding: Optional[str] = Field(
        default=None,
        description="tiktoken encoding name (derived from the model if not specified)"
    )

    @field_validator('base_url')
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate and normalize base URL."""
        if v is None:
            return v

        v = v.rstrip('/')

        if not (v.startswith('http://') or v.startswith('https://')):
            raise ValueError('base_url must start with http:// or https://')

        return v

    def get_provider_config(self) -> Dict[str, Any]:
        """
        Get keyword arguments for constructing the selected provider.

        Returns:
            Dictionary of provider constructor parameters
        """
        config: Dict[str, Any] = {
            'model': self.get_default_model(),
            'batch_size': self.batch_size,
            'timeout': self.timeout,
            'retry_attempts': max(self.max_retries, 1),
        }

        if self.api_key:
            config['api_key'] = self.api_key.get_secret_value()

        if self.base_url:
            config['base_url'] = self.base_url

        if self.provider == 'openai-compatible' and self.dimensions:
            config['dims'] = self.dimensions

        return config

    def get_default_model(self) -> str:
        """Get the model name with provider defaults."""
        defaults = {
            'openai': 'text-embedding-3-small',
            'openai-compatible': 'text-embedding-ada-002',
        }
        return self.model or defaults.get(self.provider, 'text-embedding-3-small')

    def is_provider_configured(self) -> bool:
        """Check if the provider has all required configuration."""
        if self.provider == 'openai':
            return self.api_key is not None
        return self.base_url is not None

    def get_missing_config(self) -> list[str]:
        """
        Get list of missing required configuration parameters.

        Returns:
            List of missing configuration parameter names
        """
        missing = []

        if self.provider == 'openai' and not self.api_key:
            missing.append('api_key (SECTIONHOUND_EMBEDDING_API_KEY)')

        elif self.provider == 'openai-compatible' and not self.base_url:
            missing.append('base_url (SECTIONHOUND_EMBEDDING_BASE_URL)')

        return missing

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.api_key else None
        return (
            f"EmbeddingConfig("
            f"provider={self.provider}, "
            f"model={self.get_default_model()}, "
            f"api_key={api_key_display}, "
            f"base_url={self.base_url}, "
            f"batch_size={self.batch_size})"
        )
