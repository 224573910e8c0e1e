"""OpenAI embedding provider implementation for SectionHound - concrete embedding provider using OpenAI API."""

import asyncio
import os
from typing import List, Optional, Dict, Any

import openai
from loguru import logger

from core.exceptions import EmbeddingError, ValidationError
from interfaces.embedding_provider import EmbeddingConfig


class OpenAIEmbeddingProvider:
    """OpenAI embedding provider using text-embedding-3-small by default.

    Also serves OpenAI-compatible endpoints through ``base_url``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "text-embedding-3-small",
        batch_size: int = 100,
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        dims: Optional[int] = None,
    ):
        """Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            base_url: Base URL for OpenAI API (defaults to OPENAI_BASE_URL env var)
            model: Model name to use for embeddings
            batch_size: Maximum batch size for API requests
            timeout: Request timeout in seconds
            retry_attempts: Number of attempts for rate-limited or timed-out requests
            retry_delay: Base delay between retry attempts
            dims: Dimension override for models that support it or custom endpoints
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay = retry_delay
        self._dims_override = dims

        # Model-specific configuration
        self._model_config = {
            "text-embedding-3-small": {"dims": 1536, "distance": "cosine"},
            "text-embedding-3-large": {"dims": 3072, "distance": "cosine"},
            "text-embedding-ada-002": {"dims": 1536, "distance": "cosine"}
        }

        self._usage_stats = {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0
        }

        self._client: Optional[openai.AsyncOpenAI] = None
        self._initialize_client()

    def _initialize_client(self) -> None:
        """Initialize the OpenAI client."""
        if not self._api_key and not self._base_url:
            raise ValueError("OpenAI API key is required")

        client_kwargs: Dict[str, Any] = {
            # Custom endpoints often run without a key
            "api_key": self._api_key or "not-needed",
            "timeout": self._timeout,
        }
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        logger.debug(f"OpenAI client initialized with base_url={self._base_url}, timeout={self._timeout}")

    @property
    def name(self) -> str:
        """Provider name."""
        return "openai"

    @property
    def model(self) -> str:
        """Model name."""
        return self._model

    @property
    def dims(self) -> int:
        """Embedding dimensions."""
        if self._dims_override:
            return self._dims_override
        if self._model in self._model_config:
            return self._model_config[self._model]["dims"]
        return 1536

    @property
    def distance(self) -> str:
        """Distance metric."""
        return "cosine"

    @property
    def batch_size(self) -> int:
        """Maximum batch size for embedding requests."""
        return self._batch_size

    @property
    def config(self) -> EmbeddingConfig:
        """Provider configuration."""
        return EmbeddingConfig(
            provider=self.name,
            model=self.model,
            dims=self.dims,
            distance=self.distance,
            batch_size=self.batch_size,
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            retry_attempts=self._retry_attempts,
            retry_delay=self._retry_delay
        )

    async def shutdown(self) -> None:
        """Shutdown the embedding provider and cleanup resources."""
        if self._client:
            await self._client.close()
            self._client = None
        logger.info("OpenAI embedding provider shutdown")

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for a list of texts, batching as needed."""
        if not texts:
            return []

        validated_texts = self.validate_texts(texts)
        all_embeddings: List[List[float]] = []
        for i in range(0, len(validated_texts), self._batch_size):
            batch = validated_texts[i:i + self._batch_size]
            all_embeddings.extend(await self._embed_batch_internal(batch))
        return all_embeddings

    async def embed_single(self, text: str) -> List[float]:
        """Generate embedding for a single text."""
        embeddings = await self.embed([text])
        return embeddings[0] if embeddings else []

    async def _embed_batch_internal(self, texts: List[str]) -> List[List[float]]:
        """Embed one batch, retrying on rate limits and connection errors."""
        if not self._client:
            raise EmbeddingError(self.name, self._model, "embed", "OpenAI client not initialized")

        request_kwargs: Dict[str, Any] = {"model": self._model, "input": texts}
        if self._dims_override and self._model.startswith("text-embedding-3"):
            request_kwargs["dimensions"] = self._dims_override

        for attempt in range(self._retry_attempts):
            try:
                logger.debug(f"Generating embeddings for {len(texts)} texts (attempt {attempt + 1})")
                response = await self._client.embeddings.create(**request_kwargs)

                embeddings = [data.embedding for data in response.data]

                self._usage_stats["requests_made"] += 1
                self._usage_stats["embeddings_generated"] += len(embeddings)
                if getattr(response, "usage", None):
                    self._usage_stats["tokens_used"] += response.usage.total_tokens

                return embeddings

            except openai.RateLimitError as e:
                delay = self._retry_delay * (attempt + 1)
                if attempt < self._retry_attempts - 1:
                    logger.warning(f"Rate limit exceeded, retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue
                self._usage_stats["errors"] += 1
                raise EmbeddingError(self.name, self._model, "embed", f"Rate limit exceeded: {e}") from e

            except (openai.APITimeoutError, openai.APIConnectionError) as e:
                if attempt < self._retry_attempts - 1:
                    logger.warning(f"API connection error, retrying in {self._retry_delay} seconds: {e}")
                    await asyncio.sleep(self._retry_delay)
                    continue
                self._usage_stats["errors"] += 1
                raise EmbeddingError(self.name, self._model, "embed", f"API connection failed: {e}") from e

            except openai.OpenAIError as e:
                self._usage_stats["errors"] += 1
                logger.error(f"Failed to generate embeddings: {e}")
                raise EmbeddingError(self.name, self._model, "embed", str(e)) from e

        raise EmbeddingError(
            self.name, self._model, "embed",
            f"Failed to generate embeddings after {self._retry_attempts} attempts"
        )

    def validate_texts(self, texts: List[str]) -> List[str]:
        """Validate texts before embedding.

        Raises:
            ValidationError: If a text is not a string
        """
        validated = []
        for i, text in enumerate(texts):
            if not isinstance(text, str):
                raise ValidationError(f"texts[{i}]", text, f"Text at index {i} is not a string: {type(text)}")
            # The API rejects empty input
            validated.append(text if text.strip() else "[EMPTY]")
        return validated

    def get_usage_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        return self._usage_stats.copy()

    def reset_usage_stats(self) -> None:
        """Reset usage statistics."""
        self._usage_stats = {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0
        }
