"""Provider registry and dependency injection container for SectionHound."""

from typing import Any, Callable, Dict, Optional

from loguru import logger

from core.exceptions import ConfigurationError
from providers.database.duckdb_provider import DuckDBProvider
from providers.database.memory_provider import InMemoryProvider
from providers.embeddings.openai_provider import OpenAIEmbeddingProvider
from providers.tokenizers.tiktoken_tokenizer import TiktokenTokenizer
from providers.vector.duckdb_vector_store import DuckDBVectorStore
from providers.vector.memory_vector_store import InMemoryVectorStore
from sectionhound.core.config import SectionHoundConfig, get_config
from services.indexing_coordinator import IndexingCoordinator
from services.search_service import SearchService


class ProviderRegistry:
    """Registry for managing provider implementations and dependency injection.

    Providers are registered as factories taking the registry, so a factory can
    pull its own dependencies (the DuckDB vector store shares the knowledge
    store connection). Tests register ready-made instances instead.
    """

    def __init__(self, config: Optional[SectionHoundConfig] = None):
        """Initialize the provider registry.

        Args:
            config: Configuration to build providers from; the global
                configuration is used when omitted
        """
        self._providers: Dict[str, Any] = {}
        self._singletons: Dict[str, Any] = {}
        self._config = config

        self._register_default_providers()

    @property
    def config(self) -> SectionHoundConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    def configure(self, config: SectionHoundConfig) -> None:
        """Replace the configuration and drop providers built from the old one.

        Args:
            config: Configuration with provider settings
        """
        self._config = config
        self._singletons.clear()
        logger.info("Provider registry configured")

    def register_provider(self, name: str, factory: Callable[["ProviderRegistry"], Any], singleton: bool = True) -> None:
        """Register a provider factory.

        Args:
            name: Provider name/identifier
            factory: Callable building the provider from this registry
            singleton: Whether to use singleton pattern for this provider
        """
        self._providers[name] = (factory, singleton)

        # Clear existing singleton if registered
        if name in self._singletons:
            del self._singletons[name]

        logger.debug(f"Registered provider factory for {name}")

    def register_instance(self, name: str, instance: Any) -> None:
        """Register an already constructed provider."""
        self._providers[name] = (lambda _: instance, True)
        self._singletons[name] = instance

    def get_provider(self, name: str) -> Any:
        """Get a provider instance for the specified name.

        Raises:
            ValueError: If no provider is registered for the name
        """
        if name not in self._providers:
            raise ValueError(f"No provider registered for {name}")

        factory, is_singleton = self._providers[name]

        if is_singleton:
            if name not in self._singletons:
                self._singletons[name] = factory(self)
            return self._singletons[name]
        return factory(self)

    def create_indexing_coordinator(self) -> IndexingCoordinator:
        """Create an IndexingCoordinator with all dependencies."""
        config = self.config
        return IndexingCoordinator(
            knowledge_store=self.get_provider("knowledge_store"),
            vector_store=self.get_provider("vector_store"),
            embedding_provider=self.get_provider("embedding"),
            tokenizer=self.get_provider("tokenizer"),
            chunking_config=config.chunking,
            sectioning_config=config.sectioning,
        )

    def create_search_service(self) -> SearchService:
        """Create a SearchService with all dependencies."""
        return SearchService(
            knowledge_store=self.get_provider("knowledge_store"),
            vector_store=self.get_provider("vector_store"),
            embedding_provider=self.get_provider("embedding"),
        )

    async def shutdown(self) -> None:
        """Release provider resources created by this registry."""
        embedding = self._singletons.pop("embedding", None)
        if embedding is not None and hasattr(embedding, "shutdown"):
            await embedding.shutdown()

        store = self._singletons.pop("knowledge_store", None)
        if store is not None and hasattr(store, "disconnect"):
            store.disconnect()

        self._singletons.clear()

    def _register_default_providers(self) -> None:
        """Register default provider implementations."""
        self.register_provider("knowledge_store", _create_knowledge_store)
        self.register_provider("vector_store", _create_vector_store)
        self.register_provider("embedding", _create_embedding_provider)
        self.register_provider("tokenizer", _create_tokenizer)


def _create_knowledge_store(registry: ProviderRegistry) -> Any:
    database_config = registry.config.database
    if database_config.provider == "memory":
        store = InMemoryProvider()
    else:
        store = DuckDBProvider(database_config.path)
    store.connect()
    return store


def _create_vector_store(registry: ProviderRegistry) -> Any:
    store = registry.get_provider("knowledge_store")
    if isinstance(store, DuckDBProvider):
        vector_store = DuckDBVectorStore(store)
        vector_store.create_schema()
        return vector_store
    return InMemoryVectorStore()


def _create_embedding_provider(registry: ProviderRegistry) -> OpenAIEmbeddingProvider:
    embedding_config = registry.config.embedding
    missing = embedding_config.get_missing_config()
    if missing:
        raise ConfigurationError("embedding", None, f"Missing configuration: {', '.join(missing)}")

    config_params = embedding_config.get_provider_config()
    logger.debug(
        f"Creating embedding provider with model={config_params['model']}, "
        f"base_url={config_params.get('base_url')}"
    )
    return OpenAIEmbeddingProvider(**config_params)


def _create_tokenizer(registry: ProviderRegistry) -> TiktokenTokenizer:
    embedding_config = registry.config.embedding
    return TiktokenTokenizer(
        model=embedding_config.get_default_model(),
        encoding_name=embedding_config.tokenizer_encoding,
    )


# Global registry instance (lazy initialization)
_registry = None


def get_registry() -> ProviderRegistry:
    """Get the global registry instance."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def configure_registry(config: SectionHoundConfig) -> None:
    """Configure the global provider registry.

    Args:
        config: Configuration to build providers from
    """
    get_registry().configure(config)


def get_provider(name: str) -> Any:
    """Get a provider from the global registry."""
    return get_registry().get_provider(name)


def create_indexing_coordinator() -> IndexingCoordinator:
    """Create an IndexingCoordinator from the global registry."""
    return get_registry().create_indexing_coordinator()


def create_search_service() -> SearchService:
    """Create a SearchService from the global registry."""
    return get_registry().create_search_service()


__all__ = [
    'ProviderRegistry',
    'get_registry',
    'configure_registry',
    'get_provider',
    'create_indexing_coordinator',
    'create_search_service',
]
