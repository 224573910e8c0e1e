"""Providers package for SectionHound - concrete implementations of abstract interfaces."""

from .database import DuckDBProvider, InMemoryProvider
from .embeddings import OpenAIEmbeddingProvider
from .sources import DirectoryFileSourceProvider, InMemoryFileSource, LocalFileSource
from .tokenizers import TiktokenTokenizer
from .vector import DuckDBVectorStore, InMemoryVectorStore

__all__ = [
    # Knowledge stores
    "DuckDBProvider",
    "InMemoryProvider",

    # Vector stores
    "DuckDBVectorStore",
    "InMemoryVectorStore",

    # Embedding providers
    "OpenAIEmbeddingProvider",

    # Tokenizers
    "TiktokenTokenizer",

    # File sources
    "DirectoryFileSourceProvider",
    "InMemoryFileSource",
    "LocalFileSource",
]
