"""Embedding providers package for SectionHound - concrete embedding implementations."""

from .openai_provider import OpenAIEmbeddingProvider

__all__ = [
    "OpenAIEmbeddingProvider",
]
