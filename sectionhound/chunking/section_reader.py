"""Section reader for SectionHound - groups embedded chunks into topical sections.

Every chunk is embedded as soon as it is cut. The similarity between each chunk
and the one before it is tracked per section as a running mean and standard
deviation. A section ends when the next chunk would overflow the section token
budget, or when its similarity to the previous chunk falls clearly below what
the section has shown so far. The cut-off adapts to the document: regions where
consecutive chunks are naturally less alike get a lower threshold instead of
being split into fragments.
"""

import asyncio
import math
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import uuid4

from loguru import logger

from core.exceptions import ConfigurationError, EmbeddingError
from core.models import KnowledgeFileChunk
from core.types import SectionId
from interfaces.embedding_provider import EmbeddingProvider
from interfaces.tokenizer import Tokenizer
from sectionhound.core.config import SectioningConfig
from sectionhound.relevance import cosine_similarity

# Similarities this close to the threshold are not a topic shift
SPLIT_EPSILON = 1e-6

# Fewer samples than this give no usable standard deviation
MIN_SIMILARITY_SAMPLES = 2


@dataclass(frozen=True)
class SimilarityStatistics:
    """Running mean and population standard deviation (Welford), one per section.

    Instances are immutable; ``with_sample`` returns the updated statistics.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def with_sample(self, value: float) -> "SimilarityStatistics":
        count = self.count + 1
        delta = value - self.mean
        mean = self.mean + delta / count
        m2 = self.m2 + delta * (value - mean)
        return SimilarityStatistics(count=count, mean=mean, m2=m2)

    @property
    def variance(self) -> float:
        if self.count < 2:
            return 0.0
        return max(self.m2 / self.count, 0.0)

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)


@dataclass(frozen=True)
class _EmbeddedText:
    content: str
    tokens: int
    embedding: Tuple[float, ...]


class SectionReader:
    """Turns a stream of chunk texts into sections of embedded chunks.

    The reader is single-use: ``read_sections`` consumes the underlying chunk
    iterator, so reading again requires a new reader over a fresh stream.
    """

    def __init__(
        self,
        chunk_texts: Iterable[str],
        tokenizer: Tokenizer,
        embedding_provider: EmbeddingProvider,
        config: Optional[SectioningConfig] = None,
        max_tokens_per_chunk: Optional[int] = None,
    ):
        """Initialize the section reader.

        Args:
            chunk_texts: Chunk texts in document order
            tokenizer: Tokenizer used for section budgets
            embedding_provider: Provider used to embed every chunk
            config: Sectioning configuration
            max_tokens_per_chunk: Chunk budget of the upstream reader, checked
                against the section budget

        Raises:
            ConfigurationError: If a chunk could never fit into a section
        """
        self._chunk_texts = chunk_texts
        self._tokenizer = tokenizer
        self._embedder = embedding_provider
        self._config = config or SectioningConfig()

        if max_tokens_per_chunk is not None and max_tokens_per_chunk > self._config.max_tokens_per_section:
            raise ConfigurationError(
                "max_tokens_per_section",
                self._config.max_tokens_per_section,
                f"must be at least max_tokens_per_chunk ({max_tokens_per_chunk})",
            )

        self._consumed = False

    async def read_sections(self) -> AsyncIterator[List[KnowledgeFileChunk]]:
        """Yield sections as ordered, non-empty lists of embedded chunks."""
        if self._consumed:
            raise RuntimeError("SectionReader can only be read once")
        self._consumed = True

        stats = SimilarityStatistics()
        current: List[_EmbeddedText] = []
        current_tokens = 0
        section_count = 0

        async for incoming in self._embedded_chunks():
            if current:
                similarity = cosine_similarity(current[-1].embedding, incoming.embedding)
                if self._should_split(stats, similarity, current, current_tokens, incoming.tokens):
                    yield self._build_section(current)
                    section_count += 1
                    current, current_tokens, stats = [], 0, SimilarityStatistics()
                else:
                    stats = stats.with_sample(similarity)

            current.append(incoming)
            current_tokens += incoming.tokens

        if current:
            yield self._build_section(current)
            section_count += 1

        logger.debug(f"Section reader produced {section_count} sections")

    def split_threshold(self, stats: SimilarityStatistics, section_tokens: int) -> Optional[float]:
        """Similarity below which the next chunk starts a new section.

        Starts at ``mean - k * std`` of the section so far. An optional floor
        raises it, and as the section fills past the strictness ratio the
        threshold moves quadratically towards 1. It never exceeds the
        configured ceiling.

        With fewer than ``MIN_SIMILARITY_SAMPLES`` similarities the floor
        alone is used, and without a floor there is no threshold (None).
        """
        config = self._config
        floor = config.minimum_similarity_threshold

        if stats.count >= MIN_SIMILARITY_SAMPLES:
            threshold = stats.mean - config.std_deviation_multiplier * stats.std
            if floor is not None:
                threshold = max(threshold, floor)
        elif floor is not None:
            threshold = floor
        else:
            return None

        usage = section_tokens / config.max_tokens_per_section
        strictness = config.token_strictness_threshold
        if usage > strictness and strictness < 1.0:
            excess = min((usage - strictness) / (1.0 - strictness), 1.0)
            threshold += 0.5 * excess * excess * (1.0 - threshold)

        return min(threshold, config.max_similarity_threshold)

    def _should_split(
        self,
        stats: SimilarityStatistics,
        similarity: float,
        current: List[_EmbeddedText],
        current_tokens: int,
        incoming_tokens: int,
    ) -> bool:
        config = self._config

        if current_tokens + incoming_tokens > config.max_tokens_per_section:
            return True

        # No statistics yet: the first two chunks of a section stay together
        if stats.count == 0:
            return False
        if len(current) < config.min_chunks_per_section:
            return False
        if current_tokens < config.min_tokens_per_section:
            return False

        threshold = self.split_threshold(stats, current_tokens)
        if threshold is None:
            return False
        return similarity < threshold - SPLIT_EPSILON

    def _build_section(self, texts: List[_EmbeddedText]) -> List[KnowledgeFileChunk]:
        section_id = SectionId(uuid4())
        return [
            KnowledgeFileChunk.create(
                section_id=section_id,
                chunk_index=index,
                content=text.content,
                embedding=text.embedding,
            )
            for index, text in enumerate(texts)
        ]

    async def _embedded_chunks(self) -> AsyncIterator[_EmbeddedText]:
        """Embed chunk texts, up to ``embedding_prefetch`` at a time, in order."""
        window = self._config.embedding_prefetch
        pending: List[str] = []

        for text in self._chunk_texts:
            pending.append(text)
            if len(pending) >= window:
                for embedded in await self._embed_all(pending):
                    yield embedded
                pending = []

        if pending:
            for embedded in await self._embed_all(pending):
                yield embedded

    async def _embed_all(self, texts: List[str]) -> List[_EmbeddedText]:
        if len(texts) == 1:
            vectors = [await self._embedder.embed_single(texts[0])]
        else:
            vectors = await asyncio.gather(*(self._embedder.embed_single(t) for t in texts))

        embedded = []
        for text, vector in zip(texts, vectors):
            if not vector:
                raise EmbeddingError(
                    provider=getattr(self._embedder, "name", None),
                    operation="embed_chunk",
                    reason="Provider returned an empty vector",
                )
            embedded.append(
                _EmbeddedText(
                    content=text,
                    tokens=self._tokenizer.count_tokens(text),
                    embedding=tuple(float(v) for v in vector),
                )
            )
        return embedded
