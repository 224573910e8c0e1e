"""Chunking and sectioning engine for SectionHound.

Three lazy tiers, each pulling from the one before it:

    stream -> TextSegmentReader -> SegmentChunkReader -> SectionReader

Memory use is bounded by one section of chunks and their embeddings.
"""

from typing import IO, Optional

from interfaces.embedding_provider import EmbeddingProvider
from interfaces.tokenizer import Tokenizer
from sectionhound.core.config import ChunkingConfig, SectioningConfig

from .chunk_reader import SegmentChunkReader
from .section_reader import SectionReader, SimilarityStatistics
from .segment_reader import DEFAULT_BREAK_STRINGS, TextSegmentReader, is_line_anchored


def create_chunk_reader(
    stream: IO,
    tokenizer: Tokenizer,
    chunking_config: Optional[ChunkingConfig] = None,
) -> SegmentChunkReader:
    """Build the stream -> segment -> chunk tiers."""
    config = chunking_config or ChunkingConfig()
    segments = TextSegmentReader(
        stream,
        stop_signals=config.stop_signals,
        block_size=config.read_block_size,
        max_segment_chars=config.max_segment_chars,
    )
    return SegmentChunkReader(
        segments,
        tokenizer,
        max_tokens_per_chunk=config.max_tokens_per_chunk,
        stop_signals=config.stop_signals,
    )


def create_section_reader(
    stream: IO,
    tokenizer: Tokenizer,
    embedding_provider: EmbeddingProvider,
    chunking_config: Optional[ChunkingConfig] = None,
    sectioning_config: Optional[SectioningConfig] = None,
) -> SectionReader:
    """Build the full pipeline from a content stream to sections of embedded chunks.

    Args:
        stream: Binary or text stream over the document
        tokenizer: Tokenizer used for both budgets
        embedding_provider: Provider used to embed every chunk
        chunking_config: Chunk budget and stop signals
        sectioning_config: Section budget and split policy

    Returns:
        A single-use SectionReader
    """
    chunking_config = chunking_config or ChunkingConfig()
    chunk_reader = create_chunk_reader(stream, tokenizer, chunking_config)
    return SectionReader(
        chunk_reader,
        tokenizer,
        embedding_provider,
        config=sectioning_config,
        max_tokens_per_chunk=chunking_config.max_tokens_per_chunk,
    )


__all__ = [
    "DEFAULT_BREAK_STRINGS",
    "TextSegmentReader",
    "SegmentChunkReader",
    "SectionReader",
    "SimilarityStatistics",
    "create_chunk_reader",
    "create_section_reader",
    "is_line_anchored",
]
