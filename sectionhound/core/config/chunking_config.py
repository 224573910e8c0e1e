"""Chunking and sectioning configuration for SectionHound."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

MARKDOWN_STOP_SIGNALS = [
    "# ",
    "## ",
    "### ",
    "#### ",
    "##### ",
    "###### ",
    "```",
    "**",
]


class ChunkingConfig(BaseModel):
    """How raw text is cut into token-bounded chunks."""

    max_tokens_per_chunk: int = Field(
        default=100,
        ge=1,
        description="Upper bound on tokens in a single chunk"
    )

    stop_signals: list[str] = Field(
        default_factory=lambda: list(MARKDOWN_STOP_SIGNALS),
        description="Structural markers that always start a new chunk"
    )

    read_block_size: int = Field(
        default=4096,
        ge=64,
        description="Characters read from the stream per block"
    )

    max_segment_chars: int = Field(
        default=8192,
        ge=64,
        description="Segments with no natural break are cut at this length"
    )

    @field_validator('stop_signals')
    def validate_stop_signals(cls, v: list[str]) -> list[str]:
        """Drop empty signals and duplicates while keeping order."""
        seen: list[str] = []
        for signal in v:
            if signal and signal not in seen:
                seen.append(signal)
        return seen


class SectioningConfig(BaseModel):
    """How chunks are grouped into sections."""

    max_tokens_per_section: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on the summed chunk tokens of a section"
    )

    std_deviation_multiplier: float = Field(
        default=1.0,
        ge=0.0,
        description="How many standard deviations below the running mean ends a section"
    )

    minimum_similarity_threshold: Optional[float] = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Optional floor for the split threshold"
    )

    max_similarity_threshold: float = Field(
        default=0.95,
        ge=-1.0,
        le=1.0,
        description="Ceiling for the split threshold"
    )

    token_strictness_threshold: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Section token usage ratio after which splitting becomes easier"
    )

    min_chunks_per_section: int = Field(
        default=2,
        ge=1,
        description="Similarity splits never leave fewer chunks than this in a section"
    )

    min_tokens_per_section: int = Field(
        default=0,
        ge=0,
        description="Similarity splits never leave fewer tokens than this in a section"
    )

    embedding_prefetch: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Chunks embedded concurrently ahead of the sectioning step"
    )
