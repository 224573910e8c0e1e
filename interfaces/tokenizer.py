"""Tokenizer protocol for SectionHound - token counting used by the chunk budget."""

from collections.abc import Sequence
from typing import Protocol


class Tokenizer(Protocol):
    """Converts text to token ids and back.

    ``decode(encode(text))`` does not have to reproduce ``text`` exactly, but the
    chunker relies on ``count_tokens`` agreeing with ``len(encode(text))``.
    """

    def encode(self, text: str) -> list[int]:
        """Encode text into token ids."""
        ...

    def decode(self, tokens: Sequence[int]) -> str:
        """Decode token ids back into text."""
        ...

    def count_tokens(self, text: str) -> int:
        """Number of tokens in ``text``."""
        ...
