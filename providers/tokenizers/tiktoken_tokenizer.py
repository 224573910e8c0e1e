"""tiktoken tokenizer for SectionHound - token counting for chunk and section budgets."""

from collections.abc import Sequence
from typing import Optional

import tiktoken
from loguru import logger


class TiktokenTokenizer:
    """Tokenizer backed by a tiktoken encoding.

    The encoding is picked from the embedding model so chunk budgets are
    measured the same way the embedding API counts tokens.
    """

    def __init__(self, model: str = "text-embedding-3-small", encoding_name: Optional[str] = None):
        """Initialize the tokenizer.

        Args:
            model: Model whose encoding to use
            encoding_name: Explicit encoding name, overrides ``model``
        """
        if encoding_name:
            self._encoding = tiktoken.get_encoding(encoding_name)
        else:
            try:
                self._encoding = tiktoken.encoding_for_model(model)
            except KeyError:
                # Fallback to cl100k_base for unknown models
                self._encoding = tiktoken.get_encoding("cl100k_base")
                logger.warning(f"Using cl100k_base tokenizer for unknown model: {model}")

    @property
    def encoding_name(self) -> str:
        return self._encoding.name

    def encode(self, text: str) -> list[int]:
        # Special-token text in documents is ordinary content
        return self._encoding.encode(text, disallowed_special=())

    def decode(self, tokens: Sequence[int]) -> str:
        return self._encoding.decode(list(tokens))

    def count_tokens(self, text: str) -> int:
        return len(self.encode(text))
