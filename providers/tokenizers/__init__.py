"""Tokenizer providers package for SectionHound - concrete tokenizer implementations."""

from .tiktoken_tokenizer import TiktokenTokenizer

__all__ = [
    "TiktokenTokenizer",
]
