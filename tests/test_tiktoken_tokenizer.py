"""Tests for the tiktoken tokenizer; skipped when the encoding cannot be loaded."""

import io

import pytest

from providers.tokenizers import TiktokenTokenizer
from sectionhound.chunking import create_chunk_reader
from sectionhound.core.config import ChunkingConfig


@pytest.fixture(scope="module")
def tokenizer():
    try:
        return TiktokenTokenizer()
    except Exception as e:
        # Encodings are downloaded on first use
        pytest.skip(f"tiktoken encoding unavailable: {e}")


def test_encoding_for_embedding_model(tokenizer):
    assert tokenizer.encoding_name == "cl100k_base"


def test_round_trip(tokenizer):
    text = "Databases store rows in tables. Ünïcödé too."
    assert tokenizer.decode(tokenizer.encode(text)) == text
    assert tokenizer.count_tokens(text) == len(tokenizer.encode(text))


def test_special_tokens_are_plain_text(tokenizer):
    assert tokenizer.count_tokens("<|endoftext|>") > 1


def test_chunks_respect_budget(tokenizer):
    text = ("word " * 500) + "\n\n## Heading\nShort paragraph.\n"
    reader = create_chunk_reader(io.BytesIO(text.encode("utf-8")), tokenizer,
                                 ChunkingConfig(max_tokens_per_chunk=32))

    chunks = list(reader)

    assert "".join(chunks).split() == text.split()
    assert all(tokenizer.count_tokens(chunk) <= 32 for chunk in chunks)
    assert any(chunk.startswith("## Heading") for chunk in chunks)
