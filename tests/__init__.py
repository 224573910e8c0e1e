"""SectionHound test package."""

# Test configuration and utilities
import hashlib
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Dict, List

_PIECE_PATTERN = re.compile(r"\s*\S+|\s+")
_WORD_PATTERN = re.compile(r"[a-z0-9]+")


class FakeTokenizer:
    """Deterministic tokenizer: one token per word with its leading whitespace.

    ``decode(encode(text)) == text`` holds exactly, which keeps chunk contents
    predictable in tests.
    """

    def __init__(self):
        self._vocab: Dict[str, int] = {}
        self._pieces: List[str] = []

    def encode(self, text: str) -> list[int]:
        tokens = []
        for piece in _PIECE_PATTERN.findall(text):
            if piece not in self._vocab:
                self._vocab[piece] = len(self._pieces)
                self._pieces.append(piece)
            tokens.append(self._vocab[piece])
        return tokens

    def decode(self, tokens: Sequence[int]) -> str:
        return "".join(self._pieces[t] for t in tokens)

    def count_tokens(self, text: str) -> int:
        return len(_PIECE_PATTERN.findall(text))


class HashingEmbeddingProvider:
    """Bag-of-words embedding provider for tests.

    Each lowercase word adds one to a bucket chosen by a stable hash, so texts
    sharing words are similar and texts sharing none are orthogonal.
    """

    def __init__(self, dims: int = 512):
        self._dims = dims
        self.calls = 0
        self.texts: List[str] = []

    @property
    def name(self) -> str:
        return "hashing"

    @property
    def model(self) -> str:
        return "bag-of-words"

    @property
    def dims(self) -> int:
        return self._dims

    @property
    def batch_size(self) -> int:
        return 16

    def vector_for(self, text: str) -> List[float]:
        vector = [0.0] * self._dims
        for word in _WORD_PATTERN.findall(text.lower()):
            bucket = int.from_bytes(hashlib.md5(word.encode("utf-8")).digest()[:4], "big") % self._dims
            vector[bucket] += 1.0
        return vector

    async def embed(self, texts: List[str]) -> List[List[float]]:
        return [await self.embed_single(text) for text in texts]

    async def embed_single(self, text: str) -> List[float]:
        self.calls += 1
        self.texts.append(text)
        return self.vector_for(text)

    async def shutdown(self) -> None:
        pass

    def get_usage_stats(self) -> Dict[str, Any]:
        return {"requests_made": self.calls}


TWO_TOPIC_DOCUMENT = (
    "## Cats\n"
    "Cats are small furry pets. "
    "Cats purr and cats sleep all day.\n\n"
    "Cats chase mice and cats love warm sunny windows.\n\n"
    "## Databases\n"
    "Databases store rows in tables. "
    "Databases use indexes to answer queries fast.\n"
)


def create_test_file(directory: Path, filename: str, content: str) -> Path:
    """Create a test file with given content."""
    file_path = directory / filename
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content)
    return file_path
