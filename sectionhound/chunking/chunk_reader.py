"""Chunk reader for SectionHound - packs segments into token-bounded chunks."""

from collections.abc import Iterable, Iterator

from loguru import logger

from interfaces.tokenizer import Tokenizer

from .segment_reader import is_line_anchored


class SegmentChunkReader:
    """Accumulates segments into chunks of at most ``max_tokens_per_chunk`` tokens.

    A segment that starts with a stop signal always opens a new chunk; heading
    signals only count when the segment starts a line. A single segment that is
    over budget on its own is cut on token boundaries. Whitespace-only chunks
    are dropped.
    """

    def __init__(
        self,
        segments: Iterable[str],
        tokenizer: Tokenizer,
        max_tokens_per_chunk: int,
        stop_signals: Iterable[str] = (),
    ):
        if max_tokens_per_chunk < 1:
            raise ValueError("max_tokens_per_chunk must be positive")
        self._segments = segments
        self._tokenizer = tokenizer
        self._max_tokens = max_tokens_per_chunk
        self._stop_signals = tuple(stop_signals)

    def __iter__(self) -> Iterator[str]:
        return self.chunks()

    def chunks(self) -> Iterator[str]:
        """Yield chunk texts in document order."""
        current = ""
        at_line_start = True

        for segment in self._segments:
            if current and self.starts_with_stop_signal(segment, at_line_start):
                if current.strip():
                    yield current
                current = ""
            at_line_start = segment.endswith("\n")

            candidate = current + segment
            if self._tokenizer.count_tokens(candidate) <= self._max_tokens:
                current = candidate
                continue

            if current.strip():
                yield current
                remainder = segment
            else:
                remainder = candidate
            current = ""

            if self._tokenizer.count_tokens(remainder) <= self._max_tokens:
                current = remainder
                continue

            pieces = self.split_by_tokens(remainder)
            for piece in pieces[:-1]:
                if piece.strip():
                    yield piece
            current = pieces[-1]

        if current.strip():
            yield current

    def starts_with_stop_signal(self, text: str, at_line_start: bool = True) -> bool:
        return any(
            text.startswith(signal) and (at_line_start or not is_line_anchored(signal))
            for signal in self._stop_signals
        )

    def split_by_tokens(self, text: str) -> list[str]:
        """Hard-split text into pieces of at most ``max_tokens_per_chunk`` tokens.

        Decoding a token window does not always re-encode to the same count, so
        each window shrinks until its decoded text fits.
        """
        tokens = self._tokenizer.encode(text)
        logger.debug(f"Hard-splitting segment of {len(tokens)} tokens into {self._max_tokens}-token pieces")

        pieces = []
        start = 0
        while start < len(tokens):
            window = min(self._max_tokens, len(tokens) - start)
            piece = self._tokenizer.decode(tokens[start:start + window])
            while window > 1 and self._tokenizer.count_tokens(piece) > self._max_tokens:
                window -= 1
                piece = self._tokenizer.decode(tokens[start:start + window])
            pieces.append(piece)
            start += window
        return pieces or [""]
