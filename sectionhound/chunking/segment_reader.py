"""Segment reader for SectionHound - splits a text stream at natural break points.

Segments are the raw material of chunks: short pieces of text that end on a
paragraph break, a line break or a sentence end. A stop signal always starts a
new segment, so structural markers are never buried in the middle of one.
"""

import codecs
import re
from collections.abc import Iterable, Iterator
from typing import IO

DEFAULT_BREAK_STRINGS = ("\n\n", "\n", ". ", "! ", "? ")


def is_line_anchored(signal: str) -> bool:
    """Heading signals only count at the start of a line."""
    return signal.startswith("#")


def build_boundary_pattern(break_strings: Iterable[str], stop_signals: Iterable[str]) -> re.Pattern:
    """Compile one regex matching either a stop signal or a break string.

    Stop signals come first so that at a shared position the boundary falls
    before the signal. Within each group longer alternatives win.
    """
    stops = sorted(set(stop_signals), key=len, reverse=True)
    breaks = sorted(set(break_strings), key=len, reverse=True)

    stop_parts = [
        ("^" if is_line_anchored(signal) else "") + re.escape(signal)
        for signal in stops
    ]
    alternatives = []
    if stop_parts:
        alternatives.append(f"(?P<stop>{'|'.join(stop_parts)})")
    if breaks:
        alternatives.append(f"(?P<brk>{'|'.join(re.escape(b) for b in breaks)})")
    if not alternatives:
        # Nothing to split on; never matches
        return re.compile(r"(?!)")
    return re.compile("|".join(alternatives), re.MULTILINE)


class TextSegmentReader:
    """Lazily reads segments from a binary or text stream.

    Only a bounded buffer is held: at most one read block plus the pending
    segment, which is itself capped at ``max_segment_chars``.
    """

    def __init__(
        self,
        stream: IO,
        stop_signals: Iterable[str] = (),
        break_strings: Iterable[str] = DEFAULT_BREAK_STRINGS,
        block_size: int = 4096,
        max_segment_chars: int = 8192,
        encoding: str = "utf-8",
    ):
        """Initialize the reader.

        Args:
            stream: Binary or text stream positioned at the start of the content
            stop_signals: Markers that force a segment boundary before them
            break_strings: Natural break points, a segment ends right after one
            block_size: Characters (or bytes) read per call to ``stream.read``
            max_segment_chars: Hard cap for a segment with no break in it
            encoding: Encoding used to decode binary streams
        """
        self._stream = stream
        self._stop_signals = tuple(stop_signals)
        self._break_strings = tuple(break_strings)
        self._block_size = block_size
        self._max_segment_chars = max_segment_chars
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pattern = build_boundary_pattern(self._break_strings, self._stop_signals)
        # A match closer than this to the buffer end may still grow into a longer one
        self._lookahead = max(
            (len(s) for s in self._stop_signals + self._break_strings), default=1
        )

    def __iter__(self) -> Iterator[str]:
        return self.segments()

    def segments(self) -> Iterator[str]:
        """Yield segments until the stream is exhausted."""
        buffer = ""
        scan_from = 0
        eof = False

        while True:
            boundary, scan_from = self._find_boundary(buffer, scan_from, eof)
            if boundary is not None:
                yield buffer[:boundary]
                buffer = buffer[boundary:]
                scan_from = 0
                continue

            if len(buffer) >= self._max_segment_chars:
                yield buffer[:self._max_segment_chars]
                buffer = buffer[self._max_segment_chars:]
                scan_from = 0
                continue

            if eof:
                if buffer:
                    yield buffer
                return

            block = self._read_block()
            if block is None:
                eof = True
            else:
                buffer += block

    def _read_block(self):
        """Read and decode the next block, None at end of stream."""
        data = self._stream.read(self._block_size)
        if not data:
            tail = self._decoder.decode(b"", final=True)
            return tail or None
        if isinstance(data, str):
            return data
        # An incomplete multi-byte sequence yields "" until the rest arrives
        return self._decoder.decode(data)

    def _find_boundary(self, buffer: str, scan_from: int, eof: bool):
        """Find the next segment boundary in ``buffer``.

        Returns:
            (boundary, next_scan_from). ``boundary`` is None when more data is
            needed or the buffer has no boundary.
        """
        position = scan_from
        while True:
            match = self._pattern.search(buffer, position)
            if match is None:
                return None, max(scan_from, len(buffer) - self._lookahead + 1, 0)

            start = match.start()
            if not eof and len(buffer) - start < self._lookahead:
                return None, start

            if match.lastgroup == "stop":
                if start == 0:
                    # Already at a segment start; keep looking after the signal
                    position = 1
                    continue
                return start, 0

            return match.end(), 0
