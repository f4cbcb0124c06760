"""Source text representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A half-open byte range ``[start, end)`` within the source text."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def to(self, other: Span) -> Span:
        """Return a span covering this span through *other*."""
        return Span(min(self.start, other.start), max(self.end, other.end))


NO_SPAN = Span(0, 0)


class SourceText:
    """Source text with byte-offset to line/column translation."""

    def __init__(self, text: str, name: str = "<stdin>") -> None:
        self.text = text
        self.name = name
        self.data = text.encode("utf-8")
        self.lines = text.splitlines()
        # Byte offset at which each line starts.
        self._line_starts = [0]
        for i, byte in enumerate(self.data):
            if byte == 0x0A:
                self._line_starts.append(i + 1)

    @classmethod
    def from_path(cls, path: Path) -> SourceText:
        return cls(path.read_text(encoding="utf-8"), str(path))

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def position(self, offset: int) -> tuple[int, int]:
        """Translate a byte offset into a 1-indexed (line, column) pair.

        Columns count characters, not bytes, so carets line up under
        multi-byte text.
        """
        offset = max(0, min(offset, len(self.data)))
        line = 0
        for i, start in enumerate(self._line_starts):
            if start > offset:
                break
            line = i
        line_start = self._line_starts[line]
        col = len(self.data[line_start:offset].decode("utf-8", errors="replace")) + 1
        return line + 1, col

    def span_text(self, span: Span) -> str:
        """Extract the text covered by a span."""
        return self.data[span.start:span.end].decode("utf-8", errors="replace")

    def end_span(self) -> Span:
        """A zero-width span at the end of the text."""
        return Span(len(self.data), len(self.data))
