"""Source files with a line-offset index for location lookups."""

from __future__ import annotations

import bisect
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceFile:
    """An immutable loaded source file.

    Offsets are character offsets into the decoded ``text``; lines and columns
    are 1-based.
    """

    path: str
    text: str
    line_starts: tuple[int, ...]

    @classmethod
    def from_text(cls, path: str, text: str) -> SourceFile:
        starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                starts.append(i + 1)
        return cls(path=path, text=text, line_starts=tuple(starts))

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def location(self, offset: int) -> tuple[int, int]:
        """Map a character offset to ``(line, column)``."""
        offset = max(0, min(offset, len(self.text)))
        idx = bisect.bisect_right(self.line_starts, offset) - 1
        return idx + 1, offset - self.line_starts[idx] + 1

    def line_text(self, line: int) -> str:
        """Return the text of a 1-based line without its newline."""
        if line < 1 or line > len(self.line_starts):
            return ""
        start = self.line_starts[line - 1]
        end = (
            self.line_starts[line] - 1
            if line < len(self.line_starts)
            else len(self.text)
        )
        return self.text[start:end]


@dataclass(frozen=True)
class Span:
    """A half-open character range ``[start, end)``."""

    start: int
    end: int

    def __contains__(self, offset: object) -> bool:
        return isinstance(offset, int) and self.start <= offset < self.end

    def contains_span(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: Span) -> bool:
        return self.start < other.end and other.start < self.end
