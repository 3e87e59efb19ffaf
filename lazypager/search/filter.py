"""Line filtering: reduce a buffer to the lines matching a query.

Filters always match case-insensitively, independent of smart case.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass

from ..buffer import Buffer
from .pattern import compile_pattern


@dataclass(frozen=True)
class FilterView:
    query: str
    lines: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.lines)


def filter_lines(buffer: Buffer, query: str) -> FilterView:
    """Return the absolute indices of lines matching ``query``.

    Raises ``InvalidPatternError`` for malformed expressions.
    """
    regex = compile_pattern(query, ignore_case=True).regex
    kept: list[int] = []
    for idx in range(buffer.line_count()):
        text = buffer.get_line(idx)
        if text is not None and regex.search(text) is not None:
            kept.append(idx)
    return FilterView(query=query, lines=tuple(kept))


class FilterEngine:
    """Holds the active filter view, if any."""

    def __init__(self) -> None:
        self.view: FilterView | None = None

    @property
    def active(self) -> bool:
        return self.view is not None

    @property
    def query(self) -> str:
        return self.view.query if self.view is not None else ""

    def apply_filter(self, buffer: Buffer, query: str) -> FilterView | None:
        """Install a filter for ``query``; an empty query clears it.

        On ``InvalidPatternError`` the previous view stays in place.
        """
        if not query:
            self.view = None
            return None
        self.view = filter_lines(buffer, query)
        return self.view

    def clear(self) -> None:
        self.view = None

    def line_at(self, position: int) -> int | None:
        """Map a filtered position to its absolute line."""
        if self.view is None:
            return position
        if 0 <= position < len(self.view.lines):
            return self.view.lines[position]
        return None

    def position_of(self, line: int) -> int:
        """Return the first filtered position whose line is at or after ``line``."""
        if self.view is None:
            return line
        return min(bisect_left(self.view.lines, line), max(0, len(self.view.lines) - 1))
