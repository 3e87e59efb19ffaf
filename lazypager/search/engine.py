"""Committed and preview match sets plus the match cursor."""

from __future__ import annotations

from bisect import bisect_left, bisect_right

from ..buffer import Buffer
from .background import ASYNC_BATCH_LINES, BackgroundSearch, SearchBatch
from .pattern import Match, SearchPattern, compile_pattern, find_line_matches


def _match_line(match: Match) -> int:
    return match.line


class SearchEngine:
    """Search state for the active buffer.

    ``matches`` is the committed set, sorted by ``(line, start)``.
    ``preview_matches`` is rebuilt from scratch on every keystroke while a
    query is being typed and never touches the committed set.
    """

    def __init__(self, batch_lines: int = ASYNC_BATCH_LINES) -> None:
        self.pattern: SearchPattern | None = None
        self.query = ""
        self.forward = True
        self.matches: list[Match] = []
        self.preview_matches: list[Match] = []
        self.current = 0
        self._background = BackgroundSearch(batch_lines)

    def set_pattern(self, query: str, smart_case: bool = True) -> None:
        """Compile and commit ``query``; an empty query clears the search.

        Raises ``InvalidPatternError`` without touching the current state.
        """
        if not query:
            self.query = ""
            self.pattern = None
            self.matches = []
            self.current = 0
            self._background.invalidate()
            return
        pattern = compile_pattern(query, smart_case=smart_case)
        self.query = query
        self.pattern = pattern

    def has_pattern(self) -> bool:
        return self.pattern is not None

    def search_buffer(self, buffer: Buffer) -> None:
        """Scan every line synchronously, replacing the committed set."""
        self._background.invalidate()
        self.matches = []
        self.current = 0
        if self.pattern is None:
            return
        found: list[Match] = []
        for idx in range(buffer.line_count()):
            text = buffer.get_line(idx)
            if text is not None:
                found.extend(find_line_matches(self.pattern, idx, text))
        self.matches = found

    def search_async(self, buffer: Buffer) -> int | None:
        """Start a background scan of a snapshot of ``buffer``.

        The committed set is emptied and refilled as batches are drained.
        Returns the search generation, or ``None`` when no pattern is set.
        """
        self.matches = []
        self.current = 0
        if self.pattern is None:
            self._background.invalidate()
            return None
        return self._background.start(self.pattern, buffer.text_snapshot())

    @property
    def searching(self) -> bool:
        return self._background.running

    def drain_async(self) -> list[SearchBatch]:
        """Append every available batch of the live background search."""
        batches = self._background.drain()
        for batch in batches:
            self.matches.extend(batch.matches)
        return batches

    def search_visible_lines(
        self,
        buffer: Buffer,
        start: int,
        end: int,
        pattern: SearchPattern | None = None,
    ) -> None:
        """Replace the preview set with matches on lines ``[start, end)``.

        ``pattern`` defaults to the committed pattern.
        """
        pattern = pattern if pattern is not None else self.pattern
        preview: list[Match] = []
        if pattern is not None:
            for idx in range(max(0, start), min(end, buffer.line_count())):
                text = buffer.get_line(idx)
                if text is not None:
                    preview.extend(find_line_matches(pattern, idx, text))
        self.preview_matches = preview

    def clear_preview(self) -> None:
        self.preview_matches = []

    def match_count(self) -> int:
        return len(self.matches)

    def next_match(self) -> None:
        if self.matches:
            self.current = (self.current + 1) % len(self.matches)

    def prev_match(self) -> None:
        if self.matches:
            self.current = (self.current - 1) % len(self.matches)

    def jump_to_line(self, line: int) -> bool:
        """Move the cursor to the first match at or after ``line``, without wrapping."""
        idx = bisect_left(self.matches, line, key=_match_line)
        if idx >= len(self.matches):
            return False
        self.current = idx
        return True

    def current_match(self) -> Match | None:
        if 0 <= self.current < len(self.matches):
            return self.matches[self.current]
        return None

    def current_match_line(self) -> int | None:
        match = self.current_match()
        return match.line if match is not None else None

    def matches_on_line(self, line: int) -> list[Match]:
        lo = bisect_left(self.matches, line, key=_match_line)
        hi = bisect_right(self.matches, line, lo=lo, key=_match_line)
        return self.matches[lo:hi]

    def preview_on_line(self, line: int) -> list[Match]:
        lo = bisect_left(self.preview_matches, line, key=_match_line)
        hi = bisect_right(self.preview_matches, line, lo=lo, key=_match_line)
        return self.preview_matches[lo:hi]
