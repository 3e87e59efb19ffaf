"""Scroll position bookkeeping for the content area.

Positions are row indices into whatever sequence is being viewed: buffer
lines, hex rows, or the filtered line sequence.
"""

from __future__ import annotations

from dataclasses import dataclass

HORIZONTAL_STEP = 4
GUTTER_PADDING = 2


@dataclass
class Viewport:
    top: int = 0
    left_col: int = 0
    height: int = 24
    width: int = 80
    total: int = 0

    def max_top(self) -> int:
        return max(0, self.total - self.height)

    def clamp(self) -> None:
        self.top = max(0, min(self.top, self.max_top()))
        self.left_col = max(0, self.left_col)

    def set_total(self, total: int) -> None:
        self.total = max(0, total)
        self.clamp()

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self.clamp()

    def reset(self, total: int) -> None:
        self.top = 0
        self.left_col = 0
        self.set_total(total)

    def scroll_down(self, rows: int = 1) -> None:
        self.top = min(self.top + max(0, rows), self.max_top())

    def scroll_up(self, rows: int = 1) -> None:
        self.top = max(0, self.top - max(0, rows))

    def half_page(self) -> int:
        return self.height // 2

    def goto_top(self) -> None:
        self.top = 0

    def goto_bottom(self) -> None:
        self.top = self.max_top()

    def goto_line(self, position: int) -> None:
        """Centre ``position`` vertically, clamped to the scroll range."""
        self.top = max(0, position - self.height // 2)
        self.clamp()

    def scroll_to(self, position: int) -> None:
        """Top-align ``position``, clamped to the scroll range."""
        self.top = max(0, position)
        self.clamp()

    def ensure_visible(self, position: int) -> None:
        if position < self.top:
            self.top = position
        elif position >= self.top + self.height:
            self.top = position - self.height + 1
        self.clamp()

    def scroll_right(self, cols: int = HORIZONTAL_STEP) -> None:
        self.left_col += cols

    def scroll_left(self, cols: int = HORIZONTAL_STEP) -> None:
        self.left_col = max(0, self.left_col - cols)

    def visible_range(self) -> tuple[int, int]:
        return self.top, min(self.total, self.top + self.height)

    def scroll_percentage(self) -> int:
        if self.total == 0:
            return 100
        bottom = min(self.top + self.height, self.total)
        return int(bottom * 100 / self.total)


def gutter_width(line_count: int, show_numbers: bool) -> int:
    """Digits of the largest line number plus padding, or 0 when numbers are off."""
    if not show_numbers:
        return 0
    digits = len(str(line_count)) if line_count > 0 else 1
    return digits + GUTTER_PADDING
