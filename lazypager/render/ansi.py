"""Display-width aware shaping of styled line segments.

A segment is ``(text, sgr)`` where ``sgr`` holds the SGR parameters for the
text (``""`` for the terminal default). Slicing and wrapping work on
segments so escape sequences never have to be parsed back out.
"""

from __future__ import annotations

import re
import unicodedata

Segment = tuple[str, str]

TAB_STOP = 8
RESET = "\x1b[0m"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def char_display_width(ch: str) -> int:
    """Return terminal columns for one non-tab character.

    Combining marks take no columns and East Asian wide/fullwidth characters
    take two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def text_display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in text)


def sanitize_terminal_text(text: str) -> str:
    """Escape control bytes so content cannot move the cursor or ring the bell."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda found: f"\\x{ord(found.group(0)):02x}", text)


def expand_tabs(segments: list[Segment]) -> list[Segment]:
    """Replace tabs with spaces up to the next tab stop, counting from line start."""
    out: list[Segment] = []
    col = 0
    for text, sgr in segments:
        if "\t" not in text:
            col += text_display_width(text)
            out.append((text, sgr))
            continue
        parts: list[str] = []
        for ch in text:
            if ch == "\t":
                width = TAB_STOP - (col % TAB_STOP)
                parts.append(" " * width)
                col += width
            else:
                parts.append(ch)
                col += char_display_width(ch)
        out.append(("".join(parts), sgr))
    return out


def slice_segments(segments: list[Segment], start_col: int, max_cols: int) -> list[Segment]:
    """Return the columns ``[start_col, start_col + max_cols)`` of tab-free segments.

    A wide character straddling either edge is dropped.
    """
    if max_cols <= 0:
        return []
    start_col = max(0, start_col)
    end_col = start_col + max_cols
    out: list[Segment] = []
    col = 0
    for text, sgr in segments:
        if col >= end_col:
            break
        kept: list[str] = []
        for ch in text:
            width = char_display_width(ch)
            if col >= start_col and col + width <= end_col:
                kept.append(ch)
            col += width
            if col >= end_col:
                break
        if kept:
            out.append(("".join(kept), sgr))
    return out


def wrap_segments(segments: list[Segment], width: int) -> list[list[Segment]]:
    """Split tab-free segments into rows of at most ``width`` columns."""
    if width <= 0:
        return [[]]
    rows: list[list[Segment]] = [[]]
    col = 0
    for text, sgr in segments:
        chunk: list[str] = []
        for ch in text:
            w = char_display_width(ch)
            if col + w > width and col > 0:
                if chunk:
                    rows[-1].append(("".join(chunk), sgr))
                    chunk = []
                rows.append([])
                col = 0
            chunk.append(ch)
            col += w
        if chunk:
            rows[-1].append(("".join(chunk), sgr))
    return rows


def restyle(segments: list[Segment], sgr: str) -> list[Segment]:
    return [(text, sgr) for text, _ in segments]


def segments_to_ansi(segments: list[Segment]) -> str:
    out: list[str] = []
    for text, sgr in segments:
        if not text:
            continue
        if sgr:
            out.append(f"\x1b[{sgr}m{text}{RESET}")
        else:
            out.append(text)
    return "".join(out)
