"""Frame composition: tab bar, gutter, content rows, status and prompt lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..buffer import GitChange
from ..runtime.mode import CommandInput, FilterInput, Follow, SearchInput, Visual
from .ansi import (
    Segment,
    expand_tabs,
    restyle,
    segments_to_ansi,
    slice_segments,
    text_display_width,
    wrap_segments,
)
from .highlight import Highlighter

if TYPE_CHECKING:
    from ..runtime.app import PagerApp

TAB_ACTIVE_STYLE = "1;7"
TAB_INACTIVE_STYLE = "2"
STATUS_STYLE = "7"
GUTTER_STYLE = "2"
SELECTION_STYLE = "7"
FILLER_STYLE = "2;34"
CHANGE_MARKERS: dict[GitChange, Segment] = {
    GitChange.ADDED: ("+", "32"),
    GitChange.MODIFIED: ("~", "33"),
    GitChange.DELETED: ("_", "31"),
}


def fit_text(text: str, width: int) -> str:
    """Clip or pad plain text to exactly ``width`` columns."""
    clipped = slice_segments([(text, "")], 0, width)
    body = clipped[0][0] if clipped else ""
    return body + " " * max(0, width - text_display_width(body))


def tab_bar(app: PagerApp, columns: int) -> str:
    segments: list[Segment] = []
    for idx, buffer in enumerate(app.buffers):
        style = TAB_ACTIVE_STYLE if idx == app.active else TAB_INACTIVE_STYLE
        segments.append((f" {idx + 1}:{buffer.name} ", style))
        segments.append((" ", ""))
    return segments_to_ansi(slice_segments(segments, 0, columns))


def gutter_segments(app: PagerApp, line: int | None, width: int, first_row: bool) -> list[Segment]:
    if width <= 0:
        return []
    if line is None or not first_row:
        return [(" " * width, "")]
    number = str(line + 1).rjust(width - 2)
    marker = CHANGE_MARKERS.get(app.buffer.changes.get(line)) if app.buffer.changes else None
    return [(number, GUTTER_STYLE), marker or (" ", ""), (" ", "")]


def line_segments(app: PagerApp, highlighter: Highlighter, line: int) -> list[Segment]:
    buffer = app.buffer
    text = buffer.display_line(line)
    if text is None:
        return []
    if buffer.is_binary():
        return [(text, "")]
    search = app.search
    current = search.current_match()
    return highlighter.highlight_line(
        buffer,
        text,
        matches=search.matches_on_line(line),
        preview=search.preview_on_line(line),
        current=current if current is not None and current.line == line else None,
    )


def content_rows(app: PagerApp, highlighter: Highlighter, columns: int) -> list[str]:
    """Render exactly ``viewport.height`` content rows."""
    viewport = app.viewport
    gutter = app.gutter_width()
    text_width = max(1, columns - gutter)
    selection = app.mode.selection if isinstance(app.mode, Visual) else None
    rows: list[str] = []
    position = viewport.top
    while len(rows) < viewport.height:
        line = app.line_at(position) if position < viewport.total else None
        if line is None:
            rows.append(segments_to_ansi([("~", FILLER_STYLE)]))
            position += 1
            continue
        segments = expand_tabs(line_segments(app, highlighter, line))
        if selection is not None and selection[0] <= position <= selection[1]:
            segments = restyle(segments, SELECTION_STYLE) or [(" ", SELECTION_STYLE)]
        if app.wrap_lines:
            pieces = wrap_segments(segments, text_width)
        else:
            pieces = [slice_segments(segments, viewport.left_col, text_width)]
        for idx, piece in enumerate(pieces):
            if len(rows) >= viewport.height:
                break
            rows.append(segments_to_ansi(gutter_segments(app, line, gutter, idx == 0) + piece))
        position += 1
    return rows


def mode_label(app: PagerApp) -> str:
    mode = app.mode
    if isinstance(mode, Follow):
        return "[FOLLOW]"
    if isinstance(mode, Visual):
        low, high = mode.selection
        return f"[VISUAL {high - low + 1}]"
    if app.filter.active:
        return f"[FILTER &{app.filter.query}]"
    return ""


def status_bar(app: PagerApp, columns: int) -> str:
    buffer = app.buffer
    left = f" {buffer.name} {mode_label(app)}".rstrip()
    right_parts: list[str] = []
    if app.search.has_pattern():
        count = app.search.match_count()
        suffix = "+" if app.search.searching else ""
        if count:
            right_parts.append(f"{app.search.current + 1}/{count}{suffix}")
        else:
            right_parts.append(f"0{suffix}")
    right_parts.append(f"L{app.top_line + 1}/{buffer.display_line_count()}")
    right_parts.append(f"{app.viewport.scroll_percentage()}%")
    right = " ".join(right_parts) + " "
    gap = columns - text_display_width(left) - text_display_width(right)
    if gap < 1:
        return segments_to_ansi([(fit_text(left, columns), STATUS_STYLE)])
    return segments_to_ansi([(left + " " * gap + right, STATUS_STYLE)])


def message_line(app: PagerApp, columns: int) -> str:
    mode = app.mode
    if isinstance(mode, (SearchInput, CommandInput, FilterInput)):
        return fit_text(mode.prompt, columns).rstrip()
    return fit_text(app.status_message, columns).rstrip()


def render_screen(app: PagerApp, highlighter: Highlighter, columns: int, rows: int) -> str:
    """Compose one full frame; rows are separated by CRLF for raw-mode output."""
    lines: list[str] = []
    if app.has_tab_bar():
        lines.append(tab_bar(app, columns))
    lines.extend(content_rows(app, highlighter, columns))
    lines.append(status_bar(app, columns))
    lines.append(message_line(app, columns))
    lines = lines[: max(1, rows)]
    return "\x1b[H" + "\r\n".join(line + "\x1b[K" for line in lines)
