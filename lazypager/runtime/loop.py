"""Main interactive event loop.

Each tick drains file-change events and background search batches, renders
when something changed, then waits briefly for one key. All state changes
happen on this thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import PagerError
from ..input.keys import read_key
from ..render.highlight import Highlighter
from ..render.screen import render_screen
from .terminal import TerminalController
from .watch import FileWatcher

if TYPE_CHECKING:
    from .app import PagerApp

logger = logging.getLogger(__name__)

STATUS_ROWS = 2


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 200


def content_height(app: PagerApp, rows: int) -> int:
    """Rows left for content below the tab bar and above status and prompt."""
    tab_rows = 1 if app.has_tab_bar() else 0
    return max(1, rows - STATUS_ROWS - tab_rows)


def fit_to_terminal(app: PagerApp, columns: int, rows: int) -> None:
    width = max(1, columns - app.gutter_width())
    height = content_height(app, rows)
    viewport = app.viewport
    if viewport.width != width or viewport.height != height:
        app.resize(width, height)


def run_tick(
    app: PagerApp,
    terminal: TerminalController,
    stdin_fd: int,
    highlighter: Highlighter,
    watcher: FileWatcher | None,
    timing: RuntimeLoopTiming,
) -> None:
    """Run one loop iteration: background results, render, one key."""
    if watcher is not None:
        events = watcher.drain_events()
        if events:
            app.handle_content_changes(events)
    app.drain_search_results()

    columns, rows = terminal.size()
    fit_to_terminal(app, columns, rows)
    if app.dirty:
        terminal.write_frame(render_screen(app, highlighter, columns, rows))
        app.dirty = False

    try:
        key = read_key(stdin_fd, timeout_ms=timing.key_timeout_ms)
    except KeyboardInterrupt:
        key = "CTRL_C"
    if not key:
        return
    try:
        app.handle_key(key)
    except PagerError as exc:
        logger.warning("key %r failed: %s", key, exc)
        app.set_status(str(exc))


def run_main_loop(
    app: PagerApp,
    terminal: TerminalController,
    stdin_fd: int,
    highlighter: Highlighter | None = None,
    watcher: FileWatcher | None = None,
    timing: RuntimeLoopTiming | None = None,
) -> None:
    """Run the pager until a quit action sets ``app.quit``."""
    highlighter = highlighter if highlighter is not None else Highlighter()
    timing = timing if timing is not None else RuntimeLoopTiming()
    with terminal.raw_mode():
        while not app.quit:
            run_tick(app, terminal, stdin_fd, highlighter, watcher, timing)
