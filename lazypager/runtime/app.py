"""Application core: buffer collection, mode, viewport, search, and marks.

``PagerApp`` is mutated only by the main loop. Key handling lives in
``lazypager.input.handlers``; this module provides the operations those
handlers call and the hooks the loop uses for background results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from ..buffer import Buffer
from ..errors import ContentLoadError, InvalidPatternError
from ..input.handlers import handle_key as dispatch_key
from ..input.keymap import Action, KeyBindingTable
from ..search import FilterEngine, SearchEngine, compile_pattern
from .clipboard import copy_text_to_clipboard
from .config import PagerConfig
from .mode import Follow, Mode, Normal, Visual
from .viewport import Viewport, gutter_width
from .watch import WatchEvent

logger = logging.getLogger(__name__)


class PagerApp:
    """State and operations behind every user-visible behavior."""

    def __init__(
        self,
        buffers: Sequence[Buffer],
        config: PagerConfig | None = None,
        keymap: KeyBindingTable | None = None,
        copy_to_clipboard: Callable[[str], bool] = copy_text_to_clipboard,
    ) -> None:
        if not buffers:
            raise ValueError("PagerApp needs at least one buffer")
        self.buffers: list[Buffer] = list(buffers)
        self.active = 0
        self.config = config if config is not None else PagerConfig()
        self.keymap = keymap if keymap is not None else KeyBindingTable.build(self.config.keys)
        self.mode: Mode = Normal()
        self.viewport = Viewport()
        self.search = SearchEngine()
        self.filter = FilterEngine()
        self.marks: dict[str, int] = {}
        self.pending_key: Action | None = None
        self.show_line_numbers = self.config.line_numbers
        self.wrap_lines = self.config.wrap
        self.status_message = ""
        self.quit = False
        self.dirty = True
        self._copy_to_clipboard = copy_to_clipboard
        self._search_origin: int | None = None
        self.viewport.reset(self.total_rows())
        if self.keymap.rejected:
            ignored = ", ".join(f"{name}={spec!r}" for name, spec in self.keymap.rejected)
            self.set_status(f"Ignored key bindings: {ignored}")

    # -- buffers and addressing -------------------------------------------

    @property
    def buffer(self) -> Buffer:
        return self.buffers[self.active]

    def total_rows(self) -> int:
        """Rows addressable by the viewport: filtered lines, hex rows, or lines."""
        if self.filter.view is not None:
            return len(self.filter.view)
        return self.buffer.display_line_count()

    def line_at(self, position: int) -> int | None:
        return self.filter.line_at(position)

    def position_of(self, line: int) -> int:
        return self.filter.position_of(line)

    @property
    def top_line(self) -> int:
        """Absolute line shown at the top of the viewport."""
        line = self.line_at(self.viewport.top)
        return line if line is not None else 0

    def sync_viewport(self) -> None:
        self.viewport.set_total(self.total_rows())

    def resize(self, width: int, height: int) -> None:
        self.viewport.resize(width, height)
        self.sync_viewport()
        self.dirty = True

    def gutter_width(self) -> int:
        return gutter_width(self.buffer.display_line_count(), self.show_line_numbers)

    def has_tab_bar(self) -> bool:
        return len(self.buffers) > 1

    def set_status(self, message: str) -> None:
        self.status_message = message
        self.dirty = True

    # -- scrolling --------------------------------------------------------

    def scroll_down(self, rows: int = 1) -> None:
        self.viewport.scroll_down(rows)

    def scroll_up(self, rows: int = 1) -> None:
        self.viewport.scroll_up(rows)

    def goto_line(self, line: int) -> None:
        """Centre absolute ``line`` (or the nearest filtered line after it)."""
        self.viewport.goto_line(self.position_of(line))

    def goto_top(self) -> None:
        self.viewport.goto_top()

    def goto_bottom(self) -> None:
        self.viewport.goto_bottom()

    def toggle_line_numbers(self) -> None:
        self.show_line_numbers = not self.show_line_numbers

    def toggle_wrap(self) -> None:
        self.wrap_lines = not self.wrap_lines
        self.set_status("Wrap on" if self.wrap_lines else "Wrap off")

    # -- buffer rotation --------------------------------------------------

    def _switch_buffer(self, step: int) -> None:
        if len(self.buffers) < 2:
            return
        self.active = (self.active + step) % len(self.buffers)
        self.filter.clear()
        self.search.clear_preview()
        self.viewport.reset(self.total_rows())
        if self.search.has_pattern():
            self.run_committed_search(position=False)
        self.set_status(f"Buffer {self.active + 1}/{len(self.buffers)}: {self.buffer.name}")

    def next_buffer(self) -> None:
        self._switch_buffer(1)

    def prev_buffer(self) -> None:
        self._switch_buffer(-1)

    # -- search -----------------------------------------------------------

    def _use_async_search(self) -> bool:
        return self.buffer.line_count() >= self.config.async_search_min_lines

    def _centre_current_match(self) -> None:
        line = self.search.current_match_line()
        if line is not None:
            self.goto_line(line)

    def run_committed_search(self, position: bool = True) -> None:
        """Re-run the committed pattern over the active buffer.

        Large buffers are scanned in the background; results then arrive
        through ``drain_search_results``.
        """
        if self._use_async_search():
            self._search_origin = self.top_line if position else None
            self.search.search_async(self.buffer)
            self.set_status(f"/{self.search.query} (searching...)")
            return
        self._search_origin = None
        self.search.search_buffer(self.buffer)
        if not position:
            return
        if self.search.match_count() == 0:
            self.set_status(f"Pattern not found: {self.search.query}")
            return
        self.search.jump_to_line(self.top_line)
        self._centre_current_match()
        self.set_status(f"/{self.search.query} ({self.search.match_count()} matches)")

    def execute_search(self, query: str, forward: bool = True) -> None:
        """Commit ``query`` and search the active buffer."""
        self.search.clear_preview()
        try:
            self.search.set_pattern(query, self.config.smart_case)
        except InvalidPatternError:
            self.set_status(f"Invalid regex: {query}")
            return
        self.search.forward = forward
        if not query:
            self.set_status("")
            return
        self.run_committed_search()

    def drain_search_results(self) -> bool:
        """Fold finished background batches into the committed set.

        Returns ``True`` when anything arrived.
        """
        batches = self.search.drain_async()
        for batch in batches:
            if self._search_origin is not None and batch.matches:
                if self.search.jump_to_line(self._search_origin):
                    self._centre_current_match()
                    self._search_origin = None
            if not batch.done:
                continue
            count = self.search.match_count()
            if self._search_origin is not None and count:
                self.search.current = 0
                self._centre_current_match()
            self._search_origin = None
            if count:
                self.set_status(f"/{self.search.query} ({count} matches)")
            else:
                self.set_status(f"Pattern not found: {self.search.query}")
        if batches:
            self.dirty = True
        return bool(batches)

    def step_match(self, forward: bool) -> None:
        """Advance in ``forward`` direction relative to the committed search direction."""
        if not self.search.has_pattern():
            return
        if forward == self.search.forward:
            self.search.next_match()
        else:
            self.search.prev_match()
        line = self.search.current_match_line()
        if line is None:
            return
        self.goto_line(line)
        self.set_status(f"Match {self.search.current + 1}/{self.search.match_count()}")

    def visible_line_range(self) -> tuple[int, int]:
        """Absolute ``[start, end)`` lines covering the rows on screen."""
        start, end = self.viewport.visible_range()
        view = self.filter.view
        if view is None:
            return start, end
        shown = view.lines[start:end]
        if not shown:
            return 0, 0
        return shown[0], shown[-1] + 1

    def update_preview(self, query: str) -> None:
        """Rebuild preview matches for the rows on screen from an uncommitted query."""
        if not query:
            self.search.clear_preview()
            return
        try:
            pattern = compile_pattern(query, smart_case=self.config.smart_case)
        except InvalidPatternError:
            self.search.clear_preview()
            return
        start, end = self.visible_line_range()
        self.search.search_visible_lines(self.buffer, start, end, pattern)

    # -- filter -----------------------------------------------------------

    def apply_filter(self, query: str) -> None:
        if not query:
            self.clear_filter()
            return
        try:
            view = self.filter.apply_filter(self.buffer, query)
        except InvalidPatternError:
            self.set_status(f"Invalid regex: {query}")
            return
        self.viewport.top = 0
        self.sync_viewport()
        count = len(view) if view is not None else 0
        self.set_status(f"&{query} ({count} lines)")

    def clear_filter(self) -> None:
        self.filter.clear()
        self.viewport.top = 0
        self.sync_viewport()

    # -- follow -----------------------------------------------------------

    def enter_follow(self) -> None:
        self.mode = Follow()
        self.goto_bottom()
        self.set_status("Follow mode: press q or Esc to exit")

    def reload_active_buffer(self) -> bool:
        """Reload the active buffer and rebuild everything derived from it."""
        buffer = self.buffer
        try:
            reloaded = buffer.reload(with_changes=self.config.git_changes)
        except ContentLoadError as exc:
            logger.warning("reload failed: %s", exc)
            self.set_status(str(exc))
            return False
        if not reloaded:
            return False
        if self.search.has_pattern():
            self.run_committed_search(position=False)
        if self.filter.active:
            self.filter.apply_filter(buffer, self.filter.query)
        self.sync_viewport()
        self.dirty = True
        return True

    def handle_content_changes(self, events: Iterable[WatchEvent]) -> bool:
        """React to watcher events; only Follow mode reloads and re-tails."""
        events = list(events)
        if not events or not isinstance(self.mode, Follow):
            return False
        path = self.buffer.path
        if path is None or all(event.path != path for event in events):
            return False
        if not self.reload_active_buffer():
            return False
        self.goto_bottom()
        return True

    # -- visual selection -------------------------------------------------

    def enter_visual(self) -> None:
        top = self.viewport.top
        self.mode = Visual(anchor=top, cursor=top)
        self.set_status("Visual: move to select, y to yank, Esc to cancel")

    def move_visual_cursor(self, delta: int) -> None:
        if not isinstance(self.mode, Visual):
            return
        last = max(0, self.total_rows() - 1)
        cursor = max(0, min(self.mode.cursor + delta, last))
        self.mode = Visual(anchor=self.mode.anchor, cursor=cursor)
        self.viewport.ensure_visible(cursor)

    def selected_text(self) -> str:
        if not isinstance(self.mode, Visual):
            return ""
        low, high = self.mode.selection
        lines: list[str] = []
        for position in range(low, high + 1):
            line = self.line_at(position)
            text = self.buffer.display_line(line) if line is not None else None
            lines.append(text if text is not None else "")
        return "\n".join(lines)

    def yank_selection(self) -> None:
        if not isinstance(self.mode, Visual):
            return
        low, high = self.mode.selection
        text = self.selected_text()
        self.mode = Normal()
        count = high - low + 1
        if self._copy_to_clipboard(text):
            self.set_status(f"Yanked {count} line{'s' if count != 1 else ''}")
        else:
            self.set_status("Clipboard unavailable")

    # -- marks ------------------------------------------------------------

    def begin_pending(self, action: Action) -> None:
        self.pending_key = action
        if action is Action.SET_MARK:
            self.set_status("m: press a key to set mark")
        else:
            self.set_status("': press a key to jump to mark")

    def set_mark(self, name: str) -> None:
        self.marks[name] = self.top_line
        self.set_status(f"Mark '{name}' set")

    def jump_to_mark(self, name: str) -> bool:
        line = self.marks.get(name)
        if line is None:
            self.set_status(f"No mark '{name}'")
            return False
        self.viewport.scroll_to(self.position_of(line))
        self.set_status(f"Jumped to mark '{name}'")
        return True

    # -- commands ---------------------------------------------------------

    def execute_command(self, text: str) -> None:
        command = text.strip()
        if command in {"q", "quit"}:
            self.quit = True
        elif command in {"n", "next"}:
            self.next_buffer()
        elif command in {"p", "prev"}:
            self.prev_buffer()
        elif command.isascii() and command.isdecimal():
            self.goto_line(max(0, int(command) - 1))
        else:
            self.set_status(f"Unknown command: {command}")

    def handle_key(self, key: str) -> None:
        dispatch_key(self, key)
