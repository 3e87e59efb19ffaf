"""Per-mode key handling: the edges of the mode state machine."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..runtime.mode import CommandInput, FilterInput, Follow, Normal, SearchInput, Visual
from .keymap import Action
from .keys import is_named_mark_key, is_text_key

if TYPE_CHECKING:
    from ..runtime.app import PagerApp

MOUSE_SCROLL_ROWS = 3
YANK_KEY = "y"


def edit_input(text: str, key: str) -> str | None:
    """Apply an editing key to prompt text; ``None`` when the key is not an edit."""
    if key == "BACKSPACE":
        return text[:-1]
    if is_text_key(key):
        return text + key
    return None


def _mouse_wheel_rows(key: str) -> int:
    if key.startswith("MOUSE_WHEEL_DOWN"):
        return MOUSE_SCROLL_ROWS
    if key.startswith("MOUSE_WHEEL_UP"):
        return -MOUSE_SCROLL_ROWS
    return 0


def _start_search(forward: bool) -> Callable[[PagerApp], None]:
    def action(app: PagerApp) -> None:
        app.mode = SearchInput(text="", forward=forward)
        app.search.clear_preview()

    return action


_NORMAL_ACTIONS: dict[Action, Callable[[PagerApp], None]] = {
    Action.QUIT: lambda app: setattr(app, "quit", True),
    Action.SCROLL_DOWN: lambda app: app.scroll_down(1),
    Action.SCROLL_UP: lambda app: app.scroll_up(1),
    Action.HALF_PAGE_DOWN: lambda app: app.scroll_down(app.viewport.half_page()),
    Action.HALF_PAGE_UP: lambda app: app.scroll_up(app.viewport.half_page()),
    Action.FULL_PAGE_DOWN: lambda app: app.scroll_down(app.viewport.height),
    Action.FULL_PAGE_UP: lambda app: app.scroll_up(app.viewport.height),
    Action.GOTO_TOP: lambda app: app.goto_top(),
    Action.GOTO_BOTTOM: lambda app: app.goto_bottom(),
    Action.PREV_BUFFER: lambda app: app.prev_buffer(),
    Action.NEXT_BUFFER: lambda app: app.next_buffer(),
    Action.SEARCH_FORWARD: _start_search(True),
    Action.SEARCH_BACKWARD: _start_search(False),
    Action.NEXT_MATCH: lambda app: app.step_match(True),
    Action.PREV_MATCH: lambda app: app.step_match(False),
    Action.TOGGLE_NUMBERS: lambda app: app.toggle_line_numbers(),
    Action.TOGGLE_WRAP: lambda app: app.toggle_wrap(),
    Action.FOLLOW: lambda app: app.enter_follow(),
    Action.ENTER_COMMAND: lambda app: setattr(app, "mode", CommandInput()),
    Action.FILTER: lambda app: setattr(app, "mode", FilterInput()),
    Action.VISUAL: lambda app: app.enter_visual(),
    Action.SET_MARK: lambda app: app.begin_pending(Action.SET_MARK),
    Action.JUMP_MARK: lambda app: app.begin_pending(Action.JUMP_MARK),
    Action.SCROLL_RIGHT: lambda app: app.viewport.scroll_right(),
    Action.SCROLL_LEFT: lambda app: app.viewport.scroll_left(),
}


def handle_normal_key(app: PagerApp, key: str) -> None:
    pending = app.pending_key
    if pending is not None:
        app.pending_key = None
        if not is_named_mark_key(key):
            app.set_status("")
            return
        if pending is Action.SET_MARK:
            app.set_mark(key)
        else:
            app.jump_to_mark(key)
        return

    wheel = _mouse_wheel_rows(key)
    if wheel:
        if wheel > 0:
            app.scroll_down(wheel)
        else:
            app.scroll_up(-wheel)
        return

    action = app.keymap.resolve(key)
    if action is None:
        return
    _NORMAL_ACTIONS[action](app)


def handle_search_key(app: PagerApp, key: str) -> None:
    mode = app.mode
    assert isinstance(mode, SearchInput)
    if key == "ENTER":
        app.mode = Normal()
        app.execute_search(mode.text, mode.forward)
        return
    if key == "ESC":
        app.mode = Normal()
        app.search.clear_preview()
        app.set_status("")
        return
    text = edit_input(mode.text, key)
    if text is None:
        return
    app.mode = SearchInput(text=text, forward=mode.forward)
    app.update_preview(text)


def handle_command_key(app: PagerApp, key: str) -> None:
    mode = app.mode
    assert isinstance(mode, CommandInput)
    if key == "ENTER":
        app.mode = Normal()
        app.execute_command(mode.text)
        return
    if key == "ESC":
        app.mode = Normal()
        app.set_status("")
        return
    text = edit_input(mode.text, key)
    if text is not None:
        app.mode = CommandInput(text=text)


def handle_filter_key(app: PagerApp, key: str) -> None:
    mode = app.mode
    assert isinstance(mode, FilterInput)
    if key == "ENTER":
        app.mode = Normal()
        app.apply_filter(mode.text)
        return
    if key == "ESC":
        app.mode = Normal()
        app.clear_filter()
        app.set_status("")
        return
    text = edit_input(mode.text, key)
    if text is not None:
        app.mode = FilterInput(text=text)


def handle_follow_key(app: PagerApp, key: str) -> None:
    if key == "ESC" or app.keymap.resolve(key) is Action.QUIT:
        app.mode = Normal()
        app.set_status("")


_VISUAL_MOVES: dict[Action, Callable[[PagerApp], int]] = {
    Action.SCROLL_DOWN: lambda app: 1,
    Action.SCROLL_UP: lambda app: -1,
    Action.HALF_PAGE_DOWN: lambda app: app.viewport.half_page(),
    Action.HALF_PAGE_UP: lambda app: -app.viewport.half_page(),
    Action.FULL_PAGE_DOWN: lambda app: app.viewport.height,
    Action.FULL_PAGE_UP: lambda app: -app.viewport.height,
    Action.GOTO_TOP: lambda app: -app.total_rows(),
    Action.GOTO_BOTTOM: lambda app: app.total_rows(),
}


def handle_visual_key(app: PagerApp, key: str) -> None:
    if key == YANK_KEY:
        app.yank_selection()
        return
    action = app.keymap.resolve(key)
    if key == "ESC" or action is Action.QUIT:
        app.mode = Normal()
        app.set_status("")
        return
    move = _VISUAL_MOVES.get(action) if action is not None else None
    if move is not None:
        app.move_visual_cursor(move(app))


_MODE_HANDLERS: dict[type, Callable[[PagerApp, str], None]] = {
    Normal: handle_normal_key,
    SearchInput: handle_search_key,
    CommandInput: handle_command_key,
    FilterInput: handle_filter_key,
    Follow: handle_follow_key,
    Visual: handle_visual_key,
}


def handle_key(app: PagerApp, key: str) -> None:
    """Route one key token to the handler for the current mode.

    ``ctrl+c`` sets the quit flag from every mode.
    """
    if not key:
        return
    if key == "CTRL_C":
        app.quit = True
        return
    _MODE_HANDLERS[type(app.mode)](app, key)
    app.sync_viewport()
    app.dirty = True
