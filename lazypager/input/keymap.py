"""Key-binding resolution from key tokens to abstract actions.

A primary table holds the overridable defaults. A fixed secondary table
(arrows, page keys, enter, ctrl+c) is consulted only when the primary table
has no entry, and configuration can never remove or reassign it.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from types import MappingProxyType


class Action(enum.Enum):
    QUIT = "quit"
    SCROLL_DOWN = "scroll_down"
    SCROLL_UP = "scroll_up"
    HALF_PAGE_DOWN = "half_page_down"
    HALF_PAGE_UP = "half_page_up"
    FULL_PAGE_DOWN = "full_page_down"
    FULL_PAGE_UP = "full_page_up"
    GOTO_TOP = "goto_top"
    GOTO_BOTTOM = "goto_bottom"
    PREV_BUFFER = "prev_buffer"
    NEXT_BUFFER = "next_buffer"
    SEARCH_FORWARD = "search_forward"
    SEARCH_BACKWARD = "search_backward"
    NEXT_MATCH = "next_match"
    PREV_MATCH = "prev_match"
    TOGGLE_NUMBERS = "toggle_numbers"
    TOGGLE_WRAP = "toggle_wrap"
    FOLLOW = "follow_mode"
    ENTER_COMMAND = "enter_command"
    FILTER = "filter"
    VISUAL = "visual"
    SET_MARK = "set_mark"
    JUMP_MARK = "jump_mark"
    SCROLL_RIGHT = "scroll_right"
    SCROLL_LEFT = "scroll_left"


DEFAULT_BINDINGS: Mapping[str, Action] = MappingProxyType(
    {
        "q": Action.QUIT,
        "j": Action.SCROLL_DOWN,
        "k": Action.SCROLL_UP,
        "CTRL_D": Action.HALF_PAGE_DOWN,
        "d": Action.HALF_PAGE_DOWN,
        "CTRL_U": Action.HALF_PAGE_UP,
        "u": Action.HALF_PAGE_UP,
        " ": Action.FULL_PAGE_DOWN,
        "b": Action.FULL_PAGE_UP,
        "g": Action.GOTO_TOP,
        "G": Action.GOTO_BOTTOM,
        "[": Action.PREV_BUFFER,
        "]": Action.NEXT_BUFFER,
        "/": Action.SEARCH_FORWARD,
        "?": Action.SEARCH_BACKWARD,
        "n": Action.NEXT_MATCH,
        "N": Action.PREV_MATCH,
        "l": Action.TOGGLE_NUMBERS,
        "w": Action.TOGGLE_WRAP,
        "F": Action.FOLLOW,
        ":": Action.ENTER_COMMAND,
        "&": Action.FILTER,
        "v": Action.VISUAL,
        "m": Action.SET_MARK,
        "'": Action.JUMP_MARK,
        "RIGHT": Action.SCROLL_RIGHT,
        "LEFT": Action.SCROLL_LEFT,
    }
)

SECONDARY_BINDINGS: Mapping[str, Action] = MappingProxyType(
    {
        "DOWN": Action.SCROLL_DOWN,
        "ENTER": Action.SCROLL_DOWN,
        "UP": Action.SCROLL_UP,
        "PAGE_DOWN": Action.FULL_PAGE_DOWN,
        "PAGE_UP": Action.FULL_PAGE_UP,
        "HOME": Action.GOTO_TOP,
        "END": Action.GOTO_BOTTOM,
        "CTRL_C": Action.QUIT,
    }
)

_NAMED_KEYS = {
    "space": " ",
    "enter": "ENTER",
    "return": "ENTER",
    "tab": "TAB",
    "pagedown": "PAGE_DOWN",
    "page-down": "PAGE_DOWN",
    "page_down": "PAGE_DOWN",
    "pgdn": "PAGE_DOWN",
    "pageup": "PAGE_UP",
    "page-up": "PAGE_UP",
    "page_up": "PAGE_UP",
    "pgup": "PAGE_UP",
    "home": "HOME",
    "end": "END",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "backspace": "BACKSPACE",
    "delete": "DELETE",
    "del": "DELETE",
    "escape": "ESC",
    "esc": "ESC",
}


def parse_key_spec(spec: str) -> str | None:
    """Parse a configuration key spec into a key token.

    ``ctrl+<char>`` yields ``CTRL_<CHAR>``; named keys are case-insensitive;
    any other single character is taken literally. Returns ``None`` for
    anything else.
    """
    if not isinstance(spec, str) or not spec:
        return None
    lower = spec.lower()
    if lower.startswith("ctrl+"):
        rest = spec[len("ctrl+") :]
        if len(rest) != 1 or not rest.isprintable() or rest.isspace():
            return None
        return f"CTRL_{rest.upper()}"
    named = _NAMED_KEYS.get(lower)
    if named is not None:
        return named
    if len(spec) == 1 and spec.isprintable():
        return spec
    return None


def action_for_name(name: str) -> Action | None:
    try:
        return Action(name)
    except ValueError:
        return None


class KeyBindingTable:
    """Two-tier key lookup with per-action overrides on the primary tier."""

    def __init__(self) -> None:
        self.primary: dict[str, Action] = dict(DEFAULT_BINDINGS)
        self.secondary: Mapping[str, Action] = SECONDARY_BINDINGS
        self.rejected: list[tuple[str, str]] = []

    @classmethod
    def build(cls, overrides: Mapping[str, str] | None = None) -> KeyBindingTable:
        table = cls()
        if overrides:
            table.apply_overrides(overrides)
        return table

    def resolve(self, key: str) -> Action | None:
        action = self.primary.get(key)
        if action is not None:
            return action
        return self.secondary.get(key)

    def apply_override(self, action: Action, spec: str) -> bool:
        """Rebind ``action`` to ``spec``, dropping its previous primary keys.

        Malformed specs leave the table unchanged and are recorded in
        ``rejected``.
        """
        key = parse_key_spec(spec)
        if key is None:
            self.rejected.append((action.value, str(spec)))
            return False
        for bound_key in [k for k, bound in self.primary.items() if bound is action]:
            del self.primary[bound_key]
        self.primary[key] = action
        return True

    def apply_overrides(self, overrides: Mapping[str, str]) -> None:
        for name, spec in overrides.items():
            action = action_for_name(name)
            if action is None:
                self.rejected.append((str(name), str(spec)))
                continue
            self.apply_override(action, spec)
