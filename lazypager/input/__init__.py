"""Key decoding, the key binding table, and per-mode key handlers."""

from __future__ import annotations

from .keymap import DEFAULT_BINDINGS, SECONDARY_BINDINGS, Action, KeyBindingTable, parse_key_spec
from .keys import is_named_mark_key, is_text_key, read_key

__all__ = [
    "Action",
    "DEFAULT_BINDINGS",
    "KeyBindingTable",
    "SECONDARY_BINDINGS",
    "is_named_mark_key",
    "is_text_key",
    "parse_key_spec",
    "read_key",
]
