"""JSON configuration loading.

Reads ``general`` preferences and ``keys`` overrides from the per-user config
file. All access is defensive: a missing, unreadable, or malformed file, or
any ill-typed value, falls back to the default for that value.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..buffer import DEFAULT_MMAP_THRESHOLD

APP_NAME = "lazypager"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_STYLE = "monokai"
DEFAULT_ASYNC_SEARCH_MIN_LINES = 50_000


@dataclass
class PagerConfig:
    """Resolved primitives handed to the core."""

    line_numbers: bool = False
    wrap: bool = False
    smart_case: bool = True
    mmap_threshold: int = DEFAULT_MMAP_THRESHOLD
    style: str = DEFAULT_STYLE
    syntax: bool = True
    git_changes: bool = True
    async_search_min_lines: int = DEFAULT_ASYNC_SEARCH_MIN_LINES
    keys: dict[str, str] = field(default_factory=dict)


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _bool_value(section: dict[str, object], key: str, default: bool) -> bool:
    value = section.get(key)
    return value if isinstance(value, bool) else default


def _positive_int_value(section: dict[str, object], key: str, default: int) -> int:
    """Booleans, non-integers, and values below 1 fall back to ``default``."""
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _str_value(section: dict[str, object], key: str, default: str) -> str:
    value = section.get(key)
    if not isinstance(value, str):
        return default
    stripped = value.strip()
    return stripped if stripped else default


def parse_config(data: dict[str, object]) -> PagerConfig:
    """Normalize a decoded JSON object into ``PagerConfig``."""
    general = data.get("general")
    if not isinstance(general, dict):
        general = {}
    keys = data.get("keys")
    if not isinstance(keys, dict):
        keys = {}

    defaults = PagerConfig()
    return PagerConfig(
        line_numbers=_bool_value(general, "line_numbers", defaults.line_numbers),
        wrap=_bool_value(general, "wrap", defaults.wrap),
        smart_case=_bool_value(general, "smart_case", defaults.smart_case),
        mmap_threshold=_positive_int_value(general, "mmap_threshold", defaults.mmap_threshold),
        style=_str_value(general, "style", defaults.style),
        syntax=_bool_value(general, "syntax", defaults.syntax),
        git_changes=_bool_value(general, "git_changes", defaults.git_changes),
        async_search_min_lines=_positive_int_value(
            general, "async_search_min_lines", defaults.async_search_min_lines
        ),
        keys={str(name): spec for name, spec in keys.items() if isinstance(spec, str)},
    )


def load_pager_config() -> PagerConfig:
    return parse_config(load_config())
