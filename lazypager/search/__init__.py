"""Search and filter engines over buffers."""

from __future__ import annotations

from .background import ASYNC_BATCH_LINES, BackgroundSearch, SearchBatch, scan_snapshot
from .engine import SearchEngine
from .filter import FilterEngine, FilterView, filter_lines
from .pattern import Match, SearchPattern, compile_pattern, find_line_matches

__all__ = [
    "ASYNC_BATCH_LINES",
    "BackgroundSearch",
    "FilterEngine",
    "FilterView",
    "Match",
    "SearchBatch",
    "SearchEngine",
    "SearchPattern",
    "compile_pattern",
    "filter_lines",
    "find_line_matches",
    "scan_snapshot",
]
