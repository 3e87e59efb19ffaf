"""Content addressing: byte sources, line indexes, and buffers."""

from __future__ import annotations

from .buffer import HEX_ROW_BYTES, STDIN_NAME, Buffer
from .git_changes import GitChange, load_git_changes, parse_git_changes
from .line_index import LineIndex, index_lines
from .source import (
    BINARY_PROBE_BYTES,
    DEFAULT_MMAP_THRESHOLD,
    ContentSource,
    MappedSource,
    MemorySource,
    load_source,
)

__all__ = [
    "BINARY_PROBE_BYTES",
    "Buffer",
    "ContentSource",
    "DEFAULT_MMAP_THRESHOLD",
    "GitChange",
    "HEX_ROW_BYTES",
    "LineIndex",
    "MappedSource",
    "MemorySource",
    "STDIN_NAME",
    "index_lines",
    "load_git_changes",
    "load_source",
    "parse_git_changes",
]
