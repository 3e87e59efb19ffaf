"""Exception taxonomy shared by loaders, search, and the runtime.

Only load failures and malformed patterns surface as exceptions.
Decode problems make a line absent and never raise.
"""

from __future__ import annotations

from pathlib import Path


class PagerError(Exception):
    """Base class for recoverable pager errors."""


class ContentLoadError(PagerError):
    """Opening, stat-ing, reading, or decompressing a content origin failed."""

    def __init__(self, path: Path | None, message: str) -> None:
        self.path = path
        label = str(path) if path is not None else "[stdin]"
        super().__init__(f"{label}: {message}")


class InvalidPatternError(PagerError, ValueError):
    """A search or filter expression failed to compile."""

    def __init__(self, query: str, reason: str) -> None:
        self.query = query
        self.reason = reason
        super().__init__(f"invalid pattern {query!r}: {reason}")
