"""One open document: content source, line index, and metadata.

Buffers are created from a file, a stream, or a synthesized diff. Only
``reload`` mutates them, by swapping source and index together.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from ..errors import ContentLoadError
from .diff import diff_display_name, diff_files
from .git_changes import GitChange, load_git_changes
from .line_index import LineIndex
from .source import DEFAULT_MMAP_THRESHOLD, ContentSource, MemorySource, load_source, probe_binary

logger = logging.getLogger(__name__)

HEX_ROW_BYTES = 16
STDIN_NAME = "[stdin]"


class Buffer:
    """Random line access over immutable byte content."""

    def __init__(
        self,
        source: ContentSource,
        *,
        path: Path | None = None,
        name: str = "",
        is_diff: bool = False,
        reloadable: bool = False,
        mmap_threshold: int = DEFAULT_MMAP_THRESHOLD,
    ) -> None:
        self.source = source
        self.line_index = LineIndex.build(source.data)
        self._binary = probe_binary(source)
        self.path = path
        self.name = name or (path.name if path is not None else STDIN_NAME)
        self.is_diff = is_diff
        self.reloadable = reloadable
        self.mmap_threshold = mmap_threshold
        self.changes: dict[int, GitChange] = {}

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "[memory]") -> Buffer:
        return cls(MemorySource(data), name=name)

    @classmethod
    def from_file(cls, path: Path, mmap_threshold: int = DEFAULT_MMAP_THRESHOLD) -> Buffer:
        """Load ``path``, mapping it when large and decompressing when compressed."""
        source = load_source(path, mmap_threshold)
        return cls(
            source,
            path=path,
            name=path.name or str(path),
            reloadable=True,
            mmap_threshold=mmap_threshold,
        )

    @classmethod
    def from_stdin(cls, stream: BinaryIO) -> Buffer:
        try:
            data = stream.read()
        except OSError as exc:
            raise ContentLoadError(None, f"failed to read from stdin: {exc}") from exc
        return cls(MemorySource(data), name=STDIN_NAME)

    @classmethod
    def from_diff(cls, old_path: Path, new_path: Path) -> Buffer:
        """Create a non-reloadable unified diff buffer comparing two files."""
        data = diff_files(old_path, new_path)
        return cls(
            MemorySource(data),
            name=diff_display_name(old_path, new_path),
            is_diff=True,
        )

    def __len__(self) -> int:
        return len(self.line_index)

    @property
    def size(self) -> int:
        return len(self.source)

    def line_count(self) -> int:
        return len(self.line_index)

    def is_binary(self) -> bool:
        return self._binary

    def hex_line_count(self) -> int:
        return -(-self.size // HEX_ROW_BYTES)

    def display_line_count(self) -> int:
        """Rows addressed by the viewport: hex rows for binary content, lines otherwise."""
        return self.hex_line_count() if self._binary else self.line_count()

    def get_line(self, line: int) -> str | None:
        """Return line text without its terminator, or ``None`` when absent.

        Out-of-range lines and bytes that are not valid UTF-8 are both absent.
        """
        span = self.line_index.span(line)
        if span is None:
            return None
        start, end = span
        raw = self.source.data[start:end]
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def hex_line(self, row: int) -> str:
        """Render one 16-byte hex dump row with offset and ASCII columns."""
        start = row * HEX_ROW_BYTES
        if row < 0 or start >= self.size:
            return ""
        chunk = self.source.data[start : start + HEX_ROW_BYTES]
        parts: list[str] = []
        for idx, byte in enumerate(chunk):
            if idx:
                parts.append("  " if idx == 8 else " ")
            parts.append(f"{byte:02x}")
        ascii_text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        return f"{start:08x}  {''.join(parts):<48} |{ascii_text}|"

    def display_line(self, row: int) -> str | None:
        if self._binary:
            return self.hex_line(row) if 0 <= row < self.hex_line_count() else None
        return self.get_line(row)

    def text_snapshot(self) -> tuple[str | None, ...]:
        """Decode every line into an immutable tuple for off-thread scanning."""
        return tuple(self.get_line(idx) for idx in range(self.line_count()))

    def refresh_changes(self) -> None:
        """Re-query version control annotations for file-backed buffers."""
        if self.path is None or self.is_diff:
            self.changes = {}
            return
        self.changes = load_git_changes(self.path)

    def reload(self, *, with_changes: bool = False) -> bool:
        """Re-run the load procedure, swapping source and index together.

        Returns ``False`` for buffers without a reloadable origin. Load
        failures raise ``ContentLoadError`` and keep the previous content.
        """
        if not self.reloadable or self.path is None:
            return False
        source = load_source(self.path, self.mmap_threshold)
        line_index = LineIndex.build(source.data)
        previous = self.source
        self.source, self.line_index, self._binary = source, line_index, probe_binary(source)
        previous.close()
        if with_changes:
            self.refresh_changes()
        logger.debug("reloaded %s: %d lines", self.path, len(line_index))
        return True
