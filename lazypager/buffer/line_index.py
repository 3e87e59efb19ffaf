"""Offset table giving O(1) access to line starts."""

from __future__ import annotations

from array import array


def index_lines(data) -> array:
    """Return line-start offsets for ``data``.

    Offset 0 starts the first line; every ``\\n`` that is not the final byte
    starts another. Empty content has no lines at all.
    """
    offsets = array("Q")
    size = len(data)
    if size == 0:
        return offsets
    offsets.append(0)
    find = data.find
    pos = find(b"\n")
    while pos != -1 and pos + 1 < size:
        offsets.append(pos + 1)
        pos = find(b"\n", pos + 1)
    return offsets


class LineIndex:
    """Immutable sequence of line-start offsets over a byte span of ``size``."""

    def __init__(self, offsets: array, size: int) -> None:
        self._offsets = offsets
        self.size = size

    @classmethod
    def build(cls, data) -> LineIndex:
        return cls(index_lines(data), len(data))

    def __len__(self) -> int:
        return len(self._offsets)

    def __getitem__(self, idx: int) -> int:
        return self._offsets[idx]

    def span(self, line: int) -> tuple[int, int] | None:
        """Return ``(start, end)`` byte offsets of ``line`` or ``None`` if out of range."""
        count = len(self._offsets)
        if line < 0 or line >= count:
            return None
        start = self._offsets[line]
        end = self._offsets[line + 1] if line + 1 < count else self.size
        return start, end
