"""Synthesize unified-diff text comparing two files.

Output uses ``--- a`` / ``+++ b`` headers and ``@@ -a,b +c,d @@`` hunks that
always carry both counts, with three lines of context around each change.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from pathlib import Path

from ..errors import ContentLoadError

DIFF_CONTEXT_LINES = 3


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return path.read_text(encoding="latin-1")


def _hunk_start(start: int, length: int) -> int:
    """Return 1-based hunk start; empty ranges point at the preceding line."""
    return start + 1 if length else start


def _terminated(line: str) -> str:
    return line if line.endswith("\n") else line + "\n"


def unified_diff_text(
    old_lines: list[str],
    new_lines: list[str],
    old_label: str,
    new_label: str,
    context: int = DIFF_CONTEXT_LINES,
) -> str:
    """Build unified diff text for two line lists (lines keep their newlines)."""
    out: list[str] = [f"--- {old_label}\n", f"+++ {new_label}\n"]
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for group in matcher.get_grouped_opcodes(context):
        old_begin, old_end = group[0][1], group[-1][2]
        new_begin, new_end = group[0][3], group[-1][4]
        old_len = old_end - old_begin
        new_len = new_end - new_begin
        out.append(
            f"@@ -{_hunk_start(old_begin, old_len)},{old_len} "
            f"+{_hunk_start(new_begin, new_len)},{new_len} @@\n"
        )
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                out.extend(" " + _terminated(line) for line in old_lines[i1:i2])
                continue
            if tag in {"replace", "delete"}:
                out.extend("-" + _terminated(line) for line in old_lines[i1:i2])
            if tag in {"replace", "insert"}:
                out.extend("+" + _terminated(line) for line in new_lines[j1:j2])
    return "".join(out)


def diff_files(old_path: Path, new_path: Path) -> bytes:
    """Read two text files and return their unified diff as UTF-8 bytes."""
    texts: list[str] = []
    for path in (old_path, new_path):
        try:
            texts.append(read_text(path))
        except OSError as exc:
            raise ContentLoadError(path, f"cannot read: {exc.strerror or exc}") from exc
    diff = unified_diff_text(
        texts[0].splitlines(keepends=True),
        texts[1].splitlines(keepends=True),
        str(old_path),
        str(new_path),
    )
    return diff.encode("utf-8")


def diff_display_name(old_path: Path, new_path: Path) -> str:
    return f"{old_path.name} → {new_path.name}"
