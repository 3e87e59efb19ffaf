"""Per-line change annotations from ``git diff HEAD``.

Produces a sparse mapping from 0-based line number to change kind.
Any git failure (missing binary, not a repo, timeout) yields no annotations.
"""

from __future__ import annotations

import enum
import re
import subprocess
from pathlib import Path

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class GitChange(enum.Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


def parse_git_changes(diff_text: str) -> dict[int, GitChange]:
    """Map unified-diff hunk headers onto new-file line numbers.

    Hunks that add nothing mark the line above the deletion point as deleted.
    Hunks replacing nothing mark their lines added, others modified. The first
    annotation for a line wins.
    """
    changes: dict[int, GitChange] = {}
    for raw_line in diff_text.splitlines():
        match = _HUNK_RE.match(raw_line)
        if match is None:
            continue
        old_count = int(match.group(2) or "1")
        new_start = int(match.group(3))
        new_count = int(match.group(4) or "1")
        if new_count == 0:
            if new_start > 0:
                changes.setdefault(new_start - 1, GitChange.DELETED)
            continue
        tag = GitChange.ADDED if old_count == 0 else GitChange.MODIFIED
        for line_no in range(new_start, new_start + new_count):
            if line_no > 0:
                changes.setdefault(line_no - 1, tag)
    return changes


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    """Execute a git subcommand with timeout and tolerant failure handling."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def load_git_changes(path: Path, timeout_seconds: float = 2.0) -> dict[int, GitChange]:
    """Return line change kinds for ``path`` relative to ``HEAD``."""
    resolved = path.resolve()
    proc = _run_git(
        resolved.parent,
        ["diff", "HEAD", "--unified=0", "--", str(resolved)],
        timeout_seconds,
    )
    if proc is None:
        return {}
    if proc.returncode != 0 and not proc.stdout:
        return {}
    return parse_git_changes(proc.stdout)
