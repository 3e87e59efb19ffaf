"""Background full-buffer search reporting progressive match batches.

The worker scans an immutable snapshot, so reloading the live buffer while a
scan runs is safe. Batches carry a generation number; draining drops batches
from searches that have since been superseded.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from queue import Empty, Queue

from .pattern import Match, SearchPattern, find_line_matches

logger = logging.getLogger(__name__)

ASYNC_BATCH_LINES = 10_000


@dataclass(frozen=True)
class SearchBatch:
    """Matches found since the previous batch of the same search."""

    generation: int
    matches: tuple[Match, ...]
    lines_scanned: int
    total_lines: int
    done: bool


def scan_snapshot(
    pattern: SearchPattern,
    snapshot: Sequence[str | None],
    generation: int,
    emit: Callable[[SearchBatch], None],
    batch_lines: int = ASYNC_BATCH_LINES,
) -> None:
    """Scan ``snapshot`` in order, emitting one batch per ``batch_lines`` lines.

    The last batch always has ``done`` set, even when the snapshot is empty.
    """
    batch_lines = max(1, batch_lines)
    total = len(snapshot)
    pending: list[Match] = []
    for idx, text in enumerate(snapshot):
        if text is not None:
            pending.extend(find_line_matches(pattern, idx, text))
        scanned = idx + 1
        if scanned % batch_lines == 0 and scanned < total:
            emit(SearchBatch(generation, tuple(pending), scanned, total, False))
            pending = []
    emit(SearchBatch(generation, tuple(pending), total, total, True))


class BackgroundSearch:
    """Run at most one logically live scan and queue its batches."""

    def __init__(self, batch_lines: int = ASYNC_BATCH_LINES) -> None:
        self.batch_lines = batch_lines
        self.generation = 0
        self.live_generation: int | None = None
        self._results: Queue[SearchBatch] = Queue()

    @property
    def running(self) -> bool:
        return self.live_generation is not None

    def invalidate(self) -> None:
        """Mark any outstanding scan stale so its remaining batches are dropped."""
        self.generation += 1
        self.live_generation = None

    def _worker(self, pattern: SearchPattern, snapshot: Sequence[str | None], generation: int) -> None:
        try:
            scan_snapshot(pattern, snapshot, generation, self._results.put, self.batch_lines)
        except Exception:
            logger.exception("background search %d failed", generation)
            total = len(snapshot)
            self._results.put(SearchBatch(generation, (), total, total, True))

    def start(self, pattern: SearchPattern, snapshot: Sequence[str | None]) -> int:
        """Start scanning ``snapshot`` and return the new generation number."""
        self.invalidate()
        generation = self.generation
        self.live_generation = generation
        worker = threading.Thread(
            target=self._worker,
            args=(pattern, snapshot, generation),
            name=f"lazypager-search-{generation}",
            daemon=True,
        )
        worker.start()
        return generation

    def drain(self) -> list[SearchBatch]:
        """Return every available batch of the live scan without blocking."""
        out: list[SearchBatch] = []
        while True:
            try:
                batch = self._results.get_nowait()
            except Empty:
                break
            if batch.generation != self.live_generation:
                continue
            out.append(batch)
            if batch.done:
                self.live_generation = None
                logger.debug("background search %d finished after %d lines", batch.generation, batch.total_lines)
        return out
