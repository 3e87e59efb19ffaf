"""Poll-based file watcher feeding change events to the main loop.

A daemon thread compares cheap stat signatures for each watched path and
queues ``WatchEvent`` records; the main loop drains them without blocking.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

logger = logging.getLogger(__name__)

WATCH_POLL_SECONDS = 0.25

StatSignature = tuple[str, int, int, int]


@dataclass(frozen=True)
class WatchEvent:
    path: Path
    kind: str  # "change" or "create"


def path_stat_signature(path: Path) -> StatSignature:
    """Return a stable stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0, 0)
    except OSError:
        return ("error", 0, 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size, st.st_ino)


class FileWatcher:
    """Watch a fixed set of paths for content changes and re-creation."""

    def __init__(self, paths: Iterable[Path], poll_seconds: float = WATCH_POLL_SECONDS) -> None:
        self.paths = tuple(dict.fromkeys(Path(p) for p in paths))
        self.poll_seconds = poll_seconds
        self._signatures = {path: path_stat_signature(path) for path in self.paths}
        self._events: Queue[WatchEvent] = Queue()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def poll_once(self) -> int:
        """Compare signatures once, queueing one event per changed path."""
        emitted = 0
        for path in self.paths:
            previous = self._signatures[path]
            current = path_stat_signature(path)
            if current == previous:
                continue
            self._signatures[path] = current
            if current[0] != "ok":
                continue
            kind = "change" if previous[0] == "ok" else "create"
            self._events.put(WatchEvent(path=path, kind=kind))
            emitted += 1
        return emitted

    def _run(self) -> None:
        while not self._stop.wait(self.poll_seconds):
            try:
                self.poll_once()
            except Exception:
                logger.exception("file watcher poll failed")

    def start(self) -> None:
        if self._thread is not None or not self.paths:
            return
        self._thread = threading.Thread(target=self._run, name="lazypager-watch", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

    def drain_events(self) -> list[WatchEvent]:
        out: list[WatchEvent] = []
        while True:
            try:
                out.append(self._events.get_nowait())
            except Empty:
                break
        return out
