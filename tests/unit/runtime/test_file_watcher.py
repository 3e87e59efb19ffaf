from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazypager.runtime.watch import FileWatcher, WatchEvent, path_stat_signature


class FileWatcherTests(unittest.TestCase):
    def test_signature_reports_missing_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(path_stat_signature(Path(tmp) / "none")[0], "missing")

    def test_change_and_create_events(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            existing = Path(tmp) / "existing.log"
            later = Path(tmp) / "later.log"
            existing.write_text("a\n", encoding="utf-8")
            watcher = FileWatcher([existing, later], poll_seconds=60)

            self.assertEqual(watcher.poll_once(), 0)
            existing.write_text("a\nbb\n", encoding="utf-8")
            later.write_text("new\n", encoding="utf-8")
            self.assertEqual(watcher.poll_once(), 2)

            events = watcher.drain_events()
            self.assertIn(WatchEvent(path=existing, kind="change"), events)
            self.assertIn(WatchEvent(path=later, kind="create"), events)
            self.assertEqual(watcher.drain_events(), [])

    def test_deletion_emits_nothing_until_recreated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rotating.log"
            path.write_text("a\n", encoding="utf-8")
            watcher = FileWatcher([path], poll_seconds=60)

            path.unlink()
            self.assertEqual(watcher.poll_once(), 0)
            path.write_text("fresh\n", encoding="utf-8")
            self.assertEqual(watcher.poll_once(), 1)
            self.assertEqual(watcher.drain_events(), [WatchEvent(path=path, kind="create")])

    def test_start_and_stop_background_thread(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a.log"
            path.write_text("a\n", encoding="utf-8")
            watcher = FileWatcher([path], poll_seconds=0.01)
            watcher.start()
            watcher.stop()
            self.assertIsNone(watcher._thread)


if __name__ == "__main__":
    unittest.main()
