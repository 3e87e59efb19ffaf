from __future__ import annotations

import tempfile
import time
import unittest
from pathlib import Path

from lazypager.buffer import Buffer
from lazypager.runtime.app import PagerApp
from lazypager.runtime.config import PagerConfig
from lazypager.runtime.mode import Follow, Visual
from lazypager.runtime.watch import WatchEvent
from lazypager.search import Match


def _app(*buffers: Buffer, **config) -> PagerApp:
    config.setdefault("git_changes", False)
    return PagerApp(list(buffers), PagerConfig(**config), copy_to_clipboard=lambda _text: False)


def _alpha() -> Buffer:
    return Buffer.from_bytes(b"alpha\nbeta\nalpha", name="alpha.txt")


class SearchFlowTests(unittest.TestCase):
    def test_search_then_next_match(self) -> None:
        app = _app(_alpha())
        app.execute_search("alpha")

        self.assertEqual(app.search.matches, [Match(0, 0, 5), Match(2, 0, 5)])
        self.assertEqual(app.status_message, "/alpha (2 matches)")
        app.step_match(True)
        self.assertEqual(app.search.current_match_line(), 2)
        self.assertEqual(app.status_message, "Match 2/2")

    def test_pattern_not_found(self) -> None:
        app = _app(_alpha())
        app.execute_search("gamma")
        self.assertEqual(app.status_message, "Pattern not found: gamma")
        app.step_match(True)
        self.assertIsNone(app.search.current_match())

    def test_search_starts_at_or_after_top_line(self) -> None:
        data = b"".join(b"hit\n" if idx in (3, 60) else b"x\n" for idx in range(100))
        app = _app(Buffer.from_bytes(data))
        app.resize(80, 10)
        app.scroll_down(30)
        app.execute_search("hit")
        self.assertEqual(app.search.current_match_line(), 60)
        self.assertEqual(app.viewport.top, 55)

    def test_async_search_positions_when_batches_arrive(self) -> None:
        data = b"".join(b"needle\n" if idx % 50 == 49 else b"hay\n" for idx in range(1000))
        app = _app(Buffer.from_bytes(data), async_search_min_lines=1)
        app.resize(80, 10)
        app.execute_search("needle")

        self.assertEqual(app.status_message, "/needle (searching...)")
        deadline = time.monotonic() + 5.0
        while app.search.searching and time.monotonic() < deadline:
            app.drain_search_results()
            time.sleep(0.01)

        self.assertFalse(app.search.searching)
        self.assertEqual(app.search.match_count(), 20)
        self.assertEqual(app.search.current_match_line(), 49)
        self.assertEqual(app.status_message, "/needle (20 matches)")

    def test_preview_only_covers_visible_lines(self) -> None:
        data = b"".join(b"match\n" for _ in range(50))
        app = _app(Buffer.from_bytes(data))
        app.resize(80, 5)
        app.update_preview("mat")
        self.assertEqual([m.line for m in app.search.preview_matches], [0, 1, 2, 3, 4])
        app.update_preview("(")
        self.assertEqual(app.search.preview_matches, [])


class FilterFlowTests(unittest.TestCase):
    def test_filter_reduces_rows_and_blocks_scrolling(self) -> None:
        app = _app(_alpha())
        app.apply_filter("beta")

        self.assertEqual(app.total_rows(), 1)
        self.assertEqual(app.line_at(0), 1)
        app.scroll_down(1)
        self.assertEqual(app.viewport.top, 0)
        self.assertEqual(app.status_message, "&beta (1 lines)")

    def test_search_navigation_maps_through_filter(self) -> None:
        data = b"".join(f"{'keep' if idx % 2 else 'drop'} {idx}\n".encode() for idx in range(40))
        app = _app(Buffer.from_bytes(data))
        app.resize(80, 4)
        app.apply_filter("keep")
        app.execute_search("keep 31")
        self.assertEqual(app.search.current_match_line(), 31)
        self.assertEqual(app.line_at(app.viewport.top + 2), 31)

    def test_invalid_filter_keeps_state(self) -> None:
        app = _app(_alpha())
        app.apply_filter("beta")
        app.apply_filter("(")
        self.assertEqual(app.status_message, "Invalid regex: (")
        self.assertEqual(app.total_rows(), 1)


class BufferRotationTests(unittest.TestCase):
    def test_switch_resets_view_and_reruns_search(self) -> None:
        other = Buffer.from_bytes(b"beta\nalpha\nalpha\nalpha\n", name="other.txt")
        app = _app(_alpha(), other)
        app.execute_search("alpha")
        app.apply_filter("alpha")
        app.update_preview("be")

        app.next_buffer()

        self.assertIs(app.buffer, other)
        self.assertIsNone(app.filter.view)
        self.assertEqual(app.search.preview_matches, [])
        self.assertEqual(app.search.match_count(), 3)
        self.assertEqual(app.status_message, "Buffer 2/2: other.txt")
        app.next_buffer()
        self.assertEqual(app.active, 0)
        app.prev_buffer()
        self.assertEqual(app.active, 1)

    def test_single_buffer_switch_is_noop(self) -> None:
        app = _app(_alpha())
        app.next_buffer()
        self.assertEqual(app.active, 0)
        self.assertFalse(app.has_tab_bar())


class MarksAndVisualTests(unittest.TestCase):
    def test_mark_restores_top_line(self) -> None:
        data = b"".join(b"%d\n" % idx for idx in range(200))
        app = _app(Buffer.from_bytes(data))
        app.resize(80, 20)
        app.scroll_down(42)
        app.set_mark("a")
        app.goto_bottom()
        self.assertTrue(app.jump_to_mark("a"))
        self.assertEqual(app.viewport.top, 42)
        self.assertFalse(app.jump_to_mark("b"))

    def test_yank_without_clipboard_reports_status(self) -> None:
        app = _app(_alpha())
        app.enter_visual()
        self.assertIsInstance(app.mode, Visual)
        app.move_visual_cursor(5)
        self.assertEqual(app.mode.cursor, 2)
        self.assertEqual(app.selected_text(), "alpha\nbeta\nalpha")
        app.yank_selection()
        self.assertEqual(app.status_message, "Clipboard unavailable")


class FollowTests(unittest.TestCase):
    def test_change_event_reloads_and_tails_in_follow_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "app.log"
            path.write_bytes(b"".join(b"%d\n" % idx for idx in range(20)))
            app = _app(Buffer.from_file(path))
            app.resize(80, 10)
            app.execute_search("^1")
            app.enter_follow()
            self.assertIsInstance(app.mode, Follow)
            self.assertEqual(app.viewport.top, 10)

            path.write_bytes(b"".join(b"%d\n" % idx for idx in range(40)))
            changed = app.handle_content_changes([WatchEvent(path=path, kind="change")])

            self.assertTrue(changed)
            self.assertEqual(app.buffer.line_count(), 40)
            self.assertEqual(app.viewport.top, 30)
            self.assertEqual(app.search.match_count(), 11)

    def test_follow_reload_reapplies_active_filter(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "app.log"
            path.write_bytes(b"keep 1\ndrop\n")
            app = _app(Buffer.from_file(path))
            app.resize(80, 10)
            app.apply_filter("keep")
            app.enter_follow()
            path.write_bytes(b"keep 1\ndrop\nkeep 2\ndrop\nkeep 3\n")

            self.assertTrue(app.handle_content_changes([WatchEvent(path=path, kind="change")]))
            self.assertTrue(app.filter.active)
            self.assertEqual(app.filter.query, "keep")
            self.assertEqual(list(app.filter.view.lines), [0, 2, 4])

    def test_events_ignored_outside_follow_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "app.log"
            path.write_bytes(b"a\n")
            app = _app(Buffer.from_file(path))
            path.write_bytes(b"a\nb\n")
            self.assertFalse(app.handle_content_changes([WatchEvent(path=path, kind="change")]))
            self.assertEqual(app.buffer.line_count(), 1)

    def test_events_for_other_paths_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "app.log"
            path.write_bytes(b"a\n")
            app = _app(Buffer.from_file(path))
            app.enter_follow()
            other = Path(tmp) / "other.log"
            self.assertFalse(app.handle_content_changes([WatchEvent(path=other, kind="create")]))


class StartupTests(unittest.TestCase):
    def test_rejected_key_bindings_surface_as_status(self) -> None:
        app = _app(_alpha(), keys={"quit": "ctrl+"})
        self.assertEqual(app.status_message, "Ignored key bindings: quit='ctrl+'")
        self.assertIsNotNone(app.keymap.resolve("q"))

    def test_requires_a_buffer(self) -> None:
        with self.assertRaises(ValueError):
            PagerApp([])


if __name__ == "__main__":
    unittest.main()
