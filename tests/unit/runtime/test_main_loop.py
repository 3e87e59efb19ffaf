from __future__ import annotations

from contextlib import contextmanager
import unittest
from unittest import mock

from lazypager.buffer import Buffer
from lazypager.errors import ContentLoadError
from lazypager.render.highlight import Highlighter
from lazypager.runtime.app import PagerApp
from lazypager.runtime.config import PagerConfig
from lazypager.runtime.loop import RuntimeLoopTiming, content_height, run_main_loop


class _FakeTerminal:
    def __init__(self, columns: int = 40, rows: int = 12) -> None:
        self.columns = columns
        self.rows = rows
        self.frames: list[str] = []
        self.entered = 0

    @contextmanager
    def raw_mode(self):
        self.entered += 1
        yield

    def size(self) -> tuple[int, int]:
        return self.columns, self.rows

    def write_frame(self, frame: str) -> None:
        self.frames.append(frame)


class _FakeWatcher:
    def __init__(self, batches) -> None:
        self._batches = list(batches)

    def drain_events(self):
        return self._batches.pop(0) if self._batches else []


def _app(lines: int = 100, buffers: int = 1) -> PagerApp:
    data = "".join(f"row {idx}\n" for idx in range(lines)).encode("utf-8")
    return PagerApp(
        [Buffer.from_bytes(data, name=f"b{idx}.txt") for idx in range(buffers)],
        PagerConfig(git_changes=False),
    )


class MainLoopTests(unittest.TestCase):
    def test_loop_renders_handles_keys_and_stops_on_quit(self) -> None:
        app = _app()
        terminal = _FakeTerminal()
        with mock.patch("lazypager.runtime.loop.read_key", side_effect=["j", "", "j", "q"]) as read_key:
            run_main_loop(app, terminal, 0, highlighter=Highlighter(enabled=False), timing=RuntimeLoopTiming(5))

        self.assertTrue(app.quit)
        self.assertEqual(app.viewport.top, 2)
        self.assertEqual(terminal.entered, 1)
        self.assertEqual(len(terminal.frames), 3)
        self.assertEqual(read_key.call_args.kwargs["timeout_ms"], 5)
        self.assertIn("row 0", terminal.frames[0])

    def test_viewport_sized_from_terminal(self) -> None:
        app = _app()
        terminal = _FakeTerminal(columns=50, rows=12)
        with mock.patch("lazypager.runtime.loop.read_key", side_effect=["q"]):
            run_main_loop(app, terminal, 0, highlighter=Highlighter(enabled=False))
        self.assertEqual(app.viewport.height, 10)
        self.assertEqual(app.viewport.width, 50)

    def test_tab_bar_takes_a_row(self) -> None:
        self.assertEqual(content_height(_app(buffers=2), 12), 9)
        self.assertEqual(content_height(_app(), 2), 1)

    def test_interrupt_is_treated_as_ctrl_c(self) -> None:
        app = _app()
        with mock.patch("lazypager.runtime.loop.read_key", side_effect=KeyboardInterrupt):
            run_main_loop(app, _FakeTerminal(), 0, highlighter=Highlighter(enabled=False))
        self.assertTrue(app.quit)

    def test_pager_errors_from_handlers_become_status(self) -> None:
        app = _app()

        def fail_then_quit(key: str) -> None:
            if key == "j":
                raise ContentLoadError(None, "gone")
            app.quit = True

        with (
            mock.patch("lazypager.runtime.loop.read_key", side_effect=["j", "q"]),
            mock.patch.object(app, "handle_key", side_effect=fail_then_quit),
        ):
            run_main_loop(app, _FakeTerminal(), 0, highlighter=Highlighter(enabled=False))
        self.assertEqual(app.status_message, "[stdin]: gone")

    def test_watch_events_are_forwarded(self) -> None:
        app = _app()
        watcher = _FakeWatcher([["event"]])
        with (
            mock.patch("lazypager.runtime.loop.read_key", side_effect=["q"]),
            mock.patch.object(app, "handle_content_changes") as changes,
        ):
            run_main_loop(app, _FakeTerminal(), 0, highlighter=Highlighter(enabled=False), watcher=watcher)
        changes.assert_called_once_with(["event"])


if __name__ == "__main__":
    unittest.main()
