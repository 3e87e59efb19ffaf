from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazypager import cli
from lazypager.buffer import Buffer
from lazypager.runtime.app import PagerApp
from lazypager.runtime.config import PagerConfig
from lazypager.runtime.mode import Follow


class ParserTests(unittest.TestCase):
    def test_flags_parse(self) -> None:
        args = cli.build_parser().parse_args(["-n", "-f", "-N", "12", "-p", "err", "-w", "a.txt", "b.txt"])
        self.assertTrue(args.line_numbers)
        self.assertTrue(args.follow)
        self.assertEqual(args.start_line, 12)
        self.assertEqual(args.pattern, "err")
        self.assertTrue(args.wrap)
        self.assertEqual(args.files, [Path("a.txt"), Path("b.txt")])

    def test_start_line_must_be_positive(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            cli.build_parser().parse_args(["-N", "0"])

    def test_plain_overrides_config(self) -> None:
        args = cli.build_parser().parse_args(["--plain", "--style", "friendly"])
        merged = cli.merge_cli(PagerConfig(line_numbers=True), args)
        self.assertFalse(merged.line_numbers)
        self.assertFalse(merged.syntax)
        self.assertFalse(merged.git_changes)
        self.assertEqual(merged.style, "friendly")


class LoadBuffersTests(unittest.TestCase):
    def test_unreadable_files_are_reported_and_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            good = Path(tmp) / "good.txt"
            good.write_text("ok\n", encoding="utf-8")
            args = cli.build_parser().parse_args([str(Path(tmp) / "missing.txt"), str(good)])
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr):
                buffers = cli.load_buffers(args, PagerConfig(git_changes=False))

        self.assertEqual([buffer.name for buffer in buffers], ["good.txt"])
        self.assertIn("missing.txt", stderr.getvalue())

    def test_stdin_is_read_without_files(self) -> None:
        args = cli.build_parser().parse_args([])
        buffers = cli.load_buffers(args, PagerConfig(), stdin=io.BytesIO(b"from pipe\n"))
        self.assertEqual(buffers[0].name, "[stdin]")
        self.assertEqual(buffers[0].get_line(0), "from pipe")

    def test_diff_requires_a_file(self) -> None:
        args = cli.build_parser().parse_args(["--diff", "other.txt"])
        with self.assertRaises(SystemExit):
            cli.load_buffers(args, PagerConfig())

    def test_diff_builds_one_buffer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            old = Path(tmp) / "a.txt"
            new = Path(tmp) / "b.txt"
            old.write_text("x\n", encoding="utf-8")
            new.write_text("y\n", encoding="utf-8")
            args = cli.build_parser().parse_args([str(old), "--diff", str(new)])
            buffers = cli.load_buffers(args, PagerConfig())
        self.assertEqual(len(buffers), 1)
        self.assertTrue(buffers[0].is_diff)


class MainTests(unittest.TestCase):
    def test_no_loadable_files_exits_with_status_one(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = str(Path(tmp) / "missing.txt")
            with (
                mock.patch("lazypager.cli.load_pager_config", return_value=PagerConfig()),
                contextlib.redirect_stderr(io.StringIO()),
                self.assertRaises(SystemExit) as ctx,
            ):
                cli.main([missing])
        self.assertEqual(ctx.exception.code, 1)

    def test_nopager_copies_content(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            first = Path(tmp) / "one.txt"
            second = Path(tmp) / "two.txt"
            first.write_bytes(b"1\n")
            second.write_bytes(b"2\n")
            out = io.TextIOWrapper(io.BytesIO())
            with (
                mock.patch("lazypager.cli.load_pager_config", return_value=PagerConfig(git_changes=False)),
                mock.patch("sys.stdout", out),
            ):
                cli.main(["--nopager", str(first), str(second)])
            self.assertEqual(out.buffer.getvalue(), b"1\n2\n")

    def test_startup_options_apply_in_order(self) -> None:
        data = b"".join(b"line %d\n" % idx for idx in range(100))
        app = PagerApp([Buffer.from_bytes(data)], PagerConfig(git_changes=False))
        app.resize(80, 10)
        args = cli.build_parser().parse_args(["-N", "50", "-p", "line 7"])
        cli.apply_startup_options(app, args)
        self.assertEqual(app.search.current_match_line(), 70)
        self.assertNotIsInstance(app.mode, Follow)

        args = cli.build_parser().parse_args(["-f"])
        cli.apply_startup_options(app, args)
        self.assertIsInstance(app.mode, Follow)
        self.assertEqual(app.viewport.top, 90)


if __name__ == "__main__":
    unittest.main()
