"""Command-line front door for lazypager.

Parses CLI options, merges them over the config file, and loads buffers
from files, stdin, or a two-file diff. Then dispatches into the interactive
main loop, or copies content straight through when not on a terminal.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import BinaryIO

from .buffer import Buffer
from .errors import ContentLoadError
from .render.highlight import Highlighter
from .runtime.app import PagerApp
from .runtime.config import PagerConfig, load_pager_config
from .runtime.loop import fit_to_terminal, run_main_loop
from .runtime.terminal import TerminalController
from .runtime.watch import FileWatcher

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazypager",
        description="View files in a terminal pager with search, filtering, and highlighting.",
    )
    parser.add_argument("files", nargs="*", type=Path, metavar="FILE", help="Files to view (reads stdin if none).")
    parser.add_argument("-n", "--line-numbers", action="store_true", help="Show line numbers.")
    parser.add_argument("-f", "--follow", action="store_true", help="Follow appended data, like tail -f.")
    parser.add_argument("-N", "--start-line", type=_positive_int, metavar="LINE", help="Start at line LINE.")
    parser.add_argument("-p", "--pattern", metavar="REGEX", help="Search for REGEX on open.")
    parser.add_argument("-w", "--wrap", action="store_true", help="Wrap long lines.")
    parser.add_argument("--style", default=None, help="Pygments style name.")
    parser.add_argument("--no-syntax", action="store_true", help="Disable syntax highlighting.")
    parser.add_argument("--plain", action="store_true", help="No line numbers, highlighting, or change markers.")
    parser.add_argument("--diff", type=Path, metavar="FILE2", help="Show a unified diff of FILE against FILE2.")
    parser.add_argument("--nopager", action="store_true", help="Print content directly without paging.")
    parser.add_argument("--log-file", type=Path, metavar="PATH", help="Write debug logs to PATH.")
    return parser


def merge_cli(config: PagerConfig, args: argparse.Namespace) -> PagerConfig:
    """Apply command-line flags over file configuration."""
    if args.line_numbers:
        config.line_numbers = True
    if args.wrap:
        config.wrap = True
    if args.style:
        config.style = args.style
    if args.no_syntax:
        config.syntax = False
    if args.plain:
        config.line_numbers = False
        config.syntax = False
        config.git_changes = False
    return config


def configure_logging(log_file: Path | None) -> None:
    if log_file is None:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    logging.basicConfig(filename=str(log_file), level=logging.DEBUG, format=LOG_FORMAT)


def load_buffers(
    args: argparse.Namespace,
    config: PagerConfig,
    stdin: BinaryIO | None = None,
) -> list[Buffer]:
    """Load every requested buffer; unreadable files are reported and skipped."""
    if args.diff is not None:
        if not args.files:
            raise SystemExit("lazypager: --diff requires a FILE argument")
        try:
            return [Buffer.from_diff(args.files[0], args.diff)]
        except ContentLoadError as exc:
            raise SystemExit(f"lazypager: {exc}") from exc

    if not args.files:
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            return [Buffer.from_stdin(stream)]
        except ContentLoadError as exc:
            raise SystemExit(f"lazypager: {exc}") from exc

    buffers: list[Buffer] = []
    for path in args.files:
        try:
            buffer = Buffer.from_file(path, config.mmap_threshold)
        except ContentLoadError as exc:
            logger.warning("skipping %s: %s", path, exc)
            print(f"lazypager: {exc}", file=sys.stderr)
            continue
        if config.git_changes:
            buffer.refresh_changes()
        buffers.append(buffer)
    return buffers


def copy_to_stdout(buffers: list[Buffer], out: BinaryIO) -> None:
    for buffer in buffers:
        out.write(bytes(buffer.source.data))
    out.flush()


def apply_startup_options(app: PagerApp, args: argparse.Namespace) -> None:
    if args.start_line is not None:
        app.goto_line(args.start_line - 1)
    if args.pattern:
        app.execute_search(args.pattern)
    if args.follow:
        app.enter_follow()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the pager."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file)

    if not args.files and args.diff is None and sys.stdin.isatty():
        parser.print_usage(sys.stderr)
        raise SystemExit(1)

    config = merge_cli(load_pager_config(), args)
    buffers = load_buffers(args, config)
    if not buffers:
        print("lazypager: no files could be opened", file=sys.stderr)
        raise SystemExit(1)

    if args.nopager or not sys.stdout.isatty():
        copy_to_stdout(buffers, sys.stdout.buffer)
        return

    tty_fd: int | None = None
    if sys.stdin.isatty():
        stdin_fd = sys.stdin.fileno()
    else:
        tty_fd = os.open(TTY_PATH, os.O_RDWR)
        stdin_fd = tty_fd

    watcher = FileWatcher(buffer.path for buffer in buffers if buffer.reloadable and buffer.path is not None)
    try:
        app = PagerApp(buffers, config)
        terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        fit_to_terminal(app, *terminal.size())
        apply_startup_options(app, args)
        watcher.start()
        run_main_loop(
            app,
            terminal,
            stdin_fd,
            highlighter=Highlighter(config.style, enabled=config.syntax),
            watcher=watcher,
        )
    finally:
        watcher.stop()
        if tty_fd is not None:
            os.close(tty_fd)


if __name__ == "__main__":
    main()
