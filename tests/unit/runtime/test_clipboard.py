from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from lazypager.runtime import clipboard


class ClipboardTests(unittest.TestCase):
    def test_returns_false_without_any_tool(self) -> None:
        with mock.patch("lazypager.runtime.clipboard.shutil.which", return_value=None):
            self.assertFalse(clipboard.copy_text_to_clipboard("text"))

    def test_first_successful_tool_wins(self) -> None:
        with (
            mock.patch("lazypager.runtime.clipboard.clipboard_commands", return_value=[["one"], ["two"]]),
            mock.patch("lazypager.runtime.clipboard.shutil.which", return_value="/usr/bin/tool"),
            mock.patch(
                "lazypager.runtime.clipboard.subprocess.run",
                side_effect=[
                    subprocess.CompletedProcess(["one"], 1),
                    subprocess.CompletedProcess(["two"], 0),
                ],
            ) as run,
        ):
            self.assertTrue(clipboard.copy_text_to_clipboard("text"))

        self.assertEqual([call.args[0] for call in run.call_args_list], [["one"], ["two"]])
        self.assertEqual(run.call_args.kwargs["input"], "text")

    def test_tool_errors_are_tolerated(self) -> None:
        with (
            mock.patch("lazypager.runtime.clipboard.clipboard_commands", return_value=[["one"]]),
            mock.patch("lazypager.runtime.clipboard.shutil.which", return_value="/usr/bin/one"),
            mock.patch("lazypager.runtime.clipboard.subprocess.run", side_effect=OSError("boom")),
        ):
            self.assertFalse(clipboard.copy_text_to_clipboard("text"))


if __name__ == "__main__":
    unittest.main()
