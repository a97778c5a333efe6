"""CLI argument handling and end-to-end runs over stdin and files.

The tty is replaced by ``FakeTerminal`` through the name the session context
uses to build its default terminal.
"""

from __future__ import annotations

import contextlib
import io
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fake_terminal import FakeTerminal, showing
from linepicker import cli
from linepicker.errors import TerminalInitError
from linepicker.runtime.status import STATUS_CANCELED, STATUS_OK


class CliSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.rcfile = self.tmp / "rc.json"
        self.rcfile.write_text("{}", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_cli(self, argv, stdin_text: str, script):
        terminal = FakeTerminal(script)
        stdout = io.StringIO()
        with mock.patch(
            "linepicker.runtime.context.TerminalController", return_value=terminal
        ) as controller, mock.patch.object(sys, "stdin", io.StringIO(stdin_text)), contextlib.redirect_stdout(stdout):
            status = cli.main(["--rcfile", str(self.rcfile), *argv])
        return status, stdout.getvalue(), controller

    def test_selected_line_is_printed(self) -> None:
        status, out, _ = self.run_cli([], "alpha\nbeta\ngamma\n", [showing("gamma"), "CTRL_N", "ENTER"])
        self.assertEqual(status, STATUS_OK)
        self.assertEqual(out, "beta\n")

    def test_query_option_filters_before_first_key(self) -> None:
        status, out, _ = self.run_cli(
            ["--query", "ga"],
            "alpha\nbeta\ngamma\n",
            [showing("gamma", absent=("alpha", "beta")), "ENTER"],
        )
        self.assertEqual(status, STATUS_OK)
        self.assertEqual(out, "gamma\n")

    def test_null_mode_prints_output_value(self) -> None:
        status, out, _ = self.run_cli(
            ["--null"],
            "first\0/out/1\nsecond\0/out/2\n",
            [showing("second", absent=("/out/",)), "ENTER"],
        )
        self.assertEqual(status, STATUS_OK)
        self.assertEqual(out, "/out/1\n")

    def test_initial_index_is_zero_based(self) -> None:
        status, out, _ = self.run_cli(
            ["--initial-index", "2"], "alpha\nbeta\ngamma\n", [showing("gamma"), "ENTER"]
        )
        self.assertEqual(out, "gamma\n")

    def test_multi_select_prints_each_line(self) -> None:
        status, out, _ = self.run_cli(
            [],
            "alpha\nbeta\ngamma\n",
            [showing("gamma"), "CTRL_SPACE", "CTRL_SPACE", showing("2 selected"), "ENTER"],
        )
        self.assertEqual(out, "alpha\nbeta\n")

    def test_cancel_prints_nothing(self) -> None:
        status, out, _ = self.run_cli([], "alpha\n", [showing("alpha"), "ESC"])
        self.assertEqual(status, STATUS_CANCELED)
        self.assertEqual(out, "")

    def test_file_argument_is_read(self) -> None:
        source = self.tmp / "lines.txt"
        source.write_text("from-file\n", encoding="utf-8")
        status, out, _ = self.run_cli([str(source)], "", [showing("from-file"), "ENTER"])
        self.assertEqual(out, "from-file\n")

    def test_tty_option_reaches_terminal(self) -> None:
        _status, _out, controller = self.run_cli(
            ["--tty", "/dev/pts/99"], "alpha\n", [showing("alpha"), "ENTER"]
        )
        controller.assert_called_once_with(Path("/dev/pts/99"))


class CliErrorTests(unittest.TestCase):
    def test_unknown_matcher_exits_before_terminal_is_built(self) -> None:
        with mock.patch("linepicker.runtime.context.TerminalController") as controller:
            with self.assertRaises(SystemExit) as caught:
                cli.main(["--initial-matcher", "Fuzzy"])
        self.assertIn("Unknown matcher", str(caught.exception.code))
        controller.assert_not_called()

    def test_unknown_layout_exits(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            cli.main(["--layout", "sideways"])
        self.assertIn("Unknown layout", str(caught.exception.code))

    def test_missing_file_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SystemExit) as caught:
                cli.main([str(Path(tmp) / "missing.txt")])
        self.assertIn("file not found", str(caught.exception.code))

    def test_interactive_stdin_without_file_exits(self) -> None:
        fake_stdin = mock.Mock()
        fake_stdin.isatty.return_value = True
        with mock.patch.object(sys, "stdin", fake_stdin), self.assertRaises(SystemExit) as caught:
            cli.main([])
        self.assertIn("no input", str(caught.exception.code))

    def test_terminal_failure_exits_with_message(self) -> None:
        terminal = FakeTerminal(open_error=TerminalInitError("cannot open terminal /dev/tty"))
        with mock.patch("linepicker.runtime.context.TerminalController", return_value=terminal), mock.patch.object(
            sys, "stdin", io.StringIO("a\n")
        ), self.assertRaises(SystemExit) as caught:
            cli.main([])
        self.assertIn("cannot open terminal", str(caught.exception.code))

    def test_negative_buffer_size_is_rejected_by_parser(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as caught:
            cli.main(["-b", "-3"])
        self.assertEqual(caught.exception.code, 2)

    def test_config_from_args_maps_options(self) -> None:
        args = cli.build_parser().parse_args(
            ["--prompt", ">", "--layout", "bottom-up", "-b", "5", "--no-multi-select", "--initial-index", "-4"]
        )
        cfg = cli.config_from_args(args)
        self.assertEqual(cfg.prompt, ">")
        self.assertEqual(cfg.layout, "bottom-up")
        self.assertEqual(cfg.buffer_size, 5)
        self.assertFalse(cfg.multi_select)
        self.assertEqual(cfg.initial_index, 1)


if __name__ == "__main__":
    unittest.main()
