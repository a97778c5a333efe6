"""Command-line front door for linepicker.

Parses CLI options, streams lines from FILE or stdin into a session while it
runs, and prints the output value of every selected line to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import TextIO

from . import __version__
from .config import Config, Layout, resolve_config
from .errors import ConfigurationError, TerminalInitError
from .matchers import DEFAULT_REGISTRY
from .runtime.context import Context

logger = logging.getLogger(__name__)


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linepicker",
        description="Interactively filter lines from FILE or stdin and print the selected ones.",
    )
    parser.add_argument("file", nargs="?", default=None, help="Read lines from FILE instead of stdin.")
    parser.add_argument("--query", default="", help="Initial value for the query.")
    parser.add_argument("--rcfile", type=Path, default=None, help="Path to the settings file.")
    parser.add_argument(
        "-b",
        "--buffer-size",
        type=_nonnegative_int,
        default=None,
        help="Number of lines to keep in the search buffer (0 keeps all).",
    )
    parser.add_argument("--null", action="store_true", help="Expect NUL (\\0) as separator for label/output.")
    parser.add_argument(
        "--initial-index",
        type=int,
        default=0,
        help="Position of the initially selected line (0 based).",
    )
    parser.add_argument(
        "--initial-matcher",
        default=None,
        help=f"Matcher to start with ({', '.join(DEFAULT_REGISTRY.names())}).",
    )
    parser.add_argument("--prompt", default=None, help="Prompt string shown before the query.")
    parser.add_argument(
        "--layout",
        default=None,
        help=f"Layout to use ({', '.join(layout.value for layout in Layout)}).",
    )
    parser.add_argument("--no-multi-select", action="store_true", help="Disable toggling several lines.")
    parser.add_argument("--tty", type=Path, default=None, help="Path to the TTY (defaults to /dev/tty).")
    parser.add_argument("--log-file", type=Path, default=None, help="Write debug logs to this file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """Map parsed options onto ``Config``; ``--initial-index`` is 0 based."""
    return Config(
        query=args.query,
        rcfile=args.rcfile,
        buffer_size=args.buffer_size,
        null_sep=args.null,
        initial_index=args.initial_index + 1 if args.initial_index >= 0 else 1,
        matcher=args.initial_matcher,
        prompt=args.prompt,
        layout=args.layout,
        multi_select=not args.no_multi_select,
        tty=args.tty,
    )


def feed_from(source: TextIO, ctx: Context) -> None:
    """Stream lines from ``source`` into ``ctx`` until EOF or session exit."""
    try:
        for raw in source:
            if ctx.exiting:
                return
            ctx.feed_lines([raw])
    except (OSError, ValueError) as exc:
        # ValueError: the stream was closed under us at shutdown.
        logger.debug("stopped reading input: %s", exc)


def start_feeder(source: TextIO, ctx: Context) -> threading.Thread:
    worker = threading.Thread(
        target=feed_from,
        args=(source, ctx),
        name="linepicker-feed",
        daemon=True,
    )
    worker.start()
    return worker


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run one session, and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_file is not None:
        logging.basicConfig(
            filename=str(args.log_file),
            level=logging.DEBUG,
            format="%(asctime)s %(threadName)s %(name)s %(levelname)s %(message)s",
        )

    try:
        ctx = Context.start(resolve_config(config_from_args(args)))
    except ConfigurationError as exc:
        raise SystemExit(f"linepicker: {exc}") from None

    if args.file is not None:
        path = Path(args.file)
        if not path.is_file():
            raise SystemExit(f"linepicker: file not found: {path}")
        source: TextIO = path.open(encoding="utf-8", errors="replace", newline="\n")
    else:
        if sys.stdin.isatty():
            raise SystemExit("linepicker: no input (pipe lines in or pass FILE)")
        source = sys.stdin

    start_feeder(source, ctx)
    try:
        status = ctx.run()
    except TerminalInitError as exc:
        raise SystemExit(f"linepicker: {exc}") from None
    finally:
        if source is not sys.stdin:
            source.close()

    for match in ctx.result():
        sys.stdout.write(match.output + "\n")
    sys.stdout.flush()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
