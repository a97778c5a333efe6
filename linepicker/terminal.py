"""Terminal control for a picker session.

Owns tty opening, raw-mode lifecycle, alternate-screen switching, and
bracketed paste. Frames are written to the tty rather than stdout so the
caller's stdout stays free for the selection.
"""

from __future__ import annotations

import contextlib
import logging
import os
import termios
import tty
from pathlib import Path

from .errors import TerminalInitError
from .keys import KeyReader

logger = logging.getLogger(__name__)

DEFAULT_TTY_PATH = Path("/dev/tty")


class TerminalController:
    """Manage one tty for the render and input loops.

    ``write`` is only called by the render loop; ``read_key`` only by the
    input loop. ``wake`` may be called from any thread to interrupt a
    blocking ``read_key``.
    """

    def __init__(self, tty_path: Path | None = None) -> None:
        self.tty_path = Path(tty_path) if tty_path is not None else DEFAULT_TTY_PATH
        self.fd: int | None = None
        self._saved_tty_state: list | None = None
        self._wake_read_fd: int | None = None
        self._wake_write_fd: int | None = None
        self._reader: KeyReader | None = None

    def open(self) -> None:
        """Open the tty and capture its state; raise ``TerminalInitError`` on failure."""
        try:
            fd = os.open(self.tty_path, os.O_RDWR | os.O_NOCTTY)
        except OSError as exc:
            raise TerminalInitError(f"cannot open terminal {self.tty_path}: {exc}") from exc
        try:
            self._saved_tty_state = termios.tcgetattr(fd)
        except termios.error as exc:
            os.close(fd)
            raise TerminalInitError(f"{self.tty_path} is not a terminal: {exc}") from exc
        self.fd = fd
        self._wake_read_fd, self._wake_write_fd = os.pipe()
        os.set_blocking(self._wake_write_fd, False)
        self._reader = KeyReader(fd, wake_fd=self._wake_read_fd)
        logger.debug("opened terminal %s", self.tty_path)

    def close(self) -> None:
        for fd in (self._wake_read_fd, self._wake_write_fd, self.fd):
            if fd is not None:
                with contextlib.suppress(OSError):
                    os.close(fd)
        self.fd = None
        self._wake_read_fd = None
        self._wake_write_fd = None
        self._reader = None

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with bracketed paste enabled."""
        if self.fd is None:
            raise TerminalInitError("terminal is not open")
        try:
            tty.setraw(self.fd, termios.TCSAFLUSH)
        except termios.error as exc:
            raise TerminalInitError(f"cannot switch {self.tty_path} to raw mode: {exc}") from exc
        # Enter alternate screen, hide cursor, enable bracketed paste.
        os.write(self.fd, b"\x1b[?1049h\x1b[?25l\x1b[?2004h")

    def disable_tui_mode(self) -> None:
        """Restore the saved tty state and the main screen buffer."""
        if self.fd is None:
            return
        os.write(self.fd, b"\x1b[?2004l\x1b[?25h\x1b[?1049l")
        if self._saved_tty_state is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        self.enable_tui_mode()
        try:
            yield
        finally:
            self.disable_tui_mode()

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the tty, defaulting to 80x24."""
        if self.fd is not None:
            with contextlib.suppress(OSError):
                size = os.get_terminal_size(self.fd)
                return max(1, size.columns), max(1, size.lines)
        return 80, 24

    def write(self, frame: str) -> None:
        if self.fd is None:
            return
        data = frame.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.fd, data)
            data = data[written:]

    def read_key(self) -> str:
        """Block for one key token; ``""`` means woken up."""
        if self._reader is None:
            return "EOF"
        return self._reader.read_key()

    def wake(self) -> None:
        if self._wake_write_fd is None:
            return
        with contextlib.suppress(BlockingIOError, OSError):
            os.write(self._wake_write_fd, b"x")


__all__ = ["DEFAULT_TTY_PATH", "TerminalController"]
