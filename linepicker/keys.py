"""Low-level terminal input decoding.

Reads raw bytes from the tty and translates them into normalized key tokens.
Handles ESC-sequence timing, UTF-8 characters, and bracketed paste. A wake
descriptor lets another thread interrupt a blocking read.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
PASTE_TIMEOUT_MS = 500
PASTE_PREFIX = "PASTE:"
_PASTE_END = b"\x1b[201~"

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x00": "CTRL_SPACE",
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"2": "INSERT",
    b"3": "DELETE",
    b"4": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
    b"7": "HOME",
    b"8": "END",
}


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    if lead >> 3 == 0b11110:
        return 4
    return 1


class KeyReader:
    """Stateful decoder for one input descriptor.

    Bytes read ahead while deciding that a lone ESC was not a sequence are
    kept in ``pending`` and replayed on the next call.
    """

    def __init__(self, fd: int, wake_fd: int | None = None) -> None:
        self.fd = fd
        self.wake_fd = wake_fd
        self.pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def _drain_wake_fd(self) -> None:
        if self.wake_fd is None:
            return
        while True:
            ready, _, _ = select.select([self.wake_fd], [], [], 0)
            if not ready or not os.read(self.wake_fd, 64):
                return

    def _next_byte(self, timeout_ms: int | None) -> bytes | None:
        if self.pending:
            return self.pending.pop(0)
        watched = [self.fd] if self.wake_fd is None else [self.fd, self.wake_fd]
        timeout = None if timeout_ms is None else max(0.0, timeout_ms / 1000.0)
        ready, _, _ = select.select(watched, [], [], timeout)
        if not ready:
            return None
        if self.wake_fd is not None and self.wake_fd in ready:
            self._drain_wake_fd()
            return None
        return os.read(self.fd, 1)

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return one key token, ``""`` on timeout or wake-up, ``"EOF"`` at end of input."""
        ch = self._next_byte(timeout_ms)
        if ch is None:
            return ""
        if not ch:
            return "EOF"

        if ch == b"\x1b":
            return self._read_escape()

        token = _CONTROL_KEYS.get(ch)
        if token is not None:
            return token
        code = ch[0]
        if code < 0x20:
            return f"CTRL_{chr(code + 64)}"
        return self._read_utf8(ch)

    def _read_utf8(self, lead: bytes) -> str:
        data = bytearray(lead)
        for _ in range(_utf8_length(lead[0]) - 1):
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            data += nxt
        return data.decode("utf-8", errors="replace")

    def _read_escape(self) -> str:
        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq == b"O":
            final = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if final is None:
                return "ESC"
            return _CSI_FINAL_KEYS.get(final, "ESC")
        if seq != b"[":
            self.pending.append(seq)
            return "ESC"

        params = bytearray()
        while True:
            part = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return "ESC"
            if 0x40 <= part[0] <= 0x7E:
                final = part
                break
            params += part
            if len(params) > 16:
                return "ESC"

        if final == b"~":
            if params == b"200":
                return self._read_paste()
            return _CSI_TILDE_KEYS.get(bytes(params[:1]), "ESC") if len(params) == 1 else "ESC"
        if not params or params.startswith(b"1;"):
            return _CSI_FINAL_KEYS.get(final, "ESC")
        return "ESC"

    def _read_paste(self) -> str:
        data = bytearray()
        while not data.endswith(_PASTE_END):
            part = self._read_ready_byte(PASTE_TIMEOUT_MS)
            if part is None:
                break
            data += part
        if data.endswith(_PASTE_END):
            del data[-len(_PASTE_END):]
        return PASTE_PREFIX + data.decode("utf-8", errors="replace")


def is_printable_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyReader",
    "PASTE_PREFIX",
    "is_printable_key",
]
