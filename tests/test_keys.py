"""Raw-key decoding regression tests.

Covers ESC timing, arrow and tilde sequences, control tokens, UTF-8 input,
bracketed paste, and wake-up of a blocking read.
"""

import os
import threading
import time
import unittest

from linepicker.keys import PASTE_PREFIX, KeyReader, is_printable_key


class KeyReaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.read_fd, self.write_fd = os.pipe()
        self.reader = KeyReader(self.read_fd)

    def tearDown(self) -> None:
        for fd in (self.read_fd, self.write_fd):
            try:
                os.close(fd)
            except OSError:
                pass

    def _keys(self, data: bytes, count: int) -> list[str]:
        os.write(self.write_fd, data)
        return [self.reader.read_key(timeout_ms=50) for _ in range(count)]

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        os.write(self.write_fd, b"\x1b")
        started = time.monotonic()
        key = self.reader.read_key(timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "ESC")
        self.assertLess(elapsed, 0.2)

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(self._keys(b"\x1ba", 2), ["ESC", "a"])

    def test_arrow_sequences(self) -> None:
        self.assertEqual(
            self._keys(b"\x1b[A\x1b[B\x1b[C\x1b[D\x1bOA\x1b[1;5C", 6),
            ["UP", "DOWN", "RIGHT", "LEFT", "UP", "RIGHT"],
        )

    def test_tilde_sequences(self) -> None:
        self.assertEqual(
            self._keys(b"\x1b[5~\x1b[6~\x1b[3~\x1b[1~\x1b[4~", 5),
            ["PAGE_UP", "PAGE_DOWN", "DELETE", "HOME", "END"],
        )

    def test_control_tokens(self) -> None:
        self.assertEqual(
            self._keys(b"\r\x7f\x00\x0e\x10\x03\t", 7),
            ["ENTER", "BACKSPACE", "CTRL_SPACE", "CTRL_N", "CTRL_P", "CTRL_C", "TAB"],
        )

    def test_utf8_character_is_one_token(self) -> None:
        self.assertEqual(self._keys("é漢".encode("utf-8"), 2), ["é", "漢"])

    def test_bracketed_paste_is_one_token(self) -> None:
        key = self._keys(b"\x1b[200~foo bar\x1b[201~", 1)[0]
        self.assertEqual(key, PASTE_PREFIX + "foo bar")

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(self.reader.read_key(timeout_ms=10), "")

    def test_end_of_input_returns_eof(self) -> None:
        os.close(self.write_fd)
        self.assertEqual(self.reader.read_key(timeout_ms=50), "EOF")

    def test_wake_fd_interrupts_blocking_read(self) -> None:
        wake_read, wake_write = os.pipe()
        try:
            reader = KeyReader(self.read_fd, wake_fd=wake_read)
            timer = threading.Timer(0.05, os.write, args=(wake_write, b"x"))
            timer.start()
            started = time.monotonic()
            key = reader.read_key()
            timer.join()
        finally:
            os.close(wake_read)
            os.close(wake_write)

        self.assertEqual(key, "")
        self.assertLess(time.monotonic() - started, 2.0)


class PrintableKeyTests(unittest.TestCase):
    def test_printable_key(self) -> None:
        self.assertTrue(is_printable_key("a"))
        self.assertTrue(is_printable_key("漢"))
        self.assertFalse(is_printable_key("ENTER"))
        self.assertFalse(is_printable_key("\x07"))


if __name__ == "__main__":
    unittest.main()
