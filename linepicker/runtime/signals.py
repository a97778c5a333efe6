"""Signal loop: turns OS notifications into context requests.

Python runs signal handlers on the main thread only, so ``install`` and
``restore`` are called from the thread running the session. The handlers
just enqueue the signal number; this loop's thread does the rest, so a
resize never draws from inside a handler.
"""

from __future__ import annotations

import logging
import signal
import threading
from queue import SimpleQueue
from typing import TYPE_CHECKING

from .loop import Loop
from .status import signal_status

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

RESIZE_SIGNALS = (signal.SIGWINCH,)
EXIT_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class SignalLoop(Loop):
    name = "signal"

    def __init__(self, ctx: Context, signals: tuple[int, ...] = RESIZE_SIGNALS + EXIT_SIGNALS) -> None:
        super().__init__(ctx)
        self.signals = signals
        # SimpleQueue.put is reentrant, so it is safe inside a signal handler.
        self._queue: SimpleQueue[int | None] = SimpleQueue()
        self._previous: dict[int, object] = {}
        ctx.add_stop_callback(self.wake)

    def install(self) -> bool:
        """Install handlers; return False when not on the main thread."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("not on the main thread; signal handlers not installed")
            return False
        for signum in self.signals:
            try:
                self._previous[signum] = signal.signal(signum, self._on_signal)
            except (OSError, ValueError):
                logger.debug("cannot handle signal %s", signum)
        return True

    def restore(self) -> None:
        for signum, previous in self._previous.items():
            try:
                signal.signal(signum, previous)
            except (OSError, ValueError, TypeError):
                logger.debug("cannot restore handler for signal %s", signum)
        self._previous.clear()

    def _on_signal(self, signum: int, _frame) -> None:
        self._queue.put(signum)

    def notify(self, signum: int) -> None:
        """Deliver ``signum`` as if the OS had sent it."""
        self._queue.put(signum)

    def wake(self) -> None:
        self._queue.put(None)

    def loop(self) -> None:
        while True:
            signum = self._queue.get()
            if signum is None or self.ctx.exiting:
                break
            self.handle_signal(signum)

    def handle_signal(self, signum: int) -> None:
        if signum in RESIZE_SIGNALS:
            self.ctx.request_redraw()
            return
        logger.debug("received signal %s", signum)
        self.ctx.request_exit(signal_status(signum))


__all__ = ["EXIT_SIGNALS", "RESIZE_SIGNALS", "SignalLoop"]
