"""Single-shot debounce timer shared by ingestion, typing, and redraws."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.1


class DebounceScheduler:
    """Coalesce bursts of triggers into one delayed action.

    The first ``schedule`` call arms a timer; later calls inside the window are
    no-ops and do not extend it. When the timer fires, the flag is cleared
    before the action runs, so a trigger arriving during the action arms a
    fresh window and the last trigger of a burst is never lost.
    """

    def __init__(self, delay: float = DEBOUNCE_SECONDS, *, name: str = "debounce") -> None:
        self.delay = max(0.0, float(delay))
        self.name = name
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, action: Callable[[], object]) -> bool:
        """Arm the timer for ``action``; return False when already armed."""
        with self._lock:
            if self._closed or self._timer is not None:
                return False
            self._generation += 1
            generation = self._generation
            timer = threading.Timer(self.delay, self._fire, args=(generation, action))
            timer.daemon = True
            timer.name = f"linepicker-{self.name}"
            self._timer = timer
        timer.start()
        return True

    def _fire(self, generation: int, action: Callable[[], object]) -> None:
        with self._lock:
            if generation != self._generation or self._timer is None:
                # Superseded by cancel() after the timer thread was already running.
                return
            self._timer = None
        try:
            action()
        except Exception:
            logger.exception("%s action failed", self.name)

    def cancel(self) -> None:
        """Disarm a pending timer without running its action."""
        with self._lock:
            timer = self._timer
            self._timer = None
            self._generation += 1
        if timer is not None:
            timer.cancel()

    def close(self) -> None:
        """Cancel and refuse any further scheduling."""
        with self._lock:
            self._closed = True
        self.cancel()


__all__ = ["DEBOUNCE_SECONDS", "DebounceScheduler"]
