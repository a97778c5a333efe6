"""Immutable views and synchronization primitives shared through the context."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass

from ..model import Match


@dataclass(frozen=True)
class FilteredView:
    """Immutable result of one filter pass over one buffer snapshot.

    ``generation`` is ``-1`` for the seed view shown before the first pass.
    """

    generation: int
    query: str
    matches: tuple[Match, ...]
    total: int


EMPTY_VIEW = FilteredView(generation=-1, query="", matches=(), total=0)


class Trigger:
    """Coalescing wake-up flag one loop waits on.

    Any number of ``fire`` calls before the waiter wakes collapse into one
    wake-up. ``urgent`` is sticky until consumed by ``wait``.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._fired = False
        self._urgent = False
        self._closed = False

    def fire(self, urgent: bool = False) -> None:
        with self._cond:
            if self._closed:
                return
            self._fired = True
            self._urgent = self._urgent or urgent
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def wait(self) -> tuple[bool, bool]:
        """Block until fired or closed; return ``(alive, urgent)``."""
        with self._cond:
            while not self._fired and not self._closed:
                self._cond.wait()
            if self._closed:
                return False, False
            urgent = self._urgent
            self._fired = False
            self._urgent = False
            return True, urgent


class ResultChannel:
    """Write-once, closed-after-write holder for the final selection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._items: tuple[Match, ...] = ()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def publish(self, items: Iterable[Match]) -> None:
        with self._lock:
            if self._closed.is_set():
                raise RuntimeError("result channel is already closed")
            self._items = tuple(items)
            self._closed.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._closed.wait(timeout)

    def __iter__(self):
        if not self._closed.is_set():
            raise RuntimeError("result channel is still open")
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items) if self._closed.is_set() else 0


__all__ = ["EMPTY_VIEW", "FilteredView", "ResultChannel", "Trigger"]
