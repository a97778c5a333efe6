"""Shared session context for the four picker loops.

``Context`` is the only way loops reach shared state. It owns the line
buffer, the query, the published filtered view, selection state, the exit
status, and the result channel. Locking rules:

- ``_state_lock`` guards buffer, query, caret, and the generation counter;
  a filter pass snapshots all of them in one critical section.
- ``_view_lock`` guards the published view, cursor, and selected set.
- ``_view_lock`` may be taken before ``_state_lock``, never the reverse.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import replace

from ..config import Config, Layout
from ..debounce import DebounceScheduler
from ..errors import RuntimeLoopFault
from ..keymap import resolve_bindings
from ..matchers import DEFAULT_REGISTRY, MatcherRegistry, MatcherSpec
from ..model import Line, Match, unmatched
from ..screen import FrameState
from ..terminal import TerminalController
from .filter import FilterLoop
from .input import InputLoop
from .signals import SignalLoop
from .state import EMPTY_VIEW, FilteredView, ResultChannel, Trigger
from .status import STATUS_FAULT, STATUS_OK
from .view import RenderLoop

logger = logging.getLogger(__name__)

DEFAULT_PAGE_ROWS = 23


def _clamp(index: int, count: int) -> int:
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))


class Context:
    """Aggregate root of one picker session."""

    def __init__(self, config: Config | None = None, *, registry: MatcherRegistry = DEFAULT_REGISTRY) -> None:
        self.config = (config or Config()).validate()
        self.registry = registry
        self.matcher: MatcherSpec = registry.get(self.config.matcher_name)
        self.layout: Layout = self.config.layout_type
        self.prompt: str = self.config.prompt_text
        self.bindings = resolve_bindings(dict(self.config.keymap), multi_select=self.config.multi_select)

        self._state_lock = threading.Lock()
        self._buffer: deque[Line] = deque(maxlen=self.config.buffer_cap)
        self._next_seq = 0
        self._query = self.config.query
        self._caret = len(self._query)
        self._generation = 0

        self._view_lock = threading.Lock()
        self._view = EMPTY_VIEW
        self._cursor = self.config.initial_cursor
        self._selected: dict[int, Line] = {}

        self._exit_lock = threading.Lock()
        self._exit_event = threading.Event()
        self._exit_status: int | None = None
        self._stop_callbacks: list[Callable[[], None]] = []
        self._fault: RuntimeLoopFault | None = None

        self._loops_cond = threading.Condition()
        self._active_loops: set[str] = set()
        self._started = False

        self.filter_trigger = Trigger()
        self.render_trigger = Trigger()
        self._filter_debounce = DebounceScheduler(self.config.debounce_seconds, name="filter-debounce")
        self._redraw_debounce = DebounceScheduler(self.config.debounce_seconds, name="redraw-debounce")
        self.results = ResultChannel()
        self._terminal = None

    @classmethod
    def start(cls, config: Config | None = None, *, registry: MatcherRegistry = DEFAULT_REGISTRY) -> Context:
        """Validate ``config`` and build a context without touching the terminal."""
        return cls(config, registry=registry)

    # buffer

    def feed_lines(self, lines: Iterable[Line | str]) -> list[Line]:
        """Append lines to the buffer and schedule a debounced re-filter.

        Strings are parsed with the session's NUL-separator mode. Returns the
        stored lines, each stamped with its session ``seq``.
        """
        added: list[Line] = []
        with self._state_lock:
            for item in lines:
                if isinstance(item, Line):
                    line = replace(item, seq=self._next_seq)
                else:
                    line = Line.from_raw(str(item), null_sep=self.config.null_sep, seq=self._next_seq)
                self._next_seq += 1
                self._buffer.append(line)
                added.append(line)
            if added:
                self._generation += 1
        if added:
            self.schedule_filter()
        return added

    def buffer_lines(self) -> tuple[Line, ...]:
        with self._state_lock:
            return tuple(self._buffer)

    def filter_snapshot(self) -> tuple[str, tuple[Line, ...], int]:
        """Return a consistent ``(query, lines, generation)`` triple."""
        with self._state_lock:
            return self._query, tuple(self._buffer), self._generation

    # query

    @property
    def query(self) -> str:
        with self._state_lock:
            return self._query

    @property
    def caret(self) -> int:
        with self._state_lock:
            return self._caret

    def set_query(self, text: str) -> None:
        """Replace the query without triggering a filter pass."""
        with self._state_lock:
            changed = text != self._query
            self._query = text
            self._caret = len(text)
            if changed:
                self._generation += 1
        if changed:
            self._reset_cursor()

    def exec_query(self) -> bool:
        """Run one filter pass and redraw right away.

        Returns False without forcing a redraw when a debounced redraw is
        already pending; the filter pass is still requested.
        """
        if self._redraw_debounce.pending:
            self.request_filter()
            return False
        self.request_filter(urgent=True)
        return True

    def _edit_query(self, edit: Callable[[str, int], tuple[str, int]]) -> None:
        with self._state_lock:
            query, caret = edit(self._query, self._caret)
            caret = max(0, min(caret, len(query)))
            changed = query != self._query
            moved = caret != self._caret
            self._query = query
            self._caret = caret
            if changed:
                self._generation += 1
        if changed:
            self._reset_cursor()
            self.request_filter()
        if changed or moved:
            self.request_redraw()

    def insert_text(self, text: str) -> None:
        if text:
            self._edit_query(lambda q, c: (q[:c] + text + q[c:], c + len(text)))

    def delete_backward(self) -> None:
        self._edit_query(lambda q, c: (q[:c - 1] + q[c:], c - 1) if c > 0 else (q, c))

    def delete_forward(self) -> None:
        self._edit_query(lambda q, c: (q[:c] + q[c + 1:], c))

    def delete_word_backward(self) -> None:
        def edit(query: str, caret: int) -> tuple[str, int]:
            start = caret
            while start > 0 and query[start - 1].isspace():
                start -= 1
            while start > 0 and not query[start - 1].isspace():
                start -= 1
            return query[:start] + query[caret:], start

        self._edit_query(edit)

    def kill_to_end(self) -> None:
        self._edit_query(lambda q, c: (q[:c], c))

    def kill_to_beginning(self) -> None:
        self._edit_query(lambda q, c: (q[c:], 0))

    def clear_query(self) -> None:
        self._edit_query(lambda q, c: ("", 0))

    def move_caret(self, delta: int) -> None:
        self._edit_query(lambda q, c: (q, c + delta))

    def set_caret(self, position: int | None) -> None:
        self._edit_query(lambda q, c: (q, len(q) if position is None else position))

    # view and selection

    def current_view(self) -> FilteredView:
        """Return the last published view, or a seed view of the buffer.

        The seed view stands in before the first filter pass and leaves out
        lines fed with ``known_unmatched`` set.
        """
        with self._view_lock:
            view = self._view
        if view.generation >= 0:
            return view
        with self._state_lock:
            lines = tuple(self._buffer)
        return FilteredView(
            generation=-1,
            query="",
            matches=tuple(unmatched(line) for line in lines if not line.known_unmatched),
            total=len(lines),
        )

    def publish_view(self, view: FilteredView) -> bool:
        """Swap in ``view`` unless a newer generation is already published."""
        with self._view_lock:
            if view.generation < self._view.generation:
                return False
            if self._selected:
                view = replace(
                    view,
                    matches=tuple(m.with_selected(m.seq in self._selected) for m in view.matches),
                )
            self._view = view
        logger.debug("published view gen=%d matches=%d/%d", view.generation, len(view.matches), view.total)
        return True

    @property
    def cursor(self) -> int:
        count = len(self.current_view().matches)
        with self._view_lock:
            return _clamp(self._cursor, count)

    def _reset_cursor(self) -> None:
        with self._view_lock:
            self._cursor = 0

    def page_rows(self) -> int:
        if self._terminal is None:
            return DEFAULT_PAGE_ROWS
        return max(1, self._terminal.size()[1] - 1)

    def move_cursor(self, delta: int) -> None:
        count = len(self.current_view().matches)
        with self._view_lock:
            current = _clamp(self._cursor, count)
            self._cursor = _clamp(current + delta, count)
            moved = self._cursor != current
        if moved:
            self.request_redraw()

    def toggle_selection(self) -> bool:
        """Flip the selected flag of the match under the cursor."""
        view = self.current_view()
        if not view.matches:
            return False
        with self._view_lock:
            idx = _clamp(self._cursor, len(view.matches))
            match = view.matches[idx]
            if match.seq in self._selected:
                del self._selected[match.seq]
                selected = False
            else:
                self._selected[match.seq] = match.line
                selected = True
            if self._view is view:
                matches = list(view.matches)
                matches[idx] = match.with_selected(selected)
                self._view = replace(view, matches=tuple(matches))
        self.request_redraw()
        return True

    def select_all(self) -> None:
        view = self.current_view()
        with self._view_lock:
            for match in view.matches:
                self._selected[match.seq] = match.line
            if self._view is view:
                self._view = replace(view, matches=tuple(m.with_selected(True) for m in view.matches))
        self.request_redraw()

    def clear_selection(self) -> None:
        with self._view_lock:
            self._selected.clear()
            self._view = replace(self._view, matches=tuple(m.with_selected(False) for m in self._view.matches))
        self.request_redraw()

    def selected_seqs(self) -> frozenset[int]:
        with self._view_lock:
            return frozenset(self._selected)

    def snapshot(self) -> FrameState:
        """Collect a consistent frame for the render loop."""
        view = self.current_view()
        with self._state_lock:
            query = self._query
            caret = self._caret
        with self._view_lock:
            cursor = _clamp(self._cursor, len(view.matches))
            selected = frozenset(self._selected)
        return FrameState(
            prompt=self.prompt,
            query=query,
            caret=caret,
            matches=view.matches,
            cursor=cursor,
            total=view.total,
            matcher_name=self.matcher.name,
            layout=self.layout,
            selected=selected,
            multi_select=self.config.multi_select,
        )

    # triggers

    def request_filter(self, urgent: bool = False) -> None:
        self.filter_trigger.fire(urgent)

    def schedule_filter(self) -> bool:
        return self._filter_debounce.schedule(self.request_filter)

    def request_redraw(self) -> None:
        self.render_trigger.fire()

    def schedule_redraw(self) -> bool:
        return self._redraw_debounce.schedule(self.request_redraw)

    @property
    def redraw_pending(self) -> bool:
        return self._redraw_debounce.pending

    # shutdown

    @property
    def exiting(self) -> bool:
        return self._exit_event.is_set()

    @property
    def exit_status(self) -> int | None:
        with self._exit_lock:
            return self._exit_status

    @property
    def fault(self) -> RuntimeLoopFault | None:
        with self._exit_lock:
            return self._fault

    def add_stop_callback(self, callback: Callable[[], None]) -> None:
        """Register a wake-up hook run once when exit is requested."""
        with self._exit_lock:
            if self._exit_status is None:
                self._stop_callbacks.append(callback)
                return
        callback()

    def request_exit(self, status: int) -> bool:
        """Set the exit status once and stop every loop; later calls are no-ops."""
        with self._exit_lock:
            if self._exit_status is not None:
                logger.debug("ignoring exit request %d, status already %d", status, self._exit_status)
                return False
            self._exit_status = status
            callbacks = list(self._stop_callbacks)
            self._stop_callbacks.clear()
        logger.debug("exit requested with status %d", status)
        self._exit_event.set()
        self._filter_debounce.close()
        self._redraw_debounce.close()
        self.filter_trigger.close()
        self.render_trigger.close()
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("stop callback %r failed", callback)
        return True

    def record_fault(self, fault: RuntimeLoopFault) -> None:
        with self._exit_lock:
            if self._fault is None:
                self._fault = fault

    # loop bookkeeping

    def add_loop(self, name: str) -> None:
        with self._loops_cond:
            self._active_loops.add(name)

    def loop_finished(self, name: str) -> None:
        with self._loops_cond:
            self._active_loops.discard(name)
            self._loops_cond.notify_all()
        logger.debug("%s loop stopped", name)

    @property
    def active_loops(self) -> frozenset[str]:
        with self._loops_cond:
            return frozenset(self._active_loops)

    def wait_done(self, timeout: float | None = None) -> bool:
        """Block until every registered loop has finished."""
        with self._loops_cond:
            return self._loops_cond.wait_for(lambda: not self._active_loops, timeout)

    # session

    def run(self, terminal=None) -> int:
        """Run the session to completion and return its exit status.

        ``terminal`` defaults to a ``TerminalController`` on ``config.tty``.
        Opening it happens before any loop starts, so ``TerminalInitError``
        leaves no thread behind.
        """
        if self._started:
            raise RuntimeError("a context can only run once")
        self._started = True
        if terminal is None:
            terminal = TerminalController(self.config.tty)

        try:
            terminal.open()
        except Exception:
            # Stops the debounce timers armed by feed_lines.
            self.request_exit(STATUS_FAULT)
            raise
        try:
            with terminal.raw_mode():
                self._terminal = terminal
                self.add_stop_callback(terminal.wake)
                signal_loop = SignalLoop(self)
                loops = [RenderLoop(self, terminal), FilterLoop(self), InputLoop(self, terminal), signal_loop]
                signal_loop.install()
                try:
                    for loop in loops:
                        self.add_loop(loop.name)
                        loop.start()
                    if self.query:
                        self.exec_query()
                    else:
                        self.request_redraw()
                    self.wait_done()
                finally:
                    if not self.exiting:
                        self.request_exit(STATUS_FAULT)
                    self.wait_done()
                    signal_loop.restore()
        finally:
            if not self.exiting:
                self.request_exit(STATUS_FAULT)
            self._terminal = None
            terminal.close()
        self._finalize()
        return self.exit_status

    def _finalize(self) -> None:
        status = self.exit_status
        if status is None:
            # Every loop returned without an exit request; treat as a fault.
            self.request_exit(STATUS_FAULT)
            status = STATUS_FAULT
        chosen = self._chosen_matches() if status == STATUS_OK else []
        self.results.publish(chosen)
        logger.debug("session finished with status %d and %d result(s)", status, len(chosen))

    def _settled_view(self) -> FilteredView:
        """Return a view for the current query and buffer, filtering now if needed."""
        view = self.current_view()
        with self._state_lock:
            generation = self._generation
        if view.generation == generation:
            return view
        query, lines, generation = self.filter_snapshot()
        logger.debug("published view is stale (gen %d < %d); filtering on confirm", view.generation, generation)
        self.publish_view(
            FilteredView(
                generation=generation,
                query=query,
                matches=tuple(self.matcher.match(query, lines)),
                total=len(lines),
            )
        )
        return self.current_view()

    def _chosen_matches(self) -> list[Match]:
        view = self._settled_view()
        with self._view_lock:
            selected = dict(self._selected)
            cursor = _clamp(self._cursor, len(view.matches))
        if selected:
            by_seq = {match.seq: match for match in view.matches}
            return [
                by_seq.get(seq, Match(line=line, query=view.query)).with_selected(True)
                for seq, line in sorted(selected.items())
            ]
        if not view.matches:
            return []
        return [view.matches[cursor]]

    def result(self) -> list[Match]:
        """Return the chosen matches once ``run`` has finished."""
        return list(self.results)


__all__ = ["Context", "EMPTY_VIEW", "FilteredView", "ResultChannel", "Trigger"]
