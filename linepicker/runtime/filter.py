"""Filter loop: runs the active matcher and publishes views."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from ..config import parallelism_hint
from ..model import Line, Match
from .loop import Loop
from .state import FilteredView

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

PARALLEL_MIN_LINES = 50_000


class FilterLoop(Loop):
    """Re-run the matcher whenever the query or buffer changes.

    Each pass reads ``(query, buffer)`` from one snapshot, so a published view
    always belongs to a pair that existed at some point. Redraws after a pass
    go through the debounce scheduler unless the pass was requested by
    ``exec_query``.
    """

    name = "filter"

    def __init__(self, ctx: Context, workers: int | None = None) -> None:
        super().__init__(ctx)
        self.workers = parallelism_hint() if workers is None else max(1, workers)
        self.passes = 0

    def loop(self) -> None:
        while True:
            alive, urgent = self.ctx.filter_trigger.wait()
            if not alive:
                break
            self.run_pass(redraw_now=urgent)

    def run_pass(self, redraw_now: bool = False) -> FilteredView:
        query, lines, generation = self.ctx.filter_snapshot()
        matches = self.execute(query, lines)
        view = FilteredView(generation=generation, query=query, matches=tuple(matches), total=len(lines))
        self.ctx.publish_view(view)
        self.passes += 1
        if redraw_now:
            self.ctx.request_redraw()
        else:
            self.ctx.schedule_redraw()
        return view

    def execute(self, query: str, lines: Sequence[Line]) -> list[Match]:
        spec = self.ctx.matcher
        if self.workers <= 1 or not spec.chunkable or len(lines) < PARALLEL_MIN_LINES:
            return spec.match(query, lines)

        chunk_size = (len(lines) + self.workers - 1) // self.workers
        chunks = [lines[idx:idx + chunk_size] for idx in range(0, len(lines), chunk_size)]
        logger.debug("matching %d lines in %d chunks", len(lines), len(chunks))
        out: list[Match] = []
        with ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="linepicker-match") as executor:
            futures = [executor.submit(spec.match, query, chunk) for chunk in chunks]
            for future in futures:
                out.extend(future.result())
        return out


__all__ = ["FilterLoop", "PARALLEL_MIN_LINES"]
