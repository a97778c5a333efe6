"""Thread wrapper shared by the render, filter, input, and signal loops."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from ..errors import RuntimeLoopFault
from .status import STATUS_FAULT

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class Loop:
    """One concurrently scheduled unit of work over the session context.

    Subclasses implement ``loop``. Any exception escaping it is contained
    here: it is logged, recorded on the context, and turned into a forced
    non-zero exit so the other loops stop and the terminal is restored.
    """

    name = "loop"

    def __init__(self, ctx: Context) -> None:
        self.ctx = ctx

    def start(self) -> None:
        thread = threading.Thread(
            target=self._run,
            name=f"linepicker-{self.name}",
            daemon=True,
        )
        thread.start()

    def _run(self) -> None:
        logger.debug("%s loop started", self.name)
        try:
            self.loop()
            if not self.ctx.exiting:
                logger.warning("%s loop returned before exit was requested", self.name)
                self.ctx.request_exit(STATUS_FAULT)
        except Exception as exc:
            logger.exception("%s loop failed", self.name)
            self.ctx.record_fault(RuntimeLoopFault(self.name, exc))
            self.ctx.request_exit(STATUS_FAULT)
        finally:
            self.ctx.loop_finished(self.name)

    def loop(self) -> None:
        raise NotImplementedError


__all__ = ["Loop"]
