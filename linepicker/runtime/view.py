"""Render loop: the only writer to the terminal."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..screen import compose_frame
from .loop import Loop

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    STOPPED = "stopped"


class RenderLoop(Loop):
    """Redraw the screen whenever the render trigger fires.

    Other components never draw; they call ``ctx.request_redraw`` or
    ``ctx.schedule_redraw`` and this loop picks the request up.
    """

    name = "render"

    def __init__(self, ctx: Context, terminal) -> None:
        super().__init__(ctx)
        self.terminal = terminal
        self.state = RenderState.IDLE
        self.frames_drawn = 0

    def loop(self) -> None:
        try:
            while True:
                alive, _urgent = self.ctx.render_trigger.wait()
                if not alive or self.ctx.exiting:
                    break
                self.state = RenderState.RENDERING
                self.draw()
                self.state = RenderState.IDLE
        finally:
            self.state = RenderState.STOPPED

    def draw(self) -> None:
        width, height = self.terminal.size()
        frame = compose_frame(self.ctx.snapshot(), width, height)
        self.terminal.write(frame)
        self.frames_drawn += 1


__all__ = ["RenderLoop", "RenderState"]
