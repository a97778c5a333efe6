"""Named input actions bound to keys by ``linepicker.keymap``.

Each action takes the session context and mutates query or selection state
through its public methods; none of them draw.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .config import Layout
from .runtime.status import STATUS_CANCELED, STATUS_OK

if TYPE_CHECKING:
    from .runtime.context import Context

Action = Callable[["Context"], None]


def _visual_step(ctx: Context, step: int) -> int:
    # Bottom-up lists grow away from the prompt, so "up" means the next match.
    return -step if ctx.layout is Layout.BOTTOM_UP else step


def select_up(ctx: Context) -> None:
    ctx.move_cursor(_visual_step(ctx, -1))


def select_down(ctx: Context) -> None:
    ctx.move_cursor(_visual_step(ctx, 1))


def page_up(ctx: Context) -> None:
    ctx.move_cursor(_visual_step(ctx, -ctx.page_rows()))


def page_down(ctx: Context) -> None:
    ctx.move_cursor(_visual_step(ctx, ctx.page_rows()))


def backward_char(ctx: Context) -> None:
    ctx.move_caret(-1)


def forward_char(ctx: Context) -> None:
    ctx.move_caret(1)


def beginning_of_line(ctx: Context) -> None:
    ctx.set_caret(0)


def end_of_line(ctx: Context) -> None:
    ctx.set_caret(None)


def delete_backward_char(ctx: Context) -> None:
    ctx.delete_backward()


def delete_forward_char(ctx: Context) -> None:
    ctx.delete_forward()


def delete_backward_word(ctx: Context) -> None:
    ctx.delete_word_backward()


def kill_end_of_line(ctx: Context) -> None:
    ctx.kill_to_end()


def kill_beginning_of_line(ctx: Context) -> None:
    ctx.kill_to_beginning()


def toggle_selection(ctx: Context) -> None:
    ctx.toggle_selection()


def toggle_selection_and_select_next(ctx: Context) -> None:
    if ctx.toggle_selection():
        ctx.move_cursor(1)


def select_all(ctx: Context) -> None:
    ctx.select_all()


def select_none(ctx: Context) -> None:
    ctx.clear_selection()


def redraw(ctx: Context) -> None:
    ctx.request_redraw()


def finish(ctx: Context) -> None:
    ctx.request_exit(STATUS_OK)


def cancel(ctx: Context) -> None:
    ctx.request_exit(STATUS_CANCELED)


ACTIONS: dict[str, Action] = {
    "select_up": select_up,
    "select_down": select_down,
    "page_up": page_up,
    "page_down": page_down,
    "backward_char": backward_char,
    "forward_char": forward_char,
    "beginning_of_line": beginning_of_line,
    "end_of_line": end_of_line,
    "delete_backward_char": delete_backward_char,
    "delete_forward_char": delete_forward_char,
    "delete_backward_word": delete_backward_word,
    "kill_end_of_line": kill_end_of_line,
    "kill_beginning_of_line": kill_beginning_of_line,
    "toggle_selection": toggle_selection,
    "toggle_selection_and_select_next": toggle_selection_and_select_next,
    "select_all": select_all,
    "select_none": select_none,
    "redraw": redraw,
    "finish": finish,
    "cancel": cancel,
}
