"""Frame composition for the picker screen.

Builds one full ANSI frame from an immutable ``FrameState``. Nothing here
touches the terminal; the render loop writes the returned string.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field

from .config import Layout
from .model import Match

TAB_STOP = 8
RESET = "\033[0m"
REVERSE = "\033[7m"
REVERSE_OFF = "\033[27m"
MATCH_SGR = "\033[1;4m"
MATCH_SGR_OFF = "\033[22;24m"
SELECTED_SGR = "\033[36m"
SELECTED_MARKER = "* "
UNSELECTED_MARKER = "  "


@dataclass(frozen=True)
class FrameState:
    """Everything the render loop needs for one frame."""

    prompt: str
    query: str
    caret: int
    matches: tuple[Match, ...]
    cursor: int
    total: int
    matcher_name: str
    layout: Layout = Layout.TOP_DOWN
    selected: frozenset[int] = field(default_factory=frozenset)
    multi_select: bool = True


def char_display_width(ch: str, col: int) -> int:
    """Columns ``ch`` takes when drawn at visual column ``col``.

    Non-printable characters are drawn as a one-column ``?``.
    """
    if ch == "\t":
        return TAB_STOP - col % TAB_STOP
    if not ch.isprintable():
        return 1
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def display_width(text: str) -> int:
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def clip_highlighted(text: str, max_cols: int, ranges: tuple[tuple[int, int], ...] = ()) -> str:
    """Clip ``text`` to ``max_cols`` display columns, emphasising ``ranges``.

    Tabs become spaces and other control characters become ``?`` so a line
    can never move the terminal cursor.
    """
    if max_cols <= 0 or not text:
        return ""
    out: list[str] = []
    col = 0
    range_idx = 0
    highlighted = False
    for idx, ch in enumerate(text):
        while range_idx < len(ranges) and idx >= ranges[range_idx][1]:
            range_idx += 1
        want_highlight = range_idx < len(ranges) and ranges[range_idx][0] <= idx < ranges[range_idx][1]
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        if want_highlight != highlighted:
            out.append(MATCH_SGR if want_highlight else MATCH_SGR_OFF)
            highlighted = want_highlight
        if ch == "\t":
            out.append(" " * width)
        elif not ch.isprintable():
            out.append("?")
        else:
            out.append(ch)
        col += width
    if highlighted:
        out.append(MATCH_SGR_OFF)
    return "".join(out)


def pad_to_width(text: str, used_cols: int, width: int) -> str:
    return text + " " * max(0, width - used_cols)


def page_bounds(cursor: int, count: int, rows: int) -> tuple[int, int, int, int]:
    """Return ``(start, end, page, pages)`` of the page holding ``cursor``."""
    rows = max(1, rows)
    pages = max(1, (count + rows - 1) // rows)
    page = 0 if count == 0 else min(max(0, cursor), count - 1) // rows
    start = page * rows
    return start, min(count, start + rows), page, pages


def build_status(state: FrameState, page: int, pages: int) -> str:
    status = f"{state.matcher_name} [{len(state.matches)}/{state.total}] ({page + 1}/{pages})"
    if state.selected:
        status = f"{len(state.selected)} selected " + status
    return status


def render_query_line(state: FrameState, width: int, status: str) -> str:
    prompt = f"{state.prompt} " if state.prompt else ""
    caret = max(0, min(state.caret, len(state.query)))
    before = state.query[:caret]
    at = state.query[caret:caret + 1] or " "
    after = state.query[caret + 1:]

    status_cols = display_width(status)
    budget = max(1, width - status_cols - 1) if status_cols + 1 < width else width
    head = clip_highlighted(prompt + before, budget)
    used = display_width(head)
    out = [head]
    if used < budget:
        out.append(REVERSE + clip_highlighted(at, budget - used) + REVERSE_OFF)
        used += display_width(at)
    if used < budget:
        tail = clip_highlighted(after, budget - used)
        out.append(tail)
        used += display_width(tail)
    if status_cols + 1 < width:
        out.append(" " * max(1, width - used - status_cols))
        out.append(status)
    return "".join(out)


def render_match_row(match: Match, width: int, *, is_cursor: bool, is_selected: bool, multi_select: bool) -> str:
    marker = ""
    if multi_select:
        marker = SELECTED_MARKER if is_selected else UNSELECTED_MARKER
    marker = marker[:width]
    body = clip_highlighted(match.text, width - len(marker), match.ranges)
    used = len(marker) + display_width(clip_highlighted(match.text, width - len(marker)))
    row = marker + body
    if is_cursor:
        return REVERSE + pad_to_width(row, used, width) + RESET
    if is_selected:
        return SELECTED_SGR + row + RESET
    return row


def compose_frame(state: FrameState, width: int, height: int) -> str:
    """Return a full-screen frame for ``state`` at ``width`` x ``height``."""
    width = max(1, width)
    height = max(1, height)
    list_rows = max(0, height - 1)
    start, end, page, pages = page_bounds(state.cursor, len(state.matches), max(1, list_rows))

    rows: list[str] = []
    for idx in range(start, end):
        match = state.matches[idx]
        rows.append(
            render_match_row(
                match,
                width,
                is_cursor=idx == state.cursor,
                is_selected=match.seq in state.selected,
                multi_select=state.multi_select,
            )
        )
    rows = rows[:list_rows]
    rows.extend("" for _ in range(list_rows - len(rows)))

    query_line = render_query_line(state, width, build_status(state, page, pages))
    if state.layout is Layout.BOTTOM_UP:
        # First match sits right above the prompt; the list grows upward.
        screen_rows = list(reversed(rows)) + [query_line]
    else:
        screen_rows = [query_line] + rows

    out: list[str] = ["\033[H\033[J"]
    for row_idx, row in enumerate(screen_rows):
        out.append(row)
        if "\033" in row:
            out.append(RESET)
        if row_idx < len(screen_rows) - 1:
            out.append("\r\n")
    return "".join(out)


__all__ = [
    "FrameState",
    "build_status",
    "char_display_width",
    "clip_highlighted",
    "compose_frame",
    "display_width",
    "page_bounds",
    "render_match_row",
    "render_query_line",
]
