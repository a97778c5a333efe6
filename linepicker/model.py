"""Immutable line and match records shared by every loop."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

NUL_SEPARATOR = "\0"


@dataclass(frozen=True)
class Line:
    """One input row.

    ``seq`` is the ingestion order within a session and doubles as the line
    identity: two lines with equal text are still distinct rows.
    """

    text: str
    output: str | None = None
    known_unmatched: bool = False
    seq: int = 0

    @property
    def output_value(self) -> str:
        return self.text if self.output is None else self.output

    @classmethod
    def from_raw(cls, raw: str, *, null_sep: bool = False, seq: int = 0) -> Line:
        """Build a line from raw input, splitting ``label\\0value`` in NUL mode."""
        raw = raw.rstrip("\r\n")
        if null_sep and NUL_SEPARATOR in raw:
            text, output = raw.split(NUL_SEPARATOR, 1)
            return cls(text=text, output=output, seq=seq)
        return cls(text=raw, seq=seq)


@dataclass(frozen=True)
class Match:
    line: Line
    query: str = ""
    ranges: tuple[tuple[int, int], ...] = field(default_factory=tuple)
    selected: bool = False

    @property
    def text(self) -> str:
        return self.line.text

    @property
    def output(self) -> str:
        return self.line.output_value

    @property
    def seq(self) -> int:
        return self.line.seq

    def with_selected(self, selected: bool) -> Match:
        if selected == self.selected:
            return self
        return replace(self, selected=selected)


def unmatched(line: Line, query: str = "") -> Match:
    """Wrap a line as a match without highlight ranges."""
    return Match(line=line, query=query)


def merge_ranges(ranges: list[tuple[int, int]]) -> tuple[tuple[int, int], ...]:
    """Sort ranges and merge overlapping or touching spans."""
    if not ranges:
        return ()
    ordered = sorted(ranges)
    merged: list[tuple[int, int]] = [ordered[0]]
    for start, end in ordered[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return tuple(merged)
