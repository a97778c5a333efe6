"""Named match strategies and their static registry.

Every strategy is a pure function ``(query, lines) -> list[Match]``. The query
is split on whitespace into terms and a line is kept only when every term
matches its display text. Results keep buffer order, so equal-ranked lines
never reorder between passes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .errors import UnknownMatcherError
from .model import Line, Match, merge_ranges, unmatched

logger = logging.getLogger(__name__)

MatchFunction = Callable[[str, Sequence[Line]], list[Match]]

IGNORE_CASE = "IgnoreCase"
CASE_SENSITIVE = "CaseSensitive"
SMART_CASE = "SmartCase"
REGEXP = "Regexp"
DEFAULT_MATCHER = IGNORE_CASE


def split_query(query: str) -> list[str]:
    return query.split()


def _match_with_patterns(
    query: str,
    lines: Sequence[Line],
    patterns: list[re.Pattern[str]],
) -> list[Match]:
    if not patterns:
        return [unmatched(line, query) for line in lines]

    out: list[Match] = []
    for line in lines:
        text = line.text
        ranges: list[tuple[int, int]] = []
        for pattern in patterns:
            if pattern.search(text) is None:
                break
            # Zero-width matches accept the line but add nothing to highlight.
            ranges.extend(m.span() for m in pattern.finditer(text) if m.end() > m.start())
        else:
            out.append(Match(line=line, query=query, ranges=merge_ranges(ranges)))
    return out


def _literal_patterns(terms: Iterable[str], flags: int) -> list[re.Pattern[str]]:
    return [re.compile(re.escape(term), flags) for term in terms]


def match_ignore_case(query: str, lines: Sequence[Line]) -> list[Match]:
    """Case-insensitive substring match for every term."""
    return _match_with_patterns(query, lines, _literal_patterns(split_query(query), re.IGNORECASE))


def match_case_sensitive(query: str, lines: Sequence[Line]) -> list[Match]:
    return _match_with_patterns(query, lines, _literal_patterns(split_query(query), 0))


def match_smart_case(query: str, lines: Sequence[Line]) -> list[Match]:
    """Case-sensitive only when the query holds an uppercase character."""
    flags = 0 if any(ch.isupper() for ch in query) else re.IGNORECASE
    return _match_with_patterns(query, lines, _literal_patterns(split_query(query), flags))


def match_regexp(query: str, lines: Sequence[Line]) -> list[Match]:
    """Treat each term as a case-insensitive regular expression.

    A term that does not compile matches nothing, so a half-typed pattern
    such as ``foo(`` empties the view instead of failing the filter pass.
    """
    patterns: list[re.Pattern[str]] = []
    for term in split_query(query):
        try:
            patterns.append(re.compile(term, re.IGNORECASE))
        except re.error:
            logger.debug("ignoring invalid pattern %r", term)
            return []
    return _match_with_patterns(query, lines, patterns)


@dataclass(frozen=True)
class MatcherSpec:
    """Registry entry binding a strategy name to its match function.

    ``chunkable`` strategies keep buffer order, so their results over
    consecutive slices of the buffer can be concatenated.
    """

    name: str
    description: str
    match: MatchFunction
    chunkable: bool = True


class MatcherRegistry:
    """Read-only lookup table of match strategies keyed by name."""

    def __init__(self, specs: Iterable[MatcherSpec]) -> None:
        self._specs: dict[str, MatcherSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"duplicate matcher name: {spec.name!r}")
            self._specs[spec.name] = spec

    def get(self, name: str) -> MatcherSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownMatcherError(name, self.names())
        return spec

    def names(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


BUILTIN_MATCHERS: tuple[MatcherSpec, ...] = (
    MatcherSpec(IGNORE_CASE, "case-insensitive substring", match_ignore_case),
    MatcherSpec(CASE_SENSITIVE, "case-sensitive substring", match_case_sensitive),
    MatcherSpec(SMART_CASE, "case-sensitive only when the query has uppercase", match_smart_case),
    MatcherSpec(REGEXP, "case-insensitive regular expressions", match_regexp),
)

DEFAULT_REGISTRY = MatcherRegistry(BUILTIN_MATCHERS)


__all__ = [
    "BUILTIN_MATCHERS",
    "CASE_SENSITIVE",
    "DEFAULT_MATCHER",
    "DEFAULT_REGISTRY",
    "IGNORE_CASE",
    "MatchFunction",
    "MatcherRegistry",
    "MatcherSpec",
    "REGEXP",
    "SMART_CASE",
    "match_case_sensitive",
    "match_ignore_case",
    "match_regexp",
    "match_smart_case",
    "split_query",
]
