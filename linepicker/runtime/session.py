"""Synchronous library entry point: pick items from a list of choices."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..config import Config, resolve_config
from ..errors import EmptyChoicesError, InternalConsistencyError, RuntimeLoopFault
from ..matchers import DEFAULT_REGISTRY, MatcherRegistry
from ..model import Line
from .context import Context
from .status import STATUS_OK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """Outcome of ``select``.

    ``items`` holds the caller's own values. A cancelled or interrupted
    session yields no items and a non-zero ``status``; that is not an error.
    """

    items: tuple[object, ...] = ()
    status: int = STATUS_OK
    fault: RuntimeLoopFault | None = None

    @property
    def canceled(self) -> bool:
        return self.status != STATUS_OK

    def __iter__(self) -> Iterator[object]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


def normalize_choices(choices: Iterable[object]) -> list[tuple[str, object]]:
    """Turn strings and ``(label, value)`` pairs into label/value tuples.

    ``None`` entries are skipped; nothing left raises ``EmptyChoicesError``.
    """
    pairs: list[tuple[str, object]] = []
    for choice in choices:
        if choice is None:
            continue
        if isinstance(choice, str):
            pairs.append((choice, choice))
            continue
        try:
            label, value = choice
        except (TypeError, ValueError):
            raise TypeError(f"choice must be a string or a (label, value) pair, got {choice!r}") from None
        pairs.append((str(label), value))
    if not pairs:
        raise EmptyChoicesError("select() needs at least one non-empty choice")
    return pairs


def select(
    choices: Iterable[object],
    config: Config | None = None,
    *,
    terminal=None,
    registry: MatcherRegistry = DEFAULT_REGISTRY,
) -> Selection:
    """Let the user pick from ``choices`` and return the picked values.

    Choices, configuration, and matcher name are validated before the
    terminal is opened. Results are correlated to choices by input position,
    so choices sharing a label stay distinct.
    """
    pairs = normalize_choices(choices)
    config = resolve_config(config or Config())
    ctx = Context.start(config, registry=registry)
    lines = ctx.feed_lines(Line(text=label) for label, _value in pairs)
    values_by_seq = {line.seq: value for line, (_label, value) in zip(lines, pairs)}

    status = ctx.run(terminal)
    if status != STATUS_OK:
        logger.debug("selection ended with status %d", status)
        return Selection(status=status, fault=ctx.fault)

    items: list[object] = []
    for match in ctx.result():
        try:
            items.append(values_by_seq[match.seq])
        except KeyError:
            raise InternalConsistencyError(
                f"selected line {match.text!r} (seq {match.seq}) does not map to any choice"
            ) from None
    return Selection(items=tuple(items), status=status, fault=ctx.fault)


__all__ = ["Selection", "normalize_choices", "select"]
