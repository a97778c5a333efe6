"""Input loop: turns key tokens into query and selection changes."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from ..actions import ACTIONS
from ..keymap import KeyComboBinding, KeyComboRegistry
from ..keys import PASTE_PREFIX, is_printable_key
from .loop import Loop
from .status import STATUS_CANCELED

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


def build_key_registry(ctx: Context) -> KeyComboRegistry:
    """Bind every key of ``ctx.bindings`` to its action on ``ctx``."""
    keys_by_action: dict[str, list[str]] = {}
    for key, action in ctx.bindings.items():
        keys_by_action.setdefault(action, []).append(key)
    return KeyComboRegistry().register_bindings(
        *(KeyComboBinding(tuple(keys), partial(ACTIONS[action], ctx)) for action, keys in keys_by_action.items())
    )


class InputLoop(Loop):
    """Read one key at a time until the session is asked to exit.

    ``terminal.read_key`` is the suspension point; ``Context.request_exit``
    wakes it through the terminal's wake hook so shutdown never waits for a
    key press.
    """

    name = "input"

    def __init__(self, ctx: Context, terminal) -> None:
        super().__init__(ctx)
        self.terminal = terminal
        self.registry = build_key_registry(ctx)

    def loop(self) -> None:
        while not self.ctx.exiting:
            key = self.terminal.read_key()
            if self.ctx.exiting:
                break
            if key:
                self.handle_key(key)

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return False when it was ignored."""
        if key == "EOF":
            self.ctx.request_exit(STATUS_CANCELED)
            return True
        if key.startswith(PASTE_PREFIX):
            text = " ".join(key[len(PASTE_PREFIX):].splitlines())
            self.ctx.insert_text(text)
            return True
        if self.registry.dispatch(key):
            return True
        if is_printable_key(key):
            self.ctx.insert_text(key)
            return True
        logger.debug("ignoring unbound key %r", key)
        return False


__all__ = ["InputLoop", "build_key_registry"]
