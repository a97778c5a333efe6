"""Key-token to action bindings.

Default bindings follow readline/emacs conventions. Overrides come from the
``Keymap`` object of the rc file or ``Config.keymap`` and may use either key
tokens (``CTRL_N``) or the short form (``C-n``).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from .actions import ACTIONS
from .errors import ConfigurationError

DEFAULT_BINDINGS: dict[str, str] = {
    "ENTER": "finish",
    "ESC": "cancel",
    "CTRL_C": "cancel",
    "CTRL_G": "cancel",
    "UP": "select_up",
    "CTRL_P": "select_up",
    "DOWN": "select_down",
    "CTRL_N": "select_down",
    "PAGE_UP": "page_up",
    "PAGE_DOWN": "page_down",
    "LEFT": "backward_char",
    "CTRL_B": "backward_char",
    "RIGHT": "forward_char",
    "CTRL_F": "forward_char",
    "HOME": "beginning_of_line",
    "CTRL_A": "beginning_of_line",
    "END": "end_of_line",
    "CTRL_E": "end_of_line",
    "BACKSPACE": "delete_backward_char",
    "DELETE": "delete_forward_char",
    "CTRL_D": "delete_forward_char",
    "CTRL_W": "delete_backward_word",
    "CTRL_K": "kill_end_of_line",
    "CTRL_U": "kill_beginning_of_line",
    "CTRL_SPACE": "toggle_selection_and_select_next",
    "CTRL_L": "redraw",
}

_KEY_ALIASES = {
    "RETURN": "ENTER",
    "ESCAPE": "ESC",
    "ARROWUP": "UP",
    "ARROWDOWN": "DOWN",
    "ARROWLEFT": "LEFT",
    "ARROWRIGHT": "RIGHT",
    "PGUP": "PAGE_UP",
    "PGDN": "PAGE_DOWN",
    "PAGEUP": "PAGE_UP",
    "PAGEDOWN": "PAGE_DOWN",
    "BS": "BACKSPACE",
    "DEL": "DELETE",
}

# Unbound when multi-select is disabled.
_MULTI_SELECT_ACTIONS = frozenset({"toggle_selection", "toggle_selection_and_select_next", "select_all"})


def normalize_key_name(name: str) -> str:
    """Map ``C-n`` / ``c-space`` / ``PgUp`` style names to key tokens."""
    raw = name.strip()
    if len(raw) == 1:
        return raw
    upper = raw.upper().replace("-", "_")
    if upper.startswith("C_") and len(upper) > 2:
        upper = "CTRL_" + upper[2:]
    return _KEY_ALIASES.get(upper, upper)


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], None]


class KeyComboRegistry:
    """Small key-dispatch table keyed by normalized key tokens."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def dispatch(self, key: str) -> bool:
        """Invoke the handler bound to ``key``; return whether one existed."""
        handler = self._handlers.get(key)
        if handler is None:
            return False
        handler()
        return True


def resolve_bindings(overrides: Mapping[str, str] | None = None, *, multi_select: bool = True) -> dict[str, str]:
    """Merge ``overrides`` onto the defaults, validating every action name."""
    bindings = dict(DEFAULT_BINDINGS)
    for key_name, action in (overrides or {}).items():
        if action not in ACTIONS:
            raise ConfigurationError(f"Unknown action {action!r} bound to key {key_name!r}")
        bindings[normalize_key_name(key_name)] = action
    if not multi_select:
        bindings = {key: action for key, action in bindings.items() if action not in _MULTI_SELECT_ACTIONS}
    return bindings


__all__ = [
    "DEFAULT_BINDINGS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "normalize_key_name",
    "resolve_bindings",
]
