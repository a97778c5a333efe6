"""Exception taxonomy for picker sessions.

Configuration and terminal errors surface before any loop starts.
Loop faults are recorded on the context and never raised past ``select``.
"""

from __future__ import annotations


class LinePickerError(Exception):
    """Base class for every error raised by linepicker."""


class ConfigurationError(LinePickerError, ValueError):
    """Bad matcher/layout/keymap name or malformed rc file."""


class UnknownMatcherError(ConfigurationError):
    def __init__(self, name: str, known: tuple[str, ...] = ()) -> None:
        self.name = name
        self.known = known
        message = f"Unknown matcher: {name!r}"
        if known:
            message += f" (available: {', '.join(known)})"
        super().__init__(message)


class EmptyChoicesError(ConfigurationError):
    """Raised when ``select`` receives nothing to pick from."""


class TerminalInitError(LinePickerError, OSError):
    """The terminal backend could not be opened or switched to raw mode."""


class RuntimeLoopFault(LinePickerError):
    """Unexpected exception contained at one loop boundary."""

    def __init__(self, loop: str, cause: BaseException) -> None:
        self.loop = loop
        self.cause = cause
        super().__init__(f"{loop} loop failed: {cause!r}")


class InternalConsistencyError(LinePickerError, RuntimeError):
    """A confirmed match could not be mapped back to an input choice."""


__all__ = [
    "ConfigurationError",
    "EmptyChoicesError",
    "InternalConsistencyError",
    "LinePickerError",
    "RuntimeLoopFault",
    "TerminalInitError",
    "UnknownMatcherError",
]
