"""Public package surface for linepicker.

``select`` runs an interactive session over a list of choices and returns the
values the user picked. ``Context`` exposes the lower-level session for
callers that stream lines in while the picker is open.
"""

from __future__ import annotations

from .config import Config, Layout
from .errors import (
    ConfigurationError,
    EmptyChoicesError,
    InternalConsistencyError,
    LinePickerError,
    RuntimeLoopFault,
    TerminalInitError,
    UnknownMatcherError,
)
from .matchers import DEFAULT_REGISTRY, MatcherRegistry, MatcherSpec
from .model import Line, Match

__version__ = "0.1.0"


def select(*args, **kwargs):
    """Lazily import the session runtime to keep package imports lightweight."""
    from .runtime.session import select as _select

    return _select(*args, **kwargs)


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def __getattr__(name: str):
    if name == "Context":
        from .runtime.context import Context

        return Context
    if name == "Selection":
        from .runtime.session import Selection

        return Selection
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Config",
    "ConfigurationError",
    "Context",
    "DEFAULT_REGISTRY",
    "EmptyChoicesError",
    "InternalConsistencyError",
    "Layout",
    "Line",
    "LinePickerError",
    "Match",
    "MatcherRegistry",
    "MatcherSpec",
    "RuntimeLoopFault",
    "Selection",
    "TerminalInitError",
    "UnknownMatcherError",
    "main",
    "select",
    "__version__",
]
