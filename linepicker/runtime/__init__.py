"""Session runtime: shared context, the four loops, and ``select``.

Imports are lazy so ``linepicker.runtime.status`` can be used by modules the
context itself depends on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context
    from .session import Selection


def select(*args, **kwargs):
    """Lazily import the session entry point to avoid package-import cycles."""
    from .session import select as _select

    return _select(*args, **kwargs)


def __getattr__(name: str):
    if name == "Context":
        from .context import Context

        return Context
    if name == "Selection":
        from .session import Selection

        return Selection
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Context", "Selection", "select"]
