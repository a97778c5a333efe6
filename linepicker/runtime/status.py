"""Session exit statuses."""

from __future__ import annotations

STATUS_OK = 0
STATUS_CANCELED = 1
STATUS_FAULT = 2


def signal_status(signum: int) -> int:
    """Shell-style status for a session ended by ``signum``."""
    return 128 + int(signum)


__all__ = ["STATUS_CANCELED", "STATUS_FAULT", "STATUS_OK", "signal_status"]
