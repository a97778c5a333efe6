"""Session configuration and rc-file helpers.

``Config`` is frozen and read once at session start. Fields left as ``None``
fall back to the rc file, then to built-in defaults. The rc file is a small
JSON object; only the keys listed in ``RCFILE_KEYS`` are read.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from platformdirs import user_config_dir

from .debounce import DEBOUNCE_SECONDS
from .errors import ConfigurationError
from .matchers import DEFAULT_MATCHER

APP_NAME = "linepicker"
CONFIG_FILENAME = "config.json"
DEFAULT_RCFILE_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_RCFILE_PATH = Path.home() / ".config" / "linepicker.json"
RCFILE_ENV_VAR = "LINEPICKER_RCFILE"
MAX_WORKERS_ENV_VAR = "LINEPICKER_MAX_WORKERS"
DEFAULT_PROMPT = "QUERY>"

RCFILE_KEYS = ("Prompt", "Layout", "InitialMatcher", "BufferSize", "Keymap")


class Layout(str, Enum):
    TOP_DOWN = "top-down"
    BOTTOM_UP = "bottom-up"


def parse_layout(name: str | Layout | None) -> Layout:
    if name is None:
        return Layout.TOP_DOWN
    if isinstance(name, Layout):
        return name
    try:
        return Layout(name)
    except ValueError:
        raise ConfigurationError(f"Unknown layout: {name!r}") from None


@dataclass(frozen=True)
class Config:
    """Options for one picker session.

    ``initial_index`` is 1-based; values below 1 clamp to 1. A ``buffer_size``
    of 0 or ``None`` keeps every line. ``keymap`` accepts a mapping and is
    stored as a tuple of ``(key, action)`` pairs so the config stays hashable.
    """

    query: str = ""
    rcfile: Path | None = None
    buffer_size: int | None = None
    null_sep: bool = False
    initial_index: int = 1
    matcher: str | None = None
    prompt: str | None = None
    layout: str | None = None
    multi_select: bool = True
    keymap: Mapping[str, str] | tuple[tuple[str, str], ...] = ()
    tty: Path | None = None
    debounce_seconds: float = DEBOUNCE_SECONDS
    use_rcfile: bool = True

    def __post_init__(self) -> None:
        if self.initial_index < 1:
            object.__setattr__(self, "initial_index", 1)
        if self.buffer_size is not None and self.buffer_size < 0:
            raise ConfigurationError(f"buffer size must be >= 0, got {self.buffer_size}")
        pairs = self.keymap.items() if isinstance(self.keymap, Mapping) else self.keymap
        object.__setattr__(self, "keymap", tuple((str(key), str(action)) for key, action in pairs))

    @property
    def matcher_name(self) -> str:
        return self.matcher or DEFAULT_MATCHER

    @property
    def prompt_text(self) -> str:
        return DEFAULT_PROMPT if self.prompt is None else self.prompt

    @property
    def layout_type(self) -> Layout:
        return parse_layout(self.layout)

    @property
    def buffer_cap(self) -> int | None:
        return self.buffer_size or None

    @property
    def initial_cursor(self) -> int:
        """0-based cursor position derived from ``initial_index``."""
        return self.initial_index - 1

    def validate(self) -> Config:
        """Check layout name eagerly; matcher and keymap need their registries."""
        parse_layout(self.layout)
        return self

    def merged_with_rcfile(self, data: Mapping[str, object]) -> Config:
        """Fill fields still unset from a decoded rc-file object."""
        changes: dict[str, object] = {}
        prompt = data.get("Prompt")
        if self.prompt is None and prompt is not None:
            changes["prompt"] = _expect(prompt, str, "Prompt")
        layout = data.get("Layout")
        if self.layout is None and layout is not None:
            changes["layout"] = _expect(layout, str, "Layout")
        matcher = data.get("InitialMatcher")
        if self.matcher is None and matcher is not None:
            changes["matcher"] = _expect(matcher, str, "InitialMatcher")
        buffer_size = data.get("BufferSize")
        if self.buffer_size is None and buffer_size is not None:
            if isinstance(buffer_size, bool):
                raise ConfigurationError("rc file key 'BufferSize' must be an integer")
            changes["buffer_size"] = _expect(buffer_size, int, "BufferSize")
        keymap = data.get("Keymap")
        if keymap is not None:
            raw_keymap = _expect(keymap, dict, "Keymap")
            merged: dict[str, str] = {}
            for key, action in raw_keymap.items():
                merged[str(key)] = _expect(action, str, f"Keymap[{key!r}]")
            # Explicit overrides win over rc-file bindings.
            merged.update(self.keymap)
            changes["keymap"] = merged
        if not changes:
            return self
        return replace(self, **changes)


def _expect(value: object, kind: type, key: str):
    if not isinstance(value, kind):
        raise ConfigurationError(f"rc file key {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


def locate_rcfile() -> Path | None:
    """Return the first existing rc file among the known locations."""
    env_path = os.environ.get(RCFILE_ENV_VAR, "").strip()
    candidates = []
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.extend([DEFAULT_RCFILE_PATH, LEGACY_RCFILE_PATH])
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_rcfile(path: Path) -> dict[str, object]:
    """Decode the rc file at ``path`` into a top-level JSON object."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read rc file {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"malformed rc file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"rc file {path} must hold a JSON object")
    return data


def resolve_config(config: Config) -> Config:
    """Apply the rc file (explicit or located) to ``config`` and validate it."""
    if not config.use_rcfile:
        return config.validate()
    rcfile = config.rcfile if config.rcfile is not None else locate_rcfile()
    if rcfile is None:
        return config.validate()
    merged = config.merged_with_rcfile(load_rcfile(rcfile))
    return replace(merged, rcfile=Path(rcfile)).validate()


def parallelism_hint() -> int:
    """Worker count for large filter passes; all CPUs unless overridden."""
    raw = os.environ.get(MAX_WORKERS_ENV_VAR, "").strip()
    if raw:
        try:
            return max(1, int(raw))
        except ValueError:
            pass
    return max(1, os.cpu_count() or 1)


__all__ = [
    "APP_NAME",
    "Config",
    "DEFAULT_PROMPT",
    "DEFAULT_RCFILE_PATH",
    "LEGACY_RCFILE_PATH",
    "Layout",
    "MAX_WORKERS_ENV_VAR",
    "RCFILE_ENV_VAR",
    "load_rcfile",
    "locate_rcfile",
    "parallelism_hint",
    "parse_layout",
    "resolve_config",
]
