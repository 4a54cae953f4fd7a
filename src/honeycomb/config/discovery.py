"""Config file discovery.

Lookup order:
  1. ``HONEYCOMB_CONFIG`` env var (a missing file there disables discovery)
  2. ``honeycomb.toml`` in the start directory or any parent, like git's ``.git/``
  3. ``$XDG_CONFIG_HOME/honeycomb/honeycomb.toml`` (``~/.config`` by default)
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "honeycomb.toml"
CONFIG_ENV_VAR = "HONEYCOMB_CONFIG"


def user_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "honeycomb" / CONFIG_FILENAME


def _walk_up(start: Path) -> Path | None:
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def find_config(start: Path | None = None) -> Path | None:
    """Locate honeycomb.toml, or None when no config applies."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    found = _walk_up(start or Path.cwd())
    if found is not None:
        return found

    fallback = user_config_path()
    return fallback if fallback.is_file() else None
