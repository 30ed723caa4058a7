"""Locate ``tasknav.toml``.

Lookup order:

1. ``TASKNAV_CONFIG``: an explicit file. Relative paths resolve against
   the search start. A value naming no file disables discovery.
2. The search start (default: cwd) and each of its ancestors, nearest
   first.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "tasknav.toml"
CONFIG_ENV_VAR = "TASKNAV_CONFIG"


def candidate_paths(start: Path | None = None) -> Iterator[Path]:
    """Yield every ``tasknav.toml`` location walk-up would try, nearest first."""
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        yield directory / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start*, or None."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        if not path.is_absolute():
            path = (start or Path.cwd()) / path
        return path if path.is_file() else None

    return next((p for p in candidate_paths(start) if p.is_file()), None)
