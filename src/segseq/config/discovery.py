"""Locating segseq.toml.

Precedence: an explicit ``--config`` path, then the ``SEGSEQ_CONFIG``
environment variable, then the nearest ``segseq.toml`` found walking up
from the working directory. An explicitly named file must exist; the
walk-up simply finds nothing.
"""

from __future__ import annotations

import os
from pathlib import Path

from segseq.errors import ConfigurationError

CONFIG_FILENAME = "segseq.toml"
CONFIG_ENV_VAR = "SEGSEQ_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest segseq.toml at or above *start* (default: cwd)."""
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config_path(
    explicit: str | Path | None = None,
    start: Path | None = None,
) -> Path | None:
    """Pick the config file for this invocation.

    Raises:
        ConfigurationError: If *explicit* or ``SEGSEQ_CONFIG`` names a
            file that does not exist.
    """
    candidates = (("--config", explicit), (CONFIG_ENV_VAR, os.environ.get(CONFIG_ENV_VAR)))
    for source, value in candidates:
        if value:
            path = Path(value)
            if not path.is_file():
                msg = f"Config file not found: {value} (from {source})"
                raise ConfigurationError(msg)
            return path
    return find_config(start)
