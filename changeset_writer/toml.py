"""TOML configuration loading.

Formatter options live in a `.mdformat.toml` file, the same file mdformat
itself reads. The nearest one at or above the working directory wins.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigError

CONFIG_FILENAME = ".mdformat.toml"


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file."""
    return tomlkit.parse(path.read_text())


def find_config_file(cwd: Path) -> Path | None:
    """Return the nearest `.mdformat.toml` at or above cwd, or None."""
    start = cwd.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(cwd: Path) -> dict[str, Any]:
    """Resolve formatter options for a working directory.

    Returns a plain dict (tomlkit containers unwrapped) so it can be merged
    and passed to mdformat. Missing config yields an empty dict.

    Raises:
        ConfigError: If the config file is not valid TOML.
    """
    path = find_config_file(cwd)
    if path is None:
        return {}
    try:
        return load_toml(path).unwrap()
    except ParseError as exc:
        raise ConfigError(f"Invalid {path}: {exc}") from exc
