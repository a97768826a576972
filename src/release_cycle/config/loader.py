"""Configuration loading.

Lookup order for a project directory:

1. ``release-cycle.toml`` in the project directory
2. ``[tool.release-cycle]`` in the nearest pyproject.toml
3. Built-in defaults
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_cycle.config.models import ReleaseCycleConfig
from release_cycle.exceptions import ConfigNotFoundError, ConfigValidationError

CONFIG_FILENAME = "release-cycle.toml"
TOOL_KEY = "release-cycle"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in start or any of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists
    """
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {start} or its parents")


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is unreadable or not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(f"Cannot read {path}: {e.strerror or e}") from e


def extract_release_cycle_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-cycle]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(project_path: Path | None = None) -> ReleaseCycleConfig:
    """Load configuration for the project at project_path.

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    project_path = project_path or Path.cwd()

    standalone = project_path / CONFIG_FILENAME
    if standalone.is_file():
        raw = load_toml(standalone)
        source = standalone
    else:
        try:
            source = find_pyproject_toml(project_path)
        except ConfigNotFoundError:
            return ReleaseCycleConfig()
        raw = extract_release_cycle_config(load_toml(source))

    try:
        return ReleaseCycleConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e
