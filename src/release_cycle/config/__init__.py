"""Configuration management for release-cycle."""

from __future__ import annotations

from release_cycle.config.loader import load_config
from release_cycle.config.models import (
    ChangelogConfig,
    DocumentRule,
    ReleaseCycleConfig,
    ReleaseNotesConfig,
)

__all__ = [
    "ChangelogConfig",
    "DocumentRule",
    "ReleaseCycleConfig",
    "ReleaseNotesConfig",
    "load_config",
]
