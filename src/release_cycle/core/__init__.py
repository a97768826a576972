"""Core business logic for release-cycle.

This module contains the fundamental building blocks:
- Version parsing and derivation (snapshot/release forms)
- Changelog promotion
- Literal version substitution across documents
- Release orchestration
"""

from __future__ import annotations

from release_cycle.core.changelog import ChangelogDocument, ChangelogSection
from release_cycle.core.release import (
    Mode,
    ReleaseCycle,
    ReleaseResult,
    ReleaseState,
    run_release_cycle,
)
from release_cycle.core.rewriter import LiteralSubstitution, apply_substitutions, rewrite_document
from release_cycle.core.version import SNAPSHOT_SUFFIX, Version, parse_version

__all__ = [
    # Version
    "SNAPSHOT_SUFFIX",
    # Changelog
    "ChangelogDocument",
    "ChangelogSection",
    # Rewriter
    "LiteralSubstitution",
    # Release
    "Mode",
    "ReleaseCycle",
    "ReleaseResult",
    "ReleaseState",
    "Version",
    "apply_substitutions",
    "parse_version",
    "rewrite_document",
    "run_release_cycle",
]
