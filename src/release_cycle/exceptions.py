"""Exception hierarchy for release-cycle.

Every error raised by the release workflow derives from
ReleaseCycleError so the CLI can report it and exit non-zero.
None of these are transient: they describe bad input or drifted
file content, and the run aborts on the first one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ReleaseCycleError(Exception):
    """Base exception for all release-cycle errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UsageError(ReleaseCycleError):
    """Invalid or missing mode argument."""


# Version errors


class VersionError(ReleaseCycleError):
    """Base class for version errors."""


class MalformedVersionError(VersionError):
    """Version string does not match <int>.<int>.<int>[-SNAPSHOT]."""


class NotASnapshotError(VersionError):
    """A snapshot version was required but a release version was given."""


# Changelog errors


class ChangelogFormatError(ReleaseCycleError):
    """Changelog has a missing or malformed unreleased section."""


# Configuration errors


class ConfigError(ReleaseCycleError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """pyproject.toml could not be found."""


class ConfigValidationError(ConfigError):
    """Configuration is unreadable or fails validation."""


# Project errors


class ProjectError(ReleaseCycleError):
    """Base class for project file errors."""


class VersionNotFoundError(ProjectError):
    """Build descriptor holds no version field."""


class DocumentNotFoundError(ProjectError):
    """A declared target document does not exist."""


class NoOccurrencesFoundError(ProjectError):
    """A declared literal substitution matched too few times."""

    def __init__(self, path: Path, literal: str, found: int, expected: int) -> None:
        self.path = path
        self.literal = literal
        self.found = found
        self.expected = expected
        super().__init__(
            f"Expected at least {expected} occurrence(s) of {literal!r} in {path}, "
            f"found {found}. The document may be out of sync with the project version."
        )


class BuildDescriptorError(ProjectError):
    """The build tool failed to read or write the project version."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        super().__init__(message)


class ReleaseNotesExistsError(ProjectError):
    """Release notes for this version were already written."""


class DocumentIOError(ProjectError):
    """A project file could not be read, decoded or written."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)
