"""Semantic version parsing for snapshot-based release cycles.

Versions have the form ``MAJOR.MINOR.PATCH`` with an optional
``-SNAPSHOT`` marker for development builds. Parsing and formatting are
strict inverses, so a version string survives a round trip unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from release_cycle.exceptions import MalformedVersionError, NotASnapshotError

SNAPSHOT_SUFFIX = "-SNAPSHOT"

# No leading zeros, otherwise "01.2.3" would format back as "1.2.3"
_NUMBER = r"(0|[1-9]\d*)"
VERSION_PATTERN = re.compile(
    rf"^{_NUMBER}\.{_NUMBER}\.{_NUMBER}(?P<snapshot>{re.escape(SNAPSHOT_SUFFIX)})?$"
)


@dataclass(frozen=True, order=True)
class Version:
    """An immutable semantic version.

    Derived versions are always new instances.

    Examples:
        >>> v = Version.parse("1.2.3-SNAPSHOT")
        >>> str(v.to_release())
        '1.2.3'
        >>> str(v.to_release().next_snapshot())
        '1.2.4-SNAPSHOT'
    """

    major: int
    minor: int
    patch: int
    snapshot: bool = False

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            if getattr(self, name) < 0:
                raise MalformedVersionError(f"Version {name} must be non-negative")

    @classmethod
    def parse(cls, raw: str) -> Version:
        """Parse a version string.

        Raises:
            MalformedVersionError: If the string is not a valid version
        """
        match = VERSION_PATTERN.match(raw.strip())
        if not match:
            raise MalformedVersionError(
                f"Invalid version {raw!r}: expected MAJOR.MINOR.PATCH optionally "
                f"followed by {SNAPSHOT_SUFFIX}"
            )
        major, minor, patch = (int(match.group(i)) for i in (1, 2, 3))
        return cls(major, minor, patch, snapshot=match.group("snapshot") is not None)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}{SNAPSHOT_SUFFIX}" if self.snapshot else base

    @property
    def release_equivalent(self) -> Version:
        """This version without the snapshot marker, whatever its form."""
        return replace(self, snapshot=False)

    @property
    def snapshot_display(self) -> str:
        """The snapshot form used in prose, e.g. ``1.2.3-SNAPSHOT``."""
        return str(replace(self, snapshot=True))

    def to_release(self) -> Version:
        """Strip the snapshot marker.

        Raises:
            NotASnapshotError: If this is already a release version
        """
        if not self.snapshot:
            raise NotASnapshotError(
                f"Version {self} is not a snapshot; release mode requires a "
                f"{SNAPSHOT_SUFFIX} version"
            )
        return self.release_equivalent

    def next_snapshot(self) -> Version:
        """The next development version: patch + 1, marked as snapshot."""
        return Version(self.major, self.minor, self.patch + 1, snapshot=True)


def parse_version(raw: str) -> Version:
    """Parse a version string. See Version.parse."""
    return Version.parse(raw)
