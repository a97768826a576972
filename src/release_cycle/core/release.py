"""Release orchestration.

A run moves through a fixed sequence of states::

    START -> VERSION_READ -> VERSION_COMPUTED -> FILES_REWRITTEN
          -> CHANGELOG_UPDATED -> [NOTES_WRITTEN] -> DONE

``release`` mode freezes the current snapshot as a release, records it in
the changelog and release notes, then moves the project on to the next
snapshot in the same run. ``snapshot`` mode only moves the project on to
the next snapshot.

The current version is read from the build descriptor once and passed
along explicitly. Any error aborts the run; files already rewritten are
left as they are, to be recovered through version control.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from release_cycle.core.changelog import ChangelogDocument
from release_cycle.core.rewriter import LiteralSubstitution, apply_substitutions
from release_cycle.core.version import SNAPSHOT_SUFFIX, Version
from release_cycle.exceptions import (
    DocumentNotFoundError,
    ReleaseNotesExistsError,
    UsageError,
)
from release_cycle.project.files import atomic_write_text, read_text

if TYPE_CHECKING:
    from pathlib import Path

    from release_cycle.config.models import ReleaseCycleConfig
    from release_cycle.project import BuildDescriptor


class Mode(StrEnum):
    """Which transition path a run takes."""

    RELEASE = "release"
    SNAPSHOT = "snapshot"

    @classmethod
    def parse(cls, token: str | None) -> Mode:
        """Parse a mode token.

        Raises:
            UsageError: If token is not exactly one of the modes
        """
        try:
            return cls(token)
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise UsageError(f"Invalid mode {token!r}. Expected one of: {choices}") from None


class ReleaseState(StrEnum):
    START = "start"
    VERSION_READ = "version-read"
    VERSION_COMPUTED = "version-computed"
    FILES_REWRITTEN = "files-rewritten"
    CHANGELOG_UPDATED = "changelog-updated"
    NOTES_WRITTEN = "notes-written"
    DONE = "done"


@dataclass
class ReleaseResult:
    """Outcome of a completed run."""

    mode: Mode
    previous_version: Version
    next_version: Version
    release_version: Version | None = None
    release_notes_path: Path | None = None
    released_entries: tuple[str, ...] = ()
    replacements: dict[tuple[Path, str], int] = field(default_factory=dict)
    states: list[ReleaseState] = field(default_factory=list)

    def summary_lines(self) -> list[str]:
        """The key=value lines printed to stdout for calling automation."""
        lines = []
        if self.release_version is not None:
            lines.append(f"release_version={self.release_version}")
        lines.append(f"next_version={self.next_version}")
        return lines


class ReleaseCycle:
    """Runs one release or snapshot transition for a project."""

    def __init__(
        self,
        project_path: Path,
        config: ReleaseCycleConfig,
        descriptor: BuildDescriptor,
        console: Console | None = None,
        *,
        today: date | None = None,
        dry_run: bool = False,
    ) -> None:
        self.project_path = project_path
        self.config = config
        self.descriptor = descriptor
        self.console = console or Console(stderr=True)
        self.today = today or date.today()
        self.dry_run = dry_run
        self._states: list[ReleaseState] = []

    @property
    def changelog_path(self) -> Path:
        return self.project_path / self.config.changelog.path

    def run(self, mode: Mode | str) -> ReleaseResult:
        mode = Mode.parse(mode)
        self._states = []
        self._advance(ReleaseState.START)

        current = Version.parse(self.descriptor.read_version())
        self._advance(ReleaseState.VERSION_READ, f"current version {current}")

        if mode is Mode.RELEASE:
            result = self._release(current)
        else:
            result = self._snapshot(current)

        self._advance(ReleaseState.DONE)
        result.states = list(self._states)
        return result

    def _release(self, current: Version) -> ReleaseResult:
        release = current.to_release()
        next_version = release.next_snapshot()
        changelog = self._load_changelog()
        previous = changelog.latest_release() or release
        notes_path = self.project_path / self.config.release_notes.path_for(str(release))
        if notes_path.exists():
            raise ReleaseNotesExistsError(f"Release notes already exist: {notes_path}")
        self._advance(
            ReleaseState.VERSION_COMPUTED,
            f"release {release}, next {next_version}, previously published {previous}",
        )

        self._write_version(release)
        substitutions = []
        for rule in self.config.documents:
            path = self.project_path / rule.path
            if rule.kind == "release":
                # Bare literal only: "1.2.3" inside "1.2.3-SNAPSHOT" is not a published mention
                sub = LiteralSubstitution(
                    path,
                    str(previous),
                    str(release),
                    rule.min_occurrences,
                    unless_followed_by=SNAPSHOT_SUFFIX,
                )
            else:
                sub = LiteralSubstitution(
                    path,
                    current.snapshot_display,
                    next_version.snapshot_display,
                    rule.min_occurrences,
                )
            substitutions.append(sub)
        replacements = self._rewrite(substitutions)
        self._advance(ReleaseState.FILES_REWRITTEN)

        promoted, entries = changelog.promote(release, self.today)
        self._write_changelog(promoted)
        self._report(f"Promoted {len(entries)} changelog entries to {release}")
        self._advance(ReleaseState.CHANGELOG_UPDATED)

        newline = changelog.newline
        notes = newline.join(entries or (self.config.changelog.placeholder,)) + newline
        if not self.dry_run:
            atomic_write_text(notes_path, notes)
        self._report(f"Wrote release notes to {self._display(notes_path)}")
        self._advance(ReleaseState.NOTES_WRITTEN)

        self._write_version(next_version)

        return ReleaseResult(
            mode=Mode.RELEASE,
            previous_version=current,
            release_version=release,
            next_version=next_version,
            release_notes_path=notes_path,
            released_entries=entries,
            replacements=replacements,
        )

    def _snapshot(self, current: Version) -> ReleaseResult:
        next_version = current.next_snapshot()
        changelog = self._load_changelog()
        self._advance(ReleaseState.VERSION_COMPUTED, f"next {next_version}")

        self._write_version(next_version)
        substitutions = [
            LiteralSubstitution(
                self.project_path / rule.path,
                current.snapshot_display,
                next_version.snapshot_display,
                min_occurrences=0,
            )
            for rule in self.config.documents_of("snapshot")
        ]
        replacements = self._rewrite(substitutions)
        self._advance(ReleaseState.FILES_REWRITTEN)

        reset = changelog.reset_unreleased()
        if reset != changelog:
            self._write_changelog(reset)
        self._advance(ReleaseState.CHANGELOG_UPDATED)

        return ReleaseResult(
            mode=Mode.SNAPSHOT,
            previous_version=current,
            next_version=next_version,
            replacements=replacements,
        )

    def _load_changelog(self) -> ChangelogDocument:
        if not self.changelog_path.is_file():
            raise DocumentNotFoundError(f"Changelog not found: {self.changelog_path}")
        return ChangelogDocument.parse(
            read_text(self.changelog_path),
            unreleased_heading=self.config.changelog.unreleased_heading,
            placeholder=self.config.changelog.placeholder,
        )

    def _write_changelog(self, changelog: ChangelogDocument) -> None:
        if not self.dry_run:
            atomic_write_text(self.changelog_path, changelog.render())
        self._report(f"Updated {self.config.changelog.path}")

    def _write_version(self, version: Version) -> None:
        if not self.dry_run:
            self.descriptor.write_version(str(version))
        self._report(f"Set project version to {version}")

    def _rewrite(self, substitutions: list[LiteralSubstitution]) -> dict[tuple[Path, str], int]:
        replacements = apply_substitutions(substitutions, dry_run=self.dry_run)
        for (path, old), count in replacements.items():
            self._report(f"Updated {self._display(path)}: {old!r} ({count} replacements)")
        return replacements

    def _display(self, path: Path) -> Path:
        return path.relative_to(self.project_path) if path.is_relative_to(self.project_path) else path

    def _advance(self, state: ReleaseState, detail: str | None = None) -> None:
        self._states.append(state)
        suffix = f": {escape(detail)}" if detail else ""
        self.console.print(f"[dim]{state.value}{suffix}[/]", highlight=False)

    def _report(self, message: str) -> None:
        prefix = "[yellow]~[/]" if self.dry_run else "[green]✓[/]"
        self.console.print(f"  {prefix} {escape(message)}", highlight=False)


def run_release_cycle(
    mode: Mode | str,
    project_path: Path,
    config: ReleaseCycleConfig,
    descriptor: BuildDescriptor,
    console: Console | None = None,
    *,
    today: date | None = None,
    dry_run: bool = False,
) -> ReleaseResult:
    """Run one release or snapshot transition. See ReleaseCycle."""
    cycle = ReleaseCycle(project_path, config, descriptor, console, today=today, dry_run=dry_run)
    return cycle.run(mode)
