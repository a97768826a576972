"""Unit tests for release orchestration."""

from __future__ import annotations

import stat
from datetime import date
from pathlib import Path

import pytest
from rich.console import Console

from release_cycle.config.models import DocumentRule, ReleaseCycleConfig, ReleaseNotesConfig
from release_cycle.core.changelog import PLACEHOLDER, ChangelogDocument
from release_cycle.core.release import Mode, ReleaseCycle, ReleaseState, run_release_cycle
from release_cycle.core.version import Version
from release_cycle.exceptions import (
    ChangelogFormatError,
    DocumentNotFoundError,
    MalformedVersionError,
    NoOccurrencesFoundError,
    NotASnapshotError,
    ReleaseNotesExistsError,
    UsageError,
)

RELEASE_DATE = date(2026, 10, 19)


def run(mode, project, config, descriptor, console, **kwargs):
    return run_release_cycle(
        mode, project, config, descriptor, console, today=RELEASE_DATE, **kwargs
    )


def changelog_of(project: Path) -> ChangelogDocument:
    return ChangelogDocument.parse((project / "CHANGELOG.md").read_text())


class TestMode:
    """Tests for Mode.parse()."""

    @pytest.mark.parametrize("token", ["release", "snapshot"])
    def test_valid(self, token: str):
        """Both mode tokens parse to their Mode."""
        assert Mode.parse(token).value == token

    @pytest.mark.parametrize("token", ["", "Release", "publish", None])
    def test_invalid(self, token):
        """Anything but an exact mode token is a usage error."""
        with pytest.raises(UsageError, match="Expected one of: release, snapshot"):
            Mode.parse(token)


class TestReleaseMode:
    """Tests for a release-mode run."""

    def test_summary(self, project, config, descriptor, quiet_console):
        """A release run reports the release and next versions."""
        result = run("release", project, config, descriptor, quiet_console)

        assert result.summary_lines() == [
            "release_version=1.2.3",
            "next_version=1.2.4-SNAPSHOT",
        ]

    def test_descriptor_ends_on_next_snapshot(self, project, config, descriptor, quiet_console):
        """The release version is set first, then the next snapshot."""
        run("release", project, config, descriptor, quiet_console)

        assert descriptor.writes == ["1.2.3", "1.2.4-SNAPSHOT"]
        assert descriptor.version == "1.2.4-SNAPSHOT"

    def test_readme_rewritten(self, project, config, descriptor, quiet_console):
        """Published and snapshot mentions both move forward."""
        result = run("release", project, config, descriptor, quiet_console)

        readme = (project / "README.md").read_text()
        assert readme.count("<version>1.2.3</version>") == 2
        assert readme.count("1.2.4-SNAPSHOT") == 2
        assert "1.2.2" not in readme
        assert "1.2.3-SNAPSHOT" not in readme
        assert sum(result.replacements.values()) == 4

    def test_changelog_promoted(self, project, config, descriptor, quiet_console):
        """Unreleased entries move into a dated section for the release."""
        run("release", project, config, descriptor, quiet_console)

        changelog = changelog_of(project)
        assert changelog.sections[0].heading == "Unreleased"
        assert changelog.sections[0].lines == (PLACEHOLDER,)
        assert changelog.sections[1].heading == "1.2.3 (2026-10-19)"
        assert changelog.sections[1].lines == ("- Added brand-new trading strategy helper.",)
        assert changelog.sections[2].heading == "1.2.2 (2026-09-01)"

    def test_release_notes_written(self, project, config, descriptor, quiet_console):
        """The release notes hold exactly the promoted entries."""
        result = run("release", project, config, descriptor, quiet_console)

        notes = project / "release-notes" / "1.2.3.md"
        assert result.release_notes_path == notes
        assert notes.read_text() == "- Added brand-new trading strategy helper.\n"
        assert result.released_entries == ("- Added brand-new trading strategy helper.",)

    def test_release_notes_for_empty_release(self, project, config, descriptor, quiet_console):
        """A release without entries gets placeholder notes."""
        changelog = project / "CHANGELOG.md"
        changelog.write_text(
            changelog.read_text().replace(
                "- Added brand-new trading strategy helper.", PLACEHOLDER
            )
        )

        run("release", project, config, descriptor, quiet_console)

        assert (project / "release-notes" / "1.2.3.md").read_text() == f"{PLACEHOLDER}\n"
        assert changelog_of(project).sections[1].lines == (PLACEHOLDER,)

    def test_states_visited(self, project, config, descriptor, quiet_console):
        """A release run passes through every state in order."""
        result = run("release", project, config, descriptor, quiet_console)

        assert result.states == [
            ReleaseState.START,
            ReleaseState.VERSION_READ,
            ReleaseState.VERSION_COMPUTED,
            ReleaseState.FILES_REWRITTEN,
            ReleaseState.CHANGELOG_UPDATED,
            ReleaseState.NOTES_WRITTEN,
            ReleaseState.DONE,
        ]

    def test_requires_snapshot(self, project, config, make_descriptor, quiet_console):
        """Releasing a release version fails before any write."""
        descriptor = make_descriptor("1.2.3")

        with pytest.raises(NotASnapshotError):
            run("release", project, config, descriptor, quiet_console)

        assert descriptor.writes == []

    def test_malformed_version(self, project, config, make_descriptor, quiet_console):
        """A descriptor version that does not parse aborts the run."""
        with pytest.raises(MalformedVersionError):
            run("release", project, config, make_descriptor("1.2"), quiet_console)

    def test_drifted_readme_aborts(self, project, config, descriptor, quiet_console):
        """A README that no longer mentions the published version fails the run."""
        (project / "README.md").write_text("# Demo\n\nNo versions here.\n")

        with pytest.raises(NoOccurrencesFoundError):
            run("release", project, config, descriptor, quiet_console)

        # No rollback, and nothing after the failing step ran
        assert descriptor.writes == ["1.2.3"]
        assert changelog_of(project).sections[0].lines != (PLACEHOLDER,)
        assert not (project / "release-notes").exists()

    def test_existing_release_notes_abort_before_writing(
        self, project, config, descriptor, quiet_console
    ):
        """Release notes are write-once."""
        notes = project / "release-notes" / "1.2.3.md"
        notes.parent.mkdir()
        notes.write_text("- already there\n")

        with pytest.raises(ReleaseNotesExistsError):
            run("release", project, config, descriptor, quiet_console)

        assert descriptor.writes == []
        assert notes.read_text() == "- already there\n"

    def test_missing_changelog(self, project, config, descriptor, quiet_console):
        """A run needs a changelog."""
        (project / "CHANGELOG.md").unlink()

        with pytest.raises(DocumentNotFoundError):
            run("release", project, config, descriptor, quiet_console)

    def test_malformed_changelog(self, project, config, descriptor, quiet_console):
        """A changelog without an unreleased section aborts before any write."""
        (project / "CHANGELOG.md").write_text("# Changelog\n\n## 1.2.2 (2026-09-01)\n")

        with pytest.raises(ChangelogFormatError):
            run("release", project, config, descriptor, quiet_console)

        assert descriptor.writes == []

    def test_no_history_uses_release_version(self, tmp_path, config, descriptor, quiet_console):
        """Without a previous release the bare literal is the release itself."""
        (tmp_path / "README.md").write_text(
            "<version>1.2.3</version>\nCurrent snapshot: 1.2.3-SNAPSHOT\n"
        )
        (tmp_path / "CHANGELOG.md").write_text("# Changelog\n\n## Unreleased\n\n- First.\n")

        run("release", tmp_path, config, descriptor, quiet_console)

        assert (tmp_path / "README.md").read_text() == (
            "<version>1.2.3</version>\nCurrent snapshot: 1.2.4-SNAPSHOT\n"
        )

    def test_no_history_snapshot_mention_is_not_a_release_mention(
        self, tmp_path, config, descriptor, quiet_console
    ):
        """The release literal inside the snapshot literal does not satisfy the release rule."""
        (tmp_path / "README.md").write_text("Current snapshot: 1.2.3-SNAPSHOT\n")
        (tmp_path / "CHANGELOG.md").write_text("# Changelog\n\n## Unreleased\n\n- First.\n")

        with pytest.raises(NoOccurrencesFoundError) as exc_info:
            run("release", tmp_path, config, descriptor, quiet_console)

        assert exc_info.value.literal == "1.2.3"
        assert exc_info.value.found == 0
        assert (tmp_path / "README.md").read_text() == "Current snapshot: 1.2.3-SNAPSHOT\n"

    def test_release_notes_mode(self, project, config, descriptor, quiet_console, umask_022):
        """New release notes get the same permissions as other project files."""
        run("release", project, config, descriptor, quiet_console)

        notes = project / "release-notes" / "1.2.3.md"
        assert stat.S_IMODE(notes.stat().st_mode) == 0o644

    def test_crlf_documents_keep_line_endings(self, project, config, descriptor, quiet_console):
        """README, changelog and notes of a CRLF project stay CRLF."""
        readme = project / "README.md"
        changelog = project / "CHANGELOG.md"
        for path in (readme, changelog):
            path.write_bytes(path.read_bytes().replace(b"\n", b"\r\n"))

        run("release", project, config, descriptor, quiet_console)

        for path in (readme, changelog, project / "release-notes" / "1.2.3.md"):
            raw = path.read_bytes()
            assert b"\n" not in raw.replace(b"\r\n", b""), path
        assert b"<version>1.2.3</version>\r\n" in readme.read_bytes()
        assert (
            b"## 1.2.3 (2026-10-19)\r\n\r\n- Added brand-new trading strategy helper.\r\n"
            in changelog.read_bytes()
        )
        assert (project / "release-notes" / "1.2.3.md").read_bytes() == (
            b"- Added brand-new trading strategy helper.\r\n"
        )

    def test_custom_notes_template_and_documents(
        self, project, descriptor, quiet_console
    ):
        """Configured documents and notes location are honoured."""
        (project / "docs").mkdir()
        (project / "docs" / "install.md").write_text("Use 1.2.2 or try 1.2.3-SNAPSHOT.\n")
        config = ReleaseCycleConfig(
            release_notes=ReleaseNotesConfig(path_template="build/notes-{version}.txt"),
            documents=[
                DocumentRule(path=Path("docs/install.md"), kind="release"),
                DocumentRule(path=Path("docs/install.md"), kind="snapshot"),
            ],
        )

        run("release", project, config, descriptor, quiet_console)

        assert (project / "build" / "notes-1.2.3.txt").is_file()
        assert (project / "docs" / "install.md").read_text() == (
            "Use 1.2.3 or try 1.2.4-SNAPSHOT.\n"
        )
        # README is not declared, so it is left alone
        assert "1.2.2" in (project / "README.md").read_text()

    def test_dry_run_writes_nothing(self, project, config, descriptor, quiet_console):
        """A dry run computes the summary without touching files."""
        readme_before = (project / "README.md").read_text()
        changelog_before = (project / "CHANGELOG.md").read_text()

        result = run("release", project, config, descriptor, quiet_console, dry_run=True)

        assert result.summary_lines() == ["release_version=1.2.3", "next_version=1.2.4-SNAPSHOT"]
        assert descriptor.writes == []
        assert (project / "README.md").read_text() == readme_before
        assert (project / "CHANGELOG.md").read_text() == changelog_before
        assert not (project / "release-notes").exists()


class TestSnapshotMode:
    """Tests for a snapshot-mode run."""

    def test_from_release_version(self, project, config, make_descriptor, quiet_console):
        """2.5.0 with an empty unreleased section moves to 2.5.1-SNAPSHOT."""
        changelog = project / "CHANGELOG.md"
        changelog.write_text(
            "# Changelog\n\n## Unreleased\n\n- _No changes yet._\n\n"
            "## 2.5.0 (2026-01-10)\n\n- Released.\n"
        )
        before = changelog.read_text()
        descriptor = make_descriptor("2.5.0")

        result = run("snapshot", project, config, descriptor, quiet_console)

        assert result.summary_lines() == ["next_version=2.5.1-SNAPSHOT"]
        assert result.release_version is None
        assert descriptor.version == "2.5.1-SNAPSHOT"
        assert changelog.read_text() == before
        assert not (project / "release-notes").exists()

    def test_from_snapshot_version(self, project, config, descriptor, quiet_console):
        """A snapshot version moves to the next patch snapshot."""
        result = run("snapshot", project, config, descriptor, quiet_console)

        assert str(result.next_version) == "1.2.4-SNAPSHOT"
        assert descriptor.writes == ["1.2.4-SNAPSHOT"]

    def test_readme_snapshot_literal_only(self, project, config, descriptor, quiet_console):
        """Published-version mentions stay; the development version moves on."""
        run("snapshot", project, config, descriptor, quiet_console)

        readme = (project / "README.md").read_text()
        assert readme.count("<version>1.2.2</version>") == 2
        assert readme.count("1.2.4-SNAPSHOT") == 2

    def test_missing_snapshot_mentions_allowed(self, project, config, make_descriptor, quiet_console):
        """Snapshot mode tolerates a README without the snapshot literal."""
        before = (project / "README.md").read_text()

        run("snapshot", project, config, make_descriptor("3.0.0"), quiet_console)

        assert (project / "README.md").read_text() == before

    def test_pending_entries_kept(self, project, config, descriptor, quiet_console):
        """Snapshot mode never discards pending entries."""
        run("snapshot", project, config, descriptor, quiet_console)

        changelog = changelog_of(project)
        assert changelog.sections[0].lines == ("- Added brand-new trading strategy helper.",)
        assert [s.heading for s in changelog.sections] == ["Unreleased", "1.2.2 (2026-09-01)"]

    def test_no_dated_section(self, project, config, descriptor, quiet_console):
        """Snapshot mode writes no release history."""
        result = run("snapshot", project, config, descriptor, quiet_console)

        assert ReleaseState.NOTES_WRITTEN not in result.states
        assert changelog_of(project).find_release(Version(1, 2, 3)) is None

    def test_first_section_is_unreleased_after_any_run(
        self, project, config, make_descriptor, quiet_console
    ):
        """Release then snapshot keeps Unreleased first."""
        descriptor = make_descriptor("1.2.3-SNAPSHOT")
        run("release", project, config, descriptor, quiet_console)
        run("snapshot", project, config, descriptor, quiet_console)

        changelog = changelog_of(project)
        assert changelog.sections[0].heading == "Unreleased"
        assert changelog.sections[0].lines == (PLACEHOLDER,)
        assert descriptor.version == "1.2.5-SNAPSHOT"


class TestConsoleOutput:
    """Progress goes to the console passed in."""

    def test_reports_progress(self, project, config, descriptor):
        """Each step is reported on the console."""
        console = Console(stderr=True, record=True, width=200)

        ReleaseCycle(project, config, descriptor, console, today=RELEASE_DATE).run(Mode.RELEASE)

        output = console.export_text()
        assert "Set project version to 1.2.3" in output
        assert "Promoted 1 changelog entries to 1.2.3" in output
        assert "done" in output
