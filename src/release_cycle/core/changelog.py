"""Changelog promotion.

The changelog is a markdown document with a title, one ``## Unreleased``
section accumulating upcoming entries, and dated release sections below
it, newest first::

    # Changelog

    ## Unreleased

    - _No changes yet._

    ## 1.2.2 (2026-09-01)

    - Fixed rounding in the cash flow helper.

The document is parsed once into a ChangelogDocument, transformed as a
value, and rendered once. Entries are moved wholesale and never reordered,
deduplicated or rewritten. Sections that a transition does not touch
render exactly as they were read, heading line and blank lines included,
using the newline style of the original text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from release_cycle.core.version import Version
from release_cycle.exceptions import ChangelogFormatError, MalformedVersionError

if TYPE_CHECKING:
    from datetime import date

UNRELEASED_HEADING = "Unreleased"
PLACEHOLDER = "- _No changes yet._"

_SECTION_HEADING = re.compile(r"^##\s+(?P<heading>.*?)\s*$")
_TOP_HEADING = re.compile(r"^#\s")
_RELEASE_HEADING = re.compile(r"^\[?(?P<version>[^\]\s(]+)\]?\s*(?:[-(].*)?$")


@dataclass(frozen=True)
class ChangelogSection:
    """A ``##`` heading and its body lines, kept verbatim.

    ``source`` is the heading line as written, ``leading`` the blank lines
    between heading and body and ``trailing`` the blank lines after the
    body. They only affect rendering and are ignored by comparisons.
    """

    heading: str
    lines: tuple[str, ...] = ()
    source: str | None = field(default=None, compare=False, repr=False)
    leading: tuple[str, ...] = field(default=("",), compare=False, repr=False)
    trailing: tuple[str, ...] = field(default=("",), compare=False, repr=False)

    def render_lines(self) -> list[str]:
        heading = self.source if self.source is not None else f"## {self.heading}"
        if not self.lines:
            return [heading, *self.leading, *self.trailing]
        return [heading, *self.leading, *self.lines, *self.trailing]

    @property
    def version(self) -> Version | None:
        """The version this section releases, or None for other headings."""
        match = _RELEASE_HEADING.match(self.heading)
        if not match:
            return None
        try:
            return Version.parse(match.group("version"))
        except MalformedVersionError:
            return None


@dataclass(frozen=True)
class ChangelogDocument:
    """A parsed changelog: title lines followed by sections."""

    title: tuple[str, ...]
    sections: tuple[ChangelogSection, ...]
    unreleased_heading: str = UNRELEASED_HEADING
    placeholder: str = PLACEHOLDER
    title_trailing: tuple[str, ...] = field(default=("",), compare=False, repr=False)
    newline: str = field(default="\n", compare=False, repr=False)

    @classmethod
    def parse(
        cls,
        text: str,
        unreleased_heading: str = UNRELEASED_HEADING,
        placeholder: str = PLACEHOLDER,
    ) -> ChangelogDocument:
        """Parse changelog text.

        Raises:
            ChangelogFormatError: If the unreleased section is missing,
                duplicated, or not the first section
        """
        title: list[str] = []
        sections: list[tuple[str, str, list[str]]] = []

        for line in text.splitlines():
            heading = _SECTION_HEADING.match(line)
            if heading:
                sections.append((line, heading.group("heading"), []))
            elif not sections:
                title.append(line)
            elif _TOP_HEADING.match(line):
                raise ChangelogFormatError(
                    f"Unexpected top-level heading after the first section: {line!r}"
                )
            else:
                sections[-1][2].append(line)

        parsed = []
        for source, heading, body in sections:
            rest, trailing = _split_trailing_blank(body)
            leading, lines = _split_leading_blank(rest)
            parsed.append(ChangelogSection(heading, lines, source, leading, trailing))

        title_lines, title_trailing = _split_trailing_blank(title)
        doc = cls(
            title=title_lines,
            sections=tuple(parsed),
            unreleased_heading=unreleased_heading,
            placeholder=placeholder,
            title_trailing=title_trailing,
            newline="\r\n" if "\r\n" in text else "\n",
        )
        doc._validate()
        return doc

    def _is_unreleased(self, section: ChangelogSection) -> bool:
        return section.heading.strip("[] ").lower() == self.unreleased_heading.lower()

    def _validate(self) -> None:
        positions = [i for i, s in enumerate(self.sections) if self._is_unreleased(s)]
        if not positions:
            raise ChangelogFormatError(f"No '## {self.unreleased_heading}' section found")
        if len(positions) > 1:
            raise ChangelogFormatError(
                f"Found {len(positions)} '## {self.unreleased_heading}' sections, expected one"
            )
        if positions[0] != 0:
            raise ChangelogFormatError(
                f"'## {self.unreleased_heading}' must be the first section of the changelog"
            )

    @property
    def unreleased(self) -> ChangelogSection:
        return self.sections[0]

    @property
    def releases(self) -> tuple[ChangelogSection, ...]:
        return tuple(s for s in self.sections[1:] if s.version is not None)

    def entries(self, section: ChangelogSection) -> tuple[str, ...]:
        """Entry lines of a section; a lone placeholder means no entries."""
        if section.lines == (self.placeholder,):
            return ()
        return section.lines

    def latest_release(self) -> Version | None:
        """The newest released version recorded in the changelog."""
        releases = self.releases
        return releases[0].version if releases else None

    def find_release(self, version: Version) -> ChangelogSection | None:
        for section in self.releases:
            if section.version == version:
                return section
        return None

    def extract_unreleased(self) -> tuple[tuple[str, ...], ChangelogDocument]:
        """Split off the unreleased section.

        Returns:
            The unreleased entries and the document without that section
        """
        return self.entries(self.unreleased), replace(self, sections=self.sections[1:])

    def _fresh_unreleased(self) -> ChangelogSection:
        current = self.unreleased
        return ChangelogSection(
            current.heading,
            (self.placeholder,),
            current.source,
            current.leading or ("",),
            current.trailing or ("",),
        )

    def promote(self, version: Version, on: date) -> tuple[ChangelogDocument, tuple[str, ...]]:
        """Freeze the unreleased entries into a dated section for version.

        The result starts with a placeholder-only unreleased section,
        followed by ``## <version> (<date>)`` and the older sections.
        A release with no entries still gets a section holding the
        placeholder.

        Returns:
            The promoted document and the entries that were moved

        Raises:
            ChangelogFormatError: If version already has a section and
                there are new unreleased entries
        """
        entries, rest = self.extract_unreleased()

        if self.find_release(version) is not None:
            if entries:
                raise ChangelogFormatError(
                    f"Changelog already has a section for {version}; "
                    "refusing to add unreleased entries to it"
                )
            return replace(self, sections=(self._fresh_unreleased(), *rest.sections)), ()

        # The dated section takes over the old unreleased section's place and spacing
        dated = ChangelogSection(
            f"{version} ({on.isoformat()})",
            entries or (self.placeholder,),
            leading=self.unreleased.leading or ("",),
            trailing=self.unreleased.trailing,
        )
        promoted = replace(self, sections=(self._fresh_unreleased(), dated, *rest.sections))
        return promoted, entries

    def reset_unreleased(self) -> ChangelogDocument:
        """Make the unreleased section placeholder-clean for a new cycle.

        Entries identical to the newest release section were already
        released and are dropped. Any other entries are kept.
        """
        entries, rest = self.extract_unreleased()
        releases = self.releases
        if entries and (not releases or entries != self.entries(releases[0])):
            return self
        if self.unreleased.lines == (self.placeholder,):
            return self
        return replace(self, sections=(self._fresh_unreleased(), *rest.sections))

    def render(self) -> str:
        out: list[str] = []
        if self.title:
            out.extend((*self.title, *self.title_trailing))
        for section in self.sections:
            out.extend(section.render_lines())
        return self.newline.join(out) + self.newline


def _split_leading_blank(lines: tuple[str, ...]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    return lines[:start], lines[start:]


def _split_trailing_blank(lines: list[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    end = len(lines)
    while end > 0 and not lines[end - 1].strip():
        end -= 1
    return tuple(lines[:end]), tuple(lines[end:])
