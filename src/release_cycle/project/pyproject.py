"""pyproject.toml as the build descriptor.

Reads and updates the version in pyproject.toml. Formatting and
comments are preserved by using a targeted regex replacement rather
than full TOML parsing and rewriting.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from release_cycle.exceptions import ProjectError, VersionNotFoundError
from release_cycle.project.files import atomic_write_text, read_text

if TYPE_CHECKING:
    from pathlib import Path

# Sections that may own the version, in lookup order
_VERSION_SECTIONS = (r"\[project\]", r"\[tool\.poetry\]")
_VERSION_LINE = r'^(version\s*=\s*)["\']([^"\']+)["\']'


def get_pyproject_version(pyproject_path: Path) -> str:
    """Get the version from pyproject.toml.

    Raises:
        ProjectError: If the file does not exist
        VersionNotFoundError: If no version field is present
    """
    content = _read(pyproject_path)

    for section in _VERSION_SECTIONS:
        section_match = re.search(_section_pattern(section), content, re.MULTILINE | re.DOTALL)
        if not section_match:
            continue
        match = re.search(_VERSION_LINE, section_match.group(0), re.MULTILINE)
        if match:
            return match.group(2)

    raise VersionNotFoundError(
        f"Could not find version in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def update_pyproject_version(pyproject_path: Path, new_version: str) -> None:
    """Set the version in pyproject.toml.

    Writing the version the file already holds is a no-op.

    Raises:
        ProjectError: If the file does not exist
        VersionNotFoundError: If no version field is present
    """
    content = _read(pyproject_path)

    def replace_in_section(match: re.Match[str]) -> str:
        return re.sub(
            _VERSION_LINE,
            rf'\g<1>"{new_version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for section in _VERSION_SECTIONS:
        section_pattern = _section_pattern(section)
        section_match = re.search(section_pattern, content, re.MULTILINE | re.DOTALL)
        if not section_match or not re.search(_VERSION_LINE, section_match.group(0), re.MULTILINE):
            continue

        new_content = re.sub(
            section_pattern,
            replace_in_section,
            content,
            count=1,
            flags=re.MULTILINE | re.DOTALL,
        )
        if new_content != content:
            atomic_write_text(pyproject_path, new_content)
        return

    raise VersionNotFoundError(
        f"Could not find version to update in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def _section_pattern(section: str) -> str:
    # The whole table up to the next table header or EOF
    return rf"^{section}[^\n]*\n.*?(?=^\[|\Z)"


def _read(pyproject_path: Path) -> str:
    if not pyproject_path.is_file():
        raise ProjectError(f"Build descriptor not found: {pyproject_path}")
    return read_text(pyproject_path)


class PyprojectDescriptor:
    """Build descriptor backed by a pyproject.toml file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read_version(self) -> str:
        return get_pyproject_version(self.path)

    def write_version(self, version: str) -> None:
        update_pyproject_version(self.path, version)

    def __repr__(self) -> str:
        return f"PyprojectDescriptor({self.path})"
