"""Configuration models.

Configuration lives under ``[tool.release-cycle]`` in pyproject.toml or
at the top level of a standalone ``release-cycle.toml``. Every field has
a default, so a project following the conventional layout needs none.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from release_cycle.core.changelog import PLACEHOLDER, UNRELEASED_HEADING

DocumentKind = Literal["release", "snapshot"]


class ChangelogConfig(BaseModel):
    """Changelog document settings."""

    model_config = ConfigDict(extra="forbid")

    path: Path = Path("CHANGELOG.md")
    unreleased_heading: str = UNRELEASED_HEADING
    placeholder: str = PLACEHOLDER

    @field_validator("unreleased_heading", "placeholder")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ReleaseNotesConfig(BaseModel):
    """Release notes artifact settings."""

    model_config = ConfigDict(extra="forbid")

    path_template: str = "release-notes/{version}.md"

    @field_validator("path_template")
    @classmethod
    def _has_version_field(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("path_template must contain '{version}'")
        return value

    def path_for(self, version: str) -> Path:
        return Path(self.path_template.format(version=version))


class DocumentRule(BaseModel):
    """A version literal to substitute in a document.

    ``release`` rules track the last published version, e.g. the
    ``<version>`` of a dependency snippet. ``snapshot`` rules track the
    development version shown in prose, e.g. ``1.2.4-SNAPSHOT``.
    """

    model_config = ConfigDict(extra="forbid")

    path: Path
    kind: DocumentKind
    min_occurrences: int = Field(default=1, ge=0)


def _default_documents() -> list[DocumentRule]:
    return [
        DocumentRule(path=Path("README.md"), kind="release"),
        DocumentRule(path=Path("README.md"), kind="snapshot"),
    ]


class ReleaseCycleConfig(BaseModel):
    """Root configuration for release-cycle."""

    model_config = ConfigDict(extra="forbid")

    descriptor: Literal["maven", "pyproject"] = "maven"
    maven_executable: str = "mvn"
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    release_notes: ReleaseNotesConfig = Field(default_factory=ReleaseNotesConfig)
    documents: list[DocumentRule] = Field(default_factory=_default_documents)

    def documents_of(self, kind: DocumentKind) -> list[DocumentRule]:
        return [doc for doc in self.documents if doc.kind == kind]
