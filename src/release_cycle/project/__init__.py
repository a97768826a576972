"""Build descriptors and project file handling.

The build descriptor owns the project's authoritative version. The
release workflow only reads and writes it through the BuildDescriptor
protocol, so any build tool can take part.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from release_cycle.exceptions import ConfigNotFoundError
from release_cycle.project.maven import MavenDescriptor
from release_cycle.project.pyproject import PyprojectDescriptor

if TYPE_CHECKING:
    from pathlib import Path

    from release_cycle.config.models import ReleaseCycleConfig


class BuildDescriptor(Protocol):
    """Reads and writes the authoritative project version."""

    def read_version(self) -> str: ...

    def write_version(self, version: str) -> None: ...


def create_descriptor(config: ReleaseCycleConfig, project_path: Path) -> BuildDescriptor:
    """Build the descriptor selected by configuration.

    The pyproject descriptor uses the same pyproject.toml the configuration
    lookup finds, which may live in a parent of project_path.
    """
    if config.descriptor == "pyproject":
        from release_cycle.config.loader import find_pyproject_toml

        try:
            pyproject = find_pyproject_toml(project_path)
        except ConfigNotFoundError:
            pyproject = project_path / "pyproject.toml"
        return PyprojectDescriptor(pyproject)
    return MavenDescriptor(project_path, executable=config.maven_executable)


__all__ = [
    "BuildDescriptor",
    "MavenDescriptor",
    "PyprojectDescriptor",
    "create_descriptor",
]
