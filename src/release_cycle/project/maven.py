"""Maven pom.xml as the build descriptor.

Maven owns the version, so it is read and written by running ``mvn`` as a
subprocess rather than by editing pom.xml. ``versions:set`` also updates
the parent reference of every module in a multi-module build.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

from release_cycle.exceptions import BuildDescriptorError

if TYPE_CHECKING:
    from pathlib import Path


class MavenDescriptor:
    """Build descriptor backed by the Maven versions plugin."""

    def __init__(self, project_path: Path, executable: str = "mvn") -> None:
        self.project_path = project_path
        self.executable = executable

    def read_version(self) -> str:
        return self._run(
            "help:evaluate",
            "-Dexpression=project.version",
            "-DforceStdout",
        ).strip()

    def write_version(self, version: str) -> None:
        self._run(
            "versions:set",
            f"-DnewVersion={version}",
            "-DgenerateBackupPoms=false",
            "-DprocessAllModules=true",
        )

    def _run(self, *args: str) -> str:
        cmd = [self.executable, "-q", "-B", *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.project_path,
            )
        except FileNotFoundError as e:
            raise BuildDescriptorError(
                f"{self.executable} not found. Install Maven or set maven_executable."
            ) from e
        except subprocess.CalledProcessError as e:
            raise BuildDescriptorError(
                f"{' '.join(cmd)} failed with exit code {e.returncode}",
                stderr=e.stderr or e.stdout,
            ) from e
        return result.stdout

    def __repr__(self) -> str:
        return f"MavenDescriptor({self.project_path})"
