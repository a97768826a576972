"""Shared fixtures for release-cycle tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from rich.console import Console

from release_cycle.config.models import ReleaseCycleConfig

README = """\
# Demo

Add the library to your build:

```xml
<dependency>
    <groupId>org.example</groupId>
    <artifactId>demo-core</artifactId>
    <version>1.2.2</version>
</dependency>
<dependency>
    <groupId>org.example</groupId>
    <artifactId>demo-examples</artifactId>
    <version>1.2.2</version>
</dependency>
```

The current snapshot version is `1.2.3-SNAPSHOT`.
Snapshot builds of `1.2.3-SNAPSHOT` are published to the snapshot repository.
"""

CHANGELOG = """\
# Changelog

All notable changes to this project are documented here.

## Unreleased

- Added brand-new trading strategy helper.

## 1.2.2 (2026-09-01)

- Fixed rounding in the cash flow helper.
"""


class InMemoryDescriptor:
    """Build descriptor holding the version in memory, recording writes."""

    def __init__(self, version: str) -> None:
        self.version = version
        self.writes: list[str] = []

    def read_version(self) -> str:
        return self.version

    def write_version(self, version: str) -> None:
        self.writes.append(version)
        self.version = version


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project directory with a README and changelog for 1.2.3-SNAPSHOT."""
    (tmp_path / "README.md").write_text(README)
    (tmp_path / "CHANGELOG.md").write_text(CHANGELOG)
    return tmp_path


@pytest.fixture
def descriptor() -> InMemoryDescriptor:
    return InMemoryDescriptor("1.2.3-SNAPSHOT")


@pytest.fixture
def config() -> ReleaseCycleConfig:
    return ReleaseCycleConfig()


@pytest.fixture
def quiet_console() -> Console:
    return Console(stderr=True, quiet=True)


@pytest.fixture
def temp_project_with_pyproject(tmp_path: Path) -> Path:
    """A Python project whose pyproject.toml owns the version."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.2.3-SNAPSHOT"  # managed by release-cycle

[tool.release-cycle]
descriptor = "pyproject"
"""
    )
    (tmp_path / "README.md").write_text(README)
    (tmp_path / "CHANGELOG.md").write_text(CHANGELOG)
    return tmp_path


@pytest.fixture
def make_descriptor():
    """Factory for in-memory descriptors at a given version."""
    return InMemoryDescriptor


@pytest.fixture
def umask_022():
    """Run with the common 022 umask, restoring the previous one afterwards."""
    previous = os.umask(0o022)
    yield
    os.umask(previous)
