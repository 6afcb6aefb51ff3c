"""Shared fixtures for CLI tests.

Provides a project directory with a composer.json and a packages.json
repository next to it.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from tests.cli.helpers import PACKAGES, write_json, write_manifest


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def repository(tmp_path: Path) -> Path:
    """A packages.json repository outside the project directory."""
    return write_json(tmp_path / "packages.json", {"packages": PACKAGES})


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project requiring vendor/a at runtime and vendor/tool for development."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    write_manifest(project_dir, require={"vendor/a": "^1.0"}, require_dev={"vendor/tool": "^2.0"})
    return project_dir
