"""Tests for ``lockwright check`` command and the CLI group."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from lockwright import __version__
from lockwright.cli.main import cli
from tests.cli.helpers import write_json, write_manifest


def _locked(runner: CliRunner, project: Path, repository: Path) -> Path:
    result = runner.invoke(cli, ["lock", str(project), "-r", str(repository)])
    assert result.exit_code == 0, result.output
    return project / "composer.lock"


class TestCheck:
    """Tests for lock freshness reporting."""

    def test_fresh(self, runner: CliRunner, project: Path, repository: Path) -> None:
        """A lock written for the current manifest should pass."""
        _locked(runner, project, repository)
        result = runner.invoke(cli, ["check", str(project)])
        assert result.exit_code == 0
        assert "is up to date" in result.output

    def test_stale(self, runner: CliRunner, project: Path, repository: Path) -> None:
        """Changing a requirement should make the lock stale."""
        _locked(runner, project, repository)
        write_manifest(project, require={"vendor/a": "^1.1"})
        result = runner.invoke(cli, ["check", str(project)])
        assert result.exit_code == 1
        assert "not up to date" in result.output

    def test_missing_lock(self, runner: CliRunner, project: Path) -> None:
        """A project without composer.lock should fail."""
        result = runner.invoke(cli, ["check", str(project)])
        assert result.exit_code == 1
        assert "No composer.lock found" in result.output

    def test_unreadable_lock(self, runner: CliRunner, project: Path) -> None:
        """A corrupt composer.lock should exit 2."""
        (project / "composer.lock").write_text("{")
        result = runner.invoke(cli, ["check", str(project)])
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_missing_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        """A directory without composer.json should exit 2."""
        result = runner.invoke(cli, ["check", str(tmp_path)])
        assert result.exit_code == 2

    def test_strict_reports_inconsistency(self, runner: CliRunner, project: Path, repository: Path) -> None:
        """--strict should fail a fresh lock with a missing requirement."""
        lock_path = _locked(runner, project, repository)
        data = json.loads(lock_path.read_text())
        data["packages"] = [p for p in data["packages"] if p["name"] != "vendor/b"]
        write_json(lock_path, data)

        assert runner.invoke(cli, ["check", str(project)]).exit_code == 0
        result = runner.invoke(cli, ["check", str(project), "--strict"])
        assert result.exit_code == 1
        assert "vendor/b ^1.0" in result.output

    def test_strict_passes_consistent_lock(self, runner: CliRunner, project: Path, repository: Path) -> None:
        """--strict should pass a lock written by lockwright."""
        _locked(runner, project, repository)
        result = runner.invoke(cli, ["check", str(project), "--strict"])
        assert result.exit_code == 0

    def test_lock_without_dev(self, runner: CliRunner, project: Path, repository: Path) -> None:
        """A --no-dev lock is stale unless check is told dev is not wanted."""
        result = runner.invoke(cli, ["lock", str(project), "-r", str(repository), "--no-dev"])
        assert result.exit_code == 0, result.output
        assert runner.invoke(cli, ["check", str(project)]).exit_code == 1
        assert runner.invoke(cli, ["check", str(project), "--no-dev"]).exit_code == 0


class TestGroup:
    """Tests for the top-level command group."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "lock" in result.output
        assert "check" in result.output
        assert "why-not" in result.output
