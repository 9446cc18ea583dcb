"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from dailycoach import __version__
from dailycoach.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner):
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"dailycoach v{__version__}" in result.output


def test_reminders(runner, fixture_file):
    result = runner.invoke(
        app,
        ["reminders", "--data", str(fixture_file), "--user", "alice", "--date", "2026-01-19", "--at", "09:00"],
    )

    assert result.exit_code == 0, result.output
    assert "Reminders" in result.output


def test_focus(runner, fixture_file):
    result = runner.invoke(
        app, ["focus", "--data", str(fixture_file), "--user", "alice", "--date", "2026-01-19", "--at", "06:00"]
    )

    assert result.exit_code == 0, result.output
    assert "Focus" in result.output


def test_score(runner, fixture_file):
    result = runner.invoke(app, ["score", "--data", str(fixture_file), "--user", "alice", "--date", "2026-01-19"])

    assert result.exit_code == 0, result.output
    assert "Daily Score" in result.output


def test_wins(runner, fixture_file):
    result = runner.invoke(app, ["wins", "--data", str(fixture_file), "--user", "alice", "--date", "2026-01-19"])

    assert result.exit_code == 0, result.output
    assert "wins saved" in result.output


def test_missing_fixture(runner, tmp_path):
    result = runner.invoke(app, ["score", "--data", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1


def test_init_db_imports_fixture(runner, fixture_file, tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"

    result = runner.invoke(app, ["init-db", "--url", url, "--data", str(fixture_file)])

    assert result.exit_code == 0, result.output
    assert "Tables created" in result.output
    assert "Imported" in result.output
    assert (tmp_path / "cli.db").exists()
