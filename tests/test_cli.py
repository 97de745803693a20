"""Tests for the fleetindex command line."""

import json

import pytest
from click.testing import CliRunner

from fleetindex import __version__
from fleetindex.cli import cli
from fleetindex.utils.exit_codes import ExitCodes


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CliRunner working inside an empty directory (no config file)."""
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestCli:
    """Top-level group."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_tables(self, runner):
        result = runner.invoke(cli, ["tables"])

        assert result.exit_code == 0
        assert "CREATE TABLE IF NOT EXISTS ingest_processors" in result.output


class TestBuildCommand:
    """fleetindex build"""

    def test_build(self, runner, tmp_path, integrations_dir):
        db_path = tmp_path / "out.db"

        result = runner.invoke(cli, ["build", "--dir", str(integrations_dir), "--db", str(db_path)])

        assert result.exit_code == 0, result.output
        assert db_path.is_file()
        assert "ingest_processors" in result.output

    def test_build_failure_exit_code(self, runner, tmp_path):
        (tmp_path / "empty").mkdir()

        result = runner.invoke(cli, ["build", "--dir", str(tmp_path / "empty"), "--db", str(tmp_path / "out.db")])

        assert result.exit_code == ExitCodes.BUILD_FAILED
        assert not (tmp_path / "out.db").exists()

    def test_missing_dir_is_usage_error(self, runner, tmp_path):
        result = runner.invoke(cli, ["build", "--dir", str(tmp_path / "nope")])

        assert result.exit_code == 2


class TestQueryCommand:
    """fleetindex query"""

    def test_json_output(self, runner, built_db):
        result = runner.invoke(
            cli, ["query", "--db", str(built_db), "--format", "json", "SELECT name FROM integrations ORDER BY name"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["rows"] == [{"name": "minimal_pkg"}, {"name": "sample_pkg"}]

    def test_text_output(self, runner, built_db):
        result = runner.invoke(cli, ["query", "--db", str(built_db), "SELECT dir_name FROM integrations"])

        assert result.exit_code == 0, result.output
        assert "sample_pkg" in result.output

    def test_bad_sql(self, runner, built_db):
        result = runner.invoke(cli, ["query", "--db", str(built_db), "SELECT * FROM nowhere"])

        assert result.exit_code == 1
        assert "failed to execute query" in result.output

    def test_missing_database(self, runner, tmp_path):
        result = runner.invoke(cli, ["query", "--db", str(tmp_path / "missing.db"), "SELECT 1"])

        assert result.exit_code == 1
        assert "Database not found" in result.output
