"""CLI smoke tests against mock providers and a temporary ledger."""

import json

import pytest
from typer.testing import CliRunner

from slipsmith.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_db(tmp_path, monkeypatch):
    monkeypatch.setenv("SLIPSMITH_DB_PATH", str(tmp_path / "cli.duckdb"))
    monkeypatch.setenv("SLIPSMITH_PROVIDER_MODE", "mock")


def test_slip_writes_export_json(tmp_path):
    out = tmp_path / "slip.json"
    result = runner.invoke(app, ["slip", "--date", "2025-01-15", "--sport", "NBA", "--tier", "pro", "-o", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["slip_id"] == "NBA_2025_01_15_PRO"
    assert data["tier"] == "pro"
    assert data["events"]
    assert "warning" in data


def test_slip_rejects_bad_date():
    result = runner.invoke(app, ["slip", "--date", "2025-13-01", "--sport", "NBA"])
    assert result.exit_code == 1
    assert "Invalid date format" in result.output


def test_slip_rejects_unknown_league():
    result = runner.invoke(app, ["slip", "--date", "2025-01-15", "--sport", "XYZ"])
    assert result.exit_code == 1
    assert "Unknown sport/league" in result.output


def test_project_lists_games():
    result = runner.invoke(app, ["project", "--date", "2025-01-15", "--league", "EPL"])
    assert result.exit_code == 0, result.output
    assert "Total: 4 games" in result.output


def test_evaluate_then_report(tmp_path):
    out = tmp_path / "slip.json"
    assert runner.invoke(app, ["slip", "-d", "2025-01-15", "-s", "NBA", "-o", str(out)]).exit_code == 0
    result = runner.invoke(app, ["evaluate", "--date", "2025-01-15"])
    assert result.exit_code == 0, result.output
    assert "Evaluated" in result.output

    result = runner.invoke(app, ["report", "summary", "--start", "2025-01-01", "--end", "2025-01-31"])
    assert result.exit_code == 0, result.output
    assert "evaluated" in result.output

    result = runner.invoke(app, ["report", "reliability", "--sport", "NBA"])
    assert result.exit_code == 0, result.output
    assert "Total:" in result.output
