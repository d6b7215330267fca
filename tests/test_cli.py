"""Command line interface tests."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from monifly.cli import cli
from monifly.services.migrations import SCHEMA_VERSION
from tests.test_snapshot import LEGACY_SNAPSHOT


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("MONIFLY_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("MONIFLY_DATABASE_URL", raising=False)
    return CliRunner()


@pytest.fixture
def legacy_file(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps(LEGACY_SNAPSHOT), encoding="utf-8")
    return path


def test_migrate_writes_current_version(runner, legacy_file, tmp_path):
    target = tmp_path / "migrated.json"

    result = runner.invoke(cli, ["migrate", str(legacy_file), "--output", str(target)])

    assert result.exit_code == 0, result.output
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["version"] == SCHEMA_VERSION
    assert data["wallets"][0]["initial_balance"] == pytest.approx(1000.0)
    # Source file is left alone when an output path is given
    assert json.loads(legacy_file.read_text(encoding="utf-8"))["version"] == 1


def test_migrate_rejects_future_versions(runner, tmp_path):
    path = tmp_path / "future.json"
    path.write_text(json.dumps({"version": SCHEMA_VERSION + 1}), encoding="utf-8")

    result = runner.invoke(cli, ["migrate", str(path)])

    assert result.exit_code != 0
    assert "newer than supported" in result.output


def test_verify_consistent_snapshot(runner, legacy_file):
    result = runner.invoke(cli, ["verify", str(legacy_file)])

    assert result.exit_code == 0, result.output
    assert "consistent" in result.output


def test_verify_reports_drift(runner, tmp_path):
    broken = dict(LEGACY_SNAPSHOT, version=SCHEMA_VERSION)
    broken["wallets"] = [dict(LEGACY_SNAPSHOT["wallets"][0], initial_balance=1000.0, balance=950.0)]
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(broken), encoding="utf-8")

    result = runner.invoke(cli, ["verify", str(path)])

    assert result.exit_code == 1
    assert "Wallet 1 (Cash)" in result.output


def test_forecast_json(runner, legacy_file):
    result = runner.invoke(
        cli, ["forecast", str(legacy_file), "--months", "2", "--as-of", "2024-05-15", "--json"]
    )

    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert [row["period"] for row in rows] == ["2024-05", "2024-06"]
    assert rows[1]["projected_balance"] == pytest.approx(800.0)


def test_forecast_rejects_bad_month_count(runner, legacy_file):
    result = runner.invoke(cli, ["forecast", str(legacy_file), "--months", "30"])
    assert result.exit_code != 0
