from __future__ import annotations

from datetime import datetime

import pytest
from typer.testing import CliRunner

from disciplines_importer import main
from disciplines_importer.errors import FetchCancelled, PublishError

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SECONDARY_DEKANAT_DB_DSN", "postgresql://u:p@db/dekanat")
    monkeypatch.setenv("KAFKA_HOST", "kafka:9092")
    monkeypatch.setattr(main, "configure_logging", lambda level, json_logs: None)
    return monkeypatch


def test_info_shows_effective_configuration():
    result = runner.invoke(main.app, ["info"])

    assert result.exit_code == 0
    assert "Kafka=kafka:9092" in result.output
    assert "group=secondary-db-disciplines-importer" in result.output
    assert "in=meta_events out=disciplines" in result.output
    assert "postgresql://" not in result.output


def test_missing_configuration_exits_non_zero(cli_env):
    cli_env.delenv("KAFKA_HOST")

    result = runner.invoke(main.app, ["run"])

    assert result.exit_code == main.EXIT_CODE_MAIN_ERROR
    assert "Failed to load config" in result.output


def test_run_failure_exits_non_zero_with_error_text(cli_env):
    def failing_run_app(settings, out):
        raise PublishError("Kafka delivery failed: Local: Message timed out")

    cli_env.setattr(main, "run_app", failing_run_app)

    result = runner.invoke(main.app, ["run"])

    assert result.exit_code == main.EXIT_CODE_MAIN_ERROR
    assert "Kafka delivery failed" in result.output


def test_cancelled_run_exits_non_zero(cli_env):
    def cancelled_run_app(settings, out):
        raise FetchCancelled("fetch cancelled by shutdown signal")

    cli_env.setattr(main, "run_app", cancelled_run_app)

    result = runner.invoke(main.app, ["run"])

    assert result.exit_code == main.EXIT_CODE_MAIN_ERROR


def test_import_window_runs_single_import(cli_env):
    seen = {}

    def fake_run_import_window(settings, window, out):
        seen["window"] = window
        return 6

    cli_env.setattr(main, "run_import_window", fake_run_import_window)

    result = runner.invoke(
        main.app,
        [
            "import-window",
            "--start",
            "2023-03-05 04:00:00",
            "--end",
            "2023-03-05T05:00:00",
            "--year",
            "2023",
        ],
    )

    assert result.exit_code == 0
    window = seen["window"]
    assert window.start == datetime(2023, 3, 5, 4).astimezone()
    assert window.end == datetime(2023, 3, 5, 5).astimezone()
    assert window.year == 2023


def test_import_window_rejects_reversed_bounds(cli_env):
    cli_env.setattr(main, "run_import_window", lambda settings, window, out: 0)

    result = runner.invoke(
        main.app,
        ["import-window", "-s", "2023-03-06", "-e", "2023-03-05", "-y", "2023"],
    )

    assert result.exit_code == 2
