from __future__ import annotations

import sys
from datetime import datetime

import typer

from disciplines_importer.app import run_app, run_import_window
from disciplines_importer.config import CONSUMER_GROUP_ID, Settings, get_settings
from disciplines_importer.domain.models import ImportWindow
from disciplines_importer.errors import PipelineError
from disciplines_importer.utils.logging import configure_logging

EXIT_CODE_MAIN_ERROR = 1
EXIT_CODE_INTERRUPTED = 130

WINDOW_FORMATS = ["%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]

app = typer.Typer(help="Republish disciplines from the secondary Dekanat DB to Kafka.")


def handle_exit_error(err: PipelineError) -> typer.Exit:
    """Print the error on stderr and build the non-zero exit for it."""
    typer.echo(str(err), err=True)
    return typer.Exit(code=EXIT_CODE_MAIN_ERROR)


def _settings() -> Settings:
    try:
        settings = get_settings()
    except PipelineError as exc:
        raise handle_exit_error(exc) from exc
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return settings


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = _settings()
    typer.echo(
        f"Kafka={settings.kafka_host} | group={CONSUMER_GROUP_ID} | "
        f"in={settings.meta_events_topic} out={settings.disciplines_topic} | "
        f"threshold={settings.write_threshold} attempts={settings.kafka_attempts} "
        f"timeout={settings.kafka_timeout}s"
    )


@app.command()
def run() -> None:
    """
    Consume control events and import disciplines until stopped or failed.
    """
    settings = _settings()
    try:
        run_app(settings, sys.stdout)
    except PipelineError as exc:
        raise handle_exit_error(exc) from exc


@app.command("import-window")
def import_window(
    start: datetime = typer.Option(
        ..., "--start", "-s", formats=WINDOW_FORMATS, help="Window start, local time."
    ),
    end: datetime = typer.Option(
        ..., "--end", "-e", formats=WINDOW_FORMATS, help="Window end, local time."
    ),
    year: int = typer.Option(..., "--year", "-y", help="Academic year attached to every event."),
) -> None:
    """
    Import one explicit window, bypassing the control-event consumer.
    """
    try:
        window = ImportWindow(start=start.astimezone(), end=end.astimezone(), year=year)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    settings = _settings()
    try:
        run_import_window(settings, window, sys.stdout)
    except PipelineError as exc:
        raise handle_exit_error(exc) from exc


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(EXIT_CODE_INTERRUPTED)


if __name__ == "__main__":
    main()
