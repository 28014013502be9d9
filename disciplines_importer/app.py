"""
Process wiring for the disciplines importer.

Builds the long-lived collaborators (legacy-store connection, Kafka reader and
writer), installs signal-based cancellation of the inbound fetch, runs the
event loop and releases every resource on the way out, whatever the outcome.
"""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Any, Generator, Optional, TextIO

from confluent_kafka import KafkaException

from disciplines_importer.config import Settings
from disciplines_importer.domain.models import ImportWindow
from disciplines_importer.errors import ConfigurationError
from disciplines_importer.infrastructure.db_factory import get_legacy_connection
from disciplines_importer.infrastructure.extractor import DisciplineExtractor
from disciplines_importer.infrastructure.kafka_bus import KafkaMessageReader, KafkaMessageWriter
from disciplines_importer.pipeline.event_loop import EventLoop
from disciplines_importer.pipeline.importer import DisciplinesImporter
from disciplines_importer.utils.logging import get_logger

log = get_logger(__name__)

SHUTDOWN_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGQUIT") if hasattr(signal, name)
)


@contextmanager
def cancel_on_signals(
    cancel_event: threading.Event,
) -> Generator[threading.Event, None, None]:
    """
    Set `cancel_event` when a shutdown signal arrives; restore handlers on exit.

    Must be entered from the main thread.
    """

    def _handler(signum: int, _frame: Any) -> None:
        log.info("Shutdown signal received", extra={"signal": signal.Signals(signum).name})
        cancel_event.set()

    previous = {sig: signal.signal(sig, _handler) for sig in SHUTDOWN_SIGNALS}
    try:
        yield cancel_event
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _close(name: str, resource: Optional[Any]) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception as exc:  # noqa: BLE001 - shutdown must release the remaining resources
        log.warning("Failed to close resource", extra={"resource": name, "error": str(exc)})


def run_app(settings: Settings, out: TextIO) -> None:
    """
    Run the event loop until it fails or is cancelled.

    Raises
    ------
    PipelineError
        Whatever ended the loop, or a startup failure.
    """
    cancel_event = threading.Event()
    conn = get_legacy_connection(settings)
    writer: Optional[KafkaMessageWriter] = None
    reader: Optional[KafkaMessageReader] = None
    try:
        try:
            writer = KafkaMessageWriter.from_settings(settings)
            reader = KafkaMessageReader.from_settings(settings, cancel_event)
        except KafkaException as exc:
            raise ConfigurationError(f"Wrong Kafka configuration: {exc}") from exc

        importer = DisciplinesImporter(
            DisciplineExtractor(conn), writer, out, write_threshold=settings.write_threshold
        )
        log.info(
            "Event loop started",
            extra={
                "topic": settings.meta_events_topic,
                "output_topic": settings.disciplines_topic,
                "write_threshold": settings.write_threshold,
            },
        )
        with cancel_on_signals(cancel_event):
            EventLoop(reader, importer, out).execute()
    finally:
        _close("kafka_reader", reader)
        _close("kafka_writer", writer)
        _close("legacy_db", conn)


def run_import_window(settings: Settings, window: ImportWindow, out: TextIO) -> int:
    """
    Run a single import for an explicit window, without consuming control events.

    Returns the number of disciplines handed to the publisher.
    """
    conn = get_legacy_connection(settings)
    writer: Optional[KafkaMessageWriter] = None
    try:
        try:
            writer = KafkaMessageWriter.from_settings(settings)
        except KafkaException as exc:
            raise ConfigurationError(f"Wrong Kafka configuration: {exc}") from exc
        importer = DisciplinesImporter(
            DisciplineExtractor(conn), writer, out, write_threshold=settings.write_threshold
        )
        return importer.execute(window)
    finally:
        _close("kafka_writer", writer)
        _close("legacy_db", conn)


__all__ = ["cancel_on_signals", "run_app", "run_import_window"]
