"""
Kafka adapters for the message-bus protocols, built on confluent-kafka.

The reader polls in short slices so that a shutdown signal (a
`threading.Event`) is observed promptly; offsets are committed manually and
synchronously, one message at a time, to keep at-least-once delivery. The
writer produces a whole batch and flushes it before returning.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Sequence

from confluent_kafka import Consumer, KafkaError, KafkaException, Producer, TopicPartition

from disciplines_importer.config import CONSUMER_GROUP_ID, Settings
from disciplines_importer.errors import CommitError, FetchCancelled, FetchError, PublishError
from disciplines_importer.infrastructure.bus import BusMessage
from disciplines_importer.utils.logging import get_logger

log = get_logger(__name__)


def build_consumer_config(settings: Settings) -> Dict[str, Any]:
    """Consumer configuration for the meta-events topic."""
    return {
        "bootstrap.servers": settings.kafka_host,
        "group.id": CONSUMER_GROUP_ID,
        "enable.auto.commit": False,
        "auto.offset.reset": "earliest",
        "fetch.min.bytes": 10,
        "fetch.wait.max.ms": 1000,
        "socket.timeout.ms": int(settings.kafka_timeout * 1000),
    }


def build_producer_config(settings: Settings) -> Dict[str, Any]:
    """Producer configuration for the disciplines topic."""
    return {
        "bootstrap.servers": settings.kafka_host,
        "acks": "all",
        "retries": settings.kafka_attempts,
        "socket.timeout.ms": int(settings.kafka_timeout * 1000),
        "message.timeout.ms": int(settings.kafka_timeout * 1000),
    }


def _decode_key(raw_key: Any) -> str:
    if raw_key is None:
        return ""
    if isinstance(raw_key, bytes):
        return raw_key.decode("utf-8", errors="replace")
    return str(raw_key)


class KafkaMessageReader:
    """
    Fetch/commit over a subscribed confluent-kafka Consumer.

    Parameters
    ----------
    consumer : Consumer
        Consumer configured with auto-commit disabled.
    topic : str
        Topic to subscribe to.
    cancel_event : threading.Event
        Set by the process wiring on shutdown; makes `fetch` raise FetchCancelled.
    poll_interval : float
        Seconds a single poll may block before cancellation is re-checked.
    max_attempts : int
        Consecutive non-fatal client errors tolerated before `fetch` gives up.
    """

    def __init__(
        self,
        consumer: Consumer,
        topic: str,
        cancel_event: threading.Event,
        poll_interval: float = 1.0,
        max_attempts: int = 3,
    ) -> None:
        self._consumer = consumer
        self._cancel_event = cancel_event
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._consumer.subscribe([topic])

    @classmethod
    def from_settings(cls, settings: Settings, cancel_event: threading.Event) -> KafkaMessageReader:
        return cls(
            Consumer(build_consumer_config(settings)),
            topic=settings.meta_events_topic,
            cancel_event=cancel_event,
            poll_interval=settings.kafka_poll_interval,
            max_attempts=settings.kafka_attempts,
        )

    def fetch(self) -> BusMessage:
        failures = 0
        while not self._cancel_event.is_set():
            try:
                raw = self._consumer.poll(self._poll_interval)
            except KafkaException as exc:
                raise FetchError(f"Kafka poll failed: {exc}") from exc

            if raw is None:
                continue

            error = raw.error()
            if error is not None:
                if error.code() == KafkaError._PARTITION_EOF:
                    continue
                failures += 1
                if error.fatal() or failures > self._max_attempts:
                    raise FetchError(f"Kafka fetch failed: {error.str()}")
                log.warning(
                    "Transient Kafka consumer error",
                    extra={"error": error.str(), "attempt": failures},
                )
                continue

            return BusMessage(
                key=_decode_key(raw.key()),
                value=raw.value() or b"",
                topic=raw.topic(),
                partition=raw.partition(),
                offset=raw.offset(),
            )

        raise FetchCancelled("fetch cancelled by shutdown signal")

    def commit(self, message: BusMessage) -> None:
        if message.topic is None or message.partition is None or message.offset is None:
            raise CommitError(f"Message {message.key!r} carries no topic position to commit")

        offsets = [TopicPartition(message.topic, message.partition, message.offset + 1)]
        try:
            committed = self._consumer.commit(offsets=offsets, asynchronous=False)
        except KafkaException as exc:
            raise CommitError(f"Kafka commit failed: {exc}") from exc

        for partition in committed or []:
            if partition.error is not None:
                raise CommitError(f"Kafka commit failed: {partition.error}")

    def close(self) -> None:
        self._consumer.close()


class KafkaMessageWriter:
    """
    Batch writer over a confluent-kafka Producer.

    A `write` call is all-or-error: every message is produced, the producer is
    flushed, and any delivery failure or timeout raises PublishError.
    """

    def __init__(self, producer: Producer, topic: str, flush_timeout: float = 10.0) -> None:
        self._producer = producer
        self._topic = topic
        self._flush_timeout = flush_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> KafkaMessageWriter:
        return cls(
            Producer(build_producer_config(settings)),
            topic=settings.disciplines_topic,
            flush_timeout=settings.kafka_timeout,
        )

    def write(self, messages: Sequence[BusMessage]) -> None:
        delivery_errors: List[KafkaError] = []

        def on_delivery(err: KafkaError | None, _msg: Any) -> None:
            if err is not None:
                delivery_errors.append(err)

        try:
            for message in messages:
                self._producer.produce(
                    self._topic,
                    key=message.key.encode("utf-8"),
                    value=message.value,
                    on_delivery=on_delivery,
                )
        except (KafkaException, BufferError) as exc:
            raise PublishError(f"Kafka produce failed: {exc}") from exc

        remaining = self._producer.flush(self._flush_timeout)
        if remaining:
            raise PublishError(
                f"{remaining} message(s) not delivered within {self._flush_timeout}s"
            )
        if delivery_errors:
            raise PublishError(f"Kafka delivery failed: {delivery_errors[0].str()}")

    def close(self) -> None:
        self._producer.flush(self._flush_timeout)


__all__ = [
    "KafkaMessageReader",
    "KafkaMessageWriter",
    "build_consumer_config",
    "build_producer_config",
]
