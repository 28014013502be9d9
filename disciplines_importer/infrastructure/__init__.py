"""
Infrastructure package for the disciplines importer.

Centralizes I/O concerns: the legacy-store connection and extractor, and the
message-bus protocols with their Kafka adapters. Keep this layer focused on
resource handling and error wrapping, decoupled from pipeline logic.
"""

from disciplines_importer.infrastructure.bus import BusMessage, MessageReader, MessageWriter
from disciplines_importer.infrastructure.db_factory import get_legacy_connection
from disciplines_importer.infrastructure.extractor import DisciplineExtractor
from disciplines_importer.infrastructure.kafka_bus import KafkaMessageReader, KafkaMessageWriter

__all__ = [
    "BusMessage",
    "DisciplineExtractor",
    "KafkaMessageReader",
    "KafkaMessageWriter",
    "MessageReader",
    "MessageWriter",
    "get_legacy_connection",
]
