"""
Pipeline package for the disciplines importer.

Re-exports the event loop, the importer and the batch publisher so callers
can import from `disciplines_importer.pipeline` directly.
"""

from disciplines_importer.pipeline.event_loop import EventLoop
from disciplines_importer.pipeline.importer import DisciplineSource, DisciplinesImporter, Importer
from disciplines_importer.pipeline.publisher import BatchPublisher, make_discipline_message

__all__ = [
    "BatchPublisher",
    "DisciplineSource",
    "DisciplinesImporter",
    "EventLoop",
    "Importer",
    "make_discipline_message",
]
