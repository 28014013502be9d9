"""
Domain package for the disciplines importer.

Exports the event payload models, the import window and the window resolver.
Keep this package free of I/O: no database, bus or logging concerns.
"""

from disciplines_importer.domain.models import (
    CURRENT_YEAR_EVENT_NAME,
    DISCIPLINE_EVENT_NAME,
    SECONDARY_DB_LOADED_EVENT_NAME,
    CurrentYearEvent,
    DisciplineRecord,
    ImportWindow,
    RawDiscipline,
    SecondaryDbLoadedEvent,
)
from disciplines_importer.domain.windows import resolve_window

__all__ = [
    "CURRENT_YEAR_EVENT_NAME",
    "DISCIPLINE_EVENT_NAME",
    "SECONDARY_DB_LOADED_EVENT_NAME",
    "CurrentYearEvent",
    "DisciplineRecord",
    "ImportWindow",
    "RawDiscipline",
    "SecondaryDbLoadedEvent",
    "resolve_window",
]
