"""
Domain models for the disciplines importer.

Control-event payloads arrive as JSON on the meta-events topic and are
validated with Pydantic; disciplines leave as JSON on the disciplines topic.
The import window and raw legacy rows are plain frozen dataclasses since they
never cross a serialization boundary.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Inbound message keys
SECONDARY_DB_LOADED_EVENT_NAME = "secondary_db_loaded_event"
CURRENT_YEAR_EVENT_NAME = "current_year_event"

# Outbound message key
DISCIPLINE_EVENT_NAME = "discipline_event"

SKIP_IGNORED = "ignored"
SKIP_MALFORMED = "malformed"


class SecondaryDbLoadedEvent(BaseModel):
    """
    The secondary database was reloaded; rows registered between the previous
    and the current reload are new.
    """

    previous_secondary_database_datetime: datetime = Field(
        ..., alias="previousSecondaryDatabaseDatetime"
    )
    current_secondary_database_datetime: datetime = Field(
        ..., alias="currentSecondaryDatabaseDatetime"
    )
    year: int

    model_config = {"frozen": True, "populate_by_name": True}


class CurrentYearEvent(BaseModel):
    """A new academic year was announced."""

    year: int

    model_config = {"frozen": True}


class DisciplineRecord(BaseModel):
    """
    A single discipline, published as a discipline event.
    """

    id: int = Field(..., description="Discipline id in the legacy store.")
    name: str = Field(..., description="Discipline name, trimmed of surrounding spaces.")
    year: int = Field(..., description="Academic year the import ran for.")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class ImportWindow:
    """
    Inclusive timestamp range of one import.

    A skip window has neither bound set; `skip_reason` tells why it was
    produced and `skip_detail` carries the decode error of a malformed
    payload. A real window always satisfies ``start <= end``.
    """

    start: Optional[datetime]
    end: Optional[datetime]
    year: int
    skip_reason: Optional[str] = None
    skip_detail: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.start is None) != (self.end is None):
            raise ValueError("ImportWindow bounds must be both set or both empty")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"ImportWindow start {self.start} is after end {self.end}")

    @classmethod
    def skip(cls, reason: str, detail: Optional[str] = None) -> ImportWindow:
        return cls(start=None, end=None, year=0, skip_reason=reason, skip_detail=detail)

    @property
    def is_skip(self) -> bool:
        return self.start is None


@dataclass(frozen=True)
class RawDiscipline:
    """One decoded row of the legacy range query."""

    id: int
    name: str


__all__ = [
    "CURRENT_YEAR_EVENT_NAME",
    "DISCIPLINE_EVENT_NAME",
    "SECONDARY_DB_LOADED_EVENT_NAME",
    "SKIP_IGNORED",
    "SKIP_MALFORMED",
    "CurrentYearEvent",
    "DisciplineRecord",
    "ImportWindow",
    "RawDiscipline",
    "SecondaryDbLoadedEvent",
]
