"""
Mapping of inbound control events to import windows.

`resolve_window` is pure: it performs no I/O and, given `now`, is fully
deterministic. Unknown keys and undecodable payloads both resolve to a skip
window; the two cases are told apart only by `ImportWindow.skip_reason`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import ValidationError

from disciplines_importer.domain.models import (
    CURRENT_YEAR_EVENT_NAME,
    SECONDARY_DB_LOADED_EVENT_NAME,
    SKIP_IGNORED,
    SKIP_MALFORMED,
    CurrentYearEvent,
    ImportWindow,
    SecondaryDbLoadedEvent,
)

# Academic years start on August 1st; a new year reimports the two previous ones.
ACADEMIC_YEAR_START_MONTH = 8
REIMPORT_YEARS_BACK = 2


def _is_zero_time(value: datetime) -> bool:
    # Serialized zero time ("0001-01-01T00:00:00Z") means "no previous load".
    return value.replace(tzinfo=None) == datetime.min


def _local_now(now: Optional[datetime]) -> datetime:
    return (now or datetime.now()).astimezone()


def current_year_window(year: int, now: Optional[datetime] = None) -> ImportWindow:
    """
    Window for a newly announced academic year.

    Starts at August 1st, 00:00 local time, of ``year - 2`` and ends at `now`
    truncated to the hour, so repeated resolution within one hour is stable.
    """
    start = datetime(year - REIMPORT_YEARS_BACK, ACADEMIC_YEAR_START_MONTH, 1).astimezone()
    end = _local_now(now).replace(minute=0, second=0, microsecond=0)
    return ImportWindow(start=start, end=end, year=year)


def secondary_db_loaded_window(event: SecondaryDbLoadedEvent) -> ImportWindow:
    start = event.previous_secondary_database_datetime
    end = event.current_secondary_database_datetime
    if _is_zero_time(start):
        return ImportWindow.skip(SKIP_IGNORED)
    if _is_zero_time(end):
        raise ValueError("currentSecondaryDatabaseDatetime is the zero time")
    return ImportWindow(start=start, end=end, year=event.year)


def resolve_window(
    key: str,
    value: Union[bytes, str, None],
    now: Optional[datetime] = None,
) -> ImportWindow:
    """
    Resolve an inbound control event into an import window.

    Parameters
    ----------
    key : str
        Message key selecting the event variant.
    value : bytes | str | None
        JSON payload of the event.
    now : datetime | None
        Wall-clock time used for current-year windows; defaults to the current time.

    Returns
    -------
    ImportWindow
        A concrete window, or a skip window for ignored or malformed events.
    """
    try:
        if key == SECONDARY_DB_LOADED_EVENT_NAME:
            return secondary_db_loaded_window(
                SecondaryDbLoadedEvent.model_validate_json(value or b"")
            )
        if key == CURRENT_YEAR_EVENT_NAME:
            event = CurrentYearEvent.model_validate_json(value or b"")
            return current_year_window(event.year, now)
    except (ValidationError, ValueError, TypeError, OverflowError, OSError) as exc:
        # Inconsistent bounds or an out-of-range year count as a malformed payload.
        return ImportWindow.skip(SKIP_MALFORMED, str(exc))

    return ImportWindow.skip(SKIP_IGNORED)


__all__ = ["current_year_window", "resolve_window", "secondary_db_loaded_window"]
