from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from disciplines_importer.domain.models import (
    CURRENT_YEAR_EVENT_NAME,
    SECONDARY_DB_LOADED_EVENT_NAME,
    SKIP_IGNORED,
    SKIP_MALFORMED,
    ImportWindow,
)
from disciplines_importer.domain.windows import current_year_window, resolve_window

KYIV_SUMMER = timezone(timedelta(hours=3))
EXPECTED_YEAR = 2023


def _secondary_db_loaded(previous: str, current: str, year: int = EXPECTED_YEAR) -> bytes:
    return json.dumps(
        {
            "previousSecondaryDatabaseDatetime": previous,
            "currentSecondaryDatabaseDatetime": current,
            "year": year,
        }
    ).encode("utf-8")


def test_secondary_db_loaded_window_is_taken_verbatim():
    payload = _secondary_db_loaded("2023-04-10T04:00:00+03:00", "2023-04-11T04:00:00+03:00")

    window = resolve_window(SECONDARY_DB_LOADED_EVENT_NAME, payload)

    assert window == ImportWindow(
        start=datetime(2023, 4, 10, 4, 0, tzinfo=KYIV_SUMMER),
        end=datetime(2023, 4, 11, 4, 0, tzinfo=KYIV_SUMMER),
        year=EXPECTED_YEAR,
    )
    assert not window.is_skip


def test_current_year_window_starts_two_academic_years_back():
    now = datetime(2024, 9, 15, 13, 47, 12, 345678).astimezone()

    window = resolve_window(CURRENT_YEAR_EVENT_NAME, b'{"year": 2024}', now=now)

    assert window.start == datetime(2022, 8, 1).astimezone()
    assert window.end == datetime(2024, 9, 15, 13).astimezone()
    assert window.year == 2024


def test_current_year_window_end_is_now_truncated_to_hour():
    before = datetime.now().astimezone()

    window = current_year_window(2024)

    assert window.end is not None
    assert (window.end.minute, window.end.second, window.end.microsecond) == (0, 0, 0)
    assert window.end <= datetime.now().astimezone()
    assert window.end > before - timedelta(hours=1)


def test_current_year_window_is_stable_within_an_hour():
    first = current_year_window(2024, now=datetime(2024, 9, 15, 13, 1).astimezone())
    second = current_year_window(2024, now=datetime(2024, 9, 15, 13, 59).astimezone())

    assert first == second


@pytest.mark.parametrize(
    "key",
    ["secondary_db_score_bulk_processed_event", "", "discipline_event"],
)
def test_unrecognized_key_is_skipped(key):
    window = resolve_window(key, b'{"year": 2024}')

    assert window.is_skip
    assert window == ImportWindow.skip(SKIP_IGNORED)
    assert (window.start, window.end, window.year) == (None, None, 0)


@pytest.mark.parametrize(
    ("key", "payload"),
    [
        (CURRENT_YEAR_EVENT_NAME, b"not json"),
        (CURRENT_YEAR_EVENT_NAME, b"{}"),
        (CURRENT_YEAR_EVENT_NAME, b'{"year": "next"}'),
        (CURRENT_YEAR_EVENT_NAME, None),
        (SECONDARY_DB_LOADED_EVENT_NAME, b'{"year": 2023}'),
        (SECONDARY_DB_LOADED_EVENT_NAME, b"[1, 2]"),
    ],
)
def test_undecodable_payload_is_skipped_as_malformed(key, payload):
    window = resolve_window(key, payload)

    assert window.is_skip
    assert window.skip_reason == SKIP_MALFORMED
    assert window.year == 0
    assert window.skip_detail


def test_reversed_bounds_are_malformed():
    payload = _secondary_db_loaded("2023-04-11T04:00:00+03:00", "2023-04-10T04:00:00+03:00")

    window = resolve_window(SECONDARY_DB_LOADED_EVENT_NAME, payload)

    assert window.skip_reason == SKIP_MALFORMED


def test_zero_previous_load_time_is_skipped():
    payload = _secondary_db_loaded("0001-01-01T00:00:00Z", "2023-04-10T04:00:00+03:00")

    window = resolve_window(SECONDARY_DB_LOADED_EVENT_NAME, payload)

    assert window.is_skip
    assert window.skip_reason == SKIP_IGNORED
    assert window.skip_detail is None


def test_zero_current_load_time_alone_is_malformed():
    payload = _secondary_db_loaded("2023-04-10T04:00:00+03:00", "0001-01-01T00:00:00Z")

    window = resolve_window(SECONDARY_DB_LOADED_EVENT_NAME, payload)

    assert window.skip_reason == SKIP_MALFORMED
    assert "currentSecondaryDatabaseDatetime" in window.skip_detail


def test_malformed_detail_names_the_validation_failure():
    window = resolve_window(CURRENT_YEAR_EVENT_NAME, b'{"year": "next"}')

    assert window.skip_reason == SKIP_MALFORMED
    assert "valid integer" in window.skip_detail


def test_year_without_valid_window_start_is_malformed():
    window = resolve_window(CURRENT_YEAR_EVENT_NAME, b'{"year": 1}')

    assert window.skip_reason == SKIP_MALFORMED


def test_import_window_rejects_half_open_bounds():
    with pytest.raises(ValueError):
        ImportWindow(start=datetime(2023, 1, 1), end=None, year=2023)
