"""
Extraction of disciplines from the legacy (secondary Dekanat) database.

`DisciplineExtractor.extract` is a single-pass generator over a server-side
cursor: rows are fetched `itersize` at a time and never materialized as a
whole. Closing the generator early closes the cursor and ends the read
transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterator, Sequence

import psycopg
from psycopg import Connection

from disciplines_importer.domain.models import RawDiscipline
from disciplines_importer.errors import ConnectivityError, DecodeError, ExtractionError

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DISCIPLINES_QUERY = """
    SELECT T_PD_CMS.ID, TPR_COLL.PREDMET FROM T_PD_CMS
    INNER JOIN TPR_COLL ON T_PD_CMS.PREDM_ID = TPR_COLL.ID
    WHERE T_PD_CMS.REGDATE BETWEEN %s AND %s
"""

CURSOR_NAME = "disciplines_import"


def _decode_name(raw_name: Any) -> str:
    if raw_name is None:
        raise DecodeError("Scan error on column PREDMET: NULL discipline name")
    if isinstance(raw_name, (bytes, bytearray, memoryview)):
        try:
            raw_name = bytes(raw_name).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Scan error on column PREDMET: {exc}") from exc
    return str(raw_name).strip(" ")


def decode_row(row: Sequence[Any]) -> RawDiscipline:
    """
    Decode one `(ID, PREDMET)` row.

    Raises
    ------
    DecodeError
        If the id is not an integer or the name is missing.
    """
    if len(row) != 2:
        raise DecodeError(f"Expected 2 columns, got {len(row)}")

    raw_id, raw_name = row
    if raw_id is None or isinstance(raw_id, bool):
        raise DecodeError(f"Scan error on column ID: {raw_id!r} is not an integer")
    try:
        discipline_id = int(str(raw_id).strip())
    except ValueError as exc:
        raise DecodeError(f"Scan error on column ID: {raw_id!r} is not an integer") from exc

    return RawDiscipline(id=discipline_id, name=_decode_name(raw_name))


class DisciplineExtractor:
    """
    Range query over disciplines registered in the legacy store.

    Parameters
    ----------
    conn : Connection
        Autocommit psycopg connection owned by the process.
    fetch_size : int
        Rows fetched per round trip from the server-side cursor.
    """

    def __init__(self, conn: Connection, fetch_size: int = 500) -> None:
        self._conn = conn
        self._fetch_size = fetch_size

    def ping(self) -> None:
        """Raise ConnectivityError unless the legacy store answers a trivial query."""
        try:
            with self._conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
        except psycopg.Error as exc:
            raise ConnectivityError(f"Secondary Dekanat DB is unreachable: {exc}") from exc

    def extract(self, start: datetime, end: datetime) -> Iterator[RawDiscipline]:
        """
        Yield disciplines whose registration date lies in ``[start, end]``.

        Bounds are rendered as ``YYYY-MM-DD HH:MM:SS`` in their own timezone.
        The query is issued on the first `next()`; a DecodeError ends the
        sequence after the rows already yielded.
        """
        params = (start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT))
        try:
            with self._conn.transaction(), self._conn.cursor(name=CURSOR_NAME) as cur:
                cur.itersize = self._fetch_size
                cur.execute(DISCIPLINES_QUERY, params)
                for row in cur:
                    yield decode_row(row)
        except psycopg.Error as exc:
            raise ExtractionError(f"Disciplines query failed: {exc}") from exc


__all__ = [
    "DATE_FORMAT",
    "DISCIPLINES_QUERY",
    "DisciplineExtractor",
    "decode_row",
]
