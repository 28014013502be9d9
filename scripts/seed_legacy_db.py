"""
Legacy-store seeding script for the disciplines importer.

Creates the two Dekanat tables the importer reads (`TPR_COLL` lookup and
`T_PD_CMS` records) in a PostgreSQL database and loads deterministic rows with
COPY, for local runs and integration tests.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta
from typing import Iterator, Tuple

import psycopg
import typer

from disciplines_importer.config import get_settings

app = typer.Typer(help="Create and seed the legacy Dekanat tables (PostgreSQL, COPY).")

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS TPR_COLL (
        ID INTEGER PRIMARY KEY,
        PREDMET CHAR(120)
    );
    CREATE TABLE IF NOT EXISTS T_PD_CMS (
        ID INTEGER PRIMARY KEY,
        PREDM_ID INTEGER NOT NULL REFERENCES TPR_COLL (ID),
        REGDATE TIMESTAMP NOT NULL
    );
"""

TRUNCATE_SQL = "TRUNCATE TABLE T_PD_CMS, TPR_COLL;"


def create_schema(conn: psycopg.Connection, reset: bool = False) -> None:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_SQL)
        if reset:
            cur.execute(TRUNCATE_SQL)
    conn.commit()


def _discipline_rows(
    rows: int, first_id: int, regdate: datetime, step: timedelta
) -> Iterator[Tuple[int, str, datetime]]:
    for offset in range(rows):
        discipline_id = first_id + offset
        yield discipline_id, f"name {discipline_id}", regdate + step * offset


def seed_disciplines(
    conn: psycopg.Connection,
    rows: int,
    first_id: int = 1,
    regdate: datetime | None = None,
    step: timedelta = timedelta(0),
) -> int:
    """
    Insert `rows` disciplines with ids starting at `first_id`.

    Every discipline gets its own lookup row; registration dates start at
    `regdate` and advance by `step`. Returns the number of rows written.
    """
    regdate = regdate or datetime.now().replace(microsecond=0)
    generated = list(_discipline_rows(rows, first_id, regdate, step))

    with conn.cursor() as cur:
        with cur.copy("COPY TPR_COLL (ID, PREDMET) FROM STDIN") as copy:
            for discipline_id, name, _ in generated:
                copy.write_row((discipline_id, name))
        with cur.copy("COPY T_PD_CMS (ID, PREDM_ID, REGDATE) FROM STDIN") as copy:
            for discipline_id, _, registered_at in generated:
                copy.write_row((discipline_id, discipline_id, registered_at))
    conn.commit()
    return len(generated)


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of disciplines to create.",
    ),
    first_id: int = typer.Option(
        1,
        "--first-id",
        help="Id of the first discipline.",
    ),
    regdate: datetime | None = typer.Option(
        None,
        "--regdate",
        formats=["%Y-%m-%d %H:%M:%S", "%Y-%m-%d"],
        help="Registration date of the first discipline (default: now).",
    ),
    step_seconds: int = typer.Option(
        60,
        "--step-seconds",
        help="Seconds between consecutive registration dates.",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for the legacy store.",
    ),
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Truncate both tables before seeding.",
    ),
) -> None:
    """
    Create the legacy tables if needed and seed them using COPY.
    """
    start = time.perf_counter()
    target = dsn or get_settings().legacy_db_dsn
    with psycopg.connect(target) as conn:
        create_schema(conn, reset=reset)
        written = seed_disciplines(
            conn,
            rows=rows,
            first_id=first_id,
            regdate=regdate,
            step=timedelta(seconds=step_seconds),
        )
    duration = time.perf_counter() - start
    typer.echo(f"Seeded {written:,} disciplines in {duration:.2f}s")


if __name__ == "__main__":
    app()
