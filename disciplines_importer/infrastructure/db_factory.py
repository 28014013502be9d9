"""
Legacy-store connection factory for the disciplines importer.

The process opens one dedicated psycopg connection to the secondary database
and keeps it for its lifetime; the pipeline never pools or shares it.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import psycopg
from psycopg import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from disciplines_importer.config import Settings
from disciplines_importer.errors import ConnectivityError
from disciplines_importer.utils.logging import get_logger

log = get_logger(__name__)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def _connect(dsn: str) -> Connection:
    # Autocommit: each extraction opens its own explicit read transaction.
    return psycopg.connect(dsn, autocommit=True)


def get_legacy_connection(settings: Settings) -> Connection:
    """
    Open the connection to the secondary (legacy) database with automatic retry.

    Retries `settings.db_connect_attempts` times with exponential backoff for
    transient connection errors.

    Returns
    -------
    Connection
        A new psycopg connection in autocommit mode.

    Raises
    ------
    ConnectivityError
        If the connection fails after all retry attempts.
    """
    connect = _connect.retry_with(stop=stop_after_attempt(settings.db_connect_attempts))
    try:
        conn = connect(settings.legacy_db_dsn)
    except psycopg.Error as exc:
        raise ConnectivityError(
            f"Wrong connection configuration for secondary Dekanat DB: {exc}"
        ) from exc
    log.info("Connected to secondary Dekanat DB", extra={"attempts": settings.db_connect_attempts})
    return conn


__all__ = ["get_legacy_connection"]
