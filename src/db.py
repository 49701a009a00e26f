# src/db.py
import logging
from contextlib import contextmanager

import psycopg2

from config import Settings
from errors import SourceUnavailable

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS trips (
    trip_id            BIGINT PRIMARY KEY,
    pickup_datetime    TEXT NOT NULL,
    pickup_latitude    NUMERIC(9, 6) NOT NULL,
    pickup_longitude   NUMERIC(9, 6) NOT NULL,
    dropoff_latitude   NUMERIC(9, 6) NOT NULL,
    dropoff_longitude  NUMERIC(9, 6) NOT NULL,
    fare_amount        NUMERIC(10, 2) NOT NULL,
    passenger_count    INT NOT NULL
);

CREATE TABLE IF NOT EXISTS trip_distances (
    trip_id   BIGINT PRIMARY KEY,
    distance  TEXT NOT NULL,
    duration  TEXT NOT NULL
);
"""


def _default_dsn():
    return Settings.from_env(require_api_key=False).db_dsn


def get_conn(dsn=None):
    dsn = dsn or _default_dsn()
    try:
        return psycopg2.connect(dsn)
    except psycopg2.OperationalError as e:
        raise SourceUnavailable(f"Cannot reach trip store: {e}") from e


@contextmanager
def connection(dsn=None):
    """
    Hold one connection for a whole pipeline run.
    The connection is closed on every exit path; uncommitted work is rolled back.
    """
    conn = get_conn(dsn)
    try:
        yield conn
    except Exception:
        if not conn.closed:
            conn.rollback()
        raise
    finally:
        conn.close()
        logger.debug("Connection closed.")


@contextmanager
def get_cursor(commit=False, dsn=None):
    """
    Simple context manager for one-off queries on a fresh connection.
    """
    conn = get_conn(dsn)
    try:
        cur = conn.cursor()
        yield cur
        if commit:
            conn.commit()
    finally:
        conn.close()


def init_schema(dsn=None):
    with get_cursor(commit=True, dsn=dsn) as cur:
        logger.info("Creating tables if missing...")
        cur.execute(SCHEMA_SQL)
