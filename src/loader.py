# src/loader.py
import logging
from decimal import Decimal

from db import get_cursor
from models import TripRecord

logger = logging.getLogger(__name__)

TRIP_COLUMNS = """
    trip_id, pickup_datetime,
    pickup_latitude, pickup_longitude,
    dropoff_latitude, dropoff_longitude,
    fare_amount, passenger_count
"""


def row_to_trip(row) -> TripRecord:
    trip_id, pickup_dt, pla, plo, dla, dlo, fare, pax = row
    return TripRecord(
        trip_id=trip_id,
        pickup_datetime=pickup_dt,
        pickup_latitude=float(pla),
        pickup_longitude=float(plo),
        dropoff_latitude=float(dla),
        dropoff_longitude=float(dlo),
        fare_amount=Decimal(str(fare)),
        passenger_count=int(pax),
    )


def _range_clause(id_range):
    low, high = id_range if id_range else (None, None)
    clauses, params = [], []
    if low is not None:
        clauses.append("trip_id >= %s")
        params.append(low)
    if high is not None:
        clauses.append("trip_id <= %s")
        params.append(high)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def extract_trips(conn, id_range=None, batch_size=1000):
    """
    Lazily yield TripRecord rows as stored, ordered by trip_id.

    Parameters:
        conn: open psycopg2 connection
        id_range: optional (low, high) inclusive bounds, either may be None
        batch_size (int): rows fetched per round trip

    Uses a server-side cursor held across commits so the enrichment step can
    commit each result while extraction is still streaming.
    """
    where, params = _range_clause(id_range)
    cur = conn.cursor(name="extract_trips", withhold=True)
    try:
        cur.itersize = batch_size
        cur.execute(f"SELECT {TRIP_COLUMNS} FROM trips {where} ORDER BY trip_id;", params)
        for row in cur:
            yield row_to_trip(row)
    finally:
        cur.close()


def fetch_trips(cur):
    cur.execute(f"SELECT {TRIP_COLUMNS} FROM trips ORDER BY trip_id;")
    return [row_to_trip(r) for r in cur.fetchall()]


def load_synthetic(n_rows=100, clear_existing=False, dsn=None):
    """
    Generates synthetic NYC trips (a share of them around JFK, a few with
    zero coordinates or zero passengers so the cleaning rules have work to do).

    Parameters:
        n_rows (int): number of synthetic trips to insert
        clear_existing (bool): if True → wipe trips and results before the load
    """
    logger.info("Generating %d trips", n_rows)

    if clear_existing:
        with get_cursor(commit=True, dsn=dsn) as cur:
            logger.info("Clearing existing trips and results...")
            cur.execute("DELETE FROM trip_distances;")
            cur.execute("DELETE FROM trips;")

    sql = """
    INSERT INTO trips (
        trip_id,
        pickup_datetime,
        pickup_latitude,
        pickup_longitude,
        dropoff_latitude,
        dropoff_longitude,
        fare_amount,
        passenger_count
    )
    SELECT
        base.max_id + g AS trip_id,
        to_char(
            '2015-01-01 00:00'::timestamp + random() * interval '30 days',
            'YYYY-MM-DD HH24:MI:SS'
        ) AS pickup_datetime,
        CASE WHEN random() < 0.02 THEN 0 ELSE pickup_lat END,
        CASE WHEN random() < 0.02 THEN 0 ELSE pickup_lon END,
        pickup_lat + (random() - 0.5) * 0.15 AS dropoff_latitude,
        pickup_lon + (random() - 0.5) * 0.15 AS dropoff_longitude,
        round((2.5 + random() * 60.0)::numeric, 2) AS fare_amount,
        CASE WHEN random() < 0.02 THEN 0 ELSE 1 + floor(random() * 4)::int END AS passenger_count
    FROM (
        SELECT
            g,
            CASE WHEN random() < 0.1 THEN 40.644537 + (random() - 0.5) * 0.01
                 ELSE 40.60 + random() * 0.25 END AS pickup_lat,
            CASE WHEN random() < 0.1 THEN -73.783260 + (random() - 0.5) * 0.01
                 ELSE -74.05 + random() * 0.25 END AS pickup_lon
        FROM generate_series(1, %s) AS g
    ) AS synthetic,
    (SELECT COALESCE(MAX(trip_id), 0) AS max_id FROM trips) AS base;
    """

    with get_cursor(commit=True, dsn=dsn) as cur:
        logger.info("Inserting %d synthetic rows...", n_rows)
        cur.execute(sql, (n_rows,))
        logger.info("Complete")
