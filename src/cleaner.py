# src/cleaner.py
import logging

from geo import has_zero_coordinate
from models import CleanedTrip

logger = logging.getLogger(__name__)

MIN_DISTANCE_KM = 0.01
MIN_PASSENGERS = 1


def merge_trips(trips, results):
    """
    Inner join trips and enrichment results on trip_id.
    Trips without a result (and results without a trip) are dropped.
    """
    by_id = {r.trip_id: r for r in results}
    merged = []
    for trip in trips:
        result = by_id.get(trip.trip_id)
        if result is None:
            continue
        merged.append(CleanedTrip(trip=trip, distance_km=result.distance_km, duration_min=result.duration_min))
    return merged


# Applied in this order. Distance is checked on its own, fare plays no part.
RULES = [
    ("zero_coordinates", lambda t: not has_zero_coordinate(t.trip.pickup, t.trip.dropoff)),
    ("short_distance", lambda t: t.distance_km >= MIN_DISTANCE_KM),
    ("no_passengers", lambda t: t.trip.passenger_count >= MIN_PASSENGERS),
]


def clean_trips(merged):
    """
    Filter merged trips through the cleaning rules without touching the store.

    Returns (kept, removed_counts) where removed_counts maps rule name to the
    number of rows that rule removed.
    """
    kept = list(merged)
    removed = {}
    for name, keep in RULES:
        before = len(kept)
        kept = [t for t in kept if keep(t)]
        removed[name] = before - len(kept)

    logger.info("Kept %d of %d merged trips, removed %s", len(kept), len(merged), removed)
    return kept, removed


PURGE_SQL = [
    (
        "zero_coordinates",
        """
        DELETE FROM trips
        WHERE pickup_latitude = 0 OR pickup_longitude = 0
           OR dropoff_latitude = 0 OR dropoff_longitude = 0;
        """,
    ),
    (
        "short_distance",
        """
        DELETE FROM trips t
        USING trip_distances d
        WHERE d.trip_id = t.trip_id
          AND split_part(d.distance, ' ', 1)::numeric < 0.01;
        """,
    ),
    (
        "no_passengers",
        """
        DELETE FROM trips
        WHERE passenger_count < 1;
        """,
    ),
]


def purge_invalid(conn):
    """
    Destructive variant of clean_trips: delete rule-violating trips from the
    store. Results are stored normalized to km, so the leading number of the
    distance text is the distance in km.
    """
    removed = {}
    cur = conn.cursor()
    try:
        logger.info("Deleting invalid trips...")
        for name, sql in PURGE_SQL:
            cur.execute(sql)
            removed[name] = cur.rowcount
        conn.commit()
    finally:
        cur.close()
    logger.info("Done. Removed %s", removed)
    return removed
