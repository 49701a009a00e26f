# src/enricher.py
import logging
import time
from dataclasses import dataclass, asdict

from errors import DuplicateResult, InvalidCoordinate, LookupFailed, MalformedResponse
from geo import has_zero_coordinate
from models import EnrichmentResult
from routing import format_distance, format_duration, parse_distance_km, parse_duration_min

logger = logging.getLogger(__name__)


class ResultSink:
    """Where enrichment results go, one at a time."""

    def upsert(self, result: EnrichmentResult) -> None:
        """Persist one result. Raises DuplicateResult if the trip already has one."""
        raise NotImplementedError


class InMemoryResultSink(ResultSink):
    def __init__(self):
        self.results = {}

    def upsert(self, result):
        if result.trip_id in self.results:
            raise DuplicateResult(result.trip_id)
        self.results[result.trip_id] = result


class PostgresResultSink(ResultSink):
    """
    Appends to trip_distances and commits each row on its own.

    Conflicts are resolved with ON CONFLICT DO NOTHING rather than a rollback:
    a rollback would drop the held extraction cursor on the same connection.
    """

    def __init__(self, conn):
        self.conn = conn

    def upsert(self, result):
        cur = self.conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO trip_distances (trip_id, distance, duration)
                VALUES (%s, %s, %s)
                ON CONFLICT (trip_id) DO NOTHING;
                """,
                (result.trip_id, format_distance(result.distance_km), format_duration(result.duration_min)),
            )
            self.conn.commit()
            if cur.rowcount == 0:
                raise DuplicateResult(result.trip_id)
        except DuplicateResult:
            raise
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()


def fetch_results(cur):
    cur.execute("SELECT trip_id, distance, duration FROM trip_distances;")
    return [
        EnrichmentResult(
            trip_id=trip_id,
            distance_km=parse_distance_km(distance),
            duration_min=parse_duration_min(duration),
        )
        for trip_id, distance, duration in cur.fetchall()
    ]


@dataclass
class EnrichmentSummary:
    succeeded: int = 0
    invalid_coordinate: int = 0
    lookup_failed: int = 0
    malformed_response: int = 0
    duplicate: int = 0

    @property
    def total(self):
        return (
            self.succeeded
            + self.invalid_coordinate
            + self.lookup_failed
            + self.malformed_response
            + self.duplicate
        )

    def as_dict(self):
        return {**asdict(self), "total": self.total}


def enrich(trips, client, sink: ResultSink, delay_seconds=1.0, sleep=time.sleep) -> EnrichmentSummary:
    """
    Look up distance/duration for each trip and write results through `sink`.

    One request at a time, `delay_seconds` between requests. Per-record
    failures are logged and counted; they never stop the loop.
    """
    summary = EnrichmentSummary()

    for trip in trips:
        if has_zero_coordinate(trip.pickup, trip.dropoff):
            summary.invalid_coordinate += 1
            logger.warning("Skipping: %s", InvalidCoordinate(trip.trip_id))
            continue

        try:
            result = client.lookup(trip.trip_id, trip.pickup, trip.dropoff)
        except LookupFailed as e:
            summary.lookup_failed += 1
            logger.warning("Skipping: %s", e)
            continue
        except MalformedResponse as e:
            summary.malformed_response += 1
            logger.warning("Skipping: %s", e)
            continue
        finally:
            if delay_seconds:
                sleep(delay_seconds)

        try:
            sink.upsert(result)
        except DuplicateResult as e:
            summary.duplicate += 1
            logger.debug("Skipping: %s", e)
            continue

        summary.succeeded += 1
        logger.info(
            "Trip %s -> %.3f km, %.1f min", trip.trip_id, result.distance_km, result.duration_min
        )

    logger.info("Enrichment finished: %s", summary.as_dict())
    return summary
