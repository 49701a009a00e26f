# src/pipeline.py
import logging
import time
from dataclasses import dataclass, field

import cleaner
import db
from enricher import EnrichmentSummary, InMemoryResultSink, PostgresResultSink, enrich, fetch_results
from loader import extract_trips, fetch_trips
from reports import build_reports
from routing import DistanceMatrixClient

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    summary: EnrichmentSummary
    cleaned: list
    removed: dict
    reports: dict = field(default_factory=dict)


def finish(trips, results, summary):
    """Merge -> Clean -> Report over fully enriched data."""
    merged = cleaner.merge_trips(trips, results)
    cleaned, removed = cleaner.clean_trips(merged)
    return PipelineRun(summary=summary, cleaned=cleaned, removed=removed, reports=build_reports(cleaned))


def run_in_memory(trips, client, delay_seconds=0.0, sleep=time.sleep):
    """Whole pipeline over an in-memory list of trips, results kept in a dict."""
    trips = list(trips)
    sink = InMemoryResultSink()
    summary = enrich(trips, client, sink, delay_seconds=delay_seconds, sleep=sleep)
    return finish(trips, sink.results.values(), summary)


def run_pipeline(settings, id_range=None, purge=False, client=None, sleep=time.sleep):
    """
    Extract → Enrich → Merge → Clean → Report against the trip store.

    One connection is held for the run and released on every exit path.
    Enrichment covers `id_range` only; merge and reports cover every trip in
    the store that has a result.
    """
    client = client or DistanceMatrixClient(
        api_key=settings.routing_api_key,
        base_url=settings.routing_base_url,
        timeout=settings.routing_timeout_seconds,
    )

    with db.connection(settings.db_dsn) as conn:
        logger.info("Starting enrichment (range=%s)", id_range if id_range and any(b is not None for b in id_range) else "ALL")
        summary = enrich(
            extract_trips(conn, id_range),
            client,
            PostgresResultSink(conn),
            delay_seconds=settings.routing_delay_seconds,
            sleep=sleep,
        )

        if purge:
            cleaner.purge_invalid(conn)

        cur = conn.cursor()
        try:
            trips = fetch_trips(cur)
            results = fetch_results(cur)
        finally:
            cur.close()

    run = finish(trips, results, summary)
    logger.info("Pipeline finished: %d cleaned trips", len(run.cleaned))
    return run
