import pytest

import pipeline
from config import Settings
from conftest import FakeClient, FakeConn, make_trip
from errors import SourceUnavailable
from models import EnrichmentResult


def test_end_to_end_keeps_only_the_valid_trip(no_sleep):
    sleep, _ = no_sleep
    trips = [
        make_trip(1, pickup=(0.0, 0.0), dropoff=(0.0, 0.0)),
        make_trip(2, fare="180.00"),
        make_trip(3, fare="20.00", passengers=2),
    ]
    client = FakeClient({2: (0.005, 1.0), 3: (5.0, 14.0)})

    run = pipeline.run_in_memory(trips, client, delay_seconds=0.2, sleep=sleep)

    assert [t.trip_id for t in run.cleaned] == [3]
    assert run.cleaned[0].distance_km == 5.0
    assert run.summary.invalid_coordinate == 1
    assert run.summary.succeeded == 2
    assert [c[0] for c in client.calls] == [2, 3]
    assert run.removed["short_distance"] == 1
    assert run.reports["fare_by_passenger_count"] == [{"passenger_count": 2, "rides": 1, "average_fare": 20.0}]


def _settings():
    return Settings(db_dsn="dbname=test", routing_api_key="k", routing_delay_seconds=0)


def test_run_pipeline_holds_one_connection_and_closes_it(monkeypatch):
    conn = FakeConn()
    opened = []

    def fake_get_conn(dsn=None):
        opened.append(dsn)
        return conn

    written = []

    class Sink:
        def __init__(self, c):
            assert c is conn

        def upsert(self, result):
            written.append(result)

    monkeypatch.setattr(pipeline.db, "get_conn", fake_get_conn)
    monkeypatch.setattr(pipeline, "extract_trips", lambda c, id_range: iter([make_trip(1), make_trip(2)]))
    monkeypatch.setattr(pipeline, "PostgresResultSink", Sink)
    monkeypatch.setattr(pipeline, "fetch_trips", lambda cur: [make_trip(1), make_trip(2)])
    monkeypatch.setattr(pipeline, "fetch_results", lambda cur: list(written))

    run = pipeline.run_pipeline(_settings(), id_range=(1, 2), client=FakeClient({1: (3.0, 8.0), 2: (4.0, 9.0)}))

    assert opened == ["dbname=test"]
    assert conn.closed
    assert written == [EnrichmentResult(1, 3.0, 8.0), EnrichmentResult(2, 4.0, 9.0)]
    assert [t.trip_id for t in run.cleaned] == [1, 2]


def test_connection_released_when_run_fails(monkeypatch):
    conn = FakeConn()
    monkeypatch.setattr(pipeline.db, "get_conn", lambda dsn=None: conn)

    def broken_extract(c, id_range):
        raise RuntimeError("cursor died")
        yield  # pragma: no cover

    monkeypatch.setattr(pipeline, "extract_trips", broken_extract)

    with pytest.raises(RuntimeError):
        pipeline.run_pipeline(_settings(), client=FakeClient())

    assert conn.closed
    assert conn.rollbacks == 1


def test_unreachable_store_aborts(monkeypatch):
    def unreachable(dsn=None):
        raise SourceUnavailable("no route to host")

    monkeypatch.setattr(pipeline.db, "get_conn", unreachable)
    client = FakeClient()

    with pytest.raises(SourceUnavailable):
        pipeline.run_pipeline(_settings(), client=client)

    assert client.calls == []
