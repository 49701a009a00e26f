from decimal import Decimal

import pytest
import requests

from models import CleanedTrip, EnrichmentResult, TripRecord


def make_trip(trip_id=1, when="2015-01-05 08:15:00", pickup=(40.75, -73.99), dropoff=(40.76, -73.98),
              fare="12.50", passengers=1):
    return TripRecord(
        trip_id=trip_id,
        pickup_datetime=when,
        pickup_latitude=pickup[0],
        pickup_longitude=pickup[1],
        dropoff_latitude=dropoff[0],
        dropoff_longitude=dropoff[1],
        fare_amount=Decimal(fare),
        passenger_count=passengers,
    )


def make_cleaned(distance_km=2.0, duration_min=10.0, **trip_kwargs):
    return CleanedTrip(trip=make_trip(**trip_kwargs), distance_km=distance_km, duration_min=duration_min)


class FakeClient:
    """Routing client double: answers from a {trip_id: (km, min) | Exception} map."""

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.calls = []

    def lookup(self, trip_id, origin, destination):
        self.calls.append((trip_id, origin, destination))
        answer = self.answers.get(trip_id, (1.0, 5.0))
        if isinstance(answer, Exception):
            raise answer
        distance_km, duration_min = answer
        return EnrichmentResult(trip_id=trip_id, distance_km=distance_km, duration_min=duration_min)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body_error=None):
        self.payload = payload
        self.status_code = status_code
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self.body_error:
            raise self.body_error
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


class FakeCursor:
    def __init__(self, rows=None, rowcount=0, error=None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.executed = []
        self.closed = False
        self.itersize = None

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error:
            raise self.error

    def fetchall(self):
        return list(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def close(self):
        self.closed = True


class FakeConn:
    def __init__(self, cursor=None):
        self._cursor = cursor or FakeCursor()
        self.cursor_kwargs = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, **kwargs):
        self.cursor_kwargs.append(kwargs)
        return self._cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


def ok_payload(distance="5 km", duration="12 mins"):
    return {
        "status": "OK",
        "rows": [{"elements": [{"status": "OK", "distance": {"text": distance}, "duration": {"text": duration}}]}],
    }


@pytest.fixture
def trip_factory():
    return make_trip


@pytest.fixture
def cleaned_factory():
    return make_cleaned


@pytest.fixture
def no_sleep():
    calls = []
    return calls.append, calls
