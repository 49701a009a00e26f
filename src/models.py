# src/models.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)

# Stored timestamps are UTC; some sources spell that out.
UTC_SUFFIXES = (" UTC", "Z")


def parse_timestamp(text: str) -> datetime:
    """Parse the stored pickup timestamp text (several common layouts)."""
    text = text.strip()
    for suffix in UTC_SUFFIXES:
        if text.endswith(suffix):
            text = text[: -len(suffix)].rstrip()
            break
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class TripRecord:
    trip_id: int
    pickup_datetime: str
    pickup_latitude: float
    pickup_longitude: float
    dropoff_latitude: float
    dropoff_longitude: float
    fare_amount: Decimal
    passenger_count: int

    @property
    def pickup(self):
        return (self.pickup_latitude, self.pickup_longitude)

    @property
    def dropoff(self):
        return (self.dropoff_latitude, self.dropoff_longitude)


@dataclass(frozen=True)
class EnrichmentResult:
    trip_id: int
    distance_km: float
    duration_min: float


@dataclass(frozen=True)
class CleanedTrip:
    trip: TripRecord
    distance_km: float
    duration_min: float

    @property
    def trip_id(self):
        return self.trip.trip_id

    @property
    def pickup_at(self) -> datetime:
        return parse_timestamp(self.trip.pickup_datetime)
