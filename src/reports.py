# src/reports.py
"""
Read-only aggregations over cleaned trips.

Every function takes a sequence of CleanedTrip and returns a list of plain
dicts (JSON-ready), never modifying its input.
"""
from collections import Counter, defaultdict
from decimal import Decimal

from geo import near_airport

WEEKDAY = "Weekday"
WEEKEND = "Weekend"


def rides_by_hour(trips):
    counts = Counter(t.pickup_at.hour for t in trips)
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [{"hour": hour, "rides": rides} for hour, rides in ordered]


def day_type(ts):
    # Monday=0 ... Sunday=6
    return WEEKEND if ts.weekday() >= 5 else WEEKDAY


def weekday_vs_weekend_by_hour(trips):
    groups = Counter()
    totals = Counter()
    for t in trips:
        ts = t.pickup_at
        kind = day_type(ts)
        groups[(kind, ts.hour)] += 1
        totals[kind] += 1

    return [
        {
            "day_type": kind,
            "hour": hour,
            "rides": rides,
            "percentage": rides / totals[kind] * 100,
        }
        for (kind, hour), rides in sorted(groups.items())
    ]


def day_of_week(ts):
    """Sunday=1 ... Saturday=7"""
    return (ts.weekday() + 1) % 7 + 1


def is_airport_trip(trip):
    return near_airport(trip.trip.pickup) or near_airport(trip.trip.dropoff)


def airport_rides(trips):
    counts = Counter(day_of_week(t.pickup_at) for t in trips if is_airport_trip(t))
    return [{"day_of_week": day, "rides": counts[day]} for day in sorted(counts)]


def fare_by_passenger_count(trips):
    fares = defaultdict(list)
    for t in trips:
        fares[t.trip.passenger_count].append(Decimal(t.trip.fare_amount))

    return [
        {
            "passenger_count": pax,
            "rides": len(values),
            "average_fare": float(sum(values) / len(values)),
        }
        for pax, values in sorted(fares.items())
    ]


def trip_summary(trips):
    trips = list(trips)
    n = len(trips)
    if not n:
        return [{"rides": 0, "average_distance_km": 0.0, "average_duration_min": 0.0, "average_fare": 0.0}]
    return [
        {
            "rides": n,
            "average_distance_km": sum(t.distance_km for t in trips) / n,
            "average_duration_min": sum(t.duration_min for t in trips) / n,
            "average_fare": float(sum(Decimal(t.trip.fare_amount) for t in trips) / n),
        }
    ]


REPORTS = {
    "rides_by_hour": rides_by_hour,
    "weekday_vs_weekend_by_hour": weekday_vs_weekend_by_hour,
    "airport_rides": airport_rides,
    "fare_by_passenger_count": fare_by_passenger_count,
    "trip_summary": trip_summary,
}


def build_reports(trips):
    trips = list(trips)
    return {name: report(trips) for name, report in REPORTS.items()}
