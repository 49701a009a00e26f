# src/geo.py
"""
Coordinate predicates used by enrichment, cleaning and reports.

Coordinates are (latitude, longitude) pairs in decimal degrees.
"""

# JFK airport reference point
AIRPORT_LAT = 40.644537
AIRPORT_LON = -73.783260
AIRPORT_TOLERANCE_DEG = 0.01


def has_zero_coordinate(*points) -> bool:
    return any(value is None or float(value) == 0.0 for point in points for value in point)


def near_point(point, ref_lat: float, ref_lon: float, tolerance: float) -> bool:
    # Latitude and longitude are checked independently (a box, not a radius).
    lat, lon = point
    return abs(float(lat) - ref_lat) <= tolerance and abs(float(lon) - ref_lon) <= tolerance


def near_airport(point) -> bool:
    return near_point(point, AIRPORT_LAT, AIRPORT_LON, AIRPORT_TOLERANCE_DEG)
