# src/routing.py
"""
Distance-matrix lookup client.

One GET per (origin, destination) pair:
    ?origins=<lat>,<lon>&destinations=<lat>,<lon>&key=<api key>

Expected response:
    {"rows": [{"elements": [{"status": "OK",
                             "distance": {"text": "5.2 km"},
                             "duration": {"text": "14 mins"}}]}]}
"""
import logging
import re

import requests

from errors import LookupFailed, MalformedResponse
from models import EnrichmentResult

logger = logging.getLogger(__name__)

KM_PER_UNIT = {
    "km": 1.0,
    "m": 0.001,
    "mi": 1.609344,
    "ft": 0.0003048,
}

MINUTES_PER_UNIT = {
    "day": 1440.0,
    "hour": 60.0,
    "min": 1.0,
    "sec": 1.0 / 60.0,
}

_DISTANCE_RE = re.compile(r"^\s*([\d,]*\.?\d+)\s*([a-zA-Z]+)\s*$")
_DURATION_RE = re.compile(r"([\d.]+)\s*(day|hour|min|sec)s?", re.IGNORECASE)


def parse_distance_km(text: str) -> float:
    """'1,500 m' -> 1.5, '5.2 km' -> 5.2"""
    match = _DISTANCE_RE.match(text or "")
    if not match:
        raise ValueError(f"unrecognized distance {text!r}")
    value, unit = match.groups()
    unit = unit.lower()
    if unit not in KM_PER_UNIT:
        raise ValueError(f"unknown distance unit {unit!r}")
    value = float(value.replace(",", ""))
    if unit == "m":
        return value / 1000
    return value * KM_PER_UNIT[unit]


def parse_duration_min(text: str) -> float:
    """'1 hour 5 mins' -> 65.0"""
    parts = _DURATION_RE.findall(text or "")
    if not parts:
        raise ValueError(f"unrecognized duration {text!r}")
    return sum(float(value) * MINUTES_PER_UNIT[unit.lower()] for value, unit in parts)


def _fixed(value: float) -> str:
    # Fixed-point only; the parsers do not accept exponent notation.
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_distance(distance_km: float) -> str:
    return f"{_fixed(distance_km)} km"


def format_duration(duration_min: float) -> str:
    return f"{_fixed(duration_min)} mins"


def build_http_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": "trip-enrichment/1.0"})
    return session


class DistanceMatrixClient:
    def __init__(self, api_key: str, base_url: str, timeout: float = 10.0, session=None):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or build_http_session()

    def lookup(self, trip_id, origin, destination) -> EnrichmentResult:
        """
        Issue exactly one request for the pair and return the normalized result.

        Raises LookupFailed on transport errors or any non-OK status and
        MalformedResponse when the payload does not have the expected shape.
        """
        params = {
            "origins": f"{origin[0]},{origin[1]}",
            "destinations": f"{destination[0]},{destination[1]}",
            "key": self.api_key,
        }
        logger.debug("Looking up trip %s", trip_id)
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise LookupFailed(trip_id, f"HTTP {status}" if status else type(e).__name__) from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise MalformedResponse(trip_id, "body is not JSON") from e

        return parse_response(trip_id, payload)


def parse_response(trip_id, payload) -> EnrichmentResult:
    if not isinstance(payload, dict):
        raise MalformedResponse(trip_id, "body is not an object")

    top_status = payload.get("status")
    if top_status is not None and top_status != "OK":
        raise LookupFailed(trip_id, top_status)

    try:
        element = payload["rows"][0]["elements"][0]
        status = element["status"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse(trip_id, f"missing {e}") from e

    if status != "OK":
        raise LookupFailed(trip_id, status)

    try:
        distance_km = parse_distance_km(element["distance"]["text"])
        duration_min = parse_duration_min(element["duration"]["text"])
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResponse(trip_id, str(e)) from e

    return EnrichmentResult(trip_id=trip_id, distance_km=distance_km, duration_min=duration_min)
