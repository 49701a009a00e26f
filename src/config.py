# src/config.py
"""
Runtime settings, read from the environment.

Database:
  TRIPS_DB_DSN                     full libpq connection string, or
  TRIPS_DB_HOST / TRIPS_DB_PORT / TRIPS_DB_USER / TRIPS_DB_PASSWORD / TRIPS_DB_NAME

Routing service:
  ROUTING_API_KEY        (required for enrichment)
  ROUTING_BASE_URL       (default: Google Distance Matrix JSON endpoint)
  ROUTING_DELAY_SECONDS  (default 1.0)
  ROUTING_TIMEOUT_SECONDS (default 10)
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from psycopg2.extensions import make_dsn

from errors import ConfigurationError

DEFAULT_ROUTING_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
DEFAULT_DB_PORT = 5432
DEFAULT_DELAY_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    db_dsn: str
    routing_api_key: Optional[str] = None
    routing_base_url: str = DEFAULT_ROUTING_URL
    routing_delay_seconds: float = DEFAULT_DELAY_SECONDS
    routing_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, require_api_key: bool = True) -> "Settings":
        env = os.environ if env is None else env

        api_key = env.get("ROUTING_API_KEY") or None
        if require_api_key and not api_key:
            raise ConfigurationError("ROUTING_API_KEY is not set")

        return cls(
            db_dsn=_db_dsn(env),
            routing_api_key=api_key,
            routing_base_url=env.get("ROUTING_BASE_URL") or DEFAULT_ROUTING_URL,
            routing_delay_seconds=_non_negative_float(env, "ROUTING_DELAY_SECONDS", DEFAULT_DELAY_SECONDS),
            routing_timeout_seconds=_non_negative_float(env, "ROUTING_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        )


def _db_dsn(env: Mapping[str, str]) -> str:
    dsn = env.get("TRIPS_DB_DSN")
    if dsn:
        return dsn

    missing = [k for k in ("TRIPS_DB_HOST", "TRIPS_DB_USER", "TRIPS_DB_PASSWORD", "TRIPS_DB_NAME") if not env.get(k)]
    if missing:
        raise ConfigurationError(f"Missing database settings: {', '.join(missing)} (or set TRIPS_DB_DSN)")

    port = env.get("TRIPS_DB_PORT") or str(DEFAULT_DB_PORT)
    if not port.isdigit():
        raise ConfigurationError(f"TRIPS_DB_PORT must be an integer, got {port!r}")

    return make_dsn(
        host=env["TRIPS_DB_HOST"],
        port=port,
        user=env["TRIPS_DB_USER"],
        password=env["TRIPS_DB_PASSWORD"],
        dbname=env["TRIPS_DB_NAME"],
    )


def _non_negative_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigurationError(f"{key} must be >= 0, got {value}")
    return value
