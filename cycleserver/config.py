import os


def _env_flag(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

database_url = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
"""The tortoise database url."""

api_root = "/api/v1"
"""The base url for the api."""

port = int(os.getenv("PORT", "8080"))
"""The port to serve on."""

strict_parking = _env_flag("STRICT_PARKING")
"""
When set, a cycle whose status is PARKED may not be parked again even
if it is not docked in any unit.
"""

broadcast_timeout = float(os.getenv("BROADCAST_TIMEOUT", "5"))
"""How long (in seconds) a single observer send may take before it is dropped."""

sentry_dsn = os.getenv("SENTRY_DSN", None)
"""The sentry DSN, error tracking is disabled if missing."""
