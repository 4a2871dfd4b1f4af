"""Environment-driven settings."""

import os
from datetime import timedelta
from pathlib import Path

DEFAULT_DB_PATH = str(Path("instance") / "drinks.db")
DEFAULT_CACHE_HOURS = 24.0
DEFAULT_TIMEOUT_SECONDS = 10.0


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def db_path() -> str:
    return os.environ.get("DRINK_DB_PATH", DEFAULT_DB_PATH)


def catalog_url() -> str:
    """Remote catalog deployment URL; empty disables the remote source."""
    return os.environ.get("CATALOG_URL", "").strip()


def catalog_cache_ttl() -> timedelta:
    return timedelta(hours=max(0.0, _env_float("CATALOG_CACHE_HOURS", DEFAULT_CACHE_HOURS)))


def catalog_timeout_seconds() -> float:
    return max(1.0, _env_float("CATALOG_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO")
