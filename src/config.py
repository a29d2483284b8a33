"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants (cache size, default TTL, upstream
URL, HTTP settings, log level) plus a logging setup helper used by the
server entrypoint.
"""

from __future__ import annotations

import logging
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Cache
CACHE_MAX_SIZE = _env_int("CACHE_MAX_SIZE", 256)
CACHE_DEFAULT_SECONDS = _env_int("CACHE_DEFAULT_SECONDS", 60)

# Upstream / HTTP
UPSTREAM_BASE_URL = os.environ.get("UPSTREAM_BASE_URL", "").strip()
HTTP_VERIFY = _env_bool("HTTP_VERIFY", False)
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 20.0)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure stdlib logging for the process.

    Unknown level names fall back to INFO.
    """
    numeric_level = getattr(logging, (level or "").upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
