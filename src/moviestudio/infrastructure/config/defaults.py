"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "moviestudio",
    "environment": "dev",
    "tmdb": {
        "api_key": None,
        "base_url": "https://api.themoviedb.org/3",
        "language": "en-US",
        "timeout_seconds": 15.0,
    },
    "http": {
        "retry_max_attempts": 2,
        "retry_backoff_base": 0.5,
        "user_agent": "MovieStudio/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "enabled": True,
        "dir": "./.cache/moviestudio/responses",
        "ttl_seconds": 1800,
    },
    "favorites": {
        "backend": "diskcache",
        "dir": "./.cache/moviestudio/favorites",
    },
    "browse": {
        "search_debounce_ms": 500,
        "watch_region": "US",
        "watch_region_fallback": True,
        "half_star_threshold": 0.25,
    },
}
