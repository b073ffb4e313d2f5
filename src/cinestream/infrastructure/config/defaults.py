"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "cinestream",
    "environment": "dev",
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cinemaos": {
        "base_url": "https://cinemaos.tech",
        "timeout_seconds": 60.0,
    },
    "cinemeta": {
        "base_url": "https://v3-cinemeta.strem.io",
        "timeout_seconds": 10.0,
    },
}
