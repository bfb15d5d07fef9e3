"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "modstream",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "validation_timeout_seconds": 10.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "moviesmod": {
        "fallback_domain": "https://moviesmod.chat",
        "domain_ttl_seconds": 4 * 60 * 60,
        "title_match_threshold": 0.3,
        "excluded_quality": "480p",
    },
}
