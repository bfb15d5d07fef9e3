"""Common infrastructure utilities."""

from __future__ import annotations

from .extractors import (
    escape_regex,
    extract_quality,
    names_quality,
    names_season,
    parse_quality_for_sort,
    tech_details,
)
from .http import fetch_text, safe_fetch

__all__ = [
    "escape_regex",
    "extract_quality",
    "fetch_text",
    "names_quality",
    "names_season",
    "parse_quality_for_sort",
    "safe_fetch",
    "tech_details",
]
