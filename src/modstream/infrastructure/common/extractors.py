"""Quality-string primitives shared by extraction and ranking."""

from __future__ import annotations

import re

_QUALITY_RE = re.compile(r"(480p|720p|1080p|2160p|4k)", re.IGNORECASE)
_QUALITY_DETAIL_RE = re.compile(r"(480p|720p|1080p|2160p|4k)[^)]*\)", re.IGNORECASE)
_RESOLUTION_RE = re.compile(r"(\d{3,4})p", re.IGNORECASE)

UNKNOWN_QUALITY = "Unknown"


def extract_quality(text: str | None) -> str:
    """Extract a quality token from a header label.

    Tries a bare resolution token first, then the token with its
    trailing parenthetical detail.  Returns ``"Unknown"`` otherwise.
    """
    if not text:
        return UNKNOWN_QUALITY

    m = _QUALITY_RE.search(text)
    if m:
        return m.group(1)

    m = _QUALITY_DETAIL_RE.search(text)
    if m:
        return m.group(0)

    return UNKNOWN_QUALITY


def parse_quality_for_sort(quality: str | None) -> int:
    """Numeric resolution for ranking (``"1080p 10bit"`` -> 1080, else 0)."""
    if not quality:
        return 0
    m = _RESOLUTION_RE.search(quality)
    return int(m.group(1)) if m else 0


def tech_details(quality: str | None) -> list[str]:
    """Technical tags named in a quality label (10-bit, HEVC, HDR)."""
    if not quality:
        return []
    lower = quality.lower()
    details: list[str] = []
    if "10bit" in lower:
        details.append("10-bit")
    if "hevc" in lower or "x265" in lower:
        details.append("HEVC")
    if "hdr" in lower:
        details.append("HDR")
    return details


def names_quality(label: str, quality: str) -> bool:
    """True if *label* mentions *quality* (case-insensitive)."""
    return quality.lower() in label.lower()


def names_season(label: str, season: int) -> bool:
    """True if *label* textually references *season*.

    Accepts ``"season 2"``, ``"s2"`` and ``"s02"``.
    """
    pattern = rf"\bseason\s*0*{season}(?!\d)|\bs0*{season}(?!\d)"
    return re.search(pattern, label, re.IGNORECASE) is not None


def escape_regex(text: str) -> str:
    """Escape regex metacharacters so *text* matches literally."""
    return re.escape(text)
