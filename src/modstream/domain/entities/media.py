"""Domain entities for the link resolution pipeline.

Pure value objects with no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

MediaType = Literal["movie", "tv"]


class OptionType(str, Enum):
    """Kind of download button found on a landing page."""

    RESUME = "resume"
    WORKER = "worker"
    INSTANT = "instant"
    GENERIC = "generic"


# Consumption order of landing-page options (lower = tried first).
OPTION_PRIORITY: dict[OptionType, int] = {
    OptionType.RESUME: 1,
    OptionType.WORKER: 2,
    OptionType.INSTANT: 3,
    OptionType.GENERIC: 4,
}


@dataclass(frozen=True)
class SearchResult:
    """One entry of the site's search result page."""

    title: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class QualityLink:
    """A labeled download entry point on a content page.

    ``quality`` is free text, e.g. ``"1080p"`` for movies or
    ``"Season 2 - Episode Links"`` for series.
    """

    quality: str
    url: str


@dataclass(frozen=True)
class IntermediateLink:
    """A link revealed by unwrapping one redirect layer."""

    server: str  # "Episode 3", "Fast Server", ...
    url: str


@dataclass(frozen=True)
class DownloadOption:
    """A named download button on a landing page."""

    title: str
    type: OptionType
    url: str
    priority: int


@dataclass(frozen=True)
class HostPage:
    """Parsed landing page: prioritized options plus file metadata."""

    options: tuple[DownloadOption, ...] = ()
    size: str | None = None
    file_name: str | None = None


@dataclass(frozen=True)
class ResolvedStream:
    """A validated, directly playable stream returned to the caller."""

    name: str
    title: str
    url: str
    quality: str
    size: str
    headers: dict[str, str] = field(default_factory=dict)  # Required to fetch url
    provider: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "url": self.url,
            "quality": self.quality,
            "size": self.size,
            "headers": dict(self.headers),
            "provider": self.provider,
        }


@dataclass(frozen=True)
class StreamRequest:
    """Parsed title request.

    ``media_type`` is normalised to ``"movie"`` or ``"tv"``
    (``"series"`` is accepted as an alias at the boundary).
    """

    title: str
    media_type: MediaType = "movie"
    season: int | None = None
    episode: int | None = None
    year: str | None = None

    @property
    def is_series(self) -> bool:
        return self.media_type == "tv"


@dataclass(frozen=True)
class StreamResult:
    """Aggregate outcome of one title request."""

    success: bool
    streams: tuple[ResolvedStream, ...] = ()
    title: str | None = None
    url: str | None = None
    error: str | None = None
    search_results: tuple[SearchResult, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON response shape (camelCase keys)."""
        data: dict[str, Any] = {"success": self.success}
        if self.title is not None:
            data["title"] = self.title
        if self.url is not None:
            data["url"] = self.url
        if self.error is not None:
            data["error"] = self.error
        data["streams"] = [s.to_dict() for s in self.streams]
        if self.search_results is not None:
            data["searchResults"] = [r.to_dict() for r in self.search_results]
        return data
