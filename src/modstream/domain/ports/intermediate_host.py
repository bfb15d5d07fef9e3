"""Port for unwrapping one redirect layer on a known host family."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from modstream.domain.entities import IntermediateLink


@runtime_checkable
class IntermediateHostPort(Protocol):
    """Resolves a quality link on one host family to its next-hop links.

    Implementations handle family-specific page structure (content-area
    anchors, episode headers, base64 query parameters, ...).
    """

    @property
    def name(self) -> str:
        """Host family name (e.g. 'aggregator', 'episodes')."""
        ...

    def handles(self, hostname: str) -> bool:
        """Return True if *hostname* belongs to this host family."""
        ...

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        """Return the links revealed by *url*; empty on any failure."""
        ...
