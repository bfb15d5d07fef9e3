"""Port for the rotating base domain of the search site."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DomainProviderPort(Protocol):
    """Supplies the current base domain (e.g. ``https://example.site``)."""

    async def current(self) -> str:
        """Return the base domain, refreshing it first when stale."""
        ...
