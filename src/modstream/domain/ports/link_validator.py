"""Port for checking that a resolved URL actually serves bytes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LinkValidatorPort(Protocol):
    """Validates that a final download URL is reachable.

    Implementations issue a bounded HEAD probe and never raise.
    """

    async def validate(self, url: str) -> bool:
        """Return True if the URL answered 2xx/206 within the deadline."""
        ...
