"""Cached base domain of the search site, refreshed from a remote JSON file.

The site rotates domains; a community-maintained JSON document names
the current one.  The value is cached for a staleness window and the
previous value (or the fallback) survives any refresh failure.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from modstream.infrastructure.common.http import safe_fetch

log = structlog.get_logger(__name__)

Clock = Callable[[], float]


class DomainCache:
    """Base domain with a last-fetch timestamp and lazy refresh.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        source_url: Remote JSON document naming the domain.
        fallback: Domain used until the first successful refresh.
        ttl_seconds: Staleness window.
        key: JSON field holding the domain.
        clock: Wall-clock source in seconds (injected for tests).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        source_url: str,
        fallback: str,
        ttl_seconds: float = 4 * 60 * 60,
        key: str = "moviesmod",
        clock: Clock = time.time,
    ) -> None:
        self._http = http_client
        self._source_url = source_url
        self._ttl = ttl_seconds
        self._key = key
        self._clock = clock
        self.value = fallback
        self.fetched_at: float | None = None

    def is_stale(self, now: float) -> bool:
        if self.fetched_at is None:
            return True
        return now - self.fetched_at >= self._ttl

    def get(self, now: float) -> str:
        """Return the cached domain (stale or not) without any I/O."""
        if self.is_stale(now):
            log.debug("domain_cache_stale", domain=self.value)
        return self.value

    async def refresh(self, now: float) -> str:
        """Fetch the domain document; keep the old value on any failure."""
        log.debug("domain_refresh_started", source=self._source_url)
        resp = await safe_fetch(self._http, self._source_url, hop="domain_refresh")
        if resp is None:
            return self.value

        try:
            data = resp.json()
        except ValueError:
            log.warning("domain_refresh_invalid_json", source=self._source_url)
            return self.value

        domain = data.get(self._key) if isinstance(data, dict) else None
        if not domain or not isinstance(domain, str):
            log.warning("domain_refresh_missing_key", key=self._key)
            return self.value

        self.value = domain.rstrip("/")
        self.fetched_at = now
        log.info("domain_updated", domain=self.value)
        return self.value

    async def current(self) -> str:
        """Return the domain, refreshing first when the window expired."""
        now = self._clock()
        if self.is_stale(now):
            return await self.refresh(now)
        return self.get(now)
