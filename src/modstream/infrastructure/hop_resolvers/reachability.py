"""Reachability probe for final download URLs."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from modstream.infrastructure.common.http import BROWSER_USER_AGENT

log = structlog.get_logger(__name__)

_PROBE_HEADERS = {"Range": "bytes=0-1", "User-Agent": BROWSER_USER_AGENT}


class HttpReachabilityValidator:
    """HEAD probe with a byte-range header and a hard deadline.

    Any 2xx (including 206 Partial Content) is valid; every other
    status, a timeout or a transport error is invalid.  Never raises.
    """

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._http = http_client
        self._timeout = timeout

    async def validate(self, url: str) -> bool:
        try:
            resp = await asyncio.wait_for(
                self._http.head(url, headers=_PROBE_HEADERS, follow_redirects=True),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            log.info("validation_timeout", url=url[:100], timeout=self._timeout)
            return False
        except httpx.HTTPError as exc:
            log.info("validation_error", url=url[:100], error=str(exc))
            return False

        valid = 200 <= resp.status_code < 300
        log.info(
            "validation_result",
            url=url[:100],
            status=resp.status_code,
            valid=valid,
        )
        return valid
