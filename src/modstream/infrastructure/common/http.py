"""Guarded HTTP fetch shared by every hop.

Every hop in the resolution chain treats a transport failure exactly
like a parse miss: log it and yield nothing.  ``safe_fetch`` is the
single place where httpx errors are caught.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}


async def safe_fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    hop: str,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    data: dict[str, str] | None = None,
    **kwargs: Any,
) -> httpx.Response | None:
    """Fetch *url* and return the response, or ``None`` on any failure.

    Non-2xx statuses count as failures.  *hop* prefixes the structured
    log events (e.g. ``"search"`` -> ``"search_http_error"``).
    """
    try:
        resp = await client.request(
            method,
            url,
            headers=headers,
            data=data,
            follow_redirects=True,
            **kwargs,
        )
        resp.raise_for_status()
        return resp
    except httpx.TimeoutException:
        log.warning(f"{hop}_timeout", url=url)
    except httpx.HTTPStatusError as exc:
        log.warning(
            f"{hop}_http_error",
            url=url,
            status=exc.response.status_code,
        )
    except httpx.HTTPError as exc:
        log.warning(f"{hop}_fetch_error", url=url, error=str(exc))
    return None


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    hop: str,
    **kwargs: Any,
) -> str | None:
    """Like :func:`safe_fetch` but return the body text."""
    resp = await safe_fetch(client, url, hop=hop, **kwargs)
    return resp.text if resp is not None else None
