"""Per-option final resolvers: turn a DownloadOption into a candidate URL.

- resume / worker: the option page carries a "Cloud Resume Download"
  anchor with the file URL.
- instant: the option URL's ``url`` parameter is exchanged for the file
  URL through the host's ``/api`` endpoint; on any failure the option
  URL itself is the candidate.
- generic: the option URL is the candidate.

Candidates are not validated here.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import structlog

from modstream.domain.entities import DownloadOption, OptionType
from modstream.infrastructure.common.html_selectors import (
    anchor_href_by_text,
    parse_html,
)
from modstream.infrastructure.common.http import (
    BROWSER_USER_AGENT,
    fetch_text,
    safe_fetch,
)

log = structlog.get_logger(__name__)


class FinalOptionResolver:
    """Resolves one DownloadOption to a candidate download URL."""

    def __init__(self, http_client: httpx.AsyncClient, referer: str) -> None:
        self._http = http_client
        self._referer = referer

    async def resolve(self, option: DownloadOption) -> str | None:
        if option.type in (OptionType.RESUME, OptionType.WORKER):
            return await self.resolve_resume(option.url)
        if option.type is OptionType.INSTANT:
            url = await self.resolve_instant(option.url)
            if url is None:
                log.debug("instant_fallback_direct", url=option.url)
                return option.url
            return url
        return option.url

    async def resolve_resume(self, url: str) -> str | None:
        html = await fetch_text(
            self._http, url, hop="resume", headers={"Referer": self._referer}
        )
        if html is None:
            return None
        href = anchor_href_by_text(parse_html(html), "Cloud Resume Download")
        if href is None:
            log.warning("resume_link_missing", url=url)
        return href

    async def resolve_instant(self, url: str) -> str | None:
        parsed = urlparse(url)
        keys = parse_qs(parsed.query).get("url", [""])[0]
        if not keys:
            log.debug("instant_keys_missing", url=url)
            return None

        resp = await safe_fetch(
            self._http,
            f"{parsed.scheme}://{parsed.netloc}/api",
            hop="instant_api",
            method="POST",
            headers={
                "x-token": parsed.hostname or "",
                "User-Agent": BROWSER_USER_AGENT,
            },
            data={"keys": keys},
        )
        if resp is None:
            return None

        try:
            data = resp.json()
        except ValueError:
            log.warning("instant_api_invalid_json", url=url)
            return None

        file_url = data.get("url") if isinstance(data, dict) else None
        if not file_url or not isinstance(file_url, str):
            log.warning("instant_api_missing_url", url=url)
            return None
        return file_url
