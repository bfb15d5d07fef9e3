"""Landing-page resolver: enumerate prioritized download options.

The landing page usually bounces once through an inline
``window.location.replace("/path")`` script before the real page with
the file details and the download buttons is served.
"""

from __future__ import annotations

import re

import httpx
import structlog
from bs4 import BeautifulSoup

from modstream.domain.entities import (
    OPTION_PRIORITY,
    DownloadOption,
    HostPage,
    OptionType,
)
from modstream.infrastructure.common.html_selectors import (
    absolute,
    anchor_href_by_text,
    attr,
    parse_html,
    text_of,
)
from modstream.infrastructure.common.http import fetch_text

log = structlog.get_logger(__name__)

_REDIRECT_RE = re.compile(r'window\.location\.replace\("([^"]+)"\)')
_GENERIC_SELECTOR = 'a[href*="/download/"]'

# Visible button label -> option type
_NAMED_OPTIONS: tuple[tuple[str, OptionType], ...] = (
    ("Resume Cloud", OptionType.RESUME),
    ("Resume Worker Bot", OptionType.WORKER),
    ("Instant Download", OptionType.INSTANT),
)


def find_client_redirect(html: str) -> str | None:
    m = _REDIRECT_RE.search(html)
    return m.group(1) if m else None


def parse_file_details(soup: BeautifulSoup) -> tuple[str | None, str | None]:
    """Return ``(size, file_name)`` from the ``Size :``/``Name :`` list."""
    size: str | None = None
    file_name: str | None = None
    for item in soup.select("ul.list-group li"):
        text = item.get_text()
        if "Size :" in text:
            size = text.partition(":")[2].strip() or None
        elif "Name :" in text:
            file_name = text.partition(":")[2].strip() or None
    return size, file_name


def parse_download_options(soup: BeautifulSoup, page_url: str) -> list[DownloadOption]:
    """Collect named and generic download options, sorted by priority."""
    options: list[DownloadOption] = []

    for label, option_type in _NAMED_OPTIONS:
        href = anchor_href_by_text(soup, label)
        if href:
            options.append(
                DownloadOption(
                    title=label,
                    type=option_type,
                    url=absolute(page_url, href),
                    priority=OPTION_PRIORITY[option_type],
                )
            )

    seen = {o.url for o in options}
    for anchor in soup.select(_GENERIC_SELECTOR):
        href = attr(anchor, "href")
        title = text_of(anchor)
        if not href or not title:
            continue
        url = absolute(page_url, href)
        if url in seen:
            continue
        seen.add(url)
        options.append(
            DownloadOption(
                title=title,
                type=OptionType.GENERIC,
                url=url,
                priority=OPTION_PRIORITY[OptionType.GENERIC],
            )
        )

    return sorted(options, key=lambda o: o.priority)


class HostOptionResolver:
    """Fetches a landing page and returns its HostPage."""

    def __init__(self, http_client: httpx.AsyncClient, referer: str) -> None:
        self._http = http_client
        self._referer = referer

    async def resolve(self, url: str) -> HostPage:
        html = await fetch_text(
            self._http, url, hop="landing", headers={"Referer": self._referer}
        )
        if html is None:
            return HostPage()

        page_url = url
        redirect = find_client_redirect(html)
        if redirect:
            page_url = absolute(url, redirect)
            log.debug("landing_client_redirect", url=url, target=page_url)
            html = await fetch_text(
                self._http, page_url, hop="landing", headers={"Referer": url}
            )
            if html is None:
                return HostPage()

        soup = parse_html(html)
        size, file_name = parse_file_details(soup)
        options = parse_download_options(soup, page_url)
        if not options:
            log.warning("landing_no_options", url=page_url)
        else:
            log.info(
                "landing_options_found",
                url=page_url,
                options=[o.type.value for o in options],
                size=size,
            )
        return HostPage(options=tuple(options), size=size, file_name=file_name)
