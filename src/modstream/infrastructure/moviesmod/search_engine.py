"""Site search: URL-template fallback, then a selector-fallback chain.

Search pages are WordPress themes that drift between mirrors, so both
the URL shape and the result-card markup are tried in order:

1. ``/search/<query>`` then ``/?s=<query>``; the first body that is long
   enough and lacks the "no results" marker is accepted.
2. Result-card selectors (most site-specific first); the first selector
   with at least one match is used exclusively.
3. A generic anchor scan over content containers as a last resort.
"""

from __future__ import annotations

from collections.abc import Callable
from urllib.parse import quote

import httpx
import structlog
from bs4 import BeautifulSoup

from modstream.domain.entities import SearchResult
from modstream.domain.ports import DomainProviderPort
from modstream.infrastructure.common.html_selectors import (
    attr,
    first_non_empty,
    parse_html,
    text_of,
)
from modstream.infrastructure.common.http import fetch_text
from modstream.infrastructure.config.schema import MoviesModConfig

log = structlog.get_logger(__name__)

SearchStrategy = Callable[[BeautifulSoup], "list[SearchResult] | None"]


def search_urls(base_url: str, query: str) -> list[str]:
    """Candidate search URLs for *query*, in the order they are tried."""
    encoded = quote(query, safe="")
    return [f"{base_url}/search/{encoded}", f"{base_url}/?s={encoded}"]


def _append_unique(results: list[SearchResult], title: str, url: str) -> None:
    if title and url and all(r.url != url for r in results):
        results.append(SearchResult(title=title, url=url))


def card_strategy(selectors: list[str]) -> SearchStrategy:
    """Strategy reading one result per card of the first matching selector.

    Later selectors are not consulted once one matches, even if its
    cards yield no usable anchor.
    """

    def _extract(soup: BeautifulSoup) -> list[SearchResult] | None:
        cards = []
        for selector in selectors:
            cards = soup.select(selector)
            if cards:
                log.debug(
                    "search_selector_matched", selector=selector, count=len(cards)
                )
                break
        if not cards:
            return None
        results: list[SearchResult] = []
        for card in cards:
            anchor = card.find("a")
            if anchor is None:
                continue
            title = attr(anchor, "title") or text_of(anchor)
            _append_unique(results, title, attr(anchor, "href"))
        return results or None

    return _extract


def anchor_scan_strategy(
    selector: str,
    base_url: str,
    content_patterns: list[str],
) -> SearchStrategy:
    """Strategy scanning generic content anchors that look like content pages."""

    def _extract(soup: BeautifulSoup) -> list[SearchResult] | None:
        results: list[SearchResult] = []
        for anchor in soup.select(selector):
            href = attr(anchor, "href")
            title = attr(anchor, "title") or text_of(anchor)
            if not href or not title:
                continue
            is_content = any(p in href for p in content_patterns)
            if (
                base_url in href
                and (is_content or "page" not in href)
                and len(title) > 3
            ):
                _append_unique(results, title, href)
        return results or None

    return _extract


def build_strategies(config: MoviesModConfig, base_url: str) -> list[SearchStrategy]:
    """Ordered extraction chain for a search page on *base_url*."""
    return [
        card_strategy(config.search_selectors),
        anchor_scan_strategy(
            config.fallback_link_selector,
            base_url,
            config.content_path_patterns,
        ),
    ]


class SiteSearchEngine:
    """Queries the current base domain and extracts SearchResults.

    Never raises: any failure yields an empty list.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        domains: DomainProviderPort,
        config: MoviesModConfig,
    ) -> None:
        self._http = http_client
        self._domains = domains
        self._config = config

    async def search(self, query: str) -> list[SearchResult]:
        base_url = await self._domains.current()
        html = await self._fetch_search_page(base_url, query)
        if html is None:
            log.info("search_no_valid_page", query=query, base_url=base_url)
            return []

        soup = parse_html(html)
        results = first_non_empty(soup, build_strategies(self._config, base_url))
        log.info("search_completed", query=query, results=len(results))
        return results

    async def _fetch_search_page(self, base_url: str, query: str) -> str | None:
        """Return the first accepted body (or the last usable one)."""
        html = ""
        for url in search_urls(base_url, query):
            log.debug("search_trying_url", url=url)
            body = await fetch_text(self._http, url, hop="search")
            if body is None:
                continue
            html = body
            if (
                len(body) > self._config.min_valid_html_length
                and self._config.no_results_marker not in body
            ):
                log.debug("search_page_accepted", url=url, length=len(body))
                return body

        if len(html) < self._config.min_html_length:
            return None
        return html
