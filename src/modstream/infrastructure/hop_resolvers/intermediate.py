"""Intermediate hop: unwrap one redirect layer, dispatched by hostname.

Three host families exist, each with its own page structure:

- ``AggregatorHost``: content-area anchors pointing at downstream hosts.
- ``EpisodeIndexHost``: one ``<h3>Episode N</h3>`` header per episode.
- ``LegacyRedirectHost``: base64 target in the ``url`` query parameter,
  whose page hides the links in a timed-content container.

``UnknownHost`` closes the set: it handles every hostname and yields
nothing.  ``IntermediateLinkResolver`` picks the first family whose
``handles()`` accepts the hostname.
"""

from __future__ import annotations

import base64
import re
from urllib.parse import parse_qs, urlparse

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from modstream.domain.entities import IntermediateLink
from modstream.domain.ports import IntermediateHostPort
from modstream.infrastructure.common.html_selectors import (
    attr,
    parse_html,
    select_items,
    text_of,
)
from modstream.infrastructure.common.http import BROWSER_USER_AGENT, fetch_text

log = structlog.get_logger(__name__)

_EPISODE_RE = re.compile(r"Episode\s+(\d+)", re.IGNORECASE)
_TIMED_CONTENT = ".timed-content-client_show_0_5_0 a"
_BUTTON_LIKE = 'button, .download-btn, .btn, [class*="download"], [class*="btn"]'


def _hostname(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def _points_at(href: str, hosts: list[str]) -> bool:
    return any(host in href for host in hosts)


def _hrefs_selector(scope: str, hosts: list[str]) -> str:
    prefix = f"{scope} " if scope else ""
    return ", ".join(f'{prefix}a[href*="{host}"]' for host in hosts)


class _HostFamily:
    """Shared plumbing for host families matched by hostname substring."""

    name: str = ""

    def __init__(self, http_client: httpx.AsyncClient, hosts: list[str]) -> None:
        self._http = http_client
        self._hosts = hosts

    def handles(self, hostname: str) -> bool:
        return any(host in hostname for host in self._hosts)

    async def _fetch_soup(
        self, url: str, headers: dict[str, str]
    ) -> BeautifulSoup | None:
        html = await fetch_text(self._http, url, hop=self.name, headers=headers)
        return parse_html(html) if html is not None else None


class AggregatorHost(_HostFamily):
    """Redirect-aggregator pages listing downstream host buttons."""

    name = "aggregator"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        hosts: list[str],
        downstream_hosts: list[str],
    ) -> None:
        super().__init__(http_client, hosts)
        self._downstream = downstream_hosts

    def _collect(self, soup: BeautifulSoup, scope: str) -> list[IntermediateLink]:
        links: list[IntermediateLink] = []
        for anchor in soup.select(_hrefs_selector(scope, self._downstream)):
            href = attr(anchor, "href")
            label = text_of(anchor)
            if href and label and "batch" not in label.lower():
                links.append(IntermediateLink(server=label, url=href))
        return links

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        soup = await self._fetch_soup(url, {"Referer": referer})
        if soup is None:
            return []
        links = self._collect(soup, ".entry-content") or self._collect(soup, "")
        log.info("aggregator_links_found", url=url, count=len(links))
        return links


class EpisodeIndexHost(_HostFamily):
    """Episode index pages: the link sits inside each episode header."""

    name = "episodes"

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        soup = await self._fetch_soup(url, {"Referer": referer})
        if soup is None:
            return []

        links: list[IntermediateLink] = []
        for header in soup.find_all("h3"):
            m = _EPISODE_RE.search(text_of(header))
            if not m:
                continue
            anchor = header.find("a")
            href = attr(anchor, "href") if anchor is not None else ""
            if href:
                links.append(IntermediateLink(server=f"Episode {m.group(1)}", url=href))

        log.info("episode_links_found", url=url, count=len(links))
        return links


def decode_redirect_target(url: str) -> str | None:
    """Decode the base64 target carried in the ``url`` query parameter."""
    encoded = parse_qs(urlparse(url).query).get("url", [""])[0]
    if not encoded:
        return None
    try:
        padded = encoded + "=" * (-len(encoded) % 4)
        return base64.b64decode(padded).decode("utf-8")
    except ValueError:
        log.warning("legacy_redirect_undecodable", url=url)
        return None


class LegacyRedirectHost(_HostFamily):
    """Legacy redirector wrapping the real page URL in base64."""

    name = "legacy_redirect"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        hosts: list[str],
        downstream_hosts: list[str],
    ) -> None:
        super().__init__(http_client, hosts)
        self._downstream = downstream_hosts

    def _timed_content(self, soup: BeautifulSoup) -> list[IntermediateLink]:
        return [
            IntermediateLink(server=text_of(a), url=attr(a, "href"))
            for a in soup.select(_TIMED_CONTENT)
            if attr(a, "href")
        ]

    def _any_anchor(self, soup: BeautifulSoup) -> list[IntermediateLink]:
        return [
            IntermediateLink(server=text_of(a) or "Download Link", url=attr(a, "href"))
            for a in soup.find_all("a")
            if _points_at(attr(a, "href"), self._downstream)
        ]

    def _button_like(self, soup: BeautifulSoup) -> list[IntermediateLink]:
        links: list[IntermediateLink] = []
        for element in select_items(soup, _BUTTON_LIKE):
            href = self._element_target(element)
            if _points_at(href, self._downstream):
                links.append(
                    IntermediateLink(
                        server=text_of(element) or "Alternative Download", url=href
                    )
                )
        return links

    @staticmethod
    def _element_target(element: Tag) -> str:
        href = attr(element, "href") or attr(element, "data-href")
        if not href:
            inner = element.find("a")
            href = attr(inner, "href") if inner is not None else ""
        return href

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        target = decode_redirect_target(url)
        if target is None:
            log.warning("legacy_redirect_missing_target", url=url)
            return []
        log.debug("legacy_redirect_decoded", target=target)

        soup = await self._fetch_soup(
            target, {"User-Agent": BROWSER_USER_AGENT, "Referer": referer}
        )
        if soup is None:
            return []

        for strategy in (self._timed_content, self._any_anchor, self._button_like):
            links = strategy(soup)
            if links:
                log.info(
                    "legacy_redirect_links_found",
                    strategy=strategy.__name__.lstrip("_"),
                    count=len(links),
                )
                return links
        log.info("legacy_redirect_no_links", target=target)
        return []


class UnknownHost:
    """Catch-all family: any hostname, no links."""

    name = "unknown"

    def handles(self, hostname: str) -> bool:
        return True

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        log.info("intermediate_unknown_host", host=_hostname(url))
        return []


class IntermediateLinkResolver:
    """Dispatches a quality link to its host family.

    The unknown-host family is always consulted last.  Never raises.
    """

    def __init__(self, families: list[IntermediateHostPort]) -> None:
        self._families: list[IntermediateHostPort] = [*families, UnknownHost()]

    @property
    def families(self) -> list[str]:
        return [f.name for f in self._families]

    def family_for(self, url: str) -> IntermediateHostPort:
        hostname = _hostname(url)
        return next(f for f in self._families if f.handles(hostname))

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]:
        family = self.family_for(url)
        log.debug("intermediate_dispatch", family=family.name, url=url)
        try:
            return await family.resolve(url, referer)
        except Exception:
            log.exception("intermediate_resolve_error", family=family.name, url=url)
            return []
