"""Quality-link extraction from a selected content page.

The content box lists one structural header per release:

- ``<h3>`` headers naming a season (series): every "Episode Links"
  anchor in the block below becomes one QualityLink labeled
  ``"<header> - <anchor text>"``; batch links are skipped.
- ``<h4>`` subheaders (movies): the first download button in the block
  below, labeled with the quality token of the header.

A header's block is every sibling up to the next ``h3``/``h4``.
"""

from __future__ import annotations

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from modstream.domain.entities import QualityLink
from modstream.infrastructure.common.extractors import UNKNOWN_QUALITY, extract_quality
from modstream.infrastructure.common.html_selectors import (
    anchors_in,
    attr,
    block_until,
    parse_html,
    text_of,
)
from modstream.infrastructure.common.http import fetch_text

log = structlog.get_logger(__name__)

_CONTENT_BOX = ".thecontent"
_HEADER_TAGS = ("h3", "h4")
_MOVIE_BUTTON = "a.maxbutton-download-links, .maxbutton"


def _is_season_header(header: Tag) -> bool:
    return header.name == "h3" and "season" in text_of(header).lower()


def _season_links(header: Tag, block: list[Tag]) -> list[QualityLink]:
    header_text = text_of(header)
    links: list[QualityLink] = []
    for anchor in anchors_in(block, "a"):
        label = text_of(anchor)
        lower = label.lower()
        href = attr(anchor, "href")
        if "episode links" in lower and "batch" not in lower and href:
            links.append(QualityLink(quality=f"{header_text} - {label}", url=href))
    return links


def _movie_link(header: Tag, block: list[Tag]) -> QualityLink | None:
    buttons = anchors_in(block, _MOVIE_BUTTON)
    if not buttons:
        return None
    href = attr(buttons[0], "href")
    quality = extract_quality(text_of(header))
    if not href or quality == UNKNOWN_QUALITY:
        return None
    return QualityLink(quality=quality, url=href)


def extract_quality_links(soup: BeautifulSoup) -> list[QualityLink]:
    """Enumerate QualityLinks in document order of their headers."""
    box = soup.select_one(_CONTENT_BOX)
    if box is None:
        log.warning("content_box_missing", selector=_CONTENT_BOX)
        return []

    links: list[QualityLink] = []
    for header in box.find_all(_HEADER_TAGS):
        if header.name == "h3" and "Season" not in header.get_text():
            continue
        block = block_until(header, _HEADER_TAGS)
        if _is_season_header(header):
            links.extend(_season_links(header, block))
        elif header.name == "h4":
            link = _movie_link(header, block)
            if link is not None:
                links.append(link)
    return links


class ContentPageExtractor:
    """Fetches a content page and extracts its QualityLinks."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def extract(self, page_url: str) -> list[QualityLink]:
        html = await fetch_text(self._http, page_url, hop="content_page")
        if html is None:
            return []
        links = extract_quality_links(parse_html(html))
        log.info("content_links_extracted", url=page_url, count=len(links))
        return links
