"""CSS-selector-based HTML extraction with fallback chains.

Thin helpers over BeautifulSoup shared by every hop.  Extraction
functions accept a primary selector and optional *fallback_selectors*;
the first selector that yields at least one match wins, so a renamed
CSS class on one mirror only needs a new entry in the chain.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

T = TypeVar("T")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns results from the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def first_non_empty(
    soup: BeautifulSoup,
    strategies: Iterable[Callable[[BeautifulSoup], list[T] | None]],
) -> list[T]:
    """Apply *strategies* in order, returning the first non-empty result."""
    for strategy in strategies:
        results = strategy(soup)
        if results:
            return results
    return []


def attr(element: Tag, name: str, default: str = "") -> str:
    """Read an attribute as a stripped string (``default`` when absent)."""
    val = element.get(name)
    if isinstance(val, list):
        val = " ".join(val)
    return str(val).strip() if val else default


def text_of(element: Tag) -> str:
    """Visible text with internal whitespace collapsed."""
    return " ".join(element.get_text(" ", strip=True).split())


def find_anchor_by_text(root: BeautifulSoup | Tag, label: str) -> Tag | None:
    """Return the first ``<a>`` whose visible text contains *label*."""
    for anchor in root.find_all("a"):
        if label in anchor.get_text():
            return anchor
    return None


def anchor_href_by_text(root: BeautifulSoup | Tag, label: str) -> str | None:
    """href of the first anchor containing *label*, or None."""
    anchor = find_anchor_by_text(root, label)
    if anchor is None:
        return None
    return attr(anchor, "href") or None


def block_until(header: Tag, stop_tags: tuple[str, ...]) -> list[Tag]:
    """Return the element siblings after *header* up to the next stop tag."""
    block: list[Tag] = []
    for sibling in header.find_next_siblings():
        if sibling.name in stop_tags:
            break
        block.append(sibling)
    return block


def anchors_in(block: Iterable[Tag], selector: str = "a") -> list[Tag]:
    """All elements matching *selector* inside (or equal to) the block elements."""
    found: list[Tag] = []
    for element in block:
        if _matches(element, selector):
            found.append(element)
        found.extend(element.select(selector))
    return found


def _matches(element: Tag, selector: str) -> bool:
    return bool(element.css.match(selector))


def absolute(base_url: str, href: str) -> str:
    """Resolve *href* against *base_url* (no-op for absolute URLs)."""
    return urljoin(base_url, href)
