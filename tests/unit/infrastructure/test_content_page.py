"""Tests for QualityLink extraction from content pages."""

from __future__ import annotations

import httpx
import pytest
import respx

from modstream.domain.entities import QualityLink
from modstream.infrastructure.common.html_selectors import parse_html
from modstream.infrastructure.moviesmod.content_page import (
    ContentPageExtractor,
    extract_quality_links,
)

_MOVIE_HTML = """
<html><body><div class="thecontent">
  <h3>Movie Info</h3>
  <p>Plot summary <a href="https://imdb.test/">IMDb</a></p>
  <h4>Inception (2010) 480p [400MB]</h4>
  <p><a class="maxbutton-download-links" href="https://links.modpro.blog/a480">Download</a></p>
  <h4>Inception (2010) 1080p x264 [2.1GB]</h4>
  <p><a class="maxbutton-download-links" href="https://links.modpro.blog/a1080">Download</a></p>
  <p><a class="maxbutton-download-links" href="https://links.modpro.blog/second">Mirror</a></p>
  <h4>Screenshots</h4>
  <p><a class="maxbutton" href="https://img.test/1">Gallery</a></p>
  <h4>Inception (2010) 2160p HDR</h4>
  <p>No button yet</p>
</div></body></html>
"""

_SERIES_HTML = """
<html><body><div class="thecontent">
  <h3>Breaking Bad Season 1 720p [150MB/E]</h3>
  <p>
    <a href="https://episodes.modpro.blog/s1-720">Episode Links</a>
    <a href="https://links.modpro.blog/s1-720-batch">Batch/Zip Episode Links</a>
  </p>
  <h3>Breaking Bad Season 2 1080p</h3>
  <p><a href="https://episodes.modpro.blog/s2-1080">Episode Links</a></p>
  <h3>Cast</h3>
  <p><a href="https://episodes.modpro.blog/none">Episode Links</a></p>
</div></body></html>
"""


class TestExtractQualityLinks:
    def test_movie_headers(self) -> None:
        links = extract_quality_links(parse_html(_MOVIE_HTML))
        assert links == [
            QualityLink(quality="480p", url="https://links.modpro.blog/a480"),
            QualityLink(quality="1080p", url="https://links.modpro.blog/a1080"),
        ]

    def test_season_headers(self) -> None:
        links = extract_quality_links(parse_html(_SERIES_HTML))
        assert links == [
            QualityLink(
                quality="Breaking Bad Season 1 720p [150MB/E] - Episode Links",
                url="https://episodes.modpro.blog/s1-720",
            ),
            QualityLink(
                quality="Breaking Bad Season 2 1080p - Episode Links",
                url="https://episodes.modpro.blog/s2-1080",
            ),
        ]

    def test_missing_content_box(self) -> None:
        assert extract_quality_links(parse_html("<html><body></body></html>")) == []


class TestContentPageExtractor:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_fetch_and_extract(self) -> None:
        url = "https://moviesmod.test/download-inception-2010/"
        respx.get(url).respond(200, text=_MOVIE_HTML)

        async with httpx.AsyncClient() as client:
            links = await ContentPageExtractor(client).extract(url)

        assert [link.quality for link in links] == ["480p", "1080p"]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_http_error_yields_empty(self) -> None:
        url = "https://moviesmod.test/gone/"
        respx.get(url).respond(404)

        async with httpx.AsyncClient() as client:
            links = await ContentPageExtractor(client).extract(url)

        assert links == []
