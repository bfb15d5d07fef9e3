"""Tests for landing-page option enumeration."""

from __future__ import annotations

import httpx
import pytest
import respx

from modstream.domain.entities import DownloadOption, OptionType
from modstream.infrastructure.common.html_selectors import parse_html
from modstream.infrastructure.hop_resolvers.host_options import (
    HostOptionResolver,
    find_client_redirect,
    parse_download_options,
    parse_file_details,
)

_REFERER = "https://links.modpro.blog/"
_BOUNCE_URL = "https://driveseed.org/file/abc"
_PAGE_URL = "https://driveseed.org/file/abc/real"

_BOUNCE_HTML = '<script>window.location.replace("/file/abc/real")</script>'

# Discovery order differs from priority order on purpose.
_OPTIONS_HTML = """
<html><body>
<ul class="list-group">
  <li class="list-group-item">Name : Inception.2010.1080p.BluRay.mkv</li>
  <li class="list-group-item">Size : 2.1 GB</li>
</ul>
<a href="https://video-seed.test/?url=k3y">Instant Download</a>
<a href="/download/generic-1">Direct Links</a>
<a href="/zfile/resume">Resume Cloud</a>
<a href="/download/generic-1">Direct Links Again</a>
<a href="https://workerseed.test/w/1">Resume Worker Bot</a>
<a href="/download/">   </a>
</body></html>
"""


class TestParsers:
    def test_client_redirect(self) -> None:
        assert find_client_redirect(_BOUNCE_HTML) == "/file/abc/real"
        assert find_client_redirect("<html></html>") is None

    def test_file_details(self) -> None:
        size, name = parse_file_details(parse_html(_OPTIONS_HTML))
        assert size == "2.1 GB"
        assert name == "Inception.2010.1080p.BluRay.mkv"

    def test_file_details_absent(self) -> None:
        assert parse_file_details(parse_html("<html></html>")) == (None, None)

    def test_options_sorted_by_priority(self) -> None:
        options = parse_download_options(parse_html(_OPTIONS_HTML), _PAGE_URL)
        assert [o.priority for o in options] == [1, 2, 3, 4]
        assert options == [
            DownloadOption(
                title="Resume Cloud",
                type=OptionType.RESUME,
                url="https://driveseed.org/zfile/resume",
                priority=1,
            ),
            DownloadOption(
                title="Resume Worker Bot",
                type=OptionType.WORKER,
                url="https://workerseed.test/w/1",
                priority=2,
            ),
            DownloadOption(
                title="Instant Download",
                type=OptionType.INSTANT,
                url="https://video-seed.test/?url=k3y",
                priority=3,
            ),
            DownloadOption(
                title="Direct Links",
                type=OptionType.GENERIC,
                url="https://driveseed.org/download/generic-1",
                priority=4,
            ),
        ]

    def test_no_options(self) -> None:
        assert parse_download_options(parse_html("<a href='/x'>Home</a>"), _PAGE_URL) == []


class TestHostOptionResolver:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_follows_client_redirect(self) -> None:
        first = respx.get(_BOUNCE_URL).respond(200, text=_BOUNCE_HTML)
        second = respx.get(_PAGE_URL).respond(200, text=_OPTIONS_HTML)

        async with httpx.AsyncClient() as client:
            page = await HostOptionResolver(client, referer=_REFERER).resolve(
                _BOUNCE_URL
            )

        assert page.size == "2.1 GB"
        assert page.file_name == "Inception.2010.1080p.BluRay.mkv"
        assert [o.type for o in page.options] == [
            OptionType.RESUME,
            OptionType.WORKER,
            OptionType.INSTANT,
            OptionType.GENERIC,
        ]
        assert first.calls.last.request.headers["Referer"] == _REFERER
        assert second.calls.last.request.headers["Referer"] == _BOUNCE_URL

    @respx.mock
    @pytest.mark.asyncio()
    async def test_page_without_redirect_is_parsed_directly(self) -> None:
        respx.get(_PAGE_URL).respond(200, text=_OPTIONS_HTML)

        async with httpx.AsyncClient() as client:
            page = await HostOptionResolver(client, referer=_REFERER).resolve(
                _PAGE_URL
            )

        assert len(page.options) == 4

    @respx.mock
    @pytest.mark.asyncio()
    async def test_fetch_failure_yields_empty_page(self) -> None:
        respx.get(_BOUNCE_URL).respond(502)

        async with httpx.AsyncClient() as client:
            page = await HostOptionResolver(client, referer=_REFERER).resolve(
                _BOUNCE_URL
            )

        assert page.options == ()
        assert page.size is None
