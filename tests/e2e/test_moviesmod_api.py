"""E2E tests for the ``/api/moviesmod`` endpoint.

Two layers are exercised:

  1. HTTP contract (status codes, CORS, usage payload) against a
     stubbed use case, the same way the router is mounted in production.
  2. The full hop chain for a series request: create_app + lifespan with
     every outbound request answered by respx.  Real components:
     DomainCache, SiteSearchEngine, select_result, ContentPageExtractor,
     EpisodeIndexHost, HostOptionResolver, FinalOptionResolver and
     HttpReachabilityValidator.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from modstream.domain.entities import ResolvedStream, SearchResult, StreamResult
from modstream.infrastructure.config.schema import AppConfig
from modstream.interfaces.api.streams.router import router
from modstream.interfaces.app import create_app

pytestmark = pytest.mark.e2e

_ENDPOINT = "/api/moviesmod"


def _stream(quality: str) -> ResolvedStream:
    return ResolvedStream(
        name=f"MoviesMod Fast Server - {quality}",
        title="Inception (2010)",
        url=f"https://cdn.test/{quality}.mkv",
        quality=quality,
        size="2.1 GB",
        headers={"Referer": "https://driveseed.org/"},
        provider="moviesmod",
    )


def _make_app(use_case: AsyncMock) -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.state.get_streams_uc = use_case
    return app


# ---------------------------------------------------------------------------
# HTTP contract
# ---------------------------------------------------------------------------


class TestHttpContract:
    def test_missing_title_returns_usage(self) -> None:
        use_case = AsyncMock()
        client = TestClient(_make_app(use_case))

        resp = client.get(_ENDPOINT)

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Missing required parameter: title"
        assert body["usage"]["endpoint"] == _ENDPOINT
        assert len(body["usage"]["examples"]) == 3
        assert resp.headers["access-control-allow-origin"] == "*"
        use_case.execute.assert_not_called()

    def test_success_returns_streams(self) -> None:
        use_case = AsyncMock()
        use_case.execute.return_value = StreamResult(
            success=True,
            title="Inception (2010)",
            url="https://moviesmod.test/download-inception-2010/",
            streams=(_stream("1080p"), _stream("720p")),
        )
        client = TestClient(_make_app(use_case))

        resp = client.get(_ENDPOINT, params={"title": "Inception", "year": "2010"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["title"] == "Inception (2010)"
        assert [s["quality"] for s in body["streams"]] == ["1080p", "720p"]
        assert body["streams"][0]["headers"] == {"Referer": "https://driveseed.org/"}
        assert "searchResults" not in body

        (request,) = use_case.execute.call_args.args
        assert request.title == "Inception"
        assert request.year == "2010"

    def test_no_match_returns_404_with_search_results(self) -> None:
        use_case = AsyncMock()
        use_case.execute.return_value = StreamResult(
            success=False,
            error="No suitable match found",
            search_results=(SearchResult("Interstellar", "https://m.test/i"),),
        )
        client = TestClient(_make_app(use_case))

        resp = client.get(_ENDPOINT, params={"title": "Inception"})

        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "No suitable match found"
        assert body["streams"] == []
        assert body["searchResults"] == [
            {"title": "Interstellar", "url": "https://m.test/i"}
        ]

    def test_unexpected_error_returns_500(self) -> None:
        use_case = AsyncMock()
        use_case.execute.side_effect = RuntimeError("boom")
        client = TestClient(_make_app(use_case))

        resp = client.get(_ENDPOINT, params={"title": "Inception"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_preflight(self) -> None:
        client = TestClient(_make_app(AsyncMock()))

        resp = client.options(_ENDPOINT)

        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert resp.headers["access-control-allow-headers"] == "Content-Type"

    def test_healthz_before_startup(self, app_config: AppConfig) -> None:
        client = TestClient(create_app(app_config))

        resp = client.get("/healthz")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "domain": None}


# ---------------------------------------------------------------------------
# Full chain (series)
# ---------------------------------------------------------------------------

_BASE = "https://moviesmod.test"
_CONTENT_URL = f"{_BASE}/download-breaking-bad/"
_SEASON_1 = "https://episodes.modpro.blog/archives/s1"
_SEASON_2 = "https://episodes.modpro.blog/archives/s2"
_EPISODE_1 = "https://driveseed.org/file/bb-e1"
_EPISODE_2 = "https://driveseed.org/file/bb-e2"
_CDN_E1 = "https://cdn.test/Breaking.Bad.S01E01.1080p.mkv"

# Search pages shorter than the accepted minimum are retried elsewhere.
_FILLER = "<p>" + "lorem ipsum " * 120 + "</p>"

_SEARCH_HTML = f"""
<html><body>
<div class="latestPost">
  <a href="{_CONTENT_URL}" title="Breaking Bad (Season 1 - 5) 1080p">Breaking Bad</a>
</div>
<div class="latestPost">
  <a href="{_BASE}/download-better-call-saul/" title="Better Call Saul">BCS</a>
</div>
{_FILLER}
</body></html>
"""

_CONTENT_HTML = f"""
<html><body><div class="thecontent">
<h3>Season 1 1080p x264</h3>
<p><a href="{_SEASON_1}">Episode Links</a> <a href="{_SEASON_1}-batch">Batch Link</a></p>
<h3>Season 2 1080p x264</h3>
<p><a href="{_SEASON_2}">Episode Links</a></p>
<h3>Season 1 480p</h3>
<p><a href="https://episodes.modpro.blog/archives/s1-480">Episode Links</a></p>
</div></body></html>
"""

_EPISODES_HTML = f"""
<html><body>
<h3><a href="{_EPISODE_1}">Episode 1</a></h3>
<h3><a href="{_EPISODE_2}">Episode 2</a></h3>
</body></html>
"""

_LANDING_HTML = """
<html><body>
<ul class="list-group">
  <li class="list-group-item">Name : Breaking.Bad.S01E01.1080p.mkv</li>
  <li class="list-group-item">Size : 420 MB</li>
</ul>
<a href="/zfile/bb-e1">Resume Cloud</a>
</body></html>
"""

_RESUME_HTML = f'<a href="{_CDN_E1}">Cloud Resume Download</a>'


class TestSeriesChain:
    def test_single_episode_stream(self, app_config: AppConfig) -> None:
        with respx.mock(assert_all_called=False) as mock:
            mock.get(app_config.moviesmod.domain_source_url).respond(
                200, json={"moviesmod": _BASE}
            )
            mock.get(f"{_BASE}/search/Breaking%20Bad").respond(200, text=_SEARCH_HTML)
            mock.get(_CONTENT_URL).respond(200, text=_CONTENT_HTML)
            season_1 = mock.get(_SEASON_1).respond(200, text=_EPISODES_HTML)
            season_2 = mock.get(_SEASON_2).respond(200, text=_EPISODES_HTML)
            episode_1 = mock.get(_EPISODE_1).respond(200, text=_LANDING_HTML)
            episode_2 = mock.get(_EPISODE_2).respond(200, text=_LANDING_HTML)
            mock.get("https://driveseed.org/zfile/bb-e1").respond(
                200, text=_RESUME_HTML
            )
            probe = mock.head(_CDN_E1).respond(206)

            with TestClient(create_app(app_config)) as client:
                resp = client.get(
                    _ENDPOINT,
                    params={
                        "title": "Breaking Bad",
                        "type": "tv",
                        "season": "1",
                        "episode": "1",
                    },
                )
                health = client.get("/healthz").json()

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["url"] == _CONTENT_URL
        assert body["streams"] == [
            {
                "name": "MoviesMod Episode 1 - Season 1 1080p x264 - Episode Links",
                "title": "Breaking Bad (Season 1 - 5) 1080p S01E01",
                "url": _CDN_E1,
                "quality": "Season 1 1080p x264 - Episode Links",
                "size": "420 MB",
                "headers": {
                    "User-Agent": app_config.moviesmod.stream_user_agent,
                    "Referer": "https://driveseed.org/",
                },
                "provider": "moviesmod",
            }
        ]

        # Season 2 and the excluded 480p release are never unwrapped.
        assert season_1.call_count == 1
        assert season_2.call_count == 0
        # Episode 2 is filtered out before any landing page is fetched.
        assert episode_1.call_count == 1
        assert episode_2.call_count == 0
        assert probe.calls.last.request.headers["Range"] == "bytes=0-1"
        assert season_1.calls.last.request.headers["Referer"] == _CONTENT_URL
        assert health == {"status": "ok", "domain": _BASE}

    def test_nothing_found_returns_404(self, app_config: AppConfig) -> None:
        with respx.mock(assert_all_called=False) as mock:
            mock.get(app_config.moviesmod.domain_source_url).respond(
                200, json={"moviesmod": _BASE}
            )
            mock.get(f"{_BASE}/search/Nope").respond(200, text="<html></html>")
            mock.get(f"{_BASE}/?s=Nope").respond(200, text="<html></html>")

            with TestClient(create_app(app_config)) as client:
                resp = client.get(_ENDPOINT, params={"title": "Nope"})

        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "error": "No search results found",
            "streams": [],
        }
