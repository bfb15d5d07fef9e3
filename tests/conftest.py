"""Shared test fixtures for the modstream test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from modstream.domain.entities import (
    DownloadOption,
    HostPage,
    IntermediateLink,
    OptionType,
    QualityLink,
    SearchResult,
    StreamRequest,
)
from modstream.infrastructure.config.schema import AppConfig, MoviesModConfig

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def movie_request() -> StreamRequest:
    return StreamRequest(title="Inception", year="2010")


@pytest.fixture()
def series_request() -> StreamRequest:
    return StreamRequest(title="Breaking Bad", media_type="tv", season=1, episode=1)


@pytest.fixture()
def inception_result() -> SearchResult:
    return SearchResult(
        title="Inception (2010)",
        url="https://moviesmod.test/download-inception-2010/",
    )


@pytest.fixture()
def landing_page() -> HostPage:
    """Landing page with a single resume option."""
    return HostPage(
        options=(
            DownloadOption(
                title="Resume Cloud",
                type=OptionType.RESUME,
                url="https://driveseed.org/zfile/abc",
                priority=1,
            ),
        ),
        size="2.1 GB",
        file_name="Inception.2010.1080p.mkv",
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def site_config() -> MoviesModConfig:
    return MoviesModConfig(fallback_domain="https://moviesmod.test")


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(
        environment="test",
        moviesmod={"fallback_domain": "https://moviesmod.test"},
    )


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_search_engine(inception_result: SearchResult) -> AsyncMock:
    engine = AsyncMock()
    engine.search.return_value = [inception_result]
    return engine


@pytest.fixture()
def mock_content_pages() -> AsyncMock:
    pages = AsyncMock()
    pages.extract.return_value = [
        QualityLink(quality="1080p", url="https://links.modpro.blog/archives/1"),
    ]
    return pages


@pytest.fixture()
def mock_unwrapper() -> AsyncMock:
    unwrapper = AsyncMock()
    unwrapper.resolve.return_value = [
        IntermediateLink(server="Fast Server", url="https://driveseed.org/file/abc"),
    ]
    return unwrapper


@pytest.fixture()
def mock_token_challenge() -> AsyncMock:
    challenge = AsyncMock()
    challenge.resolve.return_value = None
    return challenge


@pytest.fixture()
def mock_landing_pages(landing_page: HostPage) -> AsyncMock:
    pages = AsyncMock()
    pages.resolve.return_value = landing_page
    return pages


@pytest.fixture()
def mock_option_resolver() -> AsyncMock:
    resolver = AsyncMock()
    resolver.resolve.side_effect = lambda option: f"{option.url}/file.mkv"
    return resolver


@pytest.fixture()
def mock_validator() -> AsyncMock:
    validator = AsyncMock()
    validator.validate.return_value = True
    return validator


@pytest.fixture()
def select_fn() -> MagicMock:
    """Title selector that always picks the first result."""
    return MagicMock(side_effect=lambda title, results, **kw: results[0])
