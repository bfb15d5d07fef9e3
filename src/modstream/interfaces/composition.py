"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import functools
from http.cookiejar import CookieJar, DefaultCookiePolicy
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from modstream.application.use_cases import GetStreamsUseCase
from modstream.infrastructure.config.schema import AppConfig
from modstream.infrastructure.hop_resolvers.final_options import FinalOptionResolver
from modstream.infrastructure.hop_resolvers.host_options import HostOptionResolver
from modstream.infrastructure.hop_resolvers.intermediate import (
    AggregatorHost,
    EpisodeIndexHost,
    IntermediateLinkResolver,
    LegacyRedirectHost,
)
from modstream.infrastructure.hop_resolvers.reachability import (
    HttpReachabilityValidator,
)
from modstream.infrastructure.hop_resolvers.token_challenge import (
    TokenChallengeResolver,
)
from modstream.infrastructure.moviesmod.content_page import ContentPageExtractor
from modstream.infrastructure.moviesmod.domain_cache import DomainCache
from modstream.infrastructure.moviesmod.search_engine import SiteSearchEngine
from modstream.infrastructure.moviesmod.title_matcher import select_result
from modstream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared client whose cookie jar never stores response cookies."""
    return httpx.AsyncClient(
        cookies=httpx.Cookies(
            CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        ),
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )


def build_intermediate_resolver(
    http_client: httpx.AsyncClient, config: AppConfig
) -> IntermediateLinkResolver:
    site = config.moviesmod
    return IntermediateLinkResolver(
        [
            AggregatorHost(http_client, site.aggregator_hosts, site.downstream_hosts),
            EpisodeIndexHost(http_client, site.episode_hosts),
            LegacyRedirectHost(
                http_client, site.legacy_redirect_hosts, site.downstream_hosts
            ),
        ]
    )


def build_use_case(state: AppState, config: AppConfig) -> GetStreamsUseCase:
    """Wire the resolution chain onto already-created shared resources."""
    site = config.moviesmod
    http = state.http_client
    return GetStreamsUseCase(
        search_engine=SiteSearchEngine(http, state.domain_cache, site),
        select_fn=functools.partial(
            select_result, threshold=site.title_match_threshold
        ),
        content_pages=ContentPageExtractor(http),
        unwrapper=state.intermediate_resolver,
        token_challenge=TokenChallengeResolver(http),
        landing_pages=HostOptionResolver(http, referer=site.landing_referer),
        option_resolver=FinalOptionResolver(http, referer=site.stream_referer),
        validator=HttpReachabilityValidator(
            http, timeout=config.validation_timeout_seconds
        ),
        config=site,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP Client (shared by every hop)
        2. Domain cache (uses HTTP client)
        3. Intermediate host families
        4. GetStreams use case (uses all of the above)
    """
    state = cast(AppState, app.state)
    config = state.config
    site = config.moviesmod

    # 1) HTTP client
    state.http_client = build_http_client(config)
    log.info(
        "http_client_initialized",
        timeout=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
    )

    # 2) Domain cache
    state.domain_cache = DomainCache(
        state.http_client,
        source_url=site.domain_source_url,
        fallback=site.fallback_domain,
        ttl_seconds=site.domain_ttl_seconds,
        key=site.domain_source_key,
    )
    log.info("domain_cache_initialized", fallback=site.fallback_domain)

    # 3) Intermediate host families
    state.intermediate_resolver = build_intermediate_resolver(
        state.http_client, config
    )
    log.info(
        "intermediate_hosts_registered",
        families=state.intermediate_resolver.families,
    )

    # 4) Use case
    state.get_streams_uc = build_use_case(state, config)

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
