"""Resolve a title request into ranked, validated streams."""

from __future__ import annotations

import asyncio
import re
from typing import Protocol

import structlog

from modstream.application.first_success import first_success
from modstream.domain.entities import (
    DownloadOption,
    HostPage,
    IntermediateLink,
    QualityLink,
    ResolvedStream,
    SearchResult,
    StreamRequest,
    StreamResult,
)
from modstream.domain.ports import (
    ContentPagePort,
    GatedHostPort,
    LandingPagePort,
    LinkUnwrapperPort,
    LinkValidatorPort,
    OptionResolverPort,
    SearchEnginePort,
)
from modstream.infrastructure.common.extractors import (
    names_quality,
    names_season,
    parse_quality_for_sort,
    tech_details,
)

log = structlog.get_logger(__name__)

_EPISODE_RE = re.compile(r"Episode\s+(\d+)", re.IGNORECASE)

NO_SEARCH_RESULTS = "No search results found"
NO_MATCH = "No suitable match found"
NO_DOWNLOAD_LINKS = "No download links found"
NO_RELEVANT_LINKS = "No relevant quality links found"


# ---------------------------------------------------------------------------
# Collaborator protocols
# Infrastructure components satisfy these via structural subtyping.
# ---------------------------------------------------------------------------


class _ResolutionConfig(Protocol):
    """Configuration values consumed by GetStreamsUseCase."""

    max_failure_search_results: int
    excluded_quality: str
    gated_hosts: list[str]
    landing_hosts: list[str]
    provider_name: str
    provider_label: str
    stream_referer: str
    stream_user_agent: str


class _TitleSelectFn(Protocol):
    def __call__(
        self,
        title: str,
        results: list[SearchResult],
        *,
        is_series: bool = ...,
        year: str | None = ...,
    ) -> SearchResult | None: ...


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def filter_quality_links(
    links: list[QualityLink],
    request: StreamRequest,
    excluded_quality: str,
) -> list[QualityLink]:
    """Keep the requested season (series) and drop the excluded quality."""
    relevant = links
    if request.is_series and request.season is not None:
        relevant = [
            link for link in relevant if names_season(link.quality, request.season)
        ]
    return [
        link for link in relevant if not names_quality(link.quality, excluded_quality)
    ]


def episode_matches(server: str, episode: int | None) -> bool:
    """False only for a label naming a different episode than requested."""
    if episode is None or "episode" not in server.lower():
        return True
    m = _EPISODE_RE.search(server)
    return m is None or int(m.group(1)) == episode


def sort_by_quality(streams: list[ResolvedStream]) -> list[ResolvedStream]:
    """Highest resolution first; unparseable qualities rank as 0."""
    return sorted(streams, key=lambda s: parse_quality_for_sort(s.quality), reverse=True)


def media_title(selected: SearchResult, request: StreamRequest) -> str:
    if request.is_series and request.season and request.episode:
        return f"{selected.title} S{request.season:02d}E{request.episode:02d}"
    return selected.title


class GetStreamsUseCase:
    """Resolve a title request through the whole hop chain.

    Flow:
        1. Search the site and select the matching result.
        2. Extract QualityLinks; keep the requested season, drop 480p.
        3. One concurrent branch per QualityLink:
           unwrap -> (token challenge) -> landing page -> first option
           that resolves and validates.
        4. Rank the resolved streams by numeric quality.

    A branch failure never fails the request; only an empty stage
    before the fan-out yields an unsuccessful result.
    """

    def __init__(
        self,
        *,
        search_engine: SearchEnginePort,
        select_fn: _TitleSelectFn,
        content_pages: ContentPagePort,
        unwrapper: LinkUnwrapperPort,
        token_challenge: GatedHostPort,
        landing_pages: LandingPagePort,
        option_resolver: OptionResolverPort,
        validator: LinkValidatorPort,
        config: _ResolutionConfig,
    ) -> None:
        self._search_engine = search_engine
        self._select_fn = select_fn
        self._content_pages = content_pages
        self._unwrapper = unwrapper
        self._token_challenge = token_challenge
        self._landing_pages = landing_pages
        self._option_resolver = option_resolver
        self._validator = validator
        self._config = config

    async def execute(self, request: StreamRequest) -> StreamResult:
        log.info(
            "get_streams_started",
            title=request.title,
            media_type=request.media_type,
            season=request.season,
            episode=request.episode,
            year=request.year,
        )

        results = await self._search_engine.search(request.title)
        if not results:
            log.info("get_streams_no_search_results", title=request.title)
            return StreamResult(success=False, error=NO_SEARCH_RESULTS)

        selected = self._select_fn(
            request.title,
            results,
            is_series=request.is_series,
            year=request.year,
        )
        if selected is None:
            log.info("get_streams_no_match", title=request.title, year=request.year)
            limit = self._config.max_failure_search_results
            return StreamResult(
                success=False,
                error=NO_MATCH,
                search_results=tuple(results[:limit]),
            )
        log.info("get_streams_selected", title=selected.title, url=selected.url)

        links = await self._content_pages.extract(selected.url)
        if not links:
            return StreamResult(success=False, error=NO_DOWNLOAD_LINKS)

        relevant = filter_quality_links(links, request, self._config.excluded_quality)
        log.info(
            "get_streams_links_filtered",
            total=len(links),
            relevant=len(relevant),
        )
        if not relevant:
            return StreamResult(success=False, error=NO_RELEVANT_LINKS)

        branches = await asyncio.gather(
            *(self._guarded_branch(link, selected, request) for link in relevant)
        )
        streams = sort_by_quality([s for s in branches if s is not None])

        log.info(
            "get_streams_completed",
            title=selected.title,
            branches=len(relevant),
            streams=len(streams),
        )
        return StreamResult(
            success=True,
            title=selected.title,
            url=selected.url,
            streams=tuple(streams),
        )

    async def _guarded_branch(
        self,
        link: QualityLink,
        selected: SearchResult,
        request: StreamRequest,
    ) -> ResolvedStream | None:
        try:
            return await self._resolve_branch(link, selected, request)
        except Exception:
            log.exception("branch_failed", quality=link.quality, url=link.url)
            return None

    async def _resolve_branch(
        self,
        link: QualityLink,
        selected: SearchResult,
        request: StreamRequest,
    ) -> ResolvedStream | None:
        candidates = await self._unwrapper.resolve(link.url, selected.url)
        if not candidates:
            log.info("branch_no_intermediate_links", quality=link.quality)
            return None

        wanted: list[IntermediateLink] = []
        for candidate in candidates:
            if episode_matches(candidate.server, request.episode):
                wanted.append(candidate)
            else:
                log.debug(
                    "branch_episode_skipped",
                    server=candidate.server,
                    episode=request.episode,
                )

        hit = await first_success(wanted, self._resolve_candidate)
        if hit is None:
            log.info("branch_unresolved", quality=link.quality)
            return None

        candidate, (url, page) = hit
        stream = self._build_stream(link, candidate, url, page, selected, request)
        log.info(
            "branch_resolved",
            quality=link.quality,
            server=candidate.server,
            size=stream.size,
            tech=tech_details(link.quality),
        )
        return stream

    async def _resolve_candidate(
        self, candidate: IntermediateLink
    ) -> tuple[str, HostPage] | None:
        url: str | None = candidate.url
        if any(host in candidate.url for host in self._config.gated_hosts):
            url = await self._token_challenge.resolve(candidate.url)
            if url is None:
                return None

        if not any(host in url for host in self._config.landing_hosts):
            log.debug("candidate_not_landing_host", url=url)
            return None

        page = await self._landing_pages.resolve(url)
        if not page.options:
            return None

        hit = await first_success(page.options, self._resolve_option)
        if hit is None:
            return None
        _, final_url = hit
        return final_url, page

    async def _resolve_option(self, option: DownloadOption) -> str | None:
        log.debug("option_trying", title=option.title, type=option.type.value)
        url = await self._option_resolver.resolve(option)
        if not url:
            return None
        if not await self._validator.validate(url):
            log.info("option_invalid", title=option.title)
            return None
        log.info("option_validated", title=option.title)
        return url

    def _build_stream(
        self,
        link: QualityLink,
        candidate: IntermediateLink,
        url: str,
        page: HostPage,
        selected: SearchResult,
        request: StreamRequest,
    ) -> ResolvedStream:
        cfg = self._config
        name = f"{cfg.provider_label} {candidate.server} - {link.quality}".strip()
        return ResolvedStream(
            name=" ".join(name.split()),
            title=media_title(selected, request),
            url=url,
            quality=link.quality,
            size=page.size or "Unknown",
            headers={
                "User-Agent": cfg.stream_user_agent,
                "Referer": cfg.stream_referer,
            },
            provider=cfg.provider_name,
        )
