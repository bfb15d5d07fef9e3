"""Ports for the hops of the resolution chain."""

from __future__ import annotations

from typing import Protocol

from modstream.domain.entities import (
    DownloadOption,
    HostPage,
    IntermediateLink,
    QualityLink,
    SearchResult,
)


class SearchEnginePort(Protocol):
    """Site search on the current base domain."""

    async def search(self, query: str) -> list[SearchResult]: ...


class ContentPagePort(Protocol):
    """QualityLink extraction from a selected content page."""

    async def extract(self, page_url: str) -> list[QualityLink]: ...


class LinkUnwrapperPort(Protocol):
    """Unwraps a quality link into next-hop links, whatever its host."""

    async def resolve(self, url: str, referer: str) -> list[IntermediateLink]: ...


class GatedHostPort(Protocol):
    """Runs the token challenge of a gated host."""

    async def resolve(self, url: str) -> str | None: ...


class LandingPagePort(Protocol):
    """Enumerates the download options of a landing page."""

    async def resolve(self, url: str) -> HostPage: ...


class OptionResolverPort(Protocol):
    """Turns a download option into a candidate file URL."""

    async def resolve(self, option: DownloadOption) -> str | None: ...
