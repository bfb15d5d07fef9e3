"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from modstream.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from modstream.application.use_cases import GetStreamsUseCase
    from modstream.infrastructure.hop_resolvers.intermediate import (
        IntermediateLinkResolver,
    )
    from modstream.infrastructure.moviesmod.domain_cache import DomainCache


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    domain_cache: DomainCache
    intermediate_resolver: IntermediateLinkResolver

    # Application Services
    get_streams_uc: GetStreamsUseCase
