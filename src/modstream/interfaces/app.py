"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from modstream import __version__
from modstream.infrastructure.config import AppConfig
from modstream.interfaces.app_state import AppState
from modstream.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app with configuration only, no resource initialization.

    Resources (HTTP client, domain cache, resolvers) are created in lifespan().
    """
    app = FastAPI(
        title="modstream",
        description="Title-to-stream resolver for a rotating download site",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from modstream.interfaces.api.streams.router import router as streams_router

    app.include_router(streams_router, prefix="/api")

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe with the cached base domain (no refresh)."""
        cache = getattr(app.state, "domain_cache", None)
        return {
            "status": "ok",
            "domain": cache.value if cache is not None else None,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
