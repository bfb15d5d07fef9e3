"""Stream resolution endpoint (``/api/moviesmod``)."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from modstream.domain.entities import MediaType, StreamRequest
from modstream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["streams"])

_ENDPOINT = "/api/moviesmod"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_MEDIA_TYPES: dict[str, MediaType] = {"movie": "movie", "tv": "tv", "series": "tv"}


def _usage() -> dict[str, Any]:
    return {
        "endpoint": _ENDPOINT,
        "parameters": {
            "title": "(required) Movie or TV show title",
            "type": '(optional) "movie" or "tv", defaults to "movie"',
            "season": "(optional) Season number for TV shows",
            "episode": "(optional) Episode number for TV shows",
            "year": "(optional) Release year to filter results",
        },
        "examples": [
            f"{_ENDPOINT}?title=Inception",
            f"{_ENDPOINT}?title=Breaking%20Bad&type=tv&season=1&episode=1",
            f"{_ENDPOINT}?title=The%20Dark%20Knight&year=2008",
        ],
    }


def _parse_int(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_stream_request(params: dict[str, str]) -> StreamRequest | None:
    """Build a StreamRequest from query parameters (None without a title)."""
    title = (params.get("title") or "").strip()
    if not title:
        return None
    media_type = _MEDIA_TYPES.get((params.get("type") or "movie").lower(), "movie")
    return StreamRequest(
        title=title,
        media_type=media_type,
        season=_parse_int(params.get("season")),
        episode=_parse_int(params.get("episode")),
        year=(params.get("year") or "").strip() or None,
    )


@router.options("/moviesmod")
async def moviesmod_preflight() -> Response:
    """CORS preflight: empty body, permissive headers."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("/moviesmod")
async def moviesmod_streams(request: Request) -> JSONResponse:
    """Resolve a title into ranked, validated streams.

    200 on success, 404 when nothing usable was found, 400 without a
    title and 500 on unexpected failure.
    """
    stream_request = parse_stream_request(dict(request.query_params))
    if stream_request is None:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Missing required parameter: title",
                "usage": _usage(),
            },
            headers=CORS_HEADERS,
        )

    state = cast(AppState, request.app.state)
    try:
        result = await state.get_streams_uc.execute(stream_request)
    except Exception:
        log.exception("streams_request_failed", title=stream_request.title)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
            headers=CORS_HEADERS,
        )

    return JSONResponse(
        status_code=200 if result.success else 404,
        content=result.to_dict(),
        headers=CORS_HEADERS,
    )
