"""Stremio addon API endpoints (manifest, stream)."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cinestream import __version__
from cinestream.application.use_cases.identity import parse_catalog_id
from cinestream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stremio"])

_ADDON_ID = "com.cinemaos.stremio"
_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}


def build_manifest(base_url: str) -> dict[str, Any]:
    """Build the Stremio addon manifest."""
    return {
        "id": _ADDON_ID,
        "version": __version__,
        "name": "CinemaOS",
        "description": "Stream movies and TV shows from CinemaOS sources",
        "logo": f"{base_url}/logo.png",
        "background": f"{base_url}/background.jpg",
        "resources": ["stream"],
        "types": ["movie", "series"],
        "idPrefixes": ["tt", "tmdb:"],
        "catalogs": [],
        "behaviorHints": {
            "configurable": False,
            "configurationRequired": False,
        },
    }


@router.get("/manifest.json")
async def stremio_manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    state = cast(AppState, request.app.state)
    manifest = build_manifest(state.config.cinemaos_base_url)
    return JSONResponse(content=manifest, headers=_CORS_HEADERS)


@router.get("/stream/{content_type}/{stream_id}.json")
async def stremio_stream(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve CinemaOS streams for a movie or episode.

    Always answers ``{"streams": [...]}``; failures yield an empty list.
    """
    state = cast(AppState, request.app.state)

    parsed = parse_catalog_id(stream_id, content_type)
    if parsed is None:
        log.info(
            "stremio_stream_unsupported_id",
            content_type=content_type,
            stream_id=stream_id,
        )
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    log.info(
        "stremio_stream_request",
        content_type=content_type,
        stream_id=stream_id,
        season=parsed.season,
        episode=parsed.episode,
    )

    uc = getattr(state, "stream_uc", None)
    if uc is None:
        log.warning("stremio_stream_uc_missing")
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    try:
        streams = await uc.execute(stream_id, content_type)
    except Exception:
        log.error(
            "stremio_stream_failed",
            content_type=content_type,
            stream_id=stream_id,
            exc_info=True,
        )
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    log.info(
        "stremio_stream_response",
        stream_id=stream_id,
        streams_returned=len(streams),
    )
    return JSONResponse(
        content={"streams": [s.to_stremio() for s in streams]},
        headers=_CORS_HEADERS,
    )
