"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from cinestream.application.use_cases.cinemaos_stream import CinemaOsStreamUseCase
from cinestream.application.use_cases.identity import IdentityResolver
from cinestream.infrastructure.cache import InMemoryIdCache
from cinestream.infrastructure.cinemaos.client import HttpxCinemaOsClient
from cinestream.infrastructure.cinemaos.crypto import EnvelopeCrypto
from cinestream.infrastructure.cinemaos.normalizer import (
    infer_transport,
    normalize_sources,
    resolve_quality,
)
from cinestream.infrastructure.cinemaos.signer import HashSigner
from cinestream.infrastructure.cinemeta.client import HttpxCinemetaClient
from cinestream.infrastructure.config.schema import AppConfig
from cinestream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_stream_use_case(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient,
    resolver: IdentityResolver,
) -> CinemaOsStreamUseCase:
    """Wire the CinemaOS pipeline around a shared HTTP client."""
    provider = HttpxCinemaOsClient(
        http_client=http_client,
        base_url=config.cinemaos_base_url,
        timeout=config.cinemaos_timeout_seconds,
        user_agent=config.cinemaos_user_agent,
    )
    return CinemaOsStreamUseCase(
        resolver=resolver,
        provider=provider,
        signer=HashSigner(),
        cipher=EnvelopeCrypto(),
        parse_fn=normalize_sources,
        quality_fn=resolve_quality,
        transport_fn=infer_transport,
        referer=provider.base_url,
        user_agent=provider.user_agent,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Id cache (process-wide, lives as long as the app)
        2. HTTP client (shared by metadata and provider clients)
        3. Identity resolver (metadata client + cache)
        4. Stream use case (provider client + crypto + parser)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Id cache
    state.id_cache = InMemoryIdCache()

    # 2) HTTP client; per-request timeouts are set by each client
    state.http_client = httpx.AsyncClient(follow_redirects=True)
    log.info("http_client_initialized")

    # 3) Identity resolver
    metadata = HttpxCinemetaClient(
        http_client=state.http_client,
        base_url=config.cinemeta_base_url,
        timeout=config.cinemeta_timeout_seconds,
        user_agent=config.cinemeta_user_agent,
    )
    state.identity_resolver = IdentityResolver(
        metadata=metadata, cache=state.id_cache
    )

    # 4) Stream use case
    state.stream_uc = build_stream_use_case(
        config,
        http_client=state.http_client,
        resolver=state.identity_resolver,
    )
    log.info(
        "stream_pipeline_ready",
        provider=config.cinemaos_base_url,
        metadata=config.cinemeta_base_url,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")
