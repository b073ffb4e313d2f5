"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from cinestream.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from cinestream.application.use_cases.cinemaos_stream import CinemaOsStreamUseCase
    from cinestream.application.use_cases.identity import IdentityResolver
    from cinestream.domain.ports import IdCachePort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    id_cache: IdCachePort

    # Application Services
    identity_resolver: IdentityResolver
    stream_uc: CinemaOsStreamUseCase
