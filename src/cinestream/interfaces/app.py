"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from cinestream import __version__
from cinestream.infrastructure.config import AppConfig
from cinestream.interfaces.app_state import AppState
from cinestream.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, id cache, use cases) are created in lifespan().
    """
    app = FastAPI(
        title="Cinestream",
        description="CinemaOS stream resolver (Stremio addon)",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from cinestream.interfaces.api.stremio import router as stremio_router

    app.include_router(stremio_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check; returns 200 as long as the process is running."""
        now = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return {"status": "ok", "timestamp": now}

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
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
