"""Tests for the FastAPI app factory and lifespan wiring."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock

import httpx
from fastapi.testclient import TestClient

from cinestream.application.use_cases.cinemaos_stream import CinemaOsStreamUseCase
from cinestream.application.use_cases.identity import IdentityResolver
from cinestream.infrastructure.cache import InMemoryIdCache
from cinestream.infrastructure.cinemaos.normalizer import normalize_sources
from cinestream.infrastructure.config import AppConfig
from cinestream.interfaces.app import create_app
from cinestream.interfaces.composition import build_stream_use_case


class TestHealth:
    def test_ok_with_utc_timestamp(self) -> None:
        client = TestClient(create_app(AppConfig(environment="test")))

        resp = client.get("/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["timestamp"].endswith("Z")
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))


class TestLifespan:
    def test_resources_wired_and_closed(self) -> None:
        app = create_app(AppConfig(environment="test"))

        with TestClient(app) as client:
            assert isinstance(app.state.id_cache, InMemoryIdCache)
            assert isinstance(app.state.identity_resolver, IdentityResolver)
            assert isinstance(app.state.stream_uc, CinemaOsStreamUseCase)
            assert client.get("/manifest.json").status_code == 200
            http_client = app.state.http_client

        assert http_client.is_closed

    def test_manifest_via_app(self) -> None:
        client = TestClient(create_app(AppConfig(environment="test")))
        assert client.get("/manifest.json").json()["id"] == "com.cinemaos.stremio"


class TestBuildStreamUseCase:
    def test_wires_lenient_source_normalizer(self) -> None:
        config = AppConfig(environment="test")
        http_client = httpx.AsyncClient()
        resolver = IdentityResolver(metadata=AsyncMock(), cache=InMemoryIdCache())

        uc = build_stream_use_case(
            config, http_client=http_client, resolver=resolver
        )

        assert uc._parse is normalize_sources
        assert uc._stream_headers == {
            "Referer": "https://cinemaos.tech",
            "User-Agent": config.cinemaos_user_agent,
        }
