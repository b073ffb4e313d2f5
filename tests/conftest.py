"""Shared test fixtures for the cinestream test suite."""

from __future__ import annotations

import json
from typing import Any

import pytest

from cinestream.domain.entities import (
    EncryptedEnvelope,
    MediaTitle,
    RequestIdentity,
    SourceEntry,
)
from cinestream.infrastructure.cinemaos.crypto import EnvelopeCrypto
from cinestream.infrastructure.config import AppConfig

# Low PBKDF2 round count for tests that do not pin the derived key.
FAST_ITERATIONS = 1_000

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def movie_identity() -> RequestIdentity:
    """Resolved movie identity (Iron Man)."""
    return RequestIdentity(
        content_type="movie", imdb_id="tt0371746", tmdb_id="1726"
    )


@pytest.fixture()
def episode_identity() -> RequestIdentity:
    """Resolved episode identity (Breaking Bad S01E05)."""
    return RequestIdentity(
        content_type="series",
        imdb_id="tt0903747",
        tmdb_id="1396",
        season=1,
        episode=5,
    )


@pytest.fixture()
def media_title() -> MediaTitle:
    return MediaTitle(title="Iron Man", year="2008")


@pytest.fixture()
def source_entry() -> SourceEntry:
    return SourceEntry(
        server="Alpha",
        url="https://cdn.example.com/alpha/master.m3u8",
        transport_type="hls",
        speed="fast",
        bitrate_label="FHD",
        quality_label="",
    )


# ---------------------------------------------------------------------------
# Crypto fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fast_crypto() -> EnvelopeCrypto:
    """EnvelopeCrypto with a low PBKDF2 round count."""
    return EnvelopeCrypto(iterations=FAST_ITERATIONS)


@pytest.fixture()
def sources_payload() -> dict[str, Any]:
    """Decrypted payload with one multi-quality and one single source."""
    return {
        "sources": {
            "alpha": {
                "server": "Alpha",
                "speed": "fast",
                "bitrate": "FHD",
                "qualities": {
                    "1080": {
                        "url": "https://cdn.example.com/a/1080.m3u8",
                        "type": "hls",
                    },
                    "720": {
                        "url": "https://cdn.example.com/a/720.m3u8",
                        "type": "hls",
                    },
                },
            },
            "beta": {
                "server": "Beta",
                "url": "https://cdn.example.com/b/manifest.mpd",
                "type": "dash",
                "speed": "",
                "bitrate": "HD",
                "quality": "4K",
            },
        }
    }


@pytest.fixture()
def sealed_envelope(
    fast_crypto: EnvelopeCrypto, sources_payload: dict[str, Any]
) -> EncryptedEnvelope:
    return fast_crypto.seal(json.dumps(sources_payload))


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(environment="test")
