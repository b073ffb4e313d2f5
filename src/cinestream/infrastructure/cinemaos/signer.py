"""Request signing for the CinemaOS provider API.

The ``secret`` query parameter is a two-stage HMAC-SHA256 over a canonical
content string. Field order and omission rules must match what the
provider computes on its side.
"""

from __future__ import annotations

import hashlib
import hmac

from cinestream.domain.entities.stream import RequestIdentity

PRIMARY_KEY = "a7f3b9c2e8d4f1a6b5c9e2d7f4a8b3c6e1d9f7a4b2c8e5d3f9a6b4c1e7d2f8a5"
SECONDARY_KEY = "d3f8a5b2c9e6d1f7a4b8c5e2d9f3a6b1c7e4d8f2a9b5c3e7d4f1a8b6c2e9d5f3"


def _hmac_sha256_hex(data: str, key: str) -> str:
    return hmac.new(
        key.encode("utf-8"), data.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def build_content_string(
    tmdb_id: str | None,
    imdb_id: str | None,
    season: str | None,
    episode: str | None,
) -> str:
    """Join the present fields as ``key:value`` pairs separated by ``|``.

    >>> build_content_string("12345", "tt1234567", None, None)
    'tmdbId:12345|imdbId:tt1234567'
    """
    fields = (
        ("tmdbId", tmdb_id),
        ("imdbId", imdb_id),
        ("seasonId", season),
        ("episodeId", episode),
    )
    return "|".join(f"{key}:{value}" for key, value in fields if value)


class HashSigner:
    """Derives the provider auth token from request identifiers."""

    def __init__(
        self,
        *,
        primary_key: str = PRIMARY_KEY,
        secondary_key: str = SECONDARY_KEY,
    ) -> None:
        self._primary_key = primary_key
        self._secondary_key = secondary_key

    def sign(
        self,
        tmdb_id: str | None,
        imdb_id: str | None,
        season: str | None = None,
        episode: str | None = None,
    ) -> str:
        """Return the 64-char lowercase hex token.

        The first-stage digest is fed to the second stage as hex text.
        """
        content = build_content_string(tmdb_id, imdb_id, season, episode)
        first_stage = _hmac_sha256_hex(content, self._primary_key)
        return _hmac_sha256_hex(first_stage, self._secondary_key)

    def sign_identity(self, identity: RequestIdentity) -> str:
        return self.sign(
            identity.tmdb_id,
            identity.imdb_id,
            "" if identity.season is None else str(identity.season),
            "" if identity.episode is None else str(identity.episode),
        )
