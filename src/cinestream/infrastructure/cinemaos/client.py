"""CinemaOS provider client - async httpx implementation."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote_plus, urlencode, urlsplit

import httpx
import structlog

from cinestream.domain.entities.stream import (
    EncryptedEnvelope,
    MediaTitle,
    RequestIdentity,
)
from cinestream.domain.exceptions import MalformedPayload, ProviderUnavailable

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://cinemaos.tech"
DEFAULT_TIMEOUT = 60.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/139.0.0.0 Safari/537.36"
)

_WHITESPACE_RE = re.compile(r"\s")
_NULL = "null"


def _wire_value(value: str | int | None) -> str:
    if value is None or value == "":
        return _NULL
    return str(value)


def browser_headers(base_url: str, user_agent: str) -> dict[str, str]:
    """Header set the provider expects from its own web player."""
    return {
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
        "Referer": base_url,
        "Host": urlsplit(base_url).netloc,
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-origin",
        "User-Agent": user_agent,
        "sec-ch-ua": (
            '"Not;A=Brand";v="99", "Google Chrome";v="139", "Chromium";v="139"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Content-Type": "application/json",
    }


def build_provider_url(
    base_url: str,
    identity: RequestIdentity,
    media: MediaTitle,
    auth_token: str,
) -> str:
    """Build ``/api/provider`` URL; season/episode only for episodes.

    Whitespace in the title becomes ``+`` and a missing title is sent
    empty. Other absent values are sent as the literal ``null``.
    """
    params: list[tuple[str, str]] = [
        ("type", "tv" if identity.is_episode else "movie"),
        ("tmdbId", _wire_value(identity.tmdb_id)),
        ("imdbId", _wire_value(identity.imdb_id)),
    ]
    if identity.is_episode:
        params.append(("seasonId", _wire_value(identity.season)))
        params.append(("episodeId", _wire_value(identity.episode)))
    params.extend(
        [
            ("t", _WHITESPACE_RE.sub(" ", media.title or "")),
            ("ry", _wire_value(media.year)),
            ("secret", auth_token),
        ]
    )
    return f"{base_url}/api/provider?{urlencode(params, quote_via=quote_plus)}"


class HttpxCinemaOsClient:
    """Fetches the encrypted source envelope from CinemaOS.

    Implements ``StreamProviderPort`` from domain.ports.stream_provider.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = browser_headers(self._base_url, user_agent)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def user_agent(self) -> str:
        return self._headers["User-Agent"]

    async def _get_json(self, url: str) -> Any:
        try:
            resp = await self._http.get(
                url, headers=self._headers, timeout=self._timeout
            )
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ProviderUnavailable(f"timeout after {self._timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"network error: {exc!r}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedPayload("provider response is not JSON") from exc

    async def fetch_envelope(
        self,
        identity: RequestIdentity,
        media: MediaTitle,
        auth_token: str,
    ) -> EncryptedEnvelope:
        """Issue the signed request and extract ``data`` as an envelope."""
        url = build_provider_url(self._base_url, identity, media, auth_token)
        log.info(
            "cinemaos_fetch",
            tmdb_id=identity.tmdb_id,
            imdb_id=identity.imdb_id,
            season=identity.season,
            episode=identity.episode,
        )

        body = await self._get_json(url)
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or not data.get("encrypted"):
            raise MalformedPayload("response carries no encrypted envelope")
        return EncryptedEnvelope.from_mapping(data)
