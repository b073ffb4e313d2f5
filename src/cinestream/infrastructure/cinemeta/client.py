"""Cinemeta metadata client - async httpx implementation.

Cinemeta is Stremio's public metadata service. Lookups are keyed by IMDb
id (``tt0371746``) or ``tmdb:<id>`` and need no API key.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from cinestream.domain.entities.stream import StremioContentType

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://v3-cinemeta.strem.io"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class HttpxCinemetaClient:
    """Async Cinemeta client.

    Implements ``MetadataClientPort`` from domain.ports.metadata.
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
        self._headers = {"User-Agent": user_agent}

    def meta_url(self, content_type: StremioContentType, lookup_id: str) -> str:
        kind = "movie" if content_type == "movie" else "series"
        return f"{self._base_url}/meta/{kind}/{lookup_id}.json"

    async def fetch_meta(
        self, content_type: StremioContentType, lookup_id: str
    ) -> dict[str, Any] | None:
        """GET the meta document. Returns the ``meta`` object or None."""
        url = self.meta_url(content_type, lookup_id)
        try:
            resp = await self._http.get(
                url, headers=self._headers, timeout=self._timeout
            )
            if resp.status_code == 404:
                log.debug("cinemeta_not_found", lookup_id=lookup_id)
                return None
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError:
            log.warning("cinemeta_http_error", lookup_id=lookup_id, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("cinemeta_network_error", lookup_id=lookup_id, exc_info=True)
            return None
        except ValueError:
            log.warning("cinemeta_invalid_json", lookup_id=lookup_id)
            return None

        meta = data.get("meta") if isinstance(data, dict) else None
        if not isinstance(meta, dict):
            log.debug("cinemeta_meta_missing", lookup_id=lookup_id)
            return None
        return meta
