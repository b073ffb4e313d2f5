"""Catalog id -> RequestIdentity with a TMDB id and display metadata.

The provider only accepts TMDB ids, so IMDb ids go through a fallback
chain against the metadata service:

    cache -> meta.id ("tmdb:" prefix) -> meta.tmdb_id / meta.moviedb_id
    -> trailer sources ("tmdb/<digits>")
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import structlog

from cinestream.domain.entities.stream import (
    MediaTitle,
    RequestIdentity,
    ResolvedIdentity,
    StremioContentType,
)
from cinestream.domain.exceptions import IdentityUnresolved
from cinestream.domain.ports.cache import IdCachePort
from cinestream.domain.ports.metadata import MetadataClientPort

log = structlog.get_logger(__name__)

_TMDB_PREFIX = "tmdb:"
_TRAILER_TMDB_RE = re.compile(r"tmdb/(\d+)")


def _episode_number(parts: list[str], index: int) -> int | None:
    """Non-negative int at *index*; missing or non-numeric -> None."""
    try:
        value = int(parts[index])
    except (IndexError, ValueError):
        return None
    return value if value >= 0 else None


def parse_catalog_id(
    catalog_id: str, content_type: str
) -> RequestIdentity | None:
    """Parse a Stremio stream id.

    Movies: ``tt1234567`` or ``tmdb:12345``
    Series: ``tt1234567:1:5`` or ``tmdb:12345:1:5`` (season 1, episode 5)

    Returns None for unknown content types or id prefixes.
    """
    if content_type not in ("movie", "series"):
        return None
    ct: StremioContentType = "series" if content_type == "series" else "movie"
    is_series = ct == "series"

    parts = catalog_id.split(":")

    if parts[0].startswith("tt"):
        return RequestIdentity(
            content_type=ct,
            imdb_id=parts[0],
            season=_episode_number(parts, 1) if is_series else None,
            episode=_episode_number(parts, 2) if is_series else None,
        )

    if catalog_id.startswith(_TMDB_PREFIX):
        tmdb_id = parts[1] if len(parts) > 1 and parts[1] else None
        return RequestIdentity(
            content_type=ct,
            tmdb_id=tmdb_id,
            season=_episode_number(parts, 2) if is_series else None,
            episode=_episode_number(parts, 3) if is_series else None,
        )

    return None


# ---------------------------------------------------------------------------
# TMDB id extraction strategies (tried in order, first hit wins)
# ---------------------------------------------------------------------------


def _tmdb_from_meta_id(meta: dict[str, Any]) -> str | None:
    meta_id = meta.get("id")
    if isinstance(meta_id, str) and meta_id.startswith(_TMDB_PREFIX):
        return meta_id.removeprefix(_TMDB_PREFIX) or None
    return None


def _tmdb_from_explicit_field(meta: dict[str, Any]) -> str | None:
    for field_name in ("tmdb_id", "moviedb_id"):
        value = meta.get(field_name)
        if value not in (None, "", 0):
            return str(value)
    return None


def _tmdb_from_trailers(meta: dict[str, Any]) -> str | None:
    trailers = meta.get("trailers")
    if not isinstance(trailers, list):
        return None
    for trailer in trailers:
        source = trailer.get("source") if isinstance(trailer, dict) else None
        if not isinstance(source, str):
            continue
        match = _TRAILER_TMDB_RE.search(source)
        if match:
            return match.group(1)
    return None


_STRATEGIES: tuple[tuple[str, Callable[[dict[str, Any]], str | None]], ...] = (
    ("meta_id", _tmdb_from_meta_id),
    ("tmdb_field", _tmdb_from_explicit_field),
    ("trailer", _tmdb_from_trailers),
)


class IdentityResolver:
    """Resolve catalog ids into identities the provider accepts.

    Never raises for lookup failures: an unresolvable id yields None.
    """

    def __init__(
        self,
        *,
        metadata: MetadataClientPort,
        cache: IdCachePort,
    ) -> None:
        self._metadata = metadata
        self._cache = cache

    async def imdb_to_tmdb(
        self, imdb_id: str, content_type: StremioContentType
    ) -> str | None:
        """Map an IMDb id to a TMDB id. Only successes are cached."""
        cached = await self._cache.get(imdb_id, content_type)
        if cached is not None:
            log.debug("imdb_to_tmdb_cache_hit", imdb_id=imdb_id, tmdb_id=cached)
            return cached

        meta = await self._metadata.fetch_meta(content_type, imdb_id)
        if meta is None:
            log.info("imdb_to_tmdb_no_meta", imdb_id=imdb_id)
            return None

        for strategy, extract in _STRATEGIES:
            tmdb_id = extract(meta)
            if tmdb_id:
                await self._cache.put(imdb_id, content_type, tmdb_id)
                log.info(
                    "imdb_to_tmdb_resolved",
                    imdb_id=imdb_id,
                    tmdb_id=tmdb_id,
                    strategy=strategy,
                )
                return tmdb_id

        log.info("imdb_to_tmdb_not_found", imdb_id=imdb_id)
        return None

    async def fetch_media_title(self, identity: RequestIdentity) -> MediaTitle:
        """Title and year for presentation; empty MediaTitle on failure."""
        lookup_id = identity.imdb_id or f"{_TMDB_PREFIX}{identity.tmdb_id}"
        meta = await self._metadata.fetch_meta(identity.content_type, lookup_id)
        if meta is None:
            log.info("media_title_unavailable", lookup_id=lookup_id)
            return MediaTitle()

        title = meta.get("name") or meta.get("title") or None
        year = meta.get("year") or None
        media = MediaTitle(
            title=str(title) if title is not None else None,
            year=str(year) if year is not None else None,
        )
        log.debug("media_title_resolved", title=media.title, year=media.year)
        return media

    async def resolve_identity(
        self, catalog_id: str, content_type: str
    ) -> RequestIdentity:
        """Parse *catalog_id* and fill in the TMDB id.

        Raises:
            IdentityUnresolved: Unparseable id or no TMDB id obtainable.
        """
        identity = parse_catalog_id(catalog_id, content_type)
        if identity is None:
            raise IdentityUnresolved(f"unsupported catalog id {catalog_id!r}")

        if identity.tmdb_id is None and identity.imdb_id:
            tmdb_id = await self.imdb_to_tmdb(identity.imdb_id, identity.content_type)
            identity = replace(identity, tmdb_id=tmdb_id)

        if not identity.tmdb_id:
            raise IdentityUnresolved(f"no TMDB id for {catalog_id!r}")
        return identity

    async def resolve(
        self, catalog_id: str, content_type: str
    ) -> ResolvedIdentity | None:
        """Resolve ids and display metadata. None when unresolvable."""
        try:
            identity = await self.resolve_identity(catalog_id, content_type)
        except IdentityUnresolved as exc:
            log.info(
                "identity_unresolved",
                catalog_id=catalog_id,
                content_type=content_type,
                reason=exc.reason,
            )
            return None

        media = await self.fetch_media_title(identity)
        return ResolvedIdentity(identity=identity, media=media)
