"""Tests for catalog id parsing and IMDb -> TMDB resolution."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from cinestream.application.use_cases.identity import (
    IdentityResolver,
    _tmdb_from_explicit_field,
    _tmdb_from_meta_id,
    _tmdb_from_trailers,
    parse_catalog_id,
)
from cinestream.domain.entities import MediaTitle, RequestIdentity
from cinestream.domain.exceptions import IdentityUnresolved
from cinestream.infrastructure.cache import InMemoryIdCache

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _metadata(meta: dict[str, Any] | None) -> AsyncMock:
    mock = AsyncMock()
    mock.fetch_meta.return_value = meta
    return mock


def _resolver(
    meta: dict[str, Any] | None, cache: InMemoryIdCache | None = None
) -> tuple[IdentityResolver, AsyncMock]:
    metadata = _metadata(meta)
    resolver = IdentityResolver(
        metadata=metadata,
        cache=cache if cache is not None else InMemoryIdCache(),
    )
    return resolver, metadata


# ---------------------------------------------------------------------------
# parse_catalog_id
# ---------------------------------------------------------------------------


class TestParseCatalogId:
    def test_imdb_movie(self) -> None:
        assert parse_catalog_id("tt1234567", "movie") == RequestIdentity(
            content_type="movie", imdb_id="tt1234567"
        )

    def test_tmdb_movie(self) -> None:
        assert parse_catalog_id("tmdb:12345", "movie") == RequestIdentity(
            content_type="movie", tmdb_id="12345"
        )

    def test_imdb_episode(self) -> None:
        assert parse_catalog_id("tt1234567:1:5", "series") == RequestIdentity(
            content_type="series", imdb_id="tt1234567", season=1, episode=5
        )

    def test_tmdb_episode(self) -> None:
        assert parse_catalog_id("tmdb:12345:2:3", "series") == RequestIdentity(
            content_type="series", tmdb_id="12345", season=2, episode=3
        )

    def test_series_without_episode_parts(self) -> None:
        result = parse_catalog_id("tt1234567", "series")
        assert result is not None
        assert result.season is None
        assert result.episode is None

    def test_season_zero_kept(self) -> None:
        result = parse_catalog_id("tt1234567:0:1", "series")
        assert result is not None
        assert result.season == 0
        assert result.episode == 1

    def test_non_numeric_season_is_absent(self) -> None:
        result = parse_catalog_id("tt1234567:abc:5", "series")
        assert result is not None
        assert result.season is None
        assert result.episode == 5

    def test_movie_ignores_trailing_parts(self) -> None:
        result = parse_catalog_id("tt1234567:1:5", "movie")
        assert result is not None
        assert result.season is None
        assert result.episode is None

    def test_empty_tmdb_id(self) -> None:
        result = parse_catalog_id("tmdb:", "movie")
        assert result is not None
        assert result.tmdb_id is None

    def test_unknown_prefix(self) -> None:
        assert parse_catalog_id("kitsu:1234", "movie") is None

    def test_unknown_content_type(self) -> None:
        assert parse_catalog_id("tt1234567", "channel") is None


# ---------------------------------------------------------------------------
# Extraction strategies
# ---------------------------------------------------------------------------


class TestStrategies:
    def test_meta_id_prefix(self) -> None:
        assert _tmdb_from_meta_id({"id": "tmdb:1726"}) == "1726"

    def test_meta_id_imdb_is_ignored(self) -> None:
        assert _tmdb_from_meta_id({"id": "tt0371746"}) is None

    def test_tmdb_id_field(self) -> None:
        assert _tmdb_from_explicit_field({"tmdb_id": 1726}) == "1726"

    def test_moviedb_id_field(self) -> None:
        assert _tmdb_from_explicit_field({"moviedb_id": "1726"}) == "1726"

    def test_empty_fields(self) -> None:
        assert _tmdb_from_explicit_field({"tmdb_id": "", "moviedb_id": None}) is None

    def test_trailer_source(self) -> None:
        meta = {
            "trailers": [
                {"source": "yt:abcdef"},
                {"source": "https://example.com/tmdb/1726/video"},
            ]
        }
        assert _tmdb_from_trailers(meta) == "1726"

    def test_trailers_without_tmdb(self) -> None:
        assert _tmdb_from_trailers({"trailers": [{"source": "abc"}, "junk"]}) is None

    def test_trailers_not_a_list(self) -> None:
        assert _tmdb_from_trailers({"trailers": "tmdb/1"}) is None


# ---------------------------------------------------------------------------
# IdentityResolver
# ---------------------------------------------------------------------------


class TestImdbToTmdb:
    @pytest.mark.asyncio()
    async def test_meta_id_wins_over_other_fields(self) -> None:
        resolver, _ = _resolver({"id": "tmdb:1", "tmdb_id": "2"})
        assert await resolver.imdb_to_tmdb("tt0371746", "movie") == "1"

    @pytest.mark.asyncio()
    async def test_falls_back_to_trailers(self) -> None:
        resolver, _ = _resolver(
            {"id": "tt0371746", "trailers": [{"source": "tmdb/1726"}]}
        )
        assert await resolver.imdb_to_tmdb("tt0371746", "movie") == "1726"

    @pytest.mark.asyncio()
    async def test_no_meta_returns_none(self) -> None:
        resolver, _ = _resolver(None)
        assert await resolver.imdb_to_tmdb("tt0000000", "movie") is None

    @pytest.mark.asyncio()
    async def test_success_is_cached(self) -> None:
        cache = InMemoryIdCache()
        resolver, metadata = _resolver({"moviedb_id": 1726}, cache)

        assert await resolver.imdb_to_tmdb("tt0371746", "movie") == "1726"
        assert await resolver.imdb_to_tmdb("tt0371746", "movie") == "1726"

        metadata.fetch_meta.assert_awaited_once_with("movie", "tt0371746")
        assert await cache.get("tt0371746", "movie") == "1726"

    @pytest.mark.asyncio()
    async def test_failure_is_not_cached(self) -> None:
        cache = InMemoryIdCache()
        resolver, metadata = _resolver({"id": "tt0371746"}, cache)

        assert await resolver.imdb_to_tmdb("tt0371746", "movie") is None
        assert await resolver.imdb_to_tmdb("tt0371746", "movie") is None

        assert metadata.fetch_meta.await_count == 2
        assert len(cache) == 0

    @pytest.mark.asyncio()
    async def test_cache_hit_skips_lookup(self) -> None:
        cache = InMemoryIdCache()
        await cache.put("tt0371746", "movie", "1726")
        resolver, metadata = _resolver({"moviedb_id": 999}, cache)

        assert await resolver.imdb_to_tmdb("tt0371746", "movie") == "1726"
        metadata.fetch_meta.assert_not_awaited()


class TestFetchMediaTitle:
    @pytest.mark.asyncio()
    async def test_name_and_year(self, movie_identity: RequestIdentity) -> None:
        resolver, metadata = _resolver({"name": "Iron Man", "year": 2008})
        media = await resolver.fetch_media_title(movie_identity)
        assert media == MediaTitle(title="Iron Man", year="2008")
        metadata.fetch_meta.assert_awaited_once_with("movie", "tt0371746")

    @pytest.mark.asyncio()
    async def test_tmdb_only_uses_prefixed_lookup(self) -> None:
        resolver, metadata = _resolver({"title": "Fight Club"})
        identity = RequestIdentity(content_type="movie", tmdb_id="550")
        media = await resolver.fetch_media_title(identity)
        assert media.title == "Fight Club"
        assert media.year is None
        metadata.fetch_meta.assert_awaited_once_with("movie", "tmdb:550")

    @pytest.mark.asyncio()
    async def test_no_meta_gives_empty_title(
        self, movie_identity: RequestIdentity
    ) -> None:
        resolver, _ = _resolver(None)
        assert await resolver.fetch_media_title(movie_identity) == MediaTitle()


class TestResolve:
    @pytest.mark.asyncio()
    async def test_imdb_episode(self) -> None:
        resolver, _ = _resolver(
            {"id": "tt0903747", "moviedb_id": 1396, "name": "Breaking Bad"}
        )
        resolved = await resolver.resolve("tt0903747:1:5", "series")
        assert resolved is not None
        assert resolved.identity.tmdb_id == "1396"
        assert resolved.identity.imdb_id == "tt0903747"
        assert resolved.identity.season == 1
        assert resolved.identity.episode == 5
        assert resolved.media.title == "Breaking Bad"

    @pytest.mark.asyncio()
    async def test_tmdb_id_skips_mapping(self) -> None:
        resolver, metadata = _resolver({"name": "Fight Club", "year": "1999"})
        resolved = await resolver.resolve("tmdb:550", "movie")
        assert resolved is not None
        assert resolved.identity.tmdb_id == "550"
        # Only the title lookup, no id mapping.
        metadata.fetch_meta.assert_awaited_once_with("movie", "tmdb:550")

    @pytest.mark.asyncio()
    async def test_unresolvable_returns_none(self) -> None:
        resolver, _ = _resolver({"id": "tt0000000"})
        assert await resolver.resolve("tt0000000", "movie") is None

    @pytest.mark.asyncio()
    async def test_unsupported_id_returns_none(self) -> None:
        resolver, metadata = _resolver({"moviedb_id": 1})
        assert await resolver.resolve("kitsu:1", "movie") is None
        metadata.fetch_meta.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_resolve_identity_raises(self) -> None:
        resolver, _ = _resolver(None)
        with pytest.raises(IdentityUnresolved):
            await resolver.resolve_identity("tt0000000", "movie")
