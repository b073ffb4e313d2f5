"""Cache Port - Interface for the IMDb -> TMDB id mapping cache."""

from __future__ import annotations

from typing import Protocol

from cinestream.domain.entities.stream import StremioContentType


class IdCachePort(Protocol):
    """Port for a concurrency-safe id mapping cache.

    Implementations:
      - InMemoryIdCache (process-wide dict, never evicted)

    Concurrent writes to the same key may lose one update.
    """

    async def get(self, imdb_id: str, content_type: StremioContentType) -> str | None:
        """Return the cached TMDB id. None = not cached."""
        ...

    async def put(
        self, imdb_id: str, content_type: StremioContentType, tmdb_id: str
    ) -> None:
        """Store a resolved TMDB id."""
        ...

    async def clear(self) -> None:
        """Delete ALL entries."""
        ...
