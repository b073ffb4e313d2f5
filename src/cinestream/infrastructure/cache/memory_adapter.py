"""In-memory adapter - process-wide IMDb -> TMDB id mapping cache."""

from __future__ import annotations

import threading

import structlog

from cinestream.domain.entities.stream import StremioContentType

log = structlog.get_logger(__name__)


class InMemoryIdCache:
    """Unbounded dict guarded by a lock; entries are never evicted.

    - Safe for concurrent use from coroutines and worker threads.
    - Contents do not survive a process restart.
    - Implements ``IdCachePort``.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get(self, imdb_id: str, content_type: StremioContentType) -> str | None:
        with self._lock:
            value = self._entries.get((imdb_id, content_type))
        log.debug(
            "id_cache_get",
            imdb_id=imdb_id,
            content_type=content_type,
            hit=value is not None,
        )
        return value

    async def put(
        self, imdb_id: str, content_type: StremioContentType, tmdb_id: str
    ) -> None:
        with self._lock:
            self._entries[(imdb_id, content_type)] = tmdb_id
        log.debug(
            "id_cache_set", imdb_id=imdb_id, content_type=content_type, tmdb_id=tmdb_id
        )

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()
