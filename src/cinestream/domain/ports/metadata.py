"""Port for the external metadata service (Cinemeta)."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from cinestream.domain.entities.stream import StremioContentType


@runtime_checkable
class MetadataClientPort(Protocol):
    """Async interface for metadata lookups keyed by IMDb or ``tmdb:`` id."""

    async def fetch_meta(
        self, content_type: StremioContentType, lookup_id: str
    ) -> dict[str, Any] | None:
        """Return the ``meta`` object for *lookup_id*.

        Returns None on network errors, non-success status or a response
        without a ``meta`` object.
        """
        ...
