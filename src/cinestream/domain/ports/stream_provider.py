"""Port for the encrypted stream-source provider."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cinestream.domain.entities.stream import (
    EncryptedEnvelope,
    MediaTitle,
    RequestIdentity,
)


@runtime_checkable
class StreamProviderPort(Protocol):
    """Async interface for fetching the provider's encrypted envelope."""

    async def fetch_envelope(
        self,
        identity: RequestIdentity,
        media: MediaTitle,
        auth_token: str,
    ) -> EncryptedEnvelope:
        """Issue the signed provider request and return its envelope.

        Raises:
            ProviderUnavailable: Network error, timeout or non-2xx status.
            MalformedPayload: Body is not JSON or carries no envelope.
        """
        ...
