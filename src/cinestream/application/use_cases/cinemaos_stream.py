"""CinemaOS stream resolution use case.

catalog id -> identity (TMDB id) -> signed provider request
-> decrypt envelope -> parse sources -> StreamDescriptor list.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from typing import Protocol

import structlog

from cinestream.domain.entities.result import StageResult
from cinestream.domain.entities.stream import (
    EncryptedEnvelope,
    MediaTitle,
    RequestIdentity,
    ResolvedIdentity,
    SourceEntry,
    StreamDescriptor,
    StreamTransport,
)
from cinestream.domain.exceptions import StreamPipelineError
from cinestream.domain.ports.stream_provider import StreamProviderPort

# ---------------------------------------------------------------------------
# Protocols: define what this use case needs from its dependencies.
# Infrastructure components satisfy these via structural subtyping.
# ---------------------------------------------------------------------------


class _IdentityResolver(Protocol):
    async def resolve(
        self, catalog_id: str, content_type: str
    ) -> ResolvedIdentity | None: ...


class _Signer(Protocol):
    def sign_identity(self, identity: RequestIdentity) -> str: ...


class _EnvelopeCipher(Protocol):
    def decrypt(self, envelope: EncryptedEnvelope) -> str: ...


# Type aliases for injected pure functions.
_ParseFn = Callable[[str], list[SourceEntry]]
_QualityFn = Callable[[SourceEntry], int]
_TransportFn = Callable[[str], StreamTransport | None]

log = structlog.get_logger(__name__)

_MULTI_SPACE_RE = re.compile(r"\s{2,}")


def build_display_name(prefix: str, entry: SourceEntry) -> str:
    """``"<prefix> [server] bitrate speed"`` with whitespace collapsed."""
    raw = f"{prefix} [{entry.server}] {entry.bitrate_label} {entry.speed}"
    return _MULTI_SPACE_RE.sub(" ", raw).strip()


class CinemaOsStreamUseCase:
    """Resolve Stremio stream requests through the CinemaOS provider.

    Flow:
        1. Resolve the catalog id to a TMDB id (+ title/year).
        2. Sign the request and fetch the encrypted envelope.
        3. Decrypt the envelope in a worker thread.
        4. Parse the source tree into SourceEntry records.
        5. Shape one StreamDescriptor per entry.

    Every failure ends in an empty list; the reason is only logged.
    """

    def __init__(
        self,
        *,
        resolver: _IdentityResolver,
        provider: StreamProviderPort,
        signer: _Signer,
        cipher: _EnvelopeCipher,
        parse_fn: _ParseFn,
        quality_fn: _QualityFn,
        transport_fn: _TransportFn,
        referer: str,
        user_agent: str,
        display_prefix: str = "CinemaOS",
    ) -> None:
        self._resolver = resolver
        self._provider = provider
        self._signer = signer
        self._cipher = cipher
        self._parse = parse_fn
        self._quality = quality_fn
        self._transport = transport_fn
        self._stream_headers = {"Referer": referer, "User-Agent": user_agent}
        self._display_prefix = display_prefix

    async def execute(
        self, catalog_id: str, content_type: str
    ) -> list[StreamDescriptor]:
        """Full pipeline for one Stremio stream request."""
        resolved = await self._resolver.resolve(catalog_id, content_type)
        if resolved is None:
            return []
        streams = await self.fetch_streams(resolved.identity, resolved.media)
        log.info(
            "cinemaos_streams_resolved",
            catalog_id=catalog_id,
            tmdb_id=resolved.identity.tmdb_id,
            count=len(streams),
        )
        return streams

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _fetch_stage(
        self, identity: RequestIdentity, media: MediaTitle
    ) -> StageResult[EncryptedEnvelope]:
        token = self._signer.sign_identity(identity)
        try:
            envelope = await self._provider.fetch_envelope(identity, media, token)
        except StreamPipelineError as exc:
            return StageResult.failure(exc)
        return StageResult.success(envelope)

    async def _decrypt_stage(self, envelope: EncryptedEnvelope) -> StageResult[str]:
        try:
            plaintext = await asyncio.to_thread(self._cipher.decrypt, envelope)
        except StreamPipelineError as exc:
            return StageResult.failure(exc)
        return StageResult.success(plaintext)

    def _parse_stage(self, plaintext: str) -> StageResult[list[SourceEntry]]:
        try:
            return StageResult.success(self._parse(plaintext))
        except StreamPipelineError as exc:
            return StageResult.failure(exc)

    def _describe(self, entry: SourceEntry) -> StreamDescriptor:
        return StreamDescriptor(
            display_name=build_display_name(self._display_prefix, entry),
            url=entry.url,
            vertical_quality=self._quality(entry),
            transport_hint=self._transport(entry.transport_type),
            request_headers=dict(self._stream_headers),
        )

    @staticmethod
    def _abort(
        error: StreamPipelineError | None, identity: RequestIdentity
    ) -> list[StreamDescriptor]:
        log.warning(
            "cinemaos_pipeline_failed",
            stage=error.stage if error else "unknown",
            error=type(error).__name__,
            reason=error.reason if error else "",
            tmdb_id=identity.tmdb_id,
            imdb_id=identity.imdb_id,
        )
        return []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_streams(
        self, identity: RequestIdentity, media: MediaTitle
    ) -> list[StreamDescriptor]:
        """Fetch, decrypt and shape streams for an already resolved identity."""
        fetched = await self._fetch_stage(identity, media)
        if not fetched.ok:
            return self._abort(fetched.error, identity)

        decrypted = await self._decrypt_stage(fetched.unwrap())
        if not decrypted.ok:
            return self._abort(decrypted.error, identity)

        parsed = self._parse_stage(decrypted.unwrap())
        if not parsed.ok:
            return self._abort(parsed.error, identity)

        entries = parsed.unwrap()
        if not entries:
            log.info("cinemaos_no_sources", tmdb_id=identity.tmdb_id)
        return [self._describe(entry) for entry in entries]
