"""Domain entities for CinemaOS stream resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from cinestream.domain.exceptions import MalformedPayload

StremioContentType = Literal["movie", "series"]


class StreamTransport(str, Enum):
    """Adaptive streaming transport announced to the player."""

    HLS = "hls"
    DASH = "dash"


@dataclass(frozen=True)
class RequestIdentity:
    """Identifiers for one stream request.

    Parsed from ``tt1234567`` / ``tmdb:12345`` (movie) or
    ``tt1234567:1:5`` / ``tmdb:12345:1:5`` (series, season 1, episode 5).
    """

    content_type: StremioContentType
    imdb_id: str | None = None
    tmdb_id: str | None = None
    season: int | None = None
    episode: int | None = None

    @property
    def is_episode(self) -> bool:
        return self.season is not None


@dataclass(frozen=True)
class MediaTitle:
    """Display title and release year (best-effort, may be empty)."""

    title: str | None = None
    year: str | None = None


@dataclass(frozen=True)
class ResolvedIdentity:
    """A request identity with a TMDB id plus its display metadata."""

    identity: RequestIdentity
    media: MediaTitle = field(default_factory=MediaTitle)


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Encrypted provider payload. All fields are hex strings."""

    ciphertext: str
    iv: str  # wire name "cin"
    auth_tag: str  # wire name "mao"
    salt: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EncryptedEnvelope:
        """Build an envelope from the provider's ``data`` object.

        Raises:
            MalformedPayload: A field is missing, empty or not a string.
        """
        wire_fields = {
            "ciphertext": "encrypted",
            "iv": "cin",
            "auth_tag": "mao",
            "salt": "salt",
        }
        values: dict[str, str] = {}
        for attr, wire_name in wire_fields.items():
            value = data.get(wire_name)
            if not isinstance(value, str) or not value:
                raise MalformedPayload(f"envelope field {wire_name!r} missing")
            values[attr] = value
        return cls(**values)

    def to_mapping(self) -> dict[str, str]:
        return {
            "encrypted": self.ciphertext,
            "cin": self.iv,
            "mao": self.auth_tag,
            "salt": self.salt,
        }


@dataclass(frozen=True)
class SourceEntry:
    """One playable variant from the decrypted source tree.

    String fields are never None; missing values are empty strings.
    """

    server: str = ""
    url: str = ""
    transport_type: str = ""
    speed: str = ""
    bitrate_label: str = ""
    quality_label: str = ""


@dataclass(frozen=True)
class StreamDescriptor:
    """Final stream handed to the Stremio client."""

    display_name: str
    url: str
    vertical_quality: int
    request_headers: dict[str, str]
    transport_hint: StreamTransport | None = None

    def to_stremio(self) -> dict[str, Any]:
        """Render the Stremio stream JSON object."""
        stream: dict[str, Any] = {
            "name": self.display_name,
            "url": self.url,
            "quality": self.vertical_quality,
        }
        if self.transport_hint is not None:
            stream["type"] = self.transport_hint.value
        stream["headers"] = dict(self.request_headers)
        stream["behaviorHints"] = {
            "notWebReady": True,
            "proxyHeaders": {"request": dict(self.request_headers)},
        }
        return stream
