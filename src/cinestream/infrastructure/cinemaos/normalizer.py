"""Decrypted CinemaOS payload -> flat SourceEntry list.

Payload shape (keys are provider-assigned, order matters)::

    {"sources": {
        "<key>": {"server": "...", "url": "...", "type": "hls",
                  "speed": "...", "bitrate": "...", "quality": "..."},
        "<key>": {"server": "...", "speed": "...", "bitrate": "...",
                  "qualities": {"1080": {"url": "...", "type": "mp4"}, ...}}
    }}
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from cinestream.domain.entities.stream import SourceEntry, StreamTransport
from cinestream.domain.exceptions import MalformedPayload

log = structlog.get_logger(__name__)

DEFAULT_QUALITY = 1080

# Checked in order; first substring hit wins.
_QUALITY_MARKERS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("4k", "2160"), 2160),
    (("fhd", "1080"), 1080),
    (("hd", "720"), 720),
    (("480", "sd"), 480),
    (("360",), 360),
)


def _text(value: Any) -> str:
    """Stringify a scalar field; falsy values become ``""``."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def quality_from_label(label: str | None) -> int:
    """Map a free-form quality label to a vertical resolution.

    Unknown or empty labels default to 1080.
    """
    if not label:
        return DEFAULT_QUALITY
    lowered = str(label).lower()
    for markers, quality in _QUALITY_MARKERS:
        if any(marker in lowered for marker in markers):
            return quality
    return DEFAULT_QUALITY


def resolve_quality(entry: SourceEntry) -> int:
    """Pick the vertical quality for *entry*.

    The bitrate label is a coarse hint; a non-empty quality label
    overrides it (integer labels are taken verbatim).
    """
    quality = DEFAULT_QUALITY
    bitrate = entry.bitrate_label.lower()
    if "fhd" in bitrate:
        quality = 1080
    elif "hd" in bitrate:
        quality = 720

    label = entry.quality_label.strip()
    if label:
        quality = int(label) if label.isdecimal() else quality_from_label(label)
    return quality


def infer_transport(raw_type: str) -> StreamTransport | None:
    """HLS/DASH from the provider's ``type`` field; None for progressive."""
    lowered = raw_type.lower()
    if "hls" in lowered:
        return StreamTransport.HLS
    if "dash" in lowered:
        return StreamTransport.DASH
    return None


def _expand_source(key: str, source: Mapping[str, Any]) -> list[SourceEntry]:
    server = _text(source.get("server")) or key
    speed = _text(source.get("speed"))
    bitrate = _text(source.get("bitrate"))

    qualities = source.get("qualities")
    if isinstance(qualities, Mapping):
        entries: list[SourceEntry] = []
        for quality_key, variant in qualities.items():
            variant = variant if isinstance(variant, Mapping) else {}
            entries.append(
                SourceEntry(
                    server=server,
                    url=_text(variant.get("url")),
                    transport_type=_text(variant.get("type")),
                    speed=speed,
                    bitrate_label=bitrate,
                    quality_label=str(quality_key),
                )
            )
        return entries

    return [
        SourceEntry(
            server=server,
            url=_text(source.get("url")),
            transport_type=_text(source.get("type")),
            speed=speed,
            bitrate_label=bitrate,
            quality_label=_text(source.get("quality")),
        )
    ]


def parse_sources(plaintext: str) -> list[SourceEntry]:
    """Strictly parse the decrypted payload.

    Raises:
        MalformedPayload: Not JSON, top level not an object, or
            ``sources`` present but not an object.
    """
    try:
        payload = json.loads(plaintext)
    except ValueError as exc:
        raise MalformedPayload(f"decrypted payload is not JSON: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise MalformedPayload("decrypted payload is not a JSON object")

    sources = payload.get("sources")
    if sources is None:
        return []
    if not isinstance(sources, Mapping):
        raise MalformedPayload("'sources' is not a JSON object")

    entries: list[SourceEntry] = []
    for key, source in sources.items():
        if not isinstance(source, Mapping):
            log.debug("cinemaos_source_skipped", key=key, kind=type(source).__name__)
            continue
        entries.extend(_expand_source(str(key), source))
    return entries


def normalize_sources(plaintext: str) -> list[SourceEntry]:
    """Best-effort variant of :func:`parse_sources`; never raises."""
    try:
        return parse_sources(plaintext)
    except MalformedPayload as exc:
        log.warning("cinemaos_sources_malformed", reason=exc.reason)
        return []
