"""CinemaOS provider: request signing, envelope crypto, source parsing."""

from .client import HttpxCinemaOsClient
from .crypto import EnvelopeCrypto
from .normalizer import normalize_sources, parse_sources
from .signer import HashSigner

__all__ = [
    "EnvelopeCrypto",
    "HashSigner",
    "HttpxCinemaOsClient",
    "normalize_sources",
    "parse_sources",
]
