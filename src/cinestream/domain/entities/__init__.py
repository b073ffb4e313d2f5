from .result import StageResult
from .stream import (
    EncryptedEnvelope,
    MediaTitle,
    RequestIdentity,
    ResolvedIdentity,
    SourceEntry,
    StreamDescriptor,
    StreamTransport,
    StremioContentType,
)

__all__ = [
    "EncryptedEnvelope",
    "MediaTitle",
    "RequestIdentity",
    "ResolvedIdentity",
    "SourceEntry",
    "StageResult",
    "StreamDescriptor",
    "StreamTransport",
    "StremioContentType",
]
