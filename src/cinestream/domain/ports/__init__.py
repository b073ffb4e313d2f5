from .cache import IdCachePort
from .metadata import MetadataClientPort
from .stream_provider import StreamProviderPort

__all__ = [
    "IdCachePort",
    "MetadataClientPort",
    "StreamProviderPort",
]
