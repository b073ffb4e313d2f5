"""Stream pipeline errors.

Every error here is terminal for the request it occurs in and degrades to
an empty stream list. The ``stage`` label is what ends up in the logs.
"""

from __future__ import annotations


class StreamPipelineError(Exception):
    """Base class for all stream pipeline failures."""

    stage = "pipeline"

    @property
    def reason(self) -> str:
        return str(self) or type(self).__name__


class IdentityUnresolved(StreamPipelineError):
    """No TMDB id could be obtained for the catalog identifier."""

    stage = "identity"


class ProviderUnavailable(StreamPipelineError):
    """Network error, timeout or non-success status from the provider."""

    stage = "provider"


class DecryptionError(StreamPipelineError):
    """Malformed envelope bytes or authentication tag mismatch."""

    stage = "decrypt"


class MalformedPayload(StreamPipelineError):
    """Response or decrypted JSON does not have the expected shape."""

    stage = "parse"
