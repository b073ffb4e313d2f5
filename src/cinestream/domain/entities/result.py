"""Tagged outcome passed between stream pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from cinestream.domain.exceptions import StreamPipelineError

T = TypeVar("T")


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Either a value or the error that stopped the stage."""

    value: T | None = None
    error: StreamPipelineError | None = None

    @classmethod
    def success(cls, value: T) -> StageResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: StreamPipelineError) -> StageResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
