"""Cache Infrastructure - Backend-Implementations."""

from .memory_adapter import InMemoryIdCache

__all__ = ["InMemoryIdCache"]
