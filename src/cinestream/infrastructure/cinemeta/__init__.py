from .client import HttpxCinemetaClient

__all__ = ["HttpxCinemetaClient"]
