from .cinemaos_stream import CinemaOsStreamUseCase
from .identity import IdentityResolver, parse_catalog_id

__all__ = ["CinemaOsStreamUseCase", "IdentityResolver", "parse_catalog_id"]
