"""Cinestream: CinemaOS stream resolution for Stremio."""

__version__ = "1.1.0"
