"""Entites du domaine."""

from cinecache.core.entities.movie import Actor, Movie

__all__ = ["Actor", "Movie"]
