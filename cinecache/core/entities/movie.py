"""
Movie entities.

Value entities shared by the network path and the local cache. Instances
decoded from the API are transient; the cache copies them into its own
record types when persisting.
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Actor:
    """
    Cast member of a movie.

    Attributes:
        name: Actor name, also the actor primary key in the cache
    """

    name: str = ""


@dataclass(frozen=True)
class Movie:
    """
    Movie as returned by the movie API.

    Attributes:
        id: Primary key, unique in the cache (upsert overwrites on collision)
        name: Movie title
        year: Release year, used by the ranking queries
        release_date: Release date (UTC calendar day)
        grossing: Box office amount
        rating: Average rating
        cast: Ordered cast
    """

    id: int
    name: str = ""
    year: int = 0
    release_date: date = date(1970, 1, 1)
    grossing: int = 0
    rating: float = 0.0
    cast: tuple[Actor, ...] = field(default_factory=tuple)
