"""
Ports (interfaces abstraites) du domaine.

Les adaptateurs (client API, stockage SQLModel ou diskcache) implémentent
ces contrats. Les services ne dépendent que de ces interfaces.
"""

from cinecache.core.ports.auth_service import AuthResult, IAuthService
from cinecache.core.ports.movie_service import (
    IMovieService,
    MovieCompletion,
    MoviesCompletion,
)
from cinecache.core.ports.repositories import IMovieRepository

__all__ = [
    "AuthResult",
    "IAuthService",
    "IMovieRepository",
    "IMovieService",
    "MovieCompletion",
    "MoviesCompletion",
]
