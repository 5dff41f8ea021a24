"""
Routes de l'API de films.

Chaque route connait son chemin et indique si une relance apres
re-authentification a un sens. La route d'authentification n'est jamais
relancee, sinon un echec d'autorisation declencherait une nouvelle
autorisation a l'infini.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cinecache.adapters.api.context import ApiEnvironment


class RouteKind(str, Enum):
    """Type de route de l'API."""

    AUTH = "auth"
    MOVIE = "movie"
    TOP_GROSSING_MOVIES = "top_grossing_movies"
    TOP_RATED_MOVIES = "top_rated_movies"


@dataclass(frozen=True)
class ApiRoute:
    """
    Route de l'API, avec ses parametres de chemin.

    Utiliser les constructeurs nommes plutot que le constructeur direct:

        ApiRoute.auth()
        ApiRoute.movie(7)
        ApiRoute.top_grossing_movies(2016)
        ApiRoute.top_rated_movies(2016)
    """

    kind: RouteKind
    year: Optional[int] = None
    movie_id: Optional[int] = None

    @classmethod
    def auth(cls) -> "ApiRoute":
        return cls(RouteKind.AUTH)

    @classmethod
    def movie(cls, movie_id: int) -> "ApiRoute":
        return cls(RouteKind.MOVIE, movie_id=movie_id)

    @classmethod
    def top_grossing_movies(cls, year: int) -> "ApiRoute":
        return cls(RouteKind.TOP_GROSSING_MOVIES, year=year)

    @classmethod
    def top_rated_movies(cls, year: int) -> "ApiRoute":
        return cls(RouteKind.TOP_RATED_MOVIES, year=year)

    @property
    def path(self) -> str:
        """Chemin relatif a l'URL de base de l'environnement."""
        if self.kind is RouteKind.AUTH:
            return "auth"
        if self.kind is RouteKind.MOVIE:
            return f"movies/{self.movie_id}"
        if self.kind is RouteKind.TOP_GROSSING_MOVIES:
            return f"movies/{self.year}/grossing"
        return f"movies/{self.year}/rating"

    @property
    def should_retry_after_auth(self) -> bool:
        """False pour la route d'authentification, True sinon."""
        return self.kind is not RouteKind.AUTH

    def url(self, environment: ApiEnvironment) -> str:
        """Construit l'URL complete de la route pour un environnement."""
        return f"{environment.url.rstrip('/')}/{self.path}"
