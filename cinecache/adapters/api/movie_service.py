"""
Service reseau de recuperation des films.

Implemente IMovieService en interrogeant l'API via la session (qui gere
token et re-authentification). Chaque operation invoque sa completion
exactement une fois: le resultat decode, ou un resultat vide et l'erreur.
"""

from typing import Any, Callable

from loguru import logger

from cinecache.adapters.api.mapping import decode_movie, decode_movies
from cinecache.adapters.api.routes import ApiRoute
from cinecache.adapters.api.session import ApiSession
from cinecache.core.errors import ApiError
from cinecache.core.ports.movie_service import (
    IMovieService,
    MovieCompletion,
    MoviesCompletion,
)


class ApiMovieService(IMovieService):
    """
    Client de l'API de films.

    Example:
        service = ApiMovieService(session)
        await service.get_top_grossing_movies(2016, on_movies)
    """

    def __init__(self, session: ApiSession) -> None:
        self._session = session

    async def get_movie(self, movie_id: int, completion: MovieCompletion) -> None:
        try:
            movie = decode_movie(await self._session.get_json(ApiRoute.movie(movie_id)))
        except ApiError as e:
            logger.warning("Echec de recuperation du film", movie_id=movie_id, error=str(e))
            completion(None, e)
            return
        completion(movie, None)

    async def get_top_grossing_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        await self._get_movies(ApiRoute.top_grossing_movies(year), completion)

    async def get_top_rated_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        await self._get_movies(ApiRoute.top_rated_movies(year), completion)

    async def _get_movies(self, route: ApiRoute, completion: MoviesCompletion) -> None:
        try:
            movies = decode_movies(await self._session.get_json(route))
        except ApiError as e:
            logger.warning("Echec de recuperation des films", route=route.path, error=str(e))
            completion([], e)
            return
        logger.debug("Films recus", route=route.path, count=len(movies))
        completion(movies, None)
