"""
Service de films adosse au cache local.

Decore un autre IMovieService (en pratique le service reseau). Chaque
appel lance deux chemins en parallele:
- chemin cache: lecture dans le repository local, livree immediatement
- chemin reseau: appel du service decore; en cas de succes les films sont
  enregistres dans le cache avant d'etre livres

La completion est donc invoquee exactement deux fois par appel, dans un
ordre quelconque (le cache arrive generalement en premier). L'ecriture
dans le cache est best-effort: une StorageError est journalisee et ne
bloque pas la livraison du resultat reseau.
"""

import asyncio
from collections.abc import Awaitable, Sequence
from typing import Any, Callable, Optional

from loguru import logger

from cinecache.core.entities.movie import Movie
from cinecache.core.errors import StorageError
from cinecache.core.ports.movie_service import (
    IMovieService,
    MovieCompletion,
    MoviesCompletion,
)
from cinecache.core.ports.repositories import IMovieRepository

# Cle de tri descendante pour les classements par annee
RankingKey = Callable[[Movie], float]


def _capture() -> tuple[asyncio.Future, Callable[[Any, Optional[Exception]], None]]:
    """Cree une completion qui enregistre son premier resultat dans un future."""
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    def completion(result: Any, error: Optional[Exception]) -> None:
        if not future.done():
            future.set_result((result, error))

    return future, completion


class CachedMovieService(IMovieService):
    """
    Service de films avec cache local.

    Example:
        service = CachedMovieService(ApiMovieService(session), repository)

        def on_movies(movies, error):
            print(f"{len(movies)} films", error)

        # on_movies est appele deux fois: cache puis reseau
        await service.get_top_grossing_movies(2016, on_movies)
    """

    def __init__(
        self,
        base_service: IMovieService,
        repository: IMovieRepository,
    ) -> None:
        """
        Initialise le service.

        Args:
            base_service: Service reseau decore
            repository: Cache local des films
        """
        self._base_service = base_service
        self._repository = repository

    async def get_movie(self, movie_id: int, completion: MovieCompletion) -> None:
        await asyncio.gather(
            self._get_movie_from_db(movie_id, completion),
            self._get_movie_from_service(movie_id, completion),
        )

    async def get_top_grossing_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        await asyncio.gather(
            self._get_ranked_movies_from_db(
                year, lambda movie: movie.grossing, completion
            ),
            self._get_movies_from_service(
                self._base_service.get_top_grossing_movies, year, completion
            ),
        )

    async def get_top_rated_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        await asyncio.gather(
            self._get_ranked_movies_from_db(
                year, lambda movie: movie.rating, completion
            ),
            self._get_movies_from_service(
                self._base_service.get_top_rated_movies, year, completion
            ),
        )

    async def _get_movie_from_db(
        self, movie_id: int, completion: MovieCompletion
    ) -> None:
        loop = asyncio.get_running_loop()
        try:
            movie = await loop.run_in_executor(
                None, self._repository.get_by_id, movie_id
            )
        except StorageError as e:
            logger.warning("Lecture du cache impossible", movie_id=movie_id, error=str(e))
            completion(None, e)
            return
        completion(movie, None)

    async def _get_movie_from_service(
        self, movie_id: int, completion: MovieCompletion
    ) -> None:
        future, capture = _capture()
        await self._base_service.get_movie(movie_id, capture)
        movie, error = await future
        if movie is not None:
            await self._persist([movie])
        completion(movie, error)

    async def _get_ranked_movies_from_db(
        self, year: int, ranking: RankingKey, completion: MoviesCompletion
    ) -> None:
        """
        Lit les films d'une annee dans le cache, tries par ranking decroissant.

        Le tri est stable: les ex aequo gardent l'ordre du stockage.
        """
        loop = asyncio.get_running_loop()
        try:
            movies = await loop.run_in_executor(
                None, self._repository.list_by_year, year
            )
        except StorageError as e:
            logger.warning("Lecture du cache impossible", year=year, error=str(e))
            completion([], e)
            return
        completion(sorted(movies, key=ranking, reverse=True), None)

    async def _get_movies_from_service(
        self,
        fetch: Callable[[int, MoviesCompletion], Awaitable[None]],
        year: int,
        completion: MoviesCompletion,
    ) -> None:
        future, capture = _capture()
        await fetch(year, capture)
        movies, error = await future
        if error is None:
            await self._persist(movies)
        completion(movies, error)

    async def _persist(self, movies: Sequence[Movie]) -> None:
        """Enregistre les films dans le cache (best-effort)."""
        if not movies:
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._repository.upsert_batch, list(movies))
        except StorageError as e:
            logger.error(
                "Echec de l'ecriture dans le cache",
                count=len(movies),
                error=str(e),
            )
