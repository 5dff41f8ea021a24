"""
Repository de films base sur diskcache.

Alternative cle/valeur au cache SQLite: chaque film est stocke sous la
cle "movie:<id>". Les lots sont ecrits dans une transaction diskcache,
les lecteurs ne voient donc jamais un lot partiel.
"""

import sqlite3
from collections.abc import Iterable
from typing import Optional

from diskcache import Cache, Timeout
from loguru import logger

from cinecache.core.entities.movie import Movie
from cinecache.core.errors import StorageError
from cinecache.core.ports.repositories import IMovieRepository

_STORAGE_ERRORS = (OSError, sqlite3.Error, Timeout)


class DiskCacheMovieRepository(IMovieRepository):
    """
    Cache de films persistant sur disque.

    Example:
        repository = DiskCacheMovieRepository(cache_dir=".cache/movies")
        repository.upsert_batch(movies)
        movie = repository.get_by_id(7)
        repository.close()
    """

    KEY_PREFIX = "movie:"

    def __init__(self, cache_dir: str = ".cache/movies") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(cache_dir)

    def _key(self, movie_id: int) -> str:
        return f"{self.KEY_PREFIX}{movie_id}"

    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        try:
            return self._cache.get(self._key(movie_id))
        except _STORAGE_ERRORS as e:
            raise StorageError(f"Failed to read movie {movie_id}: {e}") from e

    def list_by_year(self, year: int) -> list[Movie]:
        """Parcourt les films en cache et filtre sur l'annee."""
        movies = []
        try:
            for key in self._cache.iterkeys():
                if not isinstance(key, str) or not key.startswith(self.KEY_PREFIX):
                    continue
                movie = self._cache.get(key)
                # La cle peut disparaitre entre iterkeys() et get()
                if movie is not None and movie.year == year:
                    movies.append(movie)
        except _STORAGE_ERRORS as e:
            raise StorageError(f"Failed to list movies for {year}: {e}") from e
        return movies

    def upsert_batch(self, movies: Iterable[Movie]) -> None:
        latest: dict[int, Movie] = {}
        for movie in movies:
            latest[movie.id] = movie
        if not latest:
            return

        try:
            with self._cache.transact():
                for movie_id, movie in latest.items():
                    self._cache.set(self._key(movie_id), movie)
        except _STORAGE_ERRORS as e:
            raise StorageError(f"Failed to write {len(latest)} movies: {e}") from e

        logger.debug("Films enregistres dans le cache disque", count=len(latest))

    def close(self) -> None:
        """Ferme la connexion au cache."""
        self._cache.close()
