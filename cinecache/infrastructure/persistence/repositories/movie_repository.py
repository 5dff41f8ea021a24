"""
Implementation SQLModel du repository Movie.

Implemente IMovieRepository pour le cache local des films dans SQLite.
Chaque operation ouvre sa propre session: le repository est appele depuis
les threads du pool d'executeurs asyncio, sous un verrou commun.
"""

import threading
from collections.abc import Iterable
from typing import Callable, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from cinecache.core.entities.movie import Actor, Movie
from cinecache.core.errors import StorageError
from cinecache.core.ports.repositories import IMovieRepository
from cinecache.infrastructure.persistence.models import (
    ActorModel,
    MovieActorLink,
    MovieModel,
)


class SQLModelMovieRepository(IMovieRepository):
    """
    Repository SQLModel pour les films.

    Implemente IMovieRepository avec conversion bidirectionnelle entre
    l'entite Movie (domaine) et MovieModel + MovieActorLink (persistance).
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        """
        Initialise le repository.

        Args :
            session_factory : Fabrique de sessions SQLModel (voir database.session_factory)
        """
        self._session_factory = session_factory
        # Une base en memoire partage une seule connexion entre les threads
        self._lock = threading.Lock()

    def _to_entity(self, model: MovieModel, cast: tuple[Actor, ...]) -> Movie:
        return Movie(
            id=model.id,
            name=model.name,
            year=model.year,
            release_date=model.release_date,
            grossing=model.grossing,
            rating=model.rating,
            cast=cast,
        )

    def _to_model(self, entity: Movie) -> MovieModel:
        return MovieModel(
            id=entity.id,
            name=entity.name,
            year=entity.year,
            release_date=entity.release_date,
            grossing=entity.grossing,
            rating=entity.rating,
        )

    def _load_casts(
        self, session: Session, movie_ids: list[int]
    ) -> dict[int, tuple[Actor, ...]]:
        """Charge les castings ordonnes d'un ensemble de films."""
        statement = (
            select(MovieActorLink)
            .where(col(MovieActorLink.movie_id).in_(movie_ids))
            .order_by(MovieActorLink.movie_id, MovieActorLink.position)
        )
        casts: dict[int, list[Actor]] = {movie_id: [] for movie_id in movie_ids}
        for link in session.exec(statement).all():
            casts[link.movie_id].append(Actor(name=link.actor_name))
        return {movie_id: tuple(actors) for movie_id, actors in casts.items()}

    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        """Recupere un film par sa cle primaire."""
        try:
            with self._lock, self._session_factory() as session:
                model = session.get(MovieModel, movie_id)
                if model is None:
                    return None
                casts = self._load_casts(session, [model.id])
                return self._to_entity(model, casts[model.id])
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read movie {movie_id}: {e}") from e

    def list_by_year(self, year: int) -> list[Movie]:
        """Liste les films d'une annee, dans l'ordre du stockage."""
        try:
            with self._lock, self._session_factory() as session:
                statement = select(MovieModel).where(MovieModel.year == year)
                models = session.exec(statement).all()
                if not models:
                    return []
                casts = self._load_casts(session, [model.id for model in models])
                return [self._to_entity(model, casts[model.id]) for model in models]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list movies for {year}: {e}") from e

    def upsert_batch(self, movies: Iterable[Movie]) -> None:
        """
        Insere ou remplace un lot de films dans une seule transaction.

        Pour une cle presente plusieurs fois dans le lot, la derniere
        occurrence gagne. Le casting d'un film remplace est reecrit.
        """
        latest: dict[int, Movie] = {}
        for movie in movies:
            latest[movie.id] = movie
        if not latest:
            return

        actor_names = {actor.name for movie in latest.values() for actor in movie.cast}
        try:
            # La fermeture de la session annule la transaction non validee
            with self._lock, self._session_factory() as session:
                for movie in latest.values():
                    session.merge(self._to_model(movie))
                for name in actor_names:
                    session.merge(ActorModel(name=name))

                old_links = session.exec(
                    select(MovieActorLink).where(
                        col(MovieActorLink.movie_id).in_(list(latest))
                    )
                ).all()
                for link in old_links:
                    session.delete(link)
                session.flush()

                for movie in latest.values():
                    for position, actor in enumerate(movie.cast):
                        session.add(
                            MovieActorLink(
                                movie_id=movie.id,
                                position=position,
                                actor_name=actor.name,
                            )
                        )
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {len(latest)} movies: {e}") from e

        logger.debug("Films enregistres dans le cache", count=len(latest))
