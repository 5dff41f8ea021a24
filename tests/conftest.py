"""
Fixtures pytest partagees pour les tests CineCache.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec chemins temporaires
- Contexte API sur l'environnement local
- Repository SQLModel sur une base SQLite temporaire
- Fabrique de films
"""

from datetime import date
from pathlib import Path
from typing import Callable, Iterator

import pytest

from cinecache.adapters.api.context import ApiContext, ApiEnvironment
from cinecache.config import Settings
from cinecache.core.entities.movie import Actor, Movie
from cinecache.infrastructure.persistence.database import (
    create_db_engine,
    init_db,
    session_factory,
)
from cinecache.infrastructure.persistence.repositories import SQLModelMovieRepository


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Une seule tentative sur 429 pour ne pas attendre le backoff.
    """
    return Settings(
        api_environment=ApiEnvironment.LOCAL,
        database_url=f"sqlite:///{tmp_path}/test.db",
        cache_dir=tmp_path / "cache",
        log_file=tmp_path / "test.log",
        rate_limit_max_attempts=1,
    )


@pytest.fixture
def context() -> ApiContext:
    """Contexte API sans token, sur l'environnement local."""
    return ApiContext(environment=ApiEnvironment.LOCAL)


@pytest.fixture
def engine(tmp_path: Path):
    """Engine SQLite temporaire avec les tables creees."""
    engine = create_db_engine(f"sqlite:///{tmp_path}/cache.db")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_repository(engine) -> Iterator[SQLModelMovieRepository]:
    """Repository SQLModel sur la base temporaire."""
    yield SQLModelMovieRepository(session_factory(engine))


@pytest.fixture
def make_movie() -> Callable[..., Movie]:
    """
    Fabrique de films pour les tests.

    Usage:
        movie = make_movie(1, grossing=300, year=2016, cast=("Amy Adams",))
    """

    def factory(
        movie_id: int,
        name: str = "",
        year: int = 2016,
        grossing: int = 0,
        rating: float = 0.0,
        cast: tuple[str, ...] = (),
    ) -> Movie:
        return Movie(
            id=movie_id,
            name=name or f"Movie {movie_id}",
            year=year,
            release_date=date(year, 1, 1),
            grossing=grossing,
            rating=rating,
            cast=tuple(Actor(name=actor) for actor in cast),
        )

    return factory
