"""
Assemblage explicite des composants au demarrage.

Construit le graphe d'objets par injection via les constructeurs:

    ApiContext <- ApiRequestAdapter
               <- ApiSession <- ApiAuthService <- ApiRequestRetrier
                             <- ApiMovieService <- CachedMovieService -> IMovieRepository

Utilisation :
    app = create_application()
    await app.movie_service.get_top_grossing_movies(2016, on_movies)
    await app.close()
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy import Engine

from cinecache.adapters.api.auth_service import ApiAuthService
from cinecache.adapters.api.context import ApiContext
from cinecache.adapters.api.movie_service import ApiMovieService
from cinecache.adapters.api.request import ApiRequestAdapter
from cinecache.adapters.api.retrier import ApiRequestRetrier, ResponsePredicate
from cinecache.adapters.api.session import ApiSession
from cinecache.config import CacheBackend, Settings
from cinecache.core.ports.repositories import IMovieRepository
from cinecache.infrastructure.persistence.database import (
    create_db_engine,
    init_db,
    session_factory,
)
from cinecache.infrastructure.persistence.repositories import (
    DiskCacheMovieRepository,
    SQLModelMovieRepository,
)
from cinecache.logging_config import configure_logging
from cinecache.services.cached_movie_service import CachedMovieService


@dataclass
class Application:
    """Composants assembles de l'application."""

    settings: Settings
    context: ApiContext
    session: ApiSession
    retrier: ApiRequestRetrier
    repository: IMovieRepository
    movie_service: CachedMovieService
    engine: Optional[Engine] = None

    async def close(self) -> None:
        """Ferme le client HTTP, le cache local et l'engine SQLite."""
        await self.session.close()
        self.repository.close()
        if self.engine is not None:
            self.engine.dispose()


def create_repository(
    settings: Settings,
) -> tuple[IMovieRepository, Optional[Engine]]:
    """
    Cree le cache local selon settings.cache_backend.

    Returns:
        Le repository et l'engine SQLite a liberer (None pour diskcache)
    """
    if settings.cache_backend is CacheBackend.DISK:
        return DiskCacheMovieRepository(cache_dir=str(settings.cache_dir)), None

    engine = create_db_engine(settings.database_url)
    init_db(engine)
    return SQLModelMovieRepository(session_factory(engine)), engine


def create_application(
    settings: Optional[Settings] = None,
    should_retry_response: Optional[ResponsePredicate] = None,
    setup_logging: bool = False,
) -> Application:
    """
    Assemble l'application.

    Args:
        settings: Configuration (defaut: chargee depuis l'environnement)
        should_retry_response: Politique de relance sur le code HTTP
                               (defaut: tout echec est eligible)
        setup_logging: Configure loguru depuis settings (stderr + fichier JSON)

    Returns:
        Application prete a l'emploi
    """
    settings = settings or Settings()
    if setup_logging:
        configure_logging(settings)

    context = ApiContext(environment=settings.api_environment)
    session = ApiSession(
        context,
        ApiRequestAdapter(context),
        timeout=settings.request_timeout,
        max_auth_retries=settings.max_auth_retries,
        rate_limit_attempts=settings.rate_limit_max_attempts,
    )
    retrier = ApiRequestRetrier(
        context,
        ApiAuthService(session),
        should_retry_response=should_retry_response,
    )
    session.set_retrier(retrier)

    repository, engine = create_repository(settings)
    movie_service = CachedMovieService(ApiMovieService(session), repository)

    logger.debug(
        "Application assemblee",
        environment=settings.api_environment.name,
        cache_backend=settings.cache_backend.value,
    )
    return Application(
        settings=settings,
        context=context,
        session=session,
        retrier=retrier,
        repository=repository,
        movie_service=movie_service,
        engine=engine,
    )
