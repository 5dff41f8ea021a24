"""
Configuration de la base de donnees SQLite du cache local.

Ce module fournit :
- Engine SQLite utilisable depuis plusieurs threads (les lectures et
  ecritures du cache passent par le pool d'executeurs asyncio)
- Fabrique de sessions
- Fonction d'initialisation des tables

L'URL est configuree via CINECACHE_DATABASE_URL (defaut: sqlite:///cinecache.db).
L'engine est cree explicitement au demarrage et passe aux repositories.
"""

from functools import partial
from pathlib import Path
from typing import Callable

from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Cree l'engine de la base du cache.

    Cree le repertoire parent si l'URL designe un fichier SQLite. Une base
    en memoire est servie par une connexion unique (StaticPool): sinon chaque
    thread du pool d'executeurs verrait sa propre base vide.

    Args:
        database_url: URL SQLAlchemy (ex: sqlite:///data/cinecache.db)
        echo: Journalise les requetes SQL

    Returns:
        Engine SQLAlchemy
    """
    connect_args = {}
    engine_options: dict = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if _is_in_memory(database_url):
            engine_options["poolclass"] = StaticPool
        elif database_url.startswith("sqlite:///"):
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            db_path.parent.mkdir(exist_ok=True, parents=True)

    return create_engine(
        database_url, echo=echo, connect_args=connect_args, **engine_options
    )


def _is_in_memory(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///") or ":memory:" in database_url


def session_factory(engine: Engine) -> Callable[[], Session]:
    """
    Retourne une fabrique de sessions liees a l'engine.

    Chaque operation du repository ouvre sa propre session:
        with factory() as session:
            ...
    """
    return partial(Session, engine)


def init_db(engine: Engine) -> None:
    """
    Cree les tables du cache si elles n'existent pas.

    Doit etre appelee une fois au demarrage de l'application.
    """
    # Import des modeles pour enregistrer leurs metadonnees
    from cinecache.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
