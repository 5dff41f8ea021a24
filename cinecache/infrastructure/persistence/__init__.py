"""
Couche de persistance du cache local.

- database: engine SQLite et fabrique de sessions
- models: tables SQLModel (films, acteurs, casting)
- repositories: implementations de IMovieRepository (SQLModel, diskcache)
"""

from cinecache.infrastructure.persistence.database import (
    create_db_engine,
    init_db,
    session_factory,
)

__all__ = ["create_db_engine", "init_db", "session_factory"]
