"""
Implementations de IMovieRepository.

- SQLModelMovieRepository: cache SQLite via SQLModel (defaut)
- DiskCacheMovieRepository: cache cle/valeur via diskcache

Chaque repository :
- Herite de l'interface ABC du domaine
- Convertit entre entites de domaine et enregistrements stockes
- Ecrit les lots de facon atomique et leve StorageError en cas d'echec
"""

from cinecache.infrastructure.persistence.repositories.disk_cache_repository import (
    DiskCacheMovieRepository,
)
from cinecache.infrastructure.persistence.repositories.movie_repository import (
    SQLModelMovieRepository,
)

__all__ = [
    "DiskCacheMovieRepository",
    "SQLModelMovieRepository",
]
