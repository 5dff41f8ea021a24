"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant le contrat du cache local des
films. Les implémentations fournissent le stockage concret (SQLite via
SQLModel, diskcache).
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Optional

from cinecache.core.entities.movie import Movie


class IMovieRepository(ABC):
    """
    Interface de stockage local des films et de leurs acteurs.

    Les écritures sont atomiques par lot : tous les films d'un lot sont
    enregistrés, ou aucun. Une clé déjà présente est écrasée (le dernier
    écrivain gagne).
    """

    @abstractmethod
    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        """Récupère un film par sa clé primaire."""
        ...

    @abstractmethod
    def list_by_year(self, year: int) -> list[Movie]:
        """
        Liste les films d'une année.

        L'ordre est celui du stockage, non trié : l'appelant trie.
        """
        ...

    @abstractmethod
    def upsert_batch(self, movies: Iterable[Movie]) -> None:
        """
        Insère ou remplace un lot de films (avec leur casting).

        Lève :
            StorageError : En cas d'erreur d'écriture ou de contrainte
        """
        ...

    def close(self) -> None:
        """Libère les ressources du stockage."""
