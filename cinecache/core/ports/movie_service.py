"""
Interface port pour les services de films.

Deux implémentations existent : le service réseau (API) et le service
adossé au cache local, qui décore le premier. Les résultats sont livrés
via des callbacks de complétion plutôt que par valeur de retour, car le
service avec cache livre deux résultats par appel.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from cinecache.core.entities.movie import Movie

# (film ou None, erreur ou None)
MovieCompletion = Callable[[Optional[Movie], Optional[Exception]], None]

# (films, erreur ou None) - liste vide en cas d'échec
MoviesCompletion = Callable[[list[Movie], Optional[Exception]], None]


class IMovieService(ABC):
    """
    Interface de récupération des films.

    Chaque opération est une coroutine qui invoque la complétion fournie.
    Le nombre d'invocations dépend de l'implémentation : une pour le
    service réseau, deux (cache puis réseau, dans un ordre quelconque)
    pour le service avec cache.
    """

    @abstractmethod
    async def get_movie(self, movie_id: int, completion: MovieCompletion) -> None:
        """
        Récupère un film par son identifiant.

        Args :
            movie_id : Identifiant du film (clé primaire)
            completion : Callback recevant (film, erreur)
        """
        ...

    @abstractmethod
    async def get_top_grossing_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        """
        Récupère les films d'une année classés par recettes décroissantes.

        Args :
            year : Année de sortie
            completion : Callback recevant (films, erreur)
        """
        ...

    @abstractmethod
    async def get_top_rated_movies(
        self, year: int, completion: MoviesCompletion
    ) -> None:
        """
        Récupère les films d'une année classés par note décroissante.

        Args :
            year : Année de sortie
            completion : Callback recevant (films, erreur)
        """
        ...
