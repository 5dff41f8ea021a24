"""
Contexte d'authentification partage par la session et le coordinateur.

Une seule instance par processus, passee explicitement aux composants qui
en ont besoin. L'adaptateur lit le token a chaque requete, le coordinateur
de relance l'ecrit apres une re-authentification reussie. Les acces sont
proteges par un verrou pour qu'une lecture n'observe jamais une valeur
partiellement ecrite.

Le token n'est pas persiste et n'a pas de date d'expiration.
"""

import threading
from enum import Enum
from typing import Optional


class ApiEnvironment(str, Enum):
    """URL de base de l'API selon l'environnement."""

    PRODUCTION = "http://danielsaidi.com/CocoaHeads-2017-04-03-Alamofire-Realm/api/"
    LOCAL = "http://localhost:8000/api/"

    @property
    def url(self) -> str:
        """Retourne l'URL de base de l'environnement."""
        return self.value


class ApiContext:
    """
    Etat d'authentification mutable partage.

    Attributes:
        auth_token: Token courant, ou None si aucun token n'a ete obtenu
        environment: Environnement API actif

    Example:
        context = ApiContext(environment=ApiEnvironment.PRODUCTION)
        context.auth_token = "abc123"
    """

    def __init__(
        self,
        environment: ApiEnvironment = ApiEnvironment.PRODUCTION,
        auth_token: Optional[str] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._environment = environment
        self._auth_token = auth_token

    @property
    def auth_token(self) -> Optional[str]:
        with self._lock:
            return self._auth_token

    @auth_token.setter
    def auth_token(self, value: Optional[str]) -> None:
        with self._lock:
            self._auth_token = value

    @property
    def environment(self) -> ApiEnvironment:
        with self._lock:
            return self._environment

    @environment.setter
    def environment(self, value: ApiEnvironment) -> None:
        with self._lock:
            self._environment = value
