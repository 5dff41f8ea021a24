"""
Interface port pour le service d'authentification.

Le service effectue l'appel réseau de ré-autorisation. Il est invoqué par
le coordinateur de relance, jamais directement par les services de films.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional


class AuthResult(NamedTuple):
    """
    Résultat d'une tentative d'autorisation.

    Attributs :
        token : Token obtenu, ou None si l'autorisation a échoué
        error : Erreur rencontrée, ou None
    """

    token: Optional[str] = None
    error: Optional[Exception] = None


class IAuthService(ABC):
    """Interface du service de ré-autorisation de l'application."""

    @abstractmethod
    async def authorize(self) -> AuthResult:
        """
        Demande un nouveau token à l'API.

        Les erreurs sont retournées dans AuthResult.error, pas levées.

        Retourne :
            AuthResult avec le token ou l'erreur
        """
        ...
