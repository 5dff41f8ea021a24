"""
Taxonomie des erreurs de CineCache.

Le chemin reseau leve des ApiError (transport, statut HTTP, decodage,
authentification). Le cache local leve des StorageError.

Politique de propagation:
- TransportError, ResponseStatusError et DecodeError arrivent a l'appelant
  via la completion du chemin reseau, jamais via celle du cache.
- AuthError est consommee par le coordinateur de re-authentification et
  convertie en "ne pas relancer".
- StorageError a l'ecriture est journalisee sans bloquer la livraison
  du resultat reseau.
"""

from typing import Optional


class CineCacheError(Exception):
    """Exception de base de CineCache."""


class ApiError(CineCacheError):
    """Erreur sur le chemin reseau."""


class TransportError(ApiError):
    """Serveur injoignable, timeout, redirections en boucle ou URL invalide."""


class ResponseStatusError(ApiError):
    """
    Reponse HTTP avec un statut d'echec (hors 2xx).

    Attributes:
        status_code: Code HTTP retourne par le serveur
        url: URL de la requete en echec (optionnelle)
    """

    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.url = url
        message = f"Request failed with status {status_code}"
        if url:
            message = f"{message}: {url}"
        super().__init__(message)


class DecodeError(ApiError):
    """Le contenu de la reponse ne correspond pas au format attendu."""


class AuthError(ApiError):
    """La re-authentification a echoue."""


class StorageError(CineCacheError):
    """Echec de lecture ou d'ecriture dans le cache local."""
