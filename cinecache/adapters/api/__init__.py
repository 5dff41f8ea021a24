"""
Client de l'API de films.

Ce module fournit la pile reseau:
- ApiContext: environnement et token partages
- ApiRoute: routes de l'API et eligibilite a la relance
- ApiRequestAdapter: ajoute le header AUTH_TOKEN aux requetes
- ApiRequestRetrier: regroupe les re-authentifications et relance les requetes
- ApiSession: execution des requetes via httpx (429 gere avec tenacity)
- ApiAuthService / ApiMovieService: services bases sur la session
"""

from cinecache.adapters.api.auth_service import ApiAuthService
from cinecache.adapters.api.context import ApiContext, ApiEnvironment
from cinecache.adapters.api.movie_service import ApiMovieService
from cinecache.adapters.api.request import ApiRequest, ApiRequestAdapter
from cinecache.adapters.api.retrier import ApiRequestRetrier
from cinecache.adapters.api.routes import ApiRoute
from cinecache.adapters.api.session import ApiSession

__all__ = [
    "ApiAuthService",
    "ApiContext",
    "ApiEnvironment",
    "ApiMovieService",
    "ApiRequest",
    "ApiRequestAdapter",
    "ApiRequestRetrier",
    "ApiRoute",
    "ApiSession",
]
