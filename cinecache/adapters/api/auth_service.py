"""
Service d'authentification de l'application aupres de l'API.

Appelle la route d'authentification, dont le corps de reponse est le
token. Ce service ne modifie pas le contexte: c'est le coordinateur de
relance qui enregistre le token obtenu.
"""

from loguru import logger

from cinecache.adapters.api.routes import ApiRoute
from cinecache.adapters.api.session import ApiSession
from cinecache.core.errors import ApiError
from cinecache.core.ports.auth_service import AuthResult, IAuthService


class ApiAuthService(IAuthService):
    """
    Implementation HTTP de IAuthService.

    La route d'authentification n'est jamais relancee par la session,
    un echec est donc retourne tel quel.
    """

    def __init__(self, session: ApiSession) -> None:
        self._session = session

    async def authorize(self) -> AuthResult:
        """Demande un token; un corps vide signifie aucun token."""
        try:
            token = (await self._session.get_text(ApiRoute.auth())).strip()
        except ApiError as e:
            logger.debug("Appel d'autorisation en echec", error=str(e))
            return AuthResult(token=None, error=e)
        return AuthResult(token=token or None, error=None)
