"""
Descripteur de requete et adaptateur d'authentification.

ApiRequest decrit une requete avant son envoi par httpx. L'adaptateur
produit une copie portant le header AUTH_TOKEN quand le contexte dispose
d'un token. C'est une transformation pure et synchrone: elle n'echoue pas
et ne modifie pas la requete d'origine.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from cinecache.adapters.api.context import ApiContext
from cinecache.adapters.api.routes import ApiRoute

AUTH_TOKEN_HEADER = "AUTH_TOKEN"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


class ParameterEncoding(str, Enum):
    """Encodage des parametres: query string (URL) ou corps JSON."""

    URL = "url"
    JSON = "json"

    @classmethod
    def default_for(cls, method: HttpMethod) -> "ParameterEncoding":
        """GET encode dans l'URL, POST et PUT en JSON."""
        return cls.URL if method is HttpMethod.GET else cls.JSON


@dataclass(frozen=True)
class ApiRequest:
    """
    Requete sortante vers l'API.

    Attributes:
        route: Route appelee (determine l'eligibilite a la relance)
        method: Methode HTTP
        url: URL complete
        params: Parametres de la requete
        encoding: Encodage des parametres
        headers: Headers supplementaires
    """

    route: ApiRoute
    method: HttpMethod
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    encoding: ParameterEncoding = ParameterEncoding.URL
    headers: dict[str, str] = field(default_factory=dict)

    def with_header(self, name: str, value: str) -> "ApiRequest":
        """Retourne une copie de la requete avec un header ajoute."""
        return replace(self, headers={**self.headers, name: value})


class ApiRequestAdapter:
    """
    Ajoute le token d'authentification courant aux requetes sortantes.

    Example:
        adapter = ApiRequestAdapter(context)
        request = adapter.adapt(request)
    """

    def __init__(self, context: ApiContext) -> None:
        self._context = context

    def adapt(self, request: ApiRequest) -> ApiRequest:
        """
        Retourne la requete avec le header AUTH_TOKEN si un token existe.

        Args:
            request: Requete a decorer

        Returns:
            Une copie avec le header, ou la requete inchangee sans token
        """
        token: Optional[str] = self._context.auth_token
        if token is None:
            return request
        return request.with_header(AUTH_TOKEN_HEADER, token)
