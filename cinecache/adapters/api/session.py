"""
Session HTTP de l'API de films.

Point unique d'execution des requetes: construit la requete a partir de la
route, applique l'adaptateur (token), l'envoie via httpx et convertit les
echecs dans la taxonomie de CineCache. En cas d'echec de transport ou de
statut, le coordinateur de re-authentification decide d'une relance; la
requete est alors readaptee pour porter le nouveau token.

Usage:
    session = ApiSession(context, ApiRequestAdapter(context))
    session.set_retrier(ApiRequestRetrier(context, ApiAuthService(session)))
    movies = await session.get_json(ApiRoute.top_grossing_movies(2016))
    await session.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from cinecache.adapters.api.context import ApiContext
from cinecache.adapters.api.rate_limit import RateLimitError, send_with_rate_limit
from cinecache.adapters.api.request import (
    ApiRequest,
    ApiRequestAdapter,
    HttpMethod,
    ParameterEncoding,
)
from cinecache.adapters.api.retrier import ApiRequestRetrier
from cinecache.adapters.api.routes import ApiRoute
from cinecache.core.errors import DecodeError, ResponseStatusError, TransportError


class ApiSession:
    """
    Execute les requetes vers l'API avec authentification et relance.

    Attributes:
        context: Contexte partage (environnement et token)
    """

    def __init__(
        self,
        context: ApiContext,
        adapter: Optional[ApiRequestAdapter] = None,
        retrier: Optional[ApiRequestRetrier] = None,
        timeout: float = 30.0,
        max_auth_retries: int = 1,
        rate_limit_attempts: int = 3,
    ) -> None:
        """
        Initialise la session.

        Args:
            context: Contexte partage
            adapter: Adaptateur de requetes (defaut: ApiRequestAdapter(context))
            retrier: Coordinateur de relance (optionnel, voir set_retrier)
            timeout: Timeout HTTP en secondes
            max_auth_retries: Nombre maximum de relances apres re-authentification
            rate_limit_attempts: Tentatives maximum sur 429
        """
        self.context = context
        self._adapter = adapter or ApiRequestAdapter(context)
        self._retrier = retrier
        self._timeout = timeout
        self._max_auth_retries = max_auth_retries
        self._rate_limit_attempts = rate_limit_attempts
        self._client: Optional[httpx.AsyncClient] = None

    def set_retrier(self, retrier: Optional[ApiRequestRetrier]) -> None:
        """
        Branche le coordinateur de relance.

        Le service d'authentification utilise cette meme session, le
        coordinateur ne peut donc etre cree qu'apres elle.
        """
        self._retrier = retrier

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def request(
        self,
        route: ApiRoute,
        method: HttpMethod = HttpMethod.GET,
        params: Optional[dict[str, Any]] = None,
        encoding: Optional[ParameterEncoding] = None,
    ) -> httpx.Response:
        """
        Execute une requete sur une route.

        Args:
            route: Route a appeler
            method: Methode HTTP
            params: Parametres (query string ou corps JSON selon l'encodage)
            encoding: Encodage des parametres (defaut selon la methode)

        Returns:
            httpx.Response avec un statut 2xx

        Raises:
            TransportError: Serveur injoignable ou timeout
            ResponseStatusError: Statut d'echec apres les relances eventuelles
        """
        request = ApiRequest(
            route=route,
            method=method,
            url=route.url(self.context.environment),
            params=dict(params or {}),
            encoding=encoding or ParameterEncoding.default_for(method),
        )

        replays = 0
        while True:
            adapted = self._adapter.adapt(request)
            try:
                return await self._send(adapted)
            except (TransportError, ResponseStatusError) as error:
                if not await self._should_replay(adapted, error, replays):
                    raise
                replays += 1
                logger.debug("Relance de la requete", url=adapted.url, replay=replays)

    async def _should_replay(
        self, request: ApiRequest, error: Exception, replays: int
    ) -> bool:
        if self._retrier is None or replays >= self._max_auth_retries:
            return False
        return await self._retrier.should(request, error)

    async def _send(self, request: ApiRequest) -> httpx.Response:
        """Envoie une requete et convertit les erreurs httpx."""
        client = self._get_client()
        if request.encoding is ParameterEncoding.URL:
            body = {"params": request.params or None}
        else:
            body = {"json": request.params or None}
        try:
            http_request = client.build_request(
                request.method.value,
                request.url,
                headers=request.headers,
                **body,
            )
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL {request.url}: {e}") from e

        logger.debug("Requete API", method=request.method.value, url=request.url)
        try:
            response = await send_with_rate_limit(
                client, http_request, max_attempts=self._rate_limit_attempts
            )
        except RateLimitError as e:
            raise ResponseStatusError(429, request.url) from e
        except httpx.DecodingError as e:
            raise DecodeError(f"Undecodable body from {request.url}: {e}") from e
        except httpx.RequestError as e:
            # Transport, boucle de redirections, protocole
            raise TransportError(f"{request.method.value} {request.url}: {e}") from e

        if not response.is_success:
            logger.debug(
                "Reponse en echec",
                url=request.url,
                status_code=response.status_code,
            )
            raise ResponseStatusError(response.status_code, request.url)
        return response

    async def get(
        self, route: ApiRoute, params: Optional[dict[str, Any]] = None
    ) -> httpx.Response:
        return await self.request(route, HttpMethod.GET, params)

    async def post(
        self, route: ApiRoute, params: Optional[dict[str, Any]] = None
    ) -> httpx.Response:
        return await self.request(route, HttpMethod.POST, params)

    async def put(
        self, route: ApiRoute, params: Optional[dict[str, Any]] = None
    ) -> httpx.Response:
        return await self.request(route, HttpMethod.PUT, params)

    async def get_json(
        self, route: ApiRoute, params: Optional[dict[str, Any]] = None
    ) -> Any:
        """
        GET sur une route et decode le corps JSON.

        Raises:
            DecodeError: Si le corps n'est pas du JSON valide
        """
        response = await self.get(route, params)
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON payload from {route.path}: {e}") from e

    async def get_text(
        self, route: ApiRoute, params: Optional[dict[str, Any]] = None
    ) -> str:
        """GET sur une route et retourne le corps en texte."""
        response = await self.get(route, params)
        return response.text

    async def close(self) -> None:
        """Ferme le client HTTP et libere les ressources."""
        if self._client:
            await self._client.aclose()
            self._client = None
