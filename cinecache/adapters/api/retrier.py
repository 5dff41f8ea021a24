"""
Coordinateur de re-authentification des requetes en echec.

Quand une requete echoue, la session demande au coordinateur s'il faut la
relancer. Le coordinateur met l'appelant en file d'attente et declenche
une autorisation aupres du service d'authentification. Plusieurs echecs
simultanes partagent la meme autorisation: il n'y a jamais plus d'un appel
authorize() en cours.

Etats:
- Idle: aucune autorisation en cours
- Authorizing: une autorisation est en cours, les nouveaux echecs sont
  seulement mis en file

A la fin de l'autorisation, le token est enregistre dans le contexte (en
cas de succes uniquement), le coordinateur repasse en Idle puis vide la
file dans l'ordre d'arrivee. Un echec qui survient pendant ce vidage
demarre un nouveau cycle au lieu d'etre greffe sur le cycle termine.

Note: l'API de demonstration signale un token invalide par un 404 et non
un 401. Le statut n'est donc pas inspecte par defaut; le predicat
should_retry_response permet de corriger cette politique.
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from cinecache.adapters.api.context import ApiContext
from cinecache.adapters.api.request import ApiRequest
from cinecache.core.errors import ApiError, AuthError
from cinecache.core.ports.auth_service import AuthResult, IAuthService

RetryCompletion = Callable[[bool], None]
ResponsePredicate = Callable[[Optional[int]], bool]


def always_retry_response(status_code: Optional[int]) -> bool:
    """Politique par defaut: tout echec est eligible (statut ignore)."""
    return True


def unauthorized_only(status_code: Optional[int]) -> bool:
    """Politique stricte: seul un 401 declenche une re-authentification."""
    return status_code == 401


@dataclass
class PendingRetry:
    """
    Requete en attente de la fin d'une autorisation.

    Attributes:
        request: Requete en echec
        completion: Callback recevant la decision de relance
    """

    request: ApiRequest
    completion: RetryCompletion


class ApiRequestRetrier:
    """
    Decide de la relance des requetes et regroupe les re-authentifications.

    Attributes:
        is_authorizing: True si une autorisation est en cours
        pending_count: Nombre de requetes en attente de decision

    Example:
        retrier = ApiRequestRetrier(context, auth_service)
        if await retrier.should(request, error):
            ...  # relancer la requete avec le nouveau token
    """

    def __init__(
        self,
        context: ApiContext,
        auth_service: IAuthService,
        should_retry_response: Optional[ResponsePredicate] = None,
    ) -> None:
        """
        Initialise le coordinateur.

        Args:
            context: Contexte partage dans lequel enregistrer le token
            auth_service: Service effectuant l'appel d'autorisation
            should_retry_response: Predicat sur le code HTTP de l'echec
                                   (defaut: toujours True)
        """
        self._context = context
        self._auth_service = auth_service
        self._should_retry_response = should_retry_response or always_retry_response
        self._lock = threading.Lock()
        self._is_authorizing = False
        self._retry_queue: list[PendingRetry] = []
        self._auth_task: Optional[asyncio.Task] = None

    @property
    def is_authorizing(self) -> bool:
        with self._lock:
            return self._is_authorizing

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._retry_queue)

    def should_retry(
        self,
        request: ApiRequest,
        error: Exception,
        completion: RetryCompletion,
    ) -> None:
        """
        Decide si une requete en echec doit etre relancee.

        La decision est transmise a completion, immediatement (False) si la
        requete n'est pas eligible, sinon a la fin de l'autorisation en cours
        ou de celle que cet appel declenche.

        Doit etre appele depuis la boucle asyncio.

        Args:
            request: Requete en echec
            error: Erreur de la requete
            completion: Callback recevant True si la requete doit etre relancee
        """
        status_code = getattr(error, "status_code", None)
        if not request.route.should_retry_after_auth:
            logger.debug("Route d'authentification, pas de relance", url=request.url)
            completion(False)
            return
        if not self._should_retry_response(status_code):
            logger.debug(
                "Echec non eligible a la relance",
                url=request.url,
                status_code=status_code,
            )
            completion(False)
            return

        with self._lock:
            self._retry_queue.append(PendingRetry(request, completion))
            if self._is_authorizing:
                return
            self._is_authorizing = True

        logger.info("Autorisation de l'application...", url=request.url)
        loop = asyncio.get_running_loop()
        self._auth_task = loop.create_task(self._authorize())

    async def should(self, request: ApiRequest, error: Exception) -> bool:
        """
        Version coroutine de should_retry.

        Returns:
            True si la requete doit etre relancee
        """
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def resolve(retry: bool) -> None:
            if not future.done():
                future.set_result(retry)

        self.should_retry(request, error, resolve)
        return await future

    async def _authorize(self) -> None:
        """Execute l'autorisation puis resout toutes les requetes en attente."""
        token: Optional[str] = None
        try:
            try:
                result = await self._auth_service.authorize()
            except ApiError as error:
                result = AuthResult(error=error)
            except Exception as error:
                logger.opt(exception=error).error(
                    "Erreur inattendue du service d'authentification"
                )
                result = AuthResult(error=error)
            token = self._check_auth_result(result)
        finally:
            self._finish_authorization(token)

    def _check_auth_result(self, result: AuthResult) -> Optional[str]:
        """Journalise le resultat d'autorisation et retourne le token eventuel."""
        if result.error is not None:
            error = AuthError(f"Authorization failed: {result.error}")
            logger.warning("Echec de l'autorisation", error=str(error))
            return None
        if result.token is None:
            logger.warning("Aucun token recu, echec de l'autorisation")
            return None
        logger.info("Autorisation reussie")
        return result.token

    def _finish_authorization(self, token: Optional[str]) -> None:
        """
        Enregistre le token, repasse en Idle et vide la file.

        La file est echangee sous verrou avant d'invoquer les callbacks:
        une requete mise en file pendant le vidage appartient au cycle
        suivant.
        """
        with self._lock:
            if token is not None:
                self._context.auth_token = token
            self._is_authorizing = False
            pending, self._retry_queue = self._retry_queue, []

        should_retry = token is not None
        logger.debug(
            "Resolution des requetes en attente",
            pending=len(pending),
            retry=should_retry,
        )
        for retry in pending:
            retry.completion(should_retry)
