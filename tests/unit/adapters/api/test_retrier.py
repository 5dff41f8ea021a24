"""
Tests unitaires du coordinateur de re-authentification.

Ces tests verifient:
- Un seul appel authorize() pour N echecs simultanes
- La route d'authentification n'est jamais relancee
- La file est videe dans l'ordre d'arrivee, une seule fois par requete
- Un echec pendant le vidage demarre un nouveau cycle
- Les echecs d'autorisation donnent "ne pas relancer" sans toucher au token
- Le predicat sur le code HTTP est configurable
"""

import asyncio
from typing import Optional

import pytest

from cinecache.adapters.api.context import ApiContext, ApiEnvironment
from cinecache.adapters.api.request import ApiRequest, HttpMethod
from cinecache.adapters.api.retrier import (
    ApiRequestRetrier,
    always_retry_response,
    unauthorized_only,
)
from cinecache.adapters.api.routes import ApiRoute
from cinecache.core.errors import ResponseStatusError, TransportError
from cinecache.core.ports.auth_service import AuthResult, IAuthService


class FakeAuthService(IAuthService):
    """
    Service d'authentification controle par les tests.

    Retourne les tokens dans l'ordre; si gated, attend release avant de repondre.
    """

    def __init__(
        self,
        tokens: tuple[Optional[str], ...] = ("new-token",),
        error: Optional[Exception] = None,
        raises: Optional[Exception] = None,
        gated: bool = False,
    ) -> None:
        self.calls = 0
        self._tokens = list(tokens)
        self._error = error
        self._raises = raises
        self._gated = gated
        self.release = asyncio.Event()

    async def authorize(self) -> AuthResult:
        self.calls += 1
        if self._gated:
            await self.release.wait()
        if self._raises is not None:
            raise self._raises
        if self._error is not None:
            return AuthResult(error=self._error)
        token = self._tokens[min(self.calls, len(self._tokens)) - 1]
        return AuthResult(token=token)


def make_request(route: ApiRoute) -> ApiRequest:
    return ApiRequest(
        route=route,
        method=HttpMethod.GET,
        url=route.url(ApiEnvironment.LOCAL),
    )


async def wait_until_idle(retrier: ApiRequestRetrier) -> None:
    async def _poll() -> None:
        await asyncio.sleep(0)
        while retrier.is_authorizing:
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout=1)


MOVIES_REQUEST = make_request(ApiRoute.top_grossing_movies(2016))
NOT_FOUND = ResponseStatusError(404)


class TestRetryEligibility:
    """Tests des decisions immediates (sans autorisation)."""

    @pytest.mark.asyncio
    async def test_auth_route_is_never_retried(self, context: ApiContext) -> None:
        """Un echec de la route d'auth donne False sans autorisation."""
        auth = FakeAuthService()
        retrier = ApiRequestRetrier(context, auth)
        decisions: list[bool] = []

        retrier.should_retry(make_request(ApiRoute.auth()), NOT_FOUND, decisions.append)

        assert decisions == [False]
        assert not retrier.is_authorizing
        assert retrier.pending_count == 0
        await asyncio.sleep(0)
        assert auth.calls == 0

    @pytest.mark.asyncio
    async def test_auth_route_refused_for_any_error(self, context: ApiContext) -> None:
        """La route d'auth n'est relancee pour aucun type d'echec."""
        retrier = ApiRequestRetrier(context, FakeAuthService())
        auth_request = make_request(ApiRoute.auth())

        for error in (ResponseStatusError(401), TransportError("down")):
            assert await retrier.should(auth_request, error) is False

    @pytest.mark.asyncio
    async def test_predicate_refusal_skips_authorization(
        self, context: ApiContext
    ) -> None:
        """Un predicat qui refuse le statut donne False immediatement."""
        auth = FakeAuthService()
        retrier = ApiRequestRetrier(context, auth, should_retry_response=unauthorized_only)

        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is False
        assert auth.calls == 0

    @pytest.mark.asyncio
    async def test_predicate_accepting_status_triggers_authorization(
        self, context: ApiContext
    ) -> None:
        """Un 401 avec la politique stricte declenche l'autorisation."""
        auth = FakeAuthService()
        retrier = ApiRequestRetrier(context, auth, should_retry_response=unauthorized_only)

        assert await retrier.should(MOVIES_REQUEST, ResponseStatusError(401)) is True
        assert auth.calls == 1

    def test_default_predicate_ignores_status(self) -> None:
        """La politique par defaut accepte tout code, y compris absent."""
        assert always_retry_response(404)
        assert always_retry_response(500)
        assert always_retry_response(None)


class TestCoalescing:
    """Tests du regroupement des autorisations."""

    @pytest.mark.asyncio
    async def test_concurrent_failures_share_one_authorization(
        self, context: ApiContext
    ) -> None:
        """N echecs simultanes ne declenchent qu'un seul authorize()."""
        auth = FakeAuthService(tokens=("fresh",), gated=True)
        retrier = ApiRequestRetrier(context, auth)

        tasks = [
            asyncio.create_task(retrier.should(MOVIES_REQUEST, NOT_FOUND))
            for _ in range(5)
        ]
        await asyncio.sleep(0)

        assert retrier.is_authorizing
        assert retrier.pending_count == 5

        auth.release.set()
        decisions = await asyncio.gather(*tasks)

        assert decisions == [True] * 5
        assert auth.calls == 1
        assert context.auth_token == "fresh"
        assert not retrier.is_authorizing
        assert retrier.pending_count == 0

    @pytest.mark.asyncio
    async def test_failures_during_authorization_are_only_queued(
        self, context: ApiContext
    ) -> None:
        """Un echec arrivant pendant l'autorisation rejoint le cycle en cours."""
        auth = FakeAuthService(gated=True)
        retrier = ApiRequestRetrier(context, auth)
        decisions: list[bool] = []

        retrier.should_retry(MOVIES_REQUEST, NOT_FOUND, decisions.append)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert auth.calls == 1

        retrier.should_retry(MOVIES_REQUEST, TransportError("timeout"), decisions.append)
        assert retrier.pending_count == 2

        auth.release.set()
        await wait_until_idle(retrier)

        assert decisions == [True, True]
        assert auth.calls == 1

    @pytest.mark.asyncio
    async def test_queue_is_drained_in_fifo_order(self, context: ApiContext) -> None:
        """Les requetes en attente sont resolues dans l'ordre d'arrivee."""
        auth = FakeAuthService(gated=True)
        retrier = ApiRequestRetrier(context, auth)
        order: list[int] = []

        for index in range(4):
            retrier.should_retry(
                MOVIES_REQUEST,
                NOT_FOUND,
                lambda retry, index=index: order.append(index),
            )

        auth.release.set()
        await wait_until_idle(retrier)

        assert order == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_each_pending_request_is_resolved_once(
        self, context: ApiContext
    ) -> None:
        """Chaque requete en attente recoit exactement une decision."""
        auth = FakeAuthService(tokens=("t1", "t2"))
        retrier = ApiRequestRetrier(context, auth)
        first: list[bool] = []
        second: list[bool] = []

        retrier.should_retry(MOVIES_REQUEST, NOT_FOUND, first.append)
        await wait_until_idle(retrier)
        retrier.should_retry(MOVIES_REQUEST, NOT_FOUND, second.append)
        await wait_until_idle(retrier)

        assert first == [True]
        assert second == [True]
        assert auth.calls == 2
        assert context.auth_token == "t2"

    @pytest.mark.asyncio
    async def test_failure_during_drain_starts_new_cycle(
        self, context: ApiContext
    ) -> None:
        """Un echec pendant le vidage n'est pas greffe sur le cycle termine."""
        auth = FakeAuthService(tokens=("t1", "t2"))
        retrier = ApiRequestRetrier(context, auth)
        first: list[bool] = []
        second: list[bool] = []

        def on_first(retry: bool) -> None:
            first.append(retry)
            # Echec immediat de la requete relancee
            retrier.should_retry(MOVIES_REQUEST, NOT_FOUND, second.append)

        retrier.should_retry(MOVIES_REQUEST, NOT_FOUND, on_first)
        await wait_until_idle(retrier)
        await wait_until_idle(retrier)

        assert first == [True]
        assert second == [True]
        assert auth.calls == 2
        assert context.auth_token == "t2"


class TestAuthorizationFailure:
    """Tests des echecs d'autorisation."""

    @pytest.mark.asyncio
    async def test_auth_error_means_no_retry(self, context: ApiContext) -> None:
        """Une erreur d'autorisation donne False a toutes les requetes."""
        context.auth_token = "old"
        auth = FakeAuthService(error=ResponseStatusError(404), gated=True)
        retrier = ApiRequestRetrier(context, auth)

        tasks = [
            asyncio.create_task(retrier.should(MOVIES_REQUEST, NOT_FOUND))
            for _ in range(3)
        ]
        await asyncio.sleep(0)
        auth.release.set()

        assert await asyncio.gather(*tasks) == [False, False, False]
        assert context.auth_token == "old"
        assert not retrier.is_authorizing

    @pytest.mark.asyncio
    async def test_missing_token_means_no_retry(self, context: ApiContext) -> None:
        """Une autorisation sans token donne False."""
        retrier = ApiRequestRetrier(context, FakeAuthService(tokens=(None,)))

        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is False
        assert context.auth_token is None

    @pytest.mark.asyncio
    async def test_raised_api_error_is_consumed(self, context: ApiContext) -> None:
        """Une ApiError levee par le service est convertie en False."""
        auth = FakeAuthService(raises=TransportError("unreachable"))
        retrier = ApiRequestRetrier(context, auth)

        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is False
        assert not retrier.is_authorizing

    @pytest.mark.asyncio
    async def test_new_cycle_after_failed_authorization(
        self, context: ApiContext
    ) -> None:
        """Apres un echec, un nouvel echec de requete relance une autorisation."""
        auth = FakeAuthService(tokens=(None, "recovered"))
        retrier = ApiRequestRetrier(context, auth)

        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is False
        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is True
        assert auth.calls == 2
        assert context.auth_token == "recovered"

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_consumed(self, context: ApiContext) -> None:
        """Une exception hors taxonomie donne False et ne reste pas dans la tache."""
        auth = FakeAuthService(raises=RuntimeError("boom"))
        retrier = ApiRequestRetrier(context, auth)

        assert await retrier.should(MOVIES_REQUEST, NOT_FOUND) is False
        await wait_until_idle(retrier)

        assert retrier._auth_task is not None
        await retrier._auth_task
        assert retrier._auth_task.exception() is None
        assert context.auth_token is None
