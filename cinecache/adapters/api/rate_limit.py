"""
Relance des reponses 429 au niveau transport.

Independante de la re-authentification: une reponse 429 est relancee
apres le delai demande par le serveur (header Retry-After, borne par
max_wait), ou a defaut apres un backoff exponentiel avec jitter. Les
autres statuts sont retournes tels quels a la session.

Usage:
    response = await send_with_rate_limit(client, request, max_attempts=3)
"""

from typing import Optional

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)
from tenacity.wait import wait_base


class RateLimitError(Exception):
    """
    Levee quand l'API retourne 429 Too Many Requests.

    Attributes:
        retry_after: Secondes demandees par le serveur, ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


class wait_retry_after(wait_base):
    """
    Strategie d'attente tenacity suivant le header Retry-After.

    Sans Retry-After exploitable, delegue a la strategie de repli.
    """

    def __init__(self, max_wait: float, fallback: wait_base) -> None:
        self.max_wait = max_wait
        self.fallback = fallback

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return float(min(error.retry_after, self.max_wait))
        return self.fallback(retry_state)


def with_rate_limit_retry(max_attempts: int = 3, max_wait: int = 30):
    """
    Decorateur relancant une coroutine sur RateLimitError.

    Args:
        max_attempts: Nombre maximum d'envois
        max_wait: Attente maximum entre deux envois, en secondes

    Returns:
        Decorateur tenacity; la derniere RateLimitError est propagee
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_retry_after(
            max_wait,
            fallback=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        ),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


def _parse_retry_after(response: httpx.Response) -> Optional[int]:
    # Seule la forme en secondes est geree, pas la forme date HTTP
    header = response.headers.get("Retry-After", "").strip()
    return int(header) if header.isdigit() else None


async def send_with_rate_limit(
    client: httpx.AsyncClient,
    request: httpx.Request,
    max_attempts: int = 3,
    max_wait: int = 30,
) -> httpx.Response:
    """
    Envoie une requete httpx en relancant sur 429.

    Toute autre reponse est retournee quel que soit son statut; la
    verification est faite par l'appelant.

    Raises:
        RateLimitError: 429 apres epuisement des tentatives
        httpx.RequestError: Erreur d'envoi (non relancee ici)
    """

    @with_rate_limit_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _do_send() -> httpx.Response:
        response = await client.send(request)
        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response))
        return response

    return await _do_send()
