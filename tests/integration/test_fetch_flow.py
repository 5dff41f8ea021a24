"""
Test d'integration du parcours complet: cache, reseau, re-authentification.

Utilise l'application assemblee (SQLite temporaire) et respx pour l'API.
"""

from typing import Optional

import httpx
import pytest
import respx

from cinecache.adapters.api.request import AUTH_TOKEN_HEADER
from cinecache.bootstrap import create_application
from cinecache.config import Settings
from cinecache.core.errors import ResponseStatusError, TransportError
from tests.fixtures.movie_responses import BASE_URL, TOP_GROSSING_2016_RESPONSE


class Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[list, Optional[Exception]]] = []

    def __call__(self, movies: list, error: Optional[Exception]) -> None:
        self.calls.append((movies, error))


@pytest.mark.asyncio
@respx.mock
async def test_first_fetch_authorizes_then_caches(test_settings: Settings) -> None:
    """Premier appel: cache vide, 404, autorisation, relance, enregistrement."""
    movies_route = respx.get(f"{BASE_URL}/movies/2016/grossing").mock(
        side_effect=[
            httpx.Response(404),
            httpx.Response(200, json=TOP_GROSSING_2016_RESPONSE),
            httpx.Response(200, json=TOP_GROSSING_2016_RESPONSE),
        ]
    )
    auth_route = respx.get(f"{BASE_URL}/auth").mock(
        return_value=httpx.Response(200, text="demo-token")
    )
    app = create_application(test_settings)

    first = Recorder()
    await app.movie_service.get_top_grossing_movies(2016, first)

    assert len(first.calls) == 2
    assert ([], None) in first.calls
    network_movies = [movies for movies, _ in first.calls if movies][0]
    assert [movie.id for movie in network_movies] == [1, 2, 3]
    assert auth_route.call_count == 1

    # Deuxieme appel: le cache est rempli et le token est deja connu
    second = Recorder()
    await app.movie_service.get_top_grossing_movies(2016, second)

    cached_ids = sorted(
        [movie.id for movie in movies] for movies, _ in second.calls
    )
    assert cached_ids == [[1, 2, 3], [1, 2, 3]]
    assert movies_route.calls[-1].request.headers[AUTH_TOKEN_HEADER] == "demo-token"
    assert auth_route.call_count == 1
    await app.close()


@pytest.mark.asyncio
@respx.mock
async def test_failed_authorization_delivers_original_error(
    test_settings: Settings,
) -> None:
    """L'auth en echec: le cache est livre, puis l'erreur d'origine."""
    respx.get(f"{BASE_URL}/movies/2016/rating").mock(return_value=httpx.Response(404))
    respx.get(f"{BASE_URL}/auth").mock(return_value=httpx.Response(500))
    app = create_application(test_settings)

    recorder = Recorder()
    await app.movie_service.get_top_rated_movies(2016, recorder)

    assert len(recorder.calls) == 2
    errors = [error for _, error in recorder.calls if error is not None]
    assert len(errors) == 1
    assert isinstance(errors[0], ResponseStatusError)
    assert errors[0].status_code == 404
    assert app.context.auth_token is None
    await app.close()


@pytest.mark.asyncio
@respx.mock
async def test_redirect_loop_still_delivers_twice(test_settings: Settings) -> None:
    """Une boucle de redirections donne deux livraisons: cache, puis erreur."""
    url = f"{BASE_URL}/movies/2016/grossing"
    respx.get(url).mock(return_value=httpx.Response(302, headers={"Location": url}))
    respx.get(f"{BASE_URL}/auth").mock(return_value=httpx.Response(500))
    app = create_application(test_settings)

    recorder = Recorder()
    await app.movie_service.get_top_grossing_movies(2016, recorder)

    assert len(recorder.calls) == 2
    assert ([], None) in recorder.calls
    errors = [error for _, error in recorder.calls if error is not None]
    assert len(errors) == 1
    assert isinstance(errors[0], TransportError)
    await app.close()
