from __future__ import annotations

import io
import json
import socket
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from directorio_usuarios.core.errors import RemoteFailure
from directorio_usuarios.infrastructure.api_client import APIClient, build_user_url
from directorio_usuarios.infrastructure.repositories import UserRepository
from directorio_usuarios.models.query import UserQuery, build_query
from directorio_usuarios.models.user import Pagination, User, UserName

PATCH_TARGET = "directorio_usuarios.infrastructure.api_client.urlopen"


def _response(payload) -> MagicMock:
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    response = MagicMock()
    response.__enter__.return_value = io.BytesIO(raw)
    response.__exit__.return_value = False
    return response


def test_url_is_byte_identical_for_same_inputs() -> None:
    paginacion = Pagination(selected_size=10, current_page=2, page_sizes=(5, 10, 20, 50))

    urls = {build_user_url("https://randomuser.me/api/", build_query("seed1", paginacion)) for _ in range(3)}

    assert urls == {"https://randomuser.me/api/?seed=seed1&results=10&page=2"}


def test_url_escapes_free_text_seed() -> None:
    url = build_user_url("https://randomuser.me/api/", UserQuery(seed="ana maría&co", results=5, page=0))

    assert url == "https://randomuser.me/api/?seed=ana+mar%C3%ADa%26co&results=5&page=0"


def test_obtener_usuarios_returns_raw_results() -> None:
    payload = {"results": [{"gender": "female", "name": {"first": "Ana", "last": "Ruiz"}}]}
    client = APIClient("https://example.test/api/", timeout_s=3)

    with patch(PATCH_TARGET, return_value=_response(payload)) as urlopen:
        resultados = client.obtener_usuarios(UserQuery(seed="s", results=1, page=0))

    assert resultados == payload["results"]
    request = urlopen.call_args.args[0]
    assert request.full_url == "https://example.test/api/?seed=s&results=1&page=0"
    assert request.get_header("Accept") == "application/json"
    assert urlopen.call_args.kwargs["timeout"] == 3


@pytest.mark.parametrize(
    "error, mensaje",
    [
        (HTTPError("u", 503, "Service Unavailable", {}, None), "HTTP 503"),
        (URLError("Name or service not known"), "No se pudo conectar"),
        (URLError(socket.timeout("timed out")), "timeout"),
        (TimeoutError("timed out"), "timeout"),
    ],
)
def test_transport_errors_become_remote_failure(error, mensaje) -> None:
    client = APIClient()

    with patch(PATCH_TARGET, side_effect=error):
        with pytest.raises(RemoteFailure, match=mensaje):
            client.obtener_usuarios(UserQuery(seed="s", results=5, page=0))


@pytest.mark.parametrize(
    "payload",
    [b"<html>no json</html>", [], {"error": "Uh oh, something has gone wrong."}, {"info": {}}],
)
def test_unexpected_payloads_become_remote_failure(payload) -> None:
    client = APIClient()

    with patch(PATCH_TARGET, return_value=_response(payload)):
        with pytest.raises(RemoteFailure):
            client.obtener_usuarios(UserQuery(seed="s", results=5, page=0))


def test_repository_maps_results_in_server_order() -> None:
    api_client = MagicMock()
    api_client.obtener_usuarios.return_value = [
        {"gender": "male", "name": {"title": "Mr", "first": "Bruno", "last": "Díaz"}, "email": "b@x"},
        {"gender": "female", "name": {"title": "Ms", "first": "Ana", "last": "García"}},
    ]
    repository = UserRepository(api_client)

    usuarios = repository.obtener_usuarios(UserQuery(seed="s", results=2, page=0))

    assert usuarios == [
        User(gender="male", name=UserName(first="Bruno", last="Díaz")),
        User(gender="female", name=UserName(first="Ana", last="García")),
    ]
    assert usuarios[0].full_name == "Bruno Díaz"


def test_repository_rejects_malformed_user() -> None:
    api_client = MagicMock()
    api_client.obtener_usuarios.return_value = [{"gender": "male"}]

    with pytest.raises(RemoteFailure):
        UserRepository(api_client).obtener_usuarios(UserQuery(seed="s", results=1, page=0))
