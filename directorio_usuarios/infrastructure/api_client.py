"""Cliente HTTP del servicio randomuser.me.

Hace un GET sencillo con urllib y devuelve los elementos crudos de
``results``. Cualquier problema de red, HTTP o JSON se traduce a
``RemoteFailure``.
"""

from __future__ import annotations

import json
import logging
import socket
from typing import Any, List
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from directorio_usuarios.core.errors import RemoteFailure
from directorio_usuarios.models.query import UserQuery

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://randomuser.me/api/"


def build_user_url(api_url: str, query: UserQuery) -> str:
    """URL determinista para la consulta: ``{api_url}?seed=..&results=..&page=..``."""

    return f"{api_url}?{urlencode(query.params())}"


class APIClient:
    """Provee acceso a datos de usuarios."""

    def __init__(self, api_url: str = DEFAULT_API_URL, timeout_s: float = 10.0) -> None:
        self.api_url = api_url
        self.timeout_s = timeout_s

    def obtener_usuarios(self, query: UserQuery) -> List[dict]:
        """Recupera los usuarios crudos del backend."""

        payload = self._get_json(build_user_url(self.api_url, query))
        if not isinstance(payload, dict):
            raise RemoteFailure("Formato inesperado en la respuesta de usuarios.")
        if payload.get("error"):
            raise RemoteFailure(f"El servicio devolvió un error: {payload['error']}")

        resultados = payload.get("results")
        if not isinstance(resultados, list):
            raise RemoteFailure("La respuesta no contiene la lista 'results'.")
        return resultados

    def _get_json(self, url: str) -> Any:
        logger.debug("GET %s", url)
        request = Request(url, headers={"Accept": "application/json"})
        try:
            with urlopen(request, timeout=self.timeout_s) as response:
                raw = response.read()
        except HTTPError as exc:
            raise RemoteFailure(f"Error HTTP {exc.code} al consultar usuarios.") from exc
        except URLError as exc:
            if isinstance(exc.reason, socket.timeout):
                raise RemoteFailure("La consulta de usuarios expiró por timeout.") from exc
            raise RemoteFailure(f"No se pudo conectar al servicio: {exc.reason}.") from exc
        except TimeoutError as exc:
            raise RemoteFailure("La consulta de usuarios expiró por timeout.") from exc

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RemoteFailure(f"Respuesta inválida del servicio de usuarios ({exc}).") from exc


__all__ = ["APIClient", "DEFAULT_API_URL", "build_user_url"]
