"""Implementaciones de repositorios para acceso a datos."""

from __future__ import annotations

from directorio_usuarios.core.errors import RemoteFailure
from directorio_usuarios.infrastructure.api_client import APIClient
from directorio_usuarios.models.query import UserQuery
from directorio_usuarios.models.user import User


class UserRepository:
    """Repositorio de usuarios basado en un cliente API.

    Es la fuente remota que usa ``FetchOrchestrator``.
    """

    def __init__(self, api_client: APIClient) -> None:
        self._api_client = api_client

    def obtener_usuarios(self, query: UserQuery) -> list[User]:
        """Devuelve los usuarios de la página pedida, en el orden del servidor."""

        usuarios_crudos = self._api_client.obtener_usuarios(query)
        try:
            return [User.from_payload(datos) for datos in usuarios_crudos]
        except (KeyError, TypeError) as exc:
            raise RemoteFailure(f"Usuario con formato inesperado: {exc!r}") from exc


__all__ = ["UserRepository"]
