"""Jerarquía de errores del núcleo."""

from __future__ import annotations


class DirectorioError(Exception):
    """Base de todos los errores propios de la aplicación."""


class RemoteFailure(DirectorioError):
    """La fuente remota no pudo entregar usuarios (red, HTTP o JSON inválido)."""


class StaleResult(DirectorioError):
    """Resultado de una consulta que ya fue reemplazada por otra más reciente.

    Nunca llega al usuario: el orquestador lo construye para registrarlo y lo
    descarta.
    """

    def __init__(self, token: int, latest: int) -> None:
        super().__init__(f"Resultado obsoleto (token {token}, vigente {latest})")
        self.token = token
        self.latest = latest


class InvalidConfiguration(DirectorioError, ValueError):
    """Valor fuera de la configuración permitida (p. ej. un tamaño de página)."""


__all__ = ["DirectorioError", "InvalidConfiguration", "RemoteFailure", "StaleResult"]
