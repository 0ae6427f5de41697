"""Definiciones de modelos de dominio.

Todos los registros son inmutables: cada transición del estado produce un
registro nuevo y los consumidores que conservan uno anterior siguen viendo
exactamente los mismos valores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

DEFAULT_CRITERIA = "ngDominican"
DEFAULT_PAGE_SIZES: Tuple[int, ...] = (5, 10, 20, 50)
DEFAULT_PAGE_SIZE = 5


@dataclass(frozen=True, slots=True)
class UserName:
    first: str
    last: str


@dataclass(frozen=True, slots=True)
class User:
    """Usuario tal como lo devuelve el servicio remoto."""

    gender: str
    name: UserName

    @classmethod
    def from_payload(cls, datos: Mapping[str, Any]) -> "User":
        """Construye el usuario a partir de un elemento de ``results``.

        Lanza ``KeyError`` o ``TypeError`` si el elemento no tiene la forma
        esperada; el repositorio las traduce a ``RemoteFailure``.
        """

        nombre = datos["name"]
        return cls(
            gender=str(datos["gender"]),
            name=UserName(first=str(nombre["first"]), last=str(nombre["last"])),
        )

    @property
    def full_name(self) -> str:
        return f"{self.name.first} {self.name.last}".strip()


@dataclass(frozen=True, slots=True)
class Pagination:
    """Selección de paginación.

    Attributes
    ----------
    selected_size:
        Cantidad de resultados por página; siempre uno de ``page_sizes``.
    current_page:
        Página solicitada (comienza en 0).
    page_sizes:
        Tamaños permitidos. Es configuración fija, nunca se modifica en
        tiempo de ejecución.
    """

    selected_size: int = DEFAULT_PAGE_SIZE
    current_page: int = 0
    page_sizes: Tuple[int, ...] = DEFAULT_PAGE_SIZES


@dataclass(frozen=True, slots=True)
class UserState:
    """Instantánea completa del estado de la aplicación."""

    users: Tuple[User, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)
    criteria: str = DEFAULT_CRITERIA
    loading: bool = False
    error: str | None = None


__all__ = [
    "DEFAULT_CRITERIA",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PAGE_SIZES",
    "Pagination",
    "User",
    "UserName",
    "UserState",
]
