"""Descriptor de la consulta remota de usuarios."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from directorio_usuarios.models.user import Pagination


@dataclass(frozen=True, slots=True)
class UserQuery:
    """Consulta a randomuser.me.

    ``seed`` hace que el servicio devuelva siempre los mismos usuarios para
    el mismo criterio.
    """

    seed: str
    results: int
    page: int

    def params(self) -> List[Tuple[str, str]]:
        return [
            ("seed", self.seed),
            ("results", str(self.results)),
            ("page", str(self.page)),
        ]


def build_query(criteria: str, pagination: Pagination) -> UserQuery:
    return UserQuery(
        seed=criteria,
        results=pagination.selected_size,
        page=pagination.current_page,
    )


__all__ = ["UserQuery", "build_query"]
