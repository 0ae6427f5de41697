"""Configuración de la aplicación.

Los valores por defecto viven en ``AppConfig``; ``AppConfig.from_env`` permite
sobrescribirlos con variables ``DIRECTORIO_*`` (o un archivo ``.env`` en la
raíz del proyecto, cargado con python-dotenv).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Tuple

from dotenv import load_dotenv

from directorio_usuarios.core.errors import InvalidConfiguration
from directorio_usuarios.models.user import (
    DEFAULT_CRITERIA,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PAGE_SIZES,
    Pagination,
    UserState,
)

ENV_PREFIX = "DIRECTORIO_"


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


@dataclass(frozen=True)
class AppConfig:
    """Parámetros de la aplicación."""

    api_url: str = "https://randomuser.me/api/"
    default_criteria: str = DEFAULT_CRITERIA
    page_sizes: Tuple[int, ...] = field(default=DEFAULT_PAGE_SIZES)
    default_page_size: int = DEFAULT_PAGE_SIZE

    # Silencio requerido antes de confirmar el texto de búsqueda.
    debounce_ms: int = 300
    # Cota superior para una consulta en vuelo; pasado este tiempo se da por fallida.
    fetch_timeout_ms: int = 15000
    # Timeout del propio GET (urllib).
    http_timeout_s: float = 10.0

    log_level: str = "INFO"

    def validate(self) -> "AppConfig":
        if not self.page_sizes or any(size <= 0 for size in self.page_sizes):
            raise InvalidConfiguration(
                f"Los tamaños de página deben ser enteros positivos: {self.page_sizes}"
            )
        if self.default_page_size not in self.page_sizes:
            raise InvalidConfiguration(
                f"El tamaño por defecto {self.default_page_size} no está en {self.page_sizes}"
            )
        if self.debounce_ms < 0:
            raise InvalidConfiguration("debounce_ms no puede ser negativo")
        if self.fetch_timeout_ms <= 0 or self.http_timeout_s <= 0:
            raise InvalidConfiguration("Los timeouts deben ser positivos")
        return self

    @property
    def shutdown_wait_ms(self) -> int:
        """Espera al cerrar: al menos lo que puede tardar un GET en vencer."""

        return int(self.http_timeout_s * 1000) + 1000

    def initial_state(self) -> UserState:
        """Estado inicial con el que arranca el ``Store``."""

        return UserState(
            users=(),
            criteria=self.default_criteria,
            pagination=Pagination(
                selected_size=self.default_page_size,
                current_page=0,
                page_sizes=tuple(self.page_sizes),
            ),
            loading=False,
            error=None,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Construye la configuración a partir del entorno.

        Si no se pasa ``environ`` se carga ``.env`` desde la raíz del proyecto
        (sin pisar variables ya exportadas) y se usa ``os.environ``.
        """

        if environ is None:
            load_dotenv(_project_root() / ".env", override=False)
            environ = os.environ

        def _get(nombre: str) -> str | None:
            valor = environ.get(ENV_PREFIX + nombre, "").strip()
            return valor or None

        valores: dict = {}
        if (api_url := _get("API_URL")) is not None:
            valores["api_url"] = api_url
        if (criteria := _get("DEFAULT_CRITERIA")) is not None:
            valores["default_criteria"] = criteria
        if (sizes := _get("PAGE_SIZES")) is not None:
            valores["page_sizes"] = tuple(
                _parse_int("PAGE_SIZES", parte) for parte in sizes.split(",") if parte.strip()
            )
        if (size := _get("DEFAULT_PAGE_SIZE")) is not None:
            valores["default_page_size"] = _parse_int("DEFAULT_PAGE_SIZE", size)
        if (debounce := _get("DEBOUNCE_MS")) is not None:
            valores["debounce_ms"] = _parse_int("DEBOUNCE_MS", debounce)
        if (fetch_timeout := _get("FETCH_TIMEOUT_MS")) is not None:
            valores["fetch_timeout_ms"] = _parse_int("FETCH_TIMEOUT_MS", fetch_timeout)
        if (http_timeout := _get("HTTP_TIMEOUT_S")) is not None:
            try:
                valores["http_timeout_s"] = float(http_timeout)
            except ValueError as exc:
                raise InvalidConfiguration(
                    f"{ENV_PREFIX}HTTP_TIMEOUT_S no es numérico: {http_timeout!r}"
                ) from exc
        if (level := _get("LOG_LEVEL")) is not None:
            valores["log_level"] = level.upper()

        return cls(**valores).validate()


def _parse_int(nombre: str, valor: str) -> int:
    try:
        return int(valor.strip())
    except ValueError as exc:
        raise InvalidConfiguration(f"{ENV_PREFIX}{nombre} no es un entero: {valor!r}") from exc


__all__ = ["AppConfig", "ENV_PREFIX"]
