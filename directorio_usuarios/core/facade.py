"""Fachada que la interfaz usa para leer el view model y enviar acciones."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject

from directorio_usuarios.core.config import AppConfig
from directorio_usuarios.core.debounce import InputDebouncer
from directorio_usuarios.core.services import FetchOrchestrator, UserDataSource
from directorio_usuarios.core.state import Store
from directorio_usuarios.core.view_model import CombinedProjection, compose_view_model
from directorio_usuarios.models.user import UserState

logger = logging.getLogger(__name__)


class UserFacade(QObject):
    """Punto de entrada único para la capa de presentación.

    El texto de búsqueda pasa por el debounce; la paginación se aplica al
    instante porque es una selección discreta.
    """

    def __init__(
        self,
        store: Store,
        orchestrator: FetchOrchestrator,
        debouncer: InputDebouncer,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._orchestrator = orchestrator
        self._debouncer = debouncer
        self.view_model: CombinedProjection = compose_view_model(store, parent=self)

        self._debouncer.committed.connect(self._on_criteria_committed)

    @classmethod
    def create(
        cls,
        config: AppConfig,
        data_source: UserDataSource,
        parent: QObject | None = None,
    ) -> "UserFacade":
        """Arma el grafo completo (store, debounce y orquestador) desde la configuración."""

        config.validate()
        store = Store(config.initial_state())
        orchestrator = FetchOrchestrator(
            store,
            data_source,
            timeout_ms=config.fetch_timeout_ms,
            shutdown_wait_ms=config.shutdown_wait_ms,
        )
        debouncer = InputDebouncer(config.debounce_ms, initial=config.default_criteria)
        facade = cls(store, orchestrator, debouncer, parent=parent)
        store.setParent(facade)
        orchestrator.setParent(facade)
        debouncer.setParent(facade)
        return facade

    @property
    def store(self) -> Store:
        return self._store

    @property
    def orchestrator(self) -> FetchOrchestrator:
        return self._orchestrator

    def snapshot(self) -> UserState:
        return self._store.snapshot

    def start(self) -> None:
        self._orchestrator.start()

    def shutdown(self) -> None:
        self._debouncer.cancel()
        self._orchestrator.shutdown()

    # ------------------------------------------------------------------
    # Acciones de la interfaz
    # ------------------------------------------------------------------
    def submit_search_text(self, raw: str) -> None:
        self._debouncer.push(raw)

    def select_page_size(self, size: int, page: int = 0) -> bool:
        """Cambia la paginación. Lanza ``InvalidConfiguration`` si el tamaño no está permitido."""

        return self._store.set_pagination(size, page)

    def reload(self) -> None:
        self._orchestrator.reload()

    def _on_criteria_committed(self, criteria: str) -> None:
        logger.debug("Criterio confirmado: %r", criteria)
        self._store.set_criteria(criteria)


__all__ = ["UserFacade"]
