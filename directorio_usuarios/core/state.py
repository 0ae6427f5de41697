"""Estado compartido de la aplicación.

El ``Store`` es el único dueño del ``UserState`` vigente. Nadie modifica el
registro: cada transición construye uno nuevo con ``dataclasses.replace`` y
lo publica a los suscriptores.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Iterable

from PyQt6.QtCore import QObject, pyqtSignal

from directorio_usuarios.core.errors import InvalidConfiguration
from directorio_usuarios.models.user import User, UserState

logger = logging.getLogger(__name__)


class Subscription:
    """Conexión a una señal que se puede cancelar una sola vez."""

    def __init__(self, signal, connection) -> None:
        self._signal = signal
        self._connection = connection

    @property
    def active(self) -> bool:
        return self._connection is not None

    def unsubscribe(self) -> None:
        if self._connection is None:
            return
        self._signal.disconnect(self._connection)
        self._connection = None


class Store(QObject):
    """Contenedor reactivo del ``UserState``.

    ``changed`` se emite una vez por reemplazo; ``settled`` se emite a
    continuación, cuando todos los suscriptores de ``changed`` ya procesaron
    ese reemplazo. Los combinadores usan ``settled`` como frontera de
    transición.
    """

    changed = pyqtSignal(object)
    settled = pyqtSignal(object)

    def __init__(self, initial: UserState | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._state = initial if initial is not None else UserState()
        self._published = self._state
        self._pendientes: Deque[UserState] = deque()
        self._notificando = False

    @property
    def snapshot(self) -> UserState:
        return self._state

    def subscribe(self, observer: Callable[[UserState], object]) -> Subscription:
        """Conecta ``observer`` y le entrega de inmediato el último estado publicado."""

        connection = self.changed.connect(observer)
        observer(self._published)
        return Subscription(self.changed, connection)

    # ------------------------------------------------------------------
    # Transiciones
    # ------------------------------------------------------------------
    def set_criteria(self, text: str) -> bool:
        actual = self._state
        if text == actual.criteria:
            logger.debug("Criterio sin cambios (%r); no hay transición", text)
            return False

        self._replace(replace(actual, criteria=text, loading=True, error=None))
        return True

    def set_pagination(self, selected_size: int, current_page: int = 0) -> bool:
        actual = self._state
        paginacion = actual.pagination

        if (
            isinstance(selected_size, bool)
            or not isinstance(selected_size, int)
            or selected_size not in paginacion.page_sizes
        ):
            raise InvalidConfiguration(
                f"Tamaño de página {selected_size!r} no permitido; use uno de {paginacion.page_sizes}"
            )
        if isinstance(current_page, bool) or not isinstance(current_page, int) or current_page < 0:
            raise InvalidConfiguration(f"Página inválida: {current_page!r}")

        if (selected_size, current_page) == (paginacion.selected_size, paginacion.current_page):
            logger.debug("Paginación sin cambios (%s, %s)", selected_size, current_page)
            return False

        nueva = replace(paginacion, selected_size=selected_size, current_page=current_page)
        self._replace(replace(actual, pagination=nueva, loading=True, error=None))
        return True

    def apply_fetch_result(self, users: Iterable[User]) -> bool:
        self._replace(replace(self._state, users=tuple(users), loading=False, error=None))
        return True

    def apply_fetch_failure(self, message: str) -> bool:
        self._replace(replace(self._state, loading=False, error=message))
        return True

    def mark_loading(self) -> bool:
        actual = self._state
        if actual.loading and actual.error is None:
            return False

        self._replace(replace(actual, loading=True, error=None))
        return True

    # ------------------------------------------------------------------
    # Publicación
    # ------------------------------------------------------------------
    def _replace(self, nuevo: UserState) -> None:
        self._state = nuevo
        self._pendientes.append(nuevo)
        if self._notificando:
            # Transición pedida desde un suscriptor: se publica al terminar la actual.
            return

        self._notificando = True
        try:
            while self._pendientes:
                estado = self._pendientes.popleft()
                self._published = estado
                self.changed.emit(estado)
                self.settled.emit(estado)
        finally:
            self._notificando = False


__all__ = ["Store", "Subscription"]
