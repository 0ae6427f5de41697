"""Composición del view model a partir de varias proyecciones."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Mapping, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from directorio_usuarios.core.projections import Projection, project
from directorio_usuarios.core.state import Store, Subscription
from directorio_usuarios.models.user import Pagination, User, UserState

_SIN_VALOR = object()


@dataclass(frozen=True, slots=True)
class ViewModel:
    """Lo que la interfaz necesita para dibujarse."""

    pagination: Pagination
    criteria: str
    users: Tuple[User, ...]
    loading: bool
    error: str | None = None


class CombinedProjection(QObject):
    """Combina proyecciones y emite una vez por transición del ``Store``.

    Las fuentes solo anotan su último valor; la emisión ocurre en
    ``Store.settled``, cuando todas ya vieron la misma generación del estado.
    No emite hasta que cada fuente tenga un valor.
    """

    changed = pyqtSignal(object)

    def __init__(
        self,
        store: Store,
        sources: Mapping[str, Projection],
        factory: Callable[..., Any],
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._factory = factory
        self._sources = dict(sources)
        self._nombres = tuple(sources)
        self._ultimos: dict[str, Any] = {}
        self._sucio = False
        self._value: Any = _SIN_VALOR

        self._fuentes = [
            fuente.subscribe(partial(self._on_source, nombre))
            for nombre, fuente in sources.items()
        ]
        self._settled = Subscription(store.settled, store.settled.connect(self._flush))
        self._flush()

    @property
    def has_value(self) -> bool:
        return self._value is not _SIN_VALOR

    @property
    def value(self) -> Any:
        if self._value is _SIN_VALOR:
            raise LookupError("La combinación todavía no tiene valor")
        return self._value

    def subscribe(self, observer: Callable[[Any], object]) -> Subscription:
        connection = self.changed.connect(observer)
        if self.has_value:
            observer(self._value)
        return Subscription(self.changed, connection)

    def close(self) -> None:
        """Deja de escuchar al store. Cierra también las proyecciones fuente."""

        for suscripcion in self._fuentes:
            suscripcion.unsubscribe()
        self._settled.unsubscribe()
        for fuente in self._sources.values():
            fuente.close()

    def _on_source(self, nombre: str, valor: Any) -> None:
        self._ultimos[nombre] = valor
        self._sucio = True

    def _flush(self, _estado: UserState | None = None) -> None:
        if not self._sucio or len(self._ultimos) < len(self._nombres):
            return
        self._sucio = False
        self._value = self._factory(**self._ultimos)
        self.changed.emit(self._value)


def compose_view_model(store: Store, parent: QObject | None = None) -> CombinedProjection:
    """Arma el flujo de ``ViewModel`` (paginación, criterio, usuarios, carga y error)."""

    fuentes = {
        nombre: project(store, nombre, parent=parent)
        for nombre in ("pagination", "criteria", "users", "loading", "error")
    }
    return CombinedProjection(store, fuentes, ViewModel, parent=parent)


__all__ = ["CombinedProjection", "ViewModel", "compose_view_model"]
