"""Proyecciones: sub-flujos derivados del ``Store``."""

from __future__ import annotations

from operator import attrgetter
from typing import Any, Callable

from PyQt6.QtCore import QObject, pyqtSignal

from directorio_usuarios.core.state import Store, Subscription
from directorio_usuarios.models.user import UserState

Selector = Callable[[UserState], Any]

_SIN_VALOR = object()


class Projection(QObject):
    """Valor derivado del estado que solo se emite cuando cambia.

    La comparación es por valor (``==``): el ``Store`` produce registros
    nuevos en cada transición, así que comparar identidades emitiría de más.
    """

    changed = pyqtSignal(object)

    def __init__(self, store: Store, selector: Selector, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._selector = selector
        self._value: Any = _SIN_VALOR
        self._subscription = store.subscribe(self._on_state)

    @property
    def has_value(self) -> bool:
        return self._value is not _SIN_VALOR

    @property
    def value(self) -> Any:
        if self._value is _SIN_VALOR:
            raise LookupError("La proyección todavía no recibió ningún estado")
        return self._value

    def subscribe(self, observer: Callable[[Any], object]) -> Subscription:
        connection = self.changed.connect(observer)
        if self.has_value:
            observer(self._value)
        return Subscription(self.changed, connection)

    def close(self) -> None:
        self._subscription.unsubscribe()

    def _on_state(self, estado: UserState) -> None:
        valor = self._selector(estado)
        if self.has_value and valor == self._value:
            return
        self._value = valor
        self.changed.emit(valor)


def project(store: Store, selector: Selector | str, parent: QObject | None = None) -> Projection:
    """Crea una proyección a partir de una función o de una ruta con puntos.

    >>> project(store, "pagination.selected_size")  # doctest: +SKIP
    """

    if isinstance(selector, str):
        selector = attrgetter(selector)
    return Projection(store, selector, parent=parent)


__all__ = ["Projection", "Selector", "project"]
