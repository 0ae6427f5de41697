"""Debounce del texto de búsqueda."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)


class InputDebouncer(QObject):
    """Convierte las pulsaciones en un criterio confirmado.

    Cada ``push`` reinicia la espera (debounce de flanco final). Al vencer,
    el valor pendiente se emite en ``committed`` salvo que sea igual al último
    confirmado. ``initial`` siembra ese último valor, de modo que volver a
    escribir el criterio vigente no provoca una transición.
    """

    committed = pyqtSignal(str)

    def __init__(
        self,
        delay_ms: int = 300,
        initial: str | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._ultimo = initial
        self._pendiente: str | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    @property
    def last_committed(self) -> str | None:
        return self._ultimo

    def push(self, text: str) -> None:
        self._pendiente = text
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()
        self._pendiente = None

    def _on_timeout(self) -> None:
        valor, self._pendiente = self._pendiente, None
        if valor is None:
            return
        if valor == self._ultimo:
            logger.debug("Texto %r igual al último confirmado; se ignora", valor)
            return

        self._ultimo = valor
        self.committed.emit(valor)


__all__ = ["InputDebouncer"]
