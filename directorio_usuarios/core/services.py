"""Servicios de aplicación que coordinan el acceso a datos.

``FetchOrchestrator`` escucha los cambios de (criterio, paginación), lanza la
consulta remota en un hilo aparte y devuelve el resultado al ``Store``. Solo
se aplica el resultado del último token emitido; los demás se descartan.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol, Tuple

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal, pyqtSlot

from directorio_usuarios.core.errors import RemoteFailure, StaleResult
from directorio_usuarios.core.projections import project
from directorio_usuarios.core.state import Store, Subscription
from directorio_usuarios.core.view_model import CombinedProjection
from directorio_usuarios.models.query import UserQuery, build_query
from directorio_usuarios.models.user import User

logger = logging.getLogger(__name__)


class UserDataSource(Protocol):
    """Fuente remota de usuarios. Bloqueante; se ejecuta fuera del hilo principal."""

    def obtener_usuarios(self, query: UserQuery) -> List[User]:
        ...


class _FetchWorker(QObject):
    finished = pyqtSignal(int, object)
    error = pyqtSignal(int, object)

    def __init__(self, token: int, query: UserQuery, data_source: UserDataSource) -> None:
        super().__init__()
        self.token = token
        self.query = query
        self.data_source = data_source

    @pyqtSlot()
    def run(self) -> None:
        try:
            usuarios = self.data_source.obtener_usuarios(self.query)
        except RemoteFailure as exc:
            self.error.emit(self.token, exc)
            return
        except Exception as exc:  # fuente externa: cualquier fallo cuenta como remoto
            self.error.emit(self.token, RemoteFailure(str(exc) or type(exc).__name__))
            return
        self.finished.emit(self.token, list(usuarios))


class _HilosDesprendidos(QObject):
    """Retiene los hilos que siguen bloqueados en la fuente remota tras ``shutdown``.

    Un ``QThread`` destruido mientras corre aborta el proceso, así que estos
    hilos no tienen padre Qt y se sueltan recién cuando terminan.
    """

    def __init__(self) -> None:
        super().__init__()
        self._hilos: List[Tuple[QThread, _FetchWorker]] = []

    def __len__(self) -> int:
        return len(self._hilos)

    def adoptar(self, hilo: QThread, worker: _FetchWorker) -> None:
        self._hilos.append((hilo, worker))
        hilo.finished.connect(self._recoger)

    @pyqtSlot()
    def _recoger(self) -> None:
        emisor = self.sender()
        vivos = []
        for hilo, worker in self._hilos:
            if hilo is emisor:
                # ``finished`` llega encolado; el hilo ya está saliendo de ``run``.
                hilo.wait()
            elif not hilo.isFinished():
                vivos.append((hilo, worker))
        self._hilos = vivos


_desprendidos: _HilosDesprendidos | None = None


def _hilos_desprendidos() -> _HilosDesprendidos:
    global _desprendidos
    if _desprendidos is None:
        _desprendidos = _HilosDesprendidos()
    return _desprendidos


def detached_threads() -> int:
    """Hilos de consultas abandonadas en ``shutdown`` que todavía no terminaron."""

    return len(_desprendidos) if _desprendidos is not None else 0


class FetchOrchestrator(QObject):
    """Orquesta las consultas de usuarios con política "gana el último"."""

    fetch_started = pyqtSignal(int, object)
    fetch_failed = pyqtSignal(str)

    def __init__(
        self,
        store: Store,
        data_source: UserDataSource,
        *,
        timeout_ms: int = 15000,
        shutdown_wait_ms: int = 11000,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._data_source = data_source
        self._shutdown_wait_ms = shutdown_wait_ms
        self._token = 0
        self._en_vuelo: int | None = None
        self._hilos: Dict[int, Tuple[QThread, _FetchWorker]] = {}
        self._trigger: CombinedProjection | None = None
        self._subscription: Subscription | None = None

        self._timeout = QTimer(self)
        self._timeout.setSingleShot(True)
        self._timeout.setInterval(timeout_ms)
        self._timeout.timeout.connect(self._on_timeout)

    @property
    def latest_token(self) -> int:
        return self._token

    @property
    def state(self) -> str:
        return "fetching" if self._en_vuelo is not None else "idle"

    @property
    def shutdown_wait_ms(self) -> int:
        return self._shutdown_wait_ms

    @property
    def running_threads(self) -> int:
        return len(self._hilos)

    def start(self) -> None:
        """Empieza a escuchar el estado; dispara la consulta inicial."""

        if self._trigger is not None:
            return
        fuentes = {
            "criteria": project(self._store, "criteria"),
            "pagination": project(self._store, "pagination"),
        }
        self._trigger = CombinedProjection(self._store, fuentes, build_query, parent=self)
        self._subscription = self._trigger.subscribe(self._dispatch)

    def reload(self) -> None:
        """Repite la consulta vigente (botón "Recargar")."""

        if self._trigger is None:
            raise RuntimeError("El orquestador no fue iniciado")
        self._dispatch(self._trigger.value)

    def shutdown(self, wait_ms: int | None = None) -> None:
        """Deja de escuchar y espera a que terminen los hilos en curso.

        Los hilos que siguen bloqueados pasado ``wait_ms`` quedan desprendidos
        hasta que la fuente remota responda; su resultado se descarta.
        """

        if wait_ms is None:
            wait_ms = self._shutdown_wait_ms

        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._trigger is not None:
            self._trigger.close()
            self._trigger.deleteLater()
            self._trigger = None

        self._timeout.stop()
        self._en_vuelo = None
        for token, (hilo, worker) in list(self._hilos.items()):
            hilo.quit()
            if hilo.wait(wait_ms):
                continue
            logger.warning("Un hilo de consulta no terminó en %s ms; queda desprendido", wait_ms)
            del self._hilos[token]
            _hilos_desprendidos().adoptar(hilo, worker)
        self._limpiar_hilos()

    # ------------------------------------------------------------------
    # Consulta
    # ------------------------------------------------------------------
    def _dispatch(self, query: UserQuery) -> None:
        self._token += 1
        token = self._token
        self._en_vuelo = token

        if not self._store.snapshot.loading:
            self._store.mark_loading()

        logger.info(
            "Consulta %s: seed=%r results=%s page=%s",
            token,
            query.seed,
            query.results,
            query.page,
        )
        self._iniciar_consulta_async(token, query)
        self._timeout.start()
        self.fetch_started.emit(token, query)

    def _iniciar_consulta_async(self, token: int, query: UserQuery) -> None:
        hilo = QThread()
        worker = _FetchWorker(token, query, self._data_source)
        worker.moveToThread(hilo)

        hilo.started.connect(worker.run)
        worker.finished.connect(hilo.quit)
        worker.error.connect(hilo.quit)
        worker.finished.connect(self._on_fetch_completed)
        worker.error.connect(self._on_fetch_failed)
        hilo.finished.connect(self._limpiar_hilos)

        self._hilos[token] = (hilo, worker)
        hilo.start()

    def _es_vigente(self, token: int) -> bool:
        if token == self._en_vuelo:
            return True
        stale = StaleResult(token, self._token)
        logger.debug("%s; se descarta", stale)
        return False

    def _on_fetch_completed(self, token: int, usuarios: list) -> None:
        if not self._es_vigente(token):
            return

        self._timeout.stop()
        self._en_vuelo = None
        logger.info("Consulta %s completada con %s usuarios", token, len(usuarios))
        self._store.apply_fetch_result(usuarios)

    def _on_fetch_failed(self, token: int, exc: RemoteFailure) -> None:
        if not self._es_vigente(token):
            return

        self._timeout.stop()
        self._en_vuelo = None
        mensaje = f"No se pudieron cargar usuarios: {exc}"
        logger.warning("Consulta %s falló: %s", token, exc)
        self._store.apply_fetch_failure(mensaje)
        self.fetch_failed.emit(mensaje)

    def _on_timeout(self) -> None:
        token = self._en_vuelo
        if token is None:
            return

        self._en_vuelo = None
        failure = RemoteFailure(f"tiempo de espera agotado ({self._timeout.interval()} ms)")
        mensaje = f"No se pudieron cargar usuarios: {failure}"
        logger.warning("Consulta %s: %s", token, failure)
        self._store.apply_fetch_failure(mensaje)
        self.fetch_failed.emit(mensaje)

    def _limpiar_hilos(self) -> None:
        for token, (hilo, worker) in list(self._hilos.items()):
            if not hilo.isFinished():
                continue
            del self._hilos[token]


__all__ = ["FetchOrchestrator", "UserDataSource", "detached_threads"]
