"""Fixtures compartidas para las pruebas del directorio de usuarios."""

from __future__ import annotations

import os
import threading
from typing import Dict, List

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from directorio_usuarios.core.config import AppConfig
from directorio_usuarios.core.facade import UserFacade
from directorio_usuarios.core.services import FetchOrchestrator
from directorio_usuarios.core.state import Store
from directorio_usuarios.models.query import UserQuery
from directorio_usuarios.models.user import User, UserName


def make_users(seed: str, count: int = 1) -> List[User]:
    return [
        User(gender="female", name=UserName(first=seed, last=f"#{index}"))
        for index in range(count)
    ]


class FakeDataSource:
    """Fuente remota controlable desde las pruebas.

    ``gate(seed)`` deja bloqueadas las consultas de esa semilla hasta que se
    libere el evento devuelto; así se controla el orden de llegada.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._gates: Dict[str, threading.Event] = {}
        self.calls: List[UserQuery] = []
        self.completed: List[UserQuery] = []
        self.failures: Dict[str, Exception] = {}

    def gate(self, seed: str) -> threading.Event:
        with self._lock:
            return self._gates.setdefault(seed, threading.Event())

    def release_all(self) -> None:
        with self._lock:
            gates = list(self._gates.values())
        for gate in gates:
            gate.set()

    @property
    def seeds(self) -> List[str]:
        with self._lock:
            return [query.seed for query in self.calls]

    def completed_count(self) -> int:
        with self._lock:
            return len(self.completed)

    def obtener_usuarios(self, query: UserQuery) -> List[User]:
        with self._lock:
            self.calls.append(query)
            gate = self._gates.get(query.seed)
        if gate is not None:
            gate.wait(5)
        try:
            if query.seed in self.failures:
                raise self.failures[query.seed]
            return make_users(query.seed, query.results)
        finally:
            with self._lock:
                self.completed.append(query)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(debounce_ms=30, fetch_timeout_ms=3000)


@pytest.fixture
def data_source() -> FakeDataSource:
    source = FakeDataSource()
    yield source
    source.release_all()


@pytest.fixture
def store(qapp, config: AppConfig) -> Store:
    return Store(config.initial_state())


@pytest.fixture
def orchestrator(qapp, store: Store, data_source: FakeDataSource) -> FetchOrchestrator:
    orchestrator = FetchOrchestrator(store, data_source, timeout_ms=3000)
    yield orchestrator
    data_source.release_all()
    orchestrator.shutdown()


@pytest.fixture
def facade(qapp, config: AppConfig, data_source: FakeDataSource) -> UserFacade:
    facade = UserFacade.create(config, data_source)
    yield facade
    data_source.release_all()
    facade.shutdown()
