from __future__ import annotations

import gc

import pytest
from conftest import make_users

from directorio_usuarios.core.config import AppConfig
from directorio_usuarios.core.errors import InvalidConfiguration
from directorio_usuarios.core.facade import UserFacade
from directorio_usuarios.core.services import detached_threads


def _settle(qtbot, facade: UserFacade) -> None:
    qtbot.waitUntil(lambda: not facade.snapshot().loading and facade.orchestrator.state == "idle")


def test_search_text_is_debounced_into_a_single_fetch(qtbot, facade: UserFacade, data_source) -> None:
    facade.start()
    _settle(qtbot, facade)

    facade.submit_search_text("a")
    facade.submit_search_text("ab")
    facade.submit_search_text("abc")

    assert facade.snapshot().criteria == "ngDominican"
    qtbot.waitUntil(lambda: facade.snapshot().criteria == "abc")
    _settle(qtbot, facade)

    assert data_source.seeds == ["ngDominican", "abc"]
    assert facade.snapshot().users == tuple(make_users("abc", 5))


def test_retyping_current_criteria_does_nothing(qtbot, facade: UserFacade, data_source) -> None:
    facade.start()
    _settle(qtbot, facade)
    emitidos = []
    facade.view_model.subscribe(emitidos.append)

    facade.submit_search_text("ngDominican")
    qtbot.wait(100)

    assert len(emitidos) == 1
    assert data_source.seeds == ["ngDominican"]


def test_page_size_is_applied_without_debounce(qtbot, facade: UserFacade) -> None:
    facade.start()
    _settle(qtbot, facade)
    emitidos = []
    facade.view_model.subscribe(emitidos.append)

    assert facade.select_page_size(20) is True

    assert len(emitidos) == 2
    assert emitidos[-1].pagination.selected_size == 20
    assert emitidos[-1].loading is True
    _settle(qtbot, facade)
    assert len(facade.snapshot().users) == 20


def test_invalid_page_size_is_rejected_synchronously(qtbot, facade: UserFacade) -> None:
    facade.start()
    _settle(qtbot, facade)
    antes = facade.snapshot()

    with pytest.raises(InvalidConfiguration):
        facade.select_page_size(15)

    assert facade.snapshot() is antes


def test_view_model_never_reports_idle_while_fetch_is_outstanding(
    qtbot, facade: UserFacade, data_source
) -> None:
    facade.start()
    _settle(qtbot, facade)
    gate = data_source.gate("lento")
    emitidos = []
    facade.view_model.subscribe(emitidos.append)

    facade.submit_search_text("lento")
    qtbot.waitUntil(lambda: facade.snapshot().criteria == "lento")
    qtbot.wait(50)

    assert emitidos[-1].loading is True
    gate.set()
    _settle(qtbot, facade)

    estados = [(vm.criteria, vm.loading) for vm in emitidos]
    assert estados == [("ngDominican", False), ("lento", True), ("lento", False)]


def test_reload_goes_through_loading(qtbot, facade: UserFacade, data_source) -> None:
    facade.start()
    _settle(qtbot, facade)

    facade.reload()

    assert facade.snapshot().loading is True
    _settle(qtbot, facade)
    assert data_source.seeds == ["ngDominican", "ngDominican"]


def test_destroying_facade_after_shutdown_with_blocked_fetch(qtbot, config, data_source) -> None:
    gate = data_source.gate("ngDominican")
    facade = UserFacade.create(config, data_source)
    facade.start()
    qtbot.waitUntil(lambda: data_source.seeds == ["ngDominican"])

    facade.orchestrator.shutdown(wait_ms=50)

    assert facade.orchestrator.running_threads == 0
    assert detached_threads() == 1

    # El hilo sigue bloqueado mientras el grafo de Qt se destruye.
    del facade
    gc.collect()
    gate.set()

    qtbot.waitUntil(lambda: detached_threads() == 0)
    assert data_source.completed_count() == 1


def test_create_uses_configured_shutdown_wait(qapp, data_source) -> None:
    config = AppConfig(http_timeout_s=2.5)
    facade = UserFacade.create(config, data_source)

    assert facade.orchestrator.shutdown_wait_ms == 3500
    facade.shutdown()
