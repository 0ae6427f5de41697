"""Punto de entrada de la aplicación.

Lee la configuración, crea los componentes de infraestructura, la fachada y
el estado, y arranca la interfaz gráfica principal.
"""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from directorio_usuarios.core.config import AppConfig
from directorio_usuarios.core.facade import UserFacade
from directorio_usuarios.infrastructure.api_client import APIClient
from directorio_usuarios.infrastructure.repositories import UserRepository
from directorio_usuarios.ui.main_window import MainWindow


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Arranca la aplicación PyQt6 con las dependencias configuradas."""

    config = AppConfig.from_env()
    configure_logging(config.log_level)

    app = QApplication(sys.argv)

    api_client = APIClient(config.api_url, timeout_s=config.http_timeout_s)
    repository = UserRepository(api_client)
    facade = UserFacade.create(config, repository)

    window = MainWindow(facade=facade)
    app.aboutToQuit.connect(facade.shutdown)
    facade.start()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":  # pragma: no cover - punto de entrada interactivo
    main()
