"""Inicializacion de la aplicacion de cliente."""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from cliente.backend.controller import AppController
from cliente.backend.gateway import HttpServerGateway, LocalServerGateway, ServerGateway
from cliente.frontend.main_window import MainWindow
from cliente.frontend.qt_dispatcher import QtFetchDispatcher
from parametros import BFF_URL, USE_LOCAL_SERVER

LOGGER = logging.getLogger(__name__)


def main() -> int:
    """Ejecuta la aplicacion grafica."""
    app = QApplication(sys.argv)

    gateway: ServerGateway
    if USE_LOCAL_SERVER:
        gateway = LocalServerGateway()
        LOGGER.info("Usando servidor local en memoria.")
    else:
        gateway = HttpServerGateway()
        LOGGER.info("Usando BFF en: %s", BFF_URL)

    dispatcher = QtFetchDispatcher(parent=app)
    controller = AppController(gateway=gateway, dispatcher=dispatcher)
    window = MainWindow(controller=controller)
    window.showMaximized()

    LOGGER.info("Aplicacion iniciada.")
    exit_code = app.exec()

    if isinstance(gateway, HttpServerGateway):
        gateway.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
