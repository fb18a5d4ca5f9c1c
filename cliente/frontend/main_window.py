"""Ventana principal de la consola de catalogo."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QCloseEvent, QColor, QFont, QGuiApplication, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QGraphicsDropShadowEffect,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.controller import AppController
from cliente.frontend.create_product_dialog import CreateProductDialog
from cliente.frontend.products_page import ProductsPage
from parametros import BFF_URL, USE_LOCAL_SERVER

_STYLESHEET = """
QMainWindow {
    background-color: #f1f5f9;
}
QFrame#menuCard {
    background-color: #ffffff;
    border-radius: 14px;
    min-width: 420px;
    max-width: 480px;
}
QLabel#menuTitle {
    color: #0f172a;
}
QLabel#backendLabel {
    color: #64748b;
    font-size: 12px;
}
QPushButton {
    background-color: #0f766e;
    border: none;
    border-radius: 8px;
    color: #ffffff;
    font-family: "Segoe UI";
    font-size: 14px;
    font-weight: 600;
    min-height: 38px;
    padding: 6px 14px;
}
QPushButton:hover {
    background-color: #115e59;
}
QPushButton#secondaryButton {
    background-color: #e2e8f0;
    color: #1e293b;
}
QTreeWidget {
    background-color: #ffffff;
    border: 1px solid #cbd5e1;
    border-radius: 6px;
    font-family: "Segoe UI";
    font-size: 13px;
}
"""


class MainWindow(QMainWindow):
    """Menu principal y pagina de listado en un stack de paginas."""

    def __init__(self, controller: AppController) -> None:
        super().__init__()
        self._controller = controller
        self._stack = QStackedWidget(self)
        self._menu_page = self._build_menu_page()
        self._products_page = ProductsPage(
            controller=self._controller,
            on_back=self._show_menu,
            parent=self,
        )
        self._stack.addWidget(self._menu_page)
        self._stack.addWidget(self._products_page)
        self.setCentralWidget(self._stack)

        self.setWindowTitle("Catalog Admin")
        self.setStyleSheet(_STYLESHEET)
        self._fit_to_screen()
        QShortcut(QKeySequence("Ctrl+N"), self, activated=self._open_create_dialog)
        self._show_menu()

    def _fit_to_screen(self) -> None:
        geo = QGuiApplication.primaryScreen().availableGeometry()
        self.resize(int(geo.width() * 0.7), int(geo.height() * 0.8))
        self.setMinimumSize(760, 520)

    def _build_menu_page(self) -> QWidget:
        """Construye la tarjeta del menu con las acciones disponibles."""
        page = QWidget(self)
        layout = QVBoxLayout(page)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        card = QFrame(page)
        card.setObjectName("menuCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(36, 32, 36, 32)
        card_layout.setSpacing(12)

        title = QLabel("Catalog Admin", card)
        title.setObjectName("menuTitle")
        title.setFont(QFont("Segoe UI", 22, QFont.Weight.Bold))
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)

        backend = "Servidor local (sin conexion)" if USE_LOCAL_SERVER else f"BFF: {BFF_URL}"
        backend_label = QLabel(backend, card)
        backend_label.setObjectName("backendLabel")
        backend_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        card_layout.addWidget(title)
        card_layout.addWidget(backend_label)
        card_layout.addSpacing(14)
        for text, handler, secondary in (
            ("Crear producto", self._open_create_dialog, False),
            ("Visualizar productos", self._open_products, False),
            ("Salir", self._quit, True),
        ):
            button = QPushButton(text, card)
            button.setCursor(Qt.CursorShape.PointingHandCursor)
            if secondary:
                button.setObjectName("secondaryButton")
            button.clicked.connect(handler)
            card_layout.addWidget(button)

        shadow = QGraphicsDropShadowEffect(card)
        shadow.setBlurRadius(32)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(15, 23, 42, 40))
        card.setGraphicsEffect(shadow)

        layout.addWidget(card)
        return page

    def _show_menu(self) -> None:
        self._stack.setCurrentWidget(self._menu_page)

    def _open_products(self, _checked: bool = False) -> None:
        """Abre el listado de productos con una sesion nueva."""
        if self._products_page.open_listing():
            self._stack.setCurrentWidget(self._products_page)

    def _open_create_dialog(self, _checked: bool = False) -> None:
        self._controller.on_open_create_product()
        CreateProductDialog(controller=self._controller, parent=self).exec()

    def _quit(self, _checked: bool = False) -> None:
        self._controller.on_exit(QApplication.instance())

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """Cierra la sesion de listado abierta antes de salir."""
        self._controller.close_product_listing()
        super().closeEvent(event)
