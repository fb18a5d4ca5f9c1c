"""Dialogo para crear productos con variantes y preview de SKU."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QDialog,
    QDoubleSpinBox,
    QFormLayout,
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from cliente.frontend.dialogs import show_failure, show_info
from shared.errors import ServiceError, ValidationError
from shared.protocol import ProductDraft, ProductVariant

if TYPE_CHECKING:
    from cliente.backend.controller import AppController

_COLOR_COLUMN = 0
_SIZE_COLUMN = 1
_STOCK_COLUMN = 2
_SKU_COLUMN = 3


class CreateProductDialog(QDialog):
    """Dialogo modal para crear un producto y sus variantes."""

    def __init__(
        self,
        controller: AppController,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._name_input: QLineEdit
        self._price_input: QDoubleSpinBox
        self._brand_input: QLineEdit
        self._category_input: QLineEdit
        self._description_input: QLineEdit
        self._variants_table: QTableWidget
        self._updating_previews = False

        self.setWindowTitle("Crear producto")
        self.setModal(True)
        self.setMinimumSize(720, 560)
        self.resize(780, 620)

        self._build_ui()
        self._apply_styles()

    def _build_ui(self) -> None:
        """Construye widgets del dialogo."""
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(18, 18, 18, 18)

        card = QFrame(self)
        card.setObjectName("dialogCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(24, 24, 24, 24)
        card_layout.setSpacing(12)

        title_label = QLabel("Crear producto", card)
        title_label.setObjectName("titleLabel")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        form_layout = QFormLayout()
        self._name_input = QLineEdit(card)
        self._name_input.setPlaceholderText("Classic Cotton T-Shirt 2")
        self._price_input = QDoubleSpinBox(card)
        self._price_input.setRange(0.0, 10_000_000.0)
        self._price_input.setDecimals(2)
        self._brand_input = QLineEdit(card)
        self._category_input = QLineEdit(card)
        self._description_input = QLineEdit(card)

        form_layout.addRow("Nombre", self._name_input)
        form_layout.addRow("Precio", self._price_input)
        form_layout.addRow("Marca", self._brand_input)
        form_layout.addRow("Categoria", self._category_input)
        form_layout.addRow("Descripcion", self._description_input)

        variants_label = QLabel("Variantes", card)
        variants_label.setObjectName("fieldLabel")

        self._variants_table = QTableWidget(0, 4, card)
        self._variants_table.setHorizontalHeaderLabels(
            ["Color", "Talla", "Stock inicial", "SKU (preview)"]
        )
        self._variants_table.horizontalHeader().setSectionResizeMode(
            QHeaderView.ResizeMode.Stretch
        )

        variant_buttons_layout = QHBoxLayout()
        add_variant_button = QPushButton("Agregar variante", card)
        remove_variant_button = QPushButton("Quitar variante", card)
        remove_variant_button.setObjectName("cancelButton")
        add_variant_button.clicked.connect(self._add_variant_row)
        remove_variant_button.clicked.connect(self._remove_selected_variant)
        variant_buttons_layout.addWidget(add_variant_button)
        variant_buttons_layout.addWidget(remove_variant_button)
        variant_buttons_layout.addStretch(1)

        help_label = QLabel(
            "El SKU mostrado es una vista previa; el servidor asigna el definitivo al guardar.",
            card,
        )
        help_label.setObjectName("helpLabel")
        help_label.setWordWrap(True)

        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch(1)

        cancel_button = QPushButton("Cancelar", card)
        cancel_button.setObjectName("cancelButton")
        create_button = QPushButton("Crear", card)

        cancel_button.clicked.connect(self.reject)
        create_button.clicked.connect(self._on_create_clicked)

        buttons_layout.addWidget(cancel_button)
        buttons_layout.addWidget(create_button)

        card_layout.addWidget(title_label)
        card_layout.addLayout(form_layout)
        card_layout.addWidget(variants_label)
        card_layout.addWidget(self._variants_table)
        card_layout.addLayout(variant_buttons_layout)
        card_layout.addWidget(help_label)
        card_layout.addLayout(buttons_layout)

        shadow = QGraphicsDropShadowEffect(card)
        shadow.setBlurRadius(30)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(0, 0, 0, 35))
        card.setGraphicsEffect(shadow)

        root_layout.addWidget(card)

        self._name_input.textChanged.connect(self._refresh_sku_previews)
        self._variants_table.itemChanged.connect(self._on_variant_item_changed)
        self._name_input.setFocus()

    def _apply_styles(self) -> None:
        """Aplica estilos visuales consistentes con la app."""
        self.setStyleSheet(
            """
            QDialog {
                background-color: #eef1f4;
            }
            QFrame#dialogCard {
                background-color: #ffffff;
                border-radius: 16px;
            }
            QLabel#titleLabel {
                color: #20232a;
                font-family: "Segoe UI";
                font-size: 22px;
                font-weight: 700;
            }
            QLabel#fieldLabel {
                color: #334155;
                font-family: "Segoe UI";
                font-size: 13px;
                font-weight: 600;
            }
            QLabel#helpLabel {
                color: #475569;
                font-family: "Segoe UI";
                font-size: 12px;
                background-color: #f8fafc;
                border: 1px solid #d1d5db;
                border-radius: 8px;
                padding: 10px;
            }
            QLineEdit, QDoubleSpinBox {
                background-color: #f8fafc;
                border: 1px solid #d1d5db;
                border-radius: 8px;
                color: #111827;
                font-family: "Segoe UI";
                font-size: 13px;
                padding: 8px;
            }
            QPushButton {
                background-color: #0f766e;
                border: none;
                border-radius: 10px;
                color: #ffffff;
                font-family: "Segoe UI";
                font-size: 13px;
                font-weight: 600;
                min-height: 36px;
                min-width: 100px;
                padding: 6px 12px;
            }
            QPushButton:hover {
                background-color: #115e59;
            }
            QPushButton#cancelButton {
                background-color: #e5e7eb;
                color: #1f2937;
            }
            QPushButton#cancelButton:hover {
                background-color: #d1d5db;
            }
            """
        )

    def _add_variant_row(self, _checked: bool = False) -> None:
        """Agrega una fila vacia de variante con su preview."""
        row = self._variants_table.rowCount()
        self._updating_previews = True
        try:
            self._variants_table.insertRow(row)
            self._variants_table.setItem(row, _COLOR_COLUMN, QTableWidgetItem(""))
            self._variants_table.setItem(row, _SIZE_COLUMN, QTableWidgetItem(""))
            stock_input = QSpinBox(self._variants_table)
            stock_input.setRange(0, 1_000_000)
            self._variants_table.setCellWidget(row, _STOCK_COLUMN, stock_input)
            sku_item = QTableWidgetItem("")
            sku_item.setFlags(sku_item.flags() & ~Qt.ItemFlag.ItemIsEditable)
            self._variants_table.setItem(row, _SKU_COLUMN, sku_item)
        finally:
            self._updating_previews = False
        self._refresh_sku_previews()

    def _remove_selected_variant(self, _checked: bool = False) -> None:
        row = self._variants_table.currentRow()
        if row >= 0:
            self._variants_table.removeRow(row)

    def _on_variant_item_changed(self, item: QTableWidgetItem) -> None:
        """Recalcula previews cuando cambia color o talla."""
        if self._updating_previews or item.column() == _SKU_COLUMN:
            return
        self._refresh_sku_previews()

    def _refresh_sku_previews(self, _text: str = "") -> None:
        """Recalcula el preview de SKU de todas las variantes."""
        previews = self._controller.preview_variant_skus(
            self._name_input.text(),
            self._collect_variants(),
        )
        self._updating_previews = True
        try:
            for row, preview in enumerate(previews):
                item = self._variants_table.item(row, _SKU_COLUMN)
                if item is not None:
                    item.setText(preview)
        finally:
            self._updating_previews = False

    def _collect_variants(self) -> list[ProductVariant]:
        """Lee las filas de la tabla como variantes sin SKU."""
        variants: list[ProductVariant] = []
        for row in range(self._variants_table.rowCount()):
            color_item = self._variants_table.item(row, _COLOR_COLUMN)
            size_item = self._variants_table.item(row, _SIZE_COLUMN)
            stock_widget = self._variants_table.cellWidget(row, _STOCK_COLUMN)
            variants.append(
                ProductVariant(
                    color=color_item.text() if color_item is not None else "",
                    size=size_item.text() if size_item is not None else "",
                    initial_stock=(
                        stock_widget.value() if isinstance(stock_widget, QSpinBox) else 0
                    ),
                )
            )
        return variants

    def _on_create_clicked(self) -> None:
        """Valida y crea el producto usando el controller."""
        draft = ProductDraft(
            name=self._name_input.text(),
            price=self._price_input.value(),
            brand=self._brand_input.text(),
            category=self._category_input.text(),
            description=self._description_input.text(),
            variants=self._collect_variants(),
        )
        try:
            product = self._controller.on_create_product(draft)
        except (ValidationError, ServiceError) as exc:
            show_failure(self, "Error al crear producto", exc)
            return

        skus = "\n".join(variant.sku or "" for variant in product.variants)
        show_info(self, "Producto creado", f"Producto creado: {product.name}\nSKU asignados:\n{skus}")
        self.accept()
