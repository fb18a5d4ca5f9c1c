"""Pagina de listado de productos con filas de variantes expandibles."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from cliente.backend.expansion import ExpansionState
from cliente.backend.stock_aggregation import (
    StockAggregator,
    StockStatus,
    availability_text,
    format_variant_label,
    stock_badge_text,
    stock_status,
)
from cliente.frontend.dialogs import show_failure
from shared.errors import ServiceError
from shared.protocol import ProductSummary, ProductVariant

if TYPE_CHECKING:
    from cliente.backend.controller import AppController
    from cliente.backend.listing_session import ProductListingSession

_PRODUCT_ID_ROLE = Qt.ItemDataRole.UserRole
_RETRY_ROLE = Qt.ItemDataRole.UserRole.value + 1

_ALL = "all"
_STATUS_OPTIONS = (
    ("Todos los estados", _ALL),
    ("Activos", "active"),
    ("Inactivos", "inactive"),
)

_HEADERS = ("Producto", "SKU", "Categoria", "Precio", "Variantes / Stock", "Estado")

_STATUS_COLORS: dict[StockStatus, str] = {
    StockStatus.OUT_OF_STOCK: "#dc2626",
    StockStatus.LOW: "#d97706",
    StockStatus.IN_STOCK: "#16a34a",
}


class ProductsPage(QWidget):
    """Listado de productos; expandir una fila carga el inventario de sus variantes."""

    def __init__(
        self,
        controller: AppController,
        on_back: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._on_back = on_back
        self._session: ProductListingSession | None = None
        self._items: dict[str, QTreeWidgetItem] = {}
        self._syncing = False

        self._search_input: QLineEdit
        self._category_combo: QComboBox
        self._status_combo: QComboBox
        self._tree: QTreeWidget

        self._build_ui()

    def _build_ui(self) -> None:
        """Construye barra de busqueda y arbol de productos."""
        root_layout = QVBoxLayout(self)
        root_layout.setContentsMargins(24, 24, 24, 24)
        root_layout.setSpacing(12)

        title_label = QLabel("Productos", self)
        title_label.setFont(QFont("Segoe UI", 18, QFont.Weight.Bold))

        top_layout = QHBoxLayout()
        self._search_input = QLineEdit(self)
        self._search_input.setPlaceholderText("Buscar por nombre, descripcion o SKU...")
        self._search_input.textChanged.connect(self._apply_filter)
        self._category_combo = QComboBox(self)
        self._category_combo.addItem("Todas las categorias", _ALL)
        self._category_combo.currentIndexChanged.connect(self._apply_filter)
        self._status_combo = QComboBox(self)
        for label, value in _STATUS_OPTIONS:
            self._status_combo.addItem(label, value)
        self._status_combo.currentIndexChanged.connect(self._apply_filter)
        reload_button = QPushButton("Recargar", self)
        back_button = QPushButton("Regresar", self)
        reload_button.clicked.connect(self.open_listing)
        back_button.clicked.connect(self._on_back_clicked)
        top_layout.addWidget(self._search_input, 1)
        top_layout.addWidget(self._category_combo)
        top_layout.addWidget(self._status_combo)
        top_layout.addWidget(reload_button)
        top_layout.addWidget(back_button)

        self._tree = QTreeWidget(self)
        self._tree.setColumnCount(len(_HEADERS))
        self._tree.setHeaderLabels(list(_HEADERS))
        self._tree.header().setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        self._tree.header().setStretchLastSection(True)
        self._tree.itemExpanded.connect(self._on_item_expanded)
        self._tree.itemCollapsed.connect(self._on_item_collapsed)
        self._tree.itemDoubleClicked.connect(self._on_item_double_clicked)

        root_layout.addWidget(title_label)
        root_layout.addLayout(top_layout)
        root_layout.addWidget(self._tree, 1)

    def open_listing(self, _checked: bool = False) -> bool:
        """Abre una sesion de listado nueva y construye las filas."""
        try:
            self._session = self._controller.open_product_listing(
                on_expansion_change=self._on_expansion_changed,
                on_inventory_change=self._on_inventory_changed,
            )
        except ServiceError as exc:
            show_failure(self, "Error al cargar productos", exc)
            return False

        self._rebuild_tree(self._session.products)
        self._refresh_categories(self._session.categories())
        self._apply_filter()
        return True

    def close_listing(self) -> None:
        """Cierra la sesion de listado y limpia las filas."""
        self._controller.close_product_listing()
        self._session = None
        self._items.clear()
        self._tree.clear()

    def _rebuild_tree(self, products: list[ProductSummary]) -> None:
        self._tree.clear()
        self._items.clear()
        for product in products:
            item = QTreeWidgetItem(
                [
                    product.name,
                    product.sku,
                    product.category,
                    f"${product.price:,.2f}",
                    "",
                    product.status,
                ]
            )
            item.setData(0, _PRODUCT_ID_ROLE, product.product_id)
            if product.has_variants:
                item.setChildIndicatorPolicy(
                    QTreeWidgetItem.ChildIndicatorPolicy.ShowIndicator
                )
            self._tree.addTopLevelItem(item)
            self._items[product.product_id] = item
            self._render_product(product.product_id)

    def _refresh_categories(self, categories: list[str]) -> None:
        """Recarga las categorias del filtro conservando la seleccion si aun existe."""
        selected = self._category_combo.currentData()
        self._category_combo.blockSignals(True)
        try:
            self._category_combo.clear()
            self._category_combo.addItem("Todas las categorias", _ALL)
            for category in categories:
                self._category_combo.addItem(category, category)
            index = self._category_combo.findData(selected)
            self._category_combo.setCurrentIndex(max(index, 0))
        finally:
            self._category_combo.blockSignals(False)

    def _apply_filter(self, *_args: object) -> None:
        """Oculta las filas que no pasan busqueda, categoria y estado."""
        if self._session is None:
            return
        matches = self._session.filter_products(
            search=self._search_input.text(),
            category=self._category_combo.currentData() or _ALL,
            status=self._status_combo.currentData() or _ALL,
        )
        visible = {p.product_id for p in matches}
        for product_id, item in self._items.items():
            item.setHidden(product_id not in visible)

    def _on_item_expanded(self, item: QTreeWidgetItem) -> None:
        self._sync_toggle(item, want_open=True)

    def _on_item_collapsed(self, item: QTreeWidgetItem) -> None:
        self._sync_toggle(item, want_open=False)

    def _sync_toggle(self, item: QTreeWidgetItem, want_open: bool) -> None:
        """Traduce expandir/colapsar del arbol a la sesion de listado."""
        if self._syncing or self._session is None:
            return
        product_id = item.data(0, _PRODUCT_ID_ROLE)
        if product_id is None or product_id not in self._items:
            return
        if self._session.expansion.is_open(product_id) != want_open:
            self._session.toggle(product_id)

    def _on_item_double_clicked(self, item: QTreeWidgetItem, _column: int) -> None:
        """Reintenta la carga de inventario desde la fila de reintento."""
        product_id = item.data(0, _RETRY_ROLE)
        if product_id is None or self._session is None:
            return
        self._session.reload_inventory(product_id)
        self._render_product(product_id)

    def _on_expansion_changed(self, product_id: str, _state: ExpansionState) -> None:
        self._render_product(product_id)

    def _on_inventory_changed(self, _skus: frozenset[str]) -> None:
        """Refresca las filas abiertas tras cada lote del cache."""
        if self._session is None:
            return
        for product_id in self._items:
            if self._session.expansion.is_open(product_id):
                self._render_product(product_id)

    def _render_product(self, product_id: str) -> None:
        """Dibuja hijos y resumen de stock segun el estado de la fila."""
        item = self._items.get(product_id)
        if item is None or self._session is None:
            return

        product = self._session.product(product_id)
        state = self._session.expansion.state(product_id)

        self._syncing = True
        try:
            item.takeChildren()
            item.setText(4, self._summary_text(product, state))

            if state is ExpansionState.EXPANDING:
                loading = QTreeWidgetItem(["Cargando inventario..."])
                loading.setForeground(0, QColor("#6b7280"))
                item.addChild(loading)
            elif state is ExpansionState.EXPANDED:
                if self._session.is_reloading(product_id):
                    reloading = QTreeWidgetItem(["Reintentando carga de inventario..."])
                    reloading.setForeground(0, QColor("#6b7280"))
                    item.addChild(reloading)
                elif self._session.has_failed_inventory(product_id):
                    retry = QTreeWidgetItem(
                        ["Inventario no disponible. Doble clic para reintentar."]
                    )
                    retry.setData(0, _RETRY_ROLE, product_id)
                    retry.setForeground(0, QColor("#b45309"))
                    item.addChild(retry)
                for variant in product.variants:
                    item.addChild(
                        self._build_variant_item(variant, self._session.aggregator)
                    )

            item.setExpanded(state is not ExpansionState.COLLAPSED)
        finally:
            self._syncing = False

    def _summary_text(self, product: ProductSummary, state: ExpansionState) -> str:
        if not product.has_variants or self._session is None:
            return "Sin variantes"

        count = len(product.variants)
        text = f"{count} variante{'s' if count != 1 else ''}"
        aggregator = self._session.aggregator
        if state is ExpansionState.EXPANDED and aggregator.is_fully_loaded(product.variants):
            text += f" (Total: {aggregator.total_stock(product.variants)})"
        return text

    def _build_variant_item(
        self,
        variant: ProductVariant,
        aggregator: StockAggregator,
    ) -> QTreeWidgetItem:
        """Construye la fila hija de una variante con su stock."""
        available = aggregator.available_count(variant.sku)
        reserved = aggregator.reserved_count(variant.sku)

        stock_text = stock_badge_text(available)
        if reserved > 0:
            stock_text += f" | {reserved} reservado(s)"

        child = QTreeWidgetItem(
            [
                format_variant_label(variant),
                variant.sku or "",
                "",
                "",
                stock_text,
                availability_text(available),
            ]
        )
        child.setForeground(4, QColor(_STATUS_COLORS[stock_status(available)]))
        return child

    def _on_back_clicked(self, _checked: bool = False) -> None:
        self.close_listing()
        self._on_back()
