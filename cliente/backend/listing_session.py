"""Sesion del listado de productos: cache, agregacion y expansion."""

from __future__ import annotations

import logging

from shared.protocol import ListProductsRequest, ProductSummary

from .dispatch import FetchDispatcher
from .expansion import ExpansionController, ExpansionState, StateListener
from .gateway import ServerGateway
from .inventory_cache import CacheListener, VariantInventoryCache
from .stock_aggregation import StockAggregator, StockSummary

LOGGER = logging.getLogger(__name__)

_ALL = "all"


class ProductListingSession:
    """Agrupa el estado de un listado abierto.

    Se construye al abrir el listado y se descarta al cerrarlo; reabrir el
    listado parte con un cache vacio.
    """

    def __init__(
        self,
        gateway: ServerGateway,
        dispatcher: FetchDispatcher | None = None,
        on_expansion_change: StateListener | None = None,
        on_inventory_change: CacheListener | None = None,
    ) -> None:
        self._gateway = gateway
        self.cache = VariantInventoryCache(provider=gateway, dispatcher=dispatcher)
        self.aggregator = StockAggregator(self.cache)
        self.expansion = ExpansionController(self.cache, on_change=on_expansion_change)
        if on_inventory_change is not None:
            self.cache.add_listener(on_inventory_change)
        self._products: dict[str, ProductSummary] = {}
        self._closed = False

    @property
    def products(self) -> list[ProductSummary]:
        return list(self._products.values())

    @property
    def closed(self) -> bool:
        return self._closed

    def product(self, product_id: str) -> ProductSummary:
        return self._products[product_id]

    def load_products(self, request: ListProductsRequest | None = None) -> list[ProductSummary]:
        """Carga productos y registra como colapsados los que tienen variantes."""
        response = self._gateway.list_products(request or ListProductsRequest())
        self.expansion.clear()
        self._products = {product.product_id: product for product in response.products}
        for product in response.products:
            self.expansion.register(product.product_id, product.variants)

        LOGGER.info("Listado cargado con %d productos.", len(self._products))
        return self.products

    def filter_products(
        self,
        search: str = "",
        category: str = "",
        status: str = "",
    ) -> list[ProductSummary]:
        """Filtra en memoria por texto (nombre, descripcion, SKU), categoria y estado."""
        search_key = search.strip().casefold()
        category_key = category.strip()
        status_key = status.strip().lower()

        filtered: list[ProductSummary] = []
        for product in self._products.values():
            if search_key and not any(
                search_key in text.casefold()
                for text in (product.name, product.description, product.sku)
            ):
                continue
            if category_key and category_key != _ALL and product.category != category_key:
                continue
            if status_key and status_key != _ALL and product.status != status_key:
                continue
            filtered.append(product)
        return filtered

    def categories(self) -> list[str]:
        """Categorias presentes en el listado, ordenadas, para el filtro."""
        return sorted({product.category for product in self._products.values() if product.category})

    def toggle(self, product_id: str) -> ExpansionState:
        """Expande o colapsa la fila del producto."""
        return self.expansion.toggle(product_id)

    def reload_inventory(self, product_id: str) -> bool:
        """Reintenta la carga de SKU faltantes sin cambiar el estado de la fila."""
        product = self._products[product_id]
        return self.cache.ensure_loaded(
            product_id,
            [variant.sku for variant in product.variants],
        )

    def is_reloading(self, product_id: str) -> bool:
        """Indica si hay una consulta en curso para alguna variante del producto."""
        return any(
            self.cache.is_fetching(variant.sku)
            for variant in self._products[product_id].variants
            if variant.sku
        )

    def summary(self, product_id: str) -> StockSummary:
        return self.aggregator.summarize(self._products[product_id].variants)

    def has_failed_inventory(self, product_id: str) -> bool:
        """Indica si alguna variante quedo sin datos por un fallo de consulta."""
        return any(
            self.cache.has_failed(variant.sku)
            for variant in self._products[product_id].variants
            if variant.sku
        )

    def close(self) -> None:
        """Descarta estados de expansion y cache del listado."""
        if self._closed:
            return
        self.cache.close()
        self.cache.invalidate()
        self.expansion.clear()
        self._products.clear()
        self._closed = True
        LOGGER.info("Listado de productos cerrado.")
