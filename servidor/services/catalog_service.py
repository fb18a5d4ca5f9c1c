"""Servicio de catalogo en memoria con asignacion de SKU definitivos."""

from __future__ import annotations

import logging
import uuid

from servidor.domain.models import StoredProduct, StoredVariant
from servidor.services.inventory_service import InventoryService
from shared.errors import ServiceError
from shared.protocol import ProductDraft
from shared.sku import SKU_SEPARATOR, generate_sku

LOGGER = logging.getLogger(__name__)


class CatalogService:
    """Crea y lista productos; el SKU asignado aqui es el definitivo."""

    def __init__(self, inventory_service: InventoryService | None = None) -> None:
        self._inventory_service = inventory_service or InventoryService()
        self._products: dict[str, StoredProduct] = {}
        self._assigned_skus: set[str] = set()

    @property
    def inventory_service(self) -> InventoryService:
        return self._inventory_service

    def create_product(self, draft: ProductDraft) -> StoredProduct:
        """Persiste el producto, asigna SKU unicos y registra el stock inicial."""
        name = draft.name.strip()
        if not name:
            raise ServiceError("El producto debe tener nombre.")

        product = StoredProduct(
            product_id=uuid.uuid4().hex,
            name=name,
            price=draft.price,
            sku=self._reserve_sku(generate_sku(name)),
            description=draft.description.strip(),
            brand=draft.brand.strip(),
            category=draft.category.strip(),
        )

        for variant in draft.variants:
            sku = self._reserve_sku(generate_sku(name, variant.color, variant.size))
            product.variants.append(
                StoredVariant(sku=sku, color=variant.color.strip(), size=variant.size.strip())
            )
            self._inventory_service.set_stock(sku, variant.initial_stock)

        self._products[product.product_id] = product
        LOGGER.info(
            "Producto creado: id=%s, sku=%s, variantes=%d",
            product.product_id,
            product.sku,
            len(product.variants),
        )
        return product

    def list_products(
        self,
        search: str = "",
        category: str = "",
        status: str = "",
    ) -> list[StoredProduct]:
        """Lista productos filtrando por texto, categoria y estado."""
        search_key = search.strip().casefold()
        category_key = category.strip()
        status_key = status.strip().lower()

        products: list[StoredProduct] = []
        for product in self._products.values():
            if search_key and search_key not in product.name.casefold():
                continue
            if category_key and product.category != category_key:
                continue
            if status_key == "active" and not product.is_active:
                continue
            if status_key == "inactive" and product.is_active:
                continue
            products.append(product)
        return products

    def _reserve_sku(self, candidate: str) -> str:
        """Agrega sufijo -2, -3, ... si el SKU ya fue asignado."""
        sku = candidate
        suffix = 2
        while sku in self._assigned_skus:
            sku = f"{candidate}{SKU_SEPARATOR}{suffix}"
            suffix += 1
        self._assigned_skus.add(sku)
        return sku
