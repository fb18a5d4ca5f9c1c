"""Controlador principal del cliente."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from shared.protocol import (
    CreateProductRequest,
    ListProductsRequest,
    ProductDraft,
    ProductSummary,
    ProductVariant,
)
from shared.sku import generate_sku

from .dispatch import FetchDispatcher
from .expansion import StateListener
from .gateway import ServerGateway
from .inventory_cache import CacheListener
from .listing_session import ProductListingSession
from .validators import validate_product_draft

if TYPE_CHECKING:
    from PyQt6.QtWidgets import QApplication

LOGGER = logging.getLogger(__name__)


class AppController:
    """Coordina acciones de UI y servicios de negocio."""

    def __init__(
        self,
        gateway: ServerGateway,
        dispatcher: FetchDispatcher | None = None,
    ) -> None:
        self._gateway = gateway
        self._dispatcher = dispatcher
        self._listing_session: ProductListingSession | None = None

    @property
    def listing_session(self) -> ProductListingSession | None:
        return self._listing_session

    def on_open_create_product(self) -> None:
        """Registra la accion para abrir dialogo de creacion de producto."""
        LOGGER.info("Accion ejecutada: abrir dialogo crear producto")

    @staticmethod
    def preview_sku(product_name: str, color: str = "", size: str = "") -> str:
        """Construye el SKU de preview para la UI; no se envia al servidor."""
        return generate_sku(product_name, color, size)

    @staticmethod
    def preview_variant_skus(
        product_name: str,
        variants: Sequence[ProductVariant],
    ) -> list[str]:
        """Recalcula el preview de cada variante con el nombre actual."""
        return [generate_sku(product_name, v.color, v.size) for v in variants]

    def on_create_product(self, draft: ProductDraft) -> ProductSummary:
        """Valida y crea el producto; retorna el producto con SKU definitivos."""
        validate_product_draft(draft)
        response = self._gateway.create_product(CreateProductRequest(product=draft))

        created = response.product
        previews = self.preview_variant_skus(draft.name, draft.variants)
        assigned = [variant.sku for variant in created.variants]
        if previews != assigned:
            LOGGER.info(
                "SKU asignados por el servidor difieren del preview: %s -> %s",
                previews,
                assigned,
            )
        LOGGER.info("Producto creado desde UI: id=%s, nombre=%s", created.product_id, created.name)
        return created

    def open_product_listing(
        self,
        on_expansion_change: StateListener | None = None,
        on_inventory_change: CacheListener | None = None,
        request: ListProductsRequest | None = None,
    ) -> ProductListingSession:
        """Abre una sesion de listado nueva, descartando la anterior."""
        self.close_product_listing()
        session = ProductListingSession(
            gateway=self._gateway,
            dispatcher=self._dispatcher,
            on_expansion_change=on_expansion_change,
            on_inventory_change=on_inventory_change,
        )
        session.load_products(request)
        self._listing_session = session
        LOGGER.info("Accion ejecutada: visualizar productos")
        return session

    def close_product_listing(self) -> None:
        """Cierra la sesion de listado activa, si existe."""
        if self._listing_session is None:
            return
        self._listing_session.close()
        self._listing_session = None

    def on_exit(
        self,
        app: QApplication | Callable[[], None] | None,
    ) -> None:
        """Cierra la aplicacion."""
        LOGGER.info("Accion ejecutada: salir")
        self.close_product_listing()

        if callable(app):
            app()
            return

        if app is not None:
            app.quit()
