"""Servicio de inventario en memoria."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from servidor.domain.models import StockLevel
from shared.errors import ServiceError

LOGGER = logging.getLogger(__name__)


class InventoryService:
    """Mantiene el stock por SKU y responde consultas por lote."""

    def __init__(self) -> None:
        self._levels: dict[str, StockLevel] = {}

    def set_stock(
        self,
        sku: str,
        quantity_available: int,
        quantity_reserved: int = 0,
        reorder_point: int = 0,
    ) -> StockLevel:
        """Crea o reemplaza el stock de un SKU."""
        sku_clean = sku.strip()
        if not sku_clean:
            raise ServiceError("El SKU no puede estar vacio.")
        if quantity_available < 0 or quantity_reserved < 0 or reorder_point < 0:
            raise ServiceError(f"Cantidades negativas para SKU {sku_clean}.")

        level = StockLevel(
            sku=sku_clean,
            quantity_available=quantity_available,
            quantity_reserved=quantity_reserved,
            reorder_point=reorder_point,
            updated_at=datetime.now(),
        )
        self._levels[sku_clean] = level
        return level

    def get_batch(self, skus: Iterable[str]) -> dict[str, StockLevel]:
        """Retorna el stock de los SKU existentes; omite los desconocidos."""
        found = {sku: self._levels[sku] for sku in skus if sku in self._levels}
        LOGGER.debug("Consulta de inventario por lote: %d encontrados", len(found))
        return found
