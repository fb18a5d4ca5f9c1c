"""Agregacion de stock por producto a partir del cache de inventario."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from shared.protocol import ProductVariant

from .inventory_cache import VariantInventoryCache

LOW_STOCK_THRESHOLD = 10


class StockStatus(Enum):
    """Clasificacion visual del stock disponible."""

    OUT_OF_STOCK = "out_of_stock"
    LOW = "low"
    IN_STOCK = "in_stock"


@dataclass(frozen=True, slots=True)
class StockSummary:
    """Totales de un producto para la fila del listado."""

    total_available: int
    total_reserved: int
    fully_loaded: bool


def stock_status(quantity_available: int) -> StockStatus:
    """Clasifica una cantidad disponible como sin stock, bajo o con stock."""
    if quantity_available <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity_available < LOW_STOCK_THRESHOLD:
        return StockStatus.LOW
    return StockStatus.IN_STOCK


def stock_badge_text(quantity_available: int) -> str:
    """Texto del badge de stock de una variante."""
    status = stock_status(quantity_available)
    if status is StockStatus.OUT_OF_STOCK:
        return "Sin stock"
    if status is StockStatus.LOW:
        return f"Bajo ({quantity_available})"
    return str(quantity_available)


def availability_text(quantity_available: int) -> str:
    return "Disponible" if quantity_available > 0 else "No disponible"


def format_variant_label(variant: ProductVariant) -> str:
    """Retorna "color / talla", o el SKU si la variante no tiene atributos."""
    parts = [part for part in (variant.color.strip(), variant.size.strip()) if part]
    if parts:
        return " / ".join(parts)
    return variant.sku or ""


class StockAggregator:
    """Deriva totales por producto desde el cache, sin guardar estado propio.

    Los totales se recalculan en cada consulta, asi que siempre reflejan el
    ultimo lote aplicado al cache.
    """

    def __init__(self, cache: VariantInventoryCache) -> None:
        self._cache = cache

    def available_count(self, sku: str | None) -> int:
        """Stock disponible del SKU, 0 si no esta en cache."""
        record = self._cache.get(sku) if sku else None
        return record.quantity_available if record is not None else 0

    def reserved_count(self, sku: str | None) -> int:
        """Stock reservado del SKU, 0 si no esta en cache."""
        record = self._cache.get(sku) if sku else None
        return record.quantity_reserved if record is not None else 0

    def total_stock(self, variants: Sequence[ProductVariant]) -> int:
        """Suma el stock disponible de las variantes; faltantes cuentan como 0."""
        return sum(self.available_count(variant.sku) for variant in variants)

    def reserved_total(self, variants: Sequence[ProductVariant]) -> int:
        return sum(self.reserved_count(variant.sku) for variant in variants)

    def is_fully_loaded(self, variants: Sequence[ProductVariant]) -> bool:
        """True si todas las variantes con SKU tienen entrada en el cache."""
        # Variantes sin SKU solo existen al crear el producto; no tienen inventario.
        return all(variant.sku in self._cache for variant in variants if variant.sku)

    def summarize(self, variants: Sequence[ProductVariant]) -> StockSummary:
        return StockSummary(
            total_available=self.total_stock(variants),
            total_reserved=self.reserved_total(variants),
            fully_loaded=self.is_fully_loaded(variants),
        )
