"""Tests de agregacion de stock por producto."""

from __future__ import annotations

import unittest

from cliente.backend.inventory_cache import VariantInventoryCache
from cliente.backend.stock_aggregation import (
    StockAggregator,
    StockStatus,
    StockSummary,
    availability_text,
    format_variant_label,
    stock_badge_text,
    stock_status,
)
from shared.protocol import InventoryBatchRequest, InventoryBatchResponse, InventoryRecord, ProductVariant


class _StaticProvider:
    def __init__(self, stock: dict[str, tuple[int, int]]) -> None:
        self._stock = stock

    def fetch_inventory_batch(self, request: InventoryBatchRequest) -> InventoryBatchResponse:
        return InventoryBatchResponse(
            records={
                sku: InventoryRecord(sku=sku, quantity_available=avail, quantity_reserved=res)
                for sku, (avail, res) in self._stock.items()
                if sku in request.skus
            }
        )


class StockAggregatorTests(unittest.TestCase):
    """Valida totales, carga completa y clasificacion de stock."""

    @staticmethod
    def _variants(*skus: str | None) -> list[ProductVariant]:
        return [ProductVariant(color="Red", size=str(index), sku=sku) for index, sku in enumerate(skus)]

    @staticmethod
    def _aggregator(stock: dict[str, tuple[int, int]], loaded: list[str]) -> StockAggregator:
        cache = VariantInventoryCache(_StaticProvider(stock))
        cache.ensure_loaded("p1", loaded)
        return StockAggregator(cache)

    def test_total_suma_disponibles(self) -> None:
        """X=5 e Y=3 cargados suman 8 y el producto queda cargado."""
        aggregator = self._aggregator({"X": (5, 1), "Y": (3, 2)}, ["X", "Y"])
        variants = self._variants("X", "Y")

        self.assertEqual(aggregator.total_stock(variants), 8)
        self.assertEqual(aggregator.reserved_total(variants), 3)
        self.assertTrue(aggregator.is_fully_loaded(variants))

    def test_variante_sin_cache_cuenta_cero(self) -> None:
        """Con Y fuera del cache el total es 5 y no esta completamente cargado."""
        aggregator = self._aggregator({"X": (5, 0), "Y": (3, 0)}, ["X"])
        variants = self._variants("X", "Y")

        self.assertEqual(aggregator.total_stock(variants), 5)
        self.assertFalse(aggregator.is_fully_loaded(variants))

    def test_sku_sin_registro_cuenta_cero_pero_cargado(self) -> None:
        """Un SKU omitido por el servidor suma 0 y cuenta como cargado."""
        aggregator = self._aggregator({"X": (5, 0)}, ["X", "GHOST"])
        variants = self._variants("X", "GHOST")

        self.assertEqual(aggregator.total_stock(variants), 5)
        self.assertTrue(aggregator.is_fully_loaded(variants))

    def test_variantes_vacias_y_sin_sku(self) -> None:
        """Sin variantes el total es 0; variantes sin SKU se ignoran."""
        aggregator = self._aggregator({}, [])

        self.assertEqual(aggregator.total_stock([]), 0)
        self.assertTrue(aggregator.is_fully_loaded([]))
        self.assertTrue(aggregator.is_fully_loaded(self._variants(None)))
        self.assertEqual(aggregator.available_count(None), 0)

    def test_summarize(self) -> None:
        """El resumen agrupa disponibles, reservados y estado de carga."""
        aggregator = self._aggregator({"X": (5, 1), "Y": (3, 2)}, ["X"])

        self.assertEqual(
            aggregator.summarize(self._variants("X", "Y")),
            StockSummary(total_available=5, total_reserved=1, fully_loaded=False),
        )

    def test_limites_de_clasificacion(self) -> None:
        """0 es sin stock, 9 es bajo y 10 ya tiene stock."""
        self.assertIs(stock_status(0), StockStatus.OUT_OF_STOCK)
        self.assertIs(stock_status(-1), StockStatus.OUT_OF_STOCK)
        self.assertIs(stock_status(9), StockStatus.LOW)
        self.assertIs(stock_status(10), StockStatus.IN_STOCK)

    def test_textos_de_badge(self) -> None:
        """Los textos de badge y disponibilidad siguen la clasificacion."""
        self.assertEqual(stock_badge_text(0), "Sin stock")
        self.assertEqual(stock_badge_text(9), "Bajo (9)")
        self.assertEqual(stock_badge_text(10), "10")
        self.assertEqual(availability_text(0), "No disponible")
        self.assertEqual(availability_text(1), "Disponible")

    def test_etiqueta_de_variante(self) -> None:
        """La etiqueta usa color y talla, o el SKU si no hay atributos."""
        self.assertEqual(format_variant_label(ProductVariant(color="Red", size="L")), "Red / L")
        self.assertEqual(format_variant_label(ProductVariant(size="M")), "M")
        self.assertEqual(format_variant_label(ProductVariant(sku="ABC-1")), "ABC-1")


if __name__ == "__main__":
    unittest.main()
