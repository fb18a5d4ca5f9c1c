"""Tests de la maquina de estados de expansion de productos."""

from __future__ import annotations

import unittest

from cliente.backend.expansion import ExpansionController, ExpansionState
from cliente.backend.inventory_cache import VariantInventoryCache
from cliente.backend.stock_aggregation import StockAggregator
from shared.errors import ServiceError
from shared.protocol import InventoryBatchRequest, InventoryBatchResponse, InventoryRecord, ProductVariant


class _CountingProvider:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    def fetch_inventory_batch(self, request: InventoryBatchRequest) -> InventoryBatchResponse:
        self.calls += 1
        if self.fail:
            raise ServiceError("inventario no disponible")
        return InventoryBatchResponse(
            records={
                sku: InventoryRecord(sku=sku, quantity_available=4, quantity_reserved=0)
                for sku in request.skus
            }
        )


class _HeldDispatcher:
    def __init__(self) -> None:
        self.jobs: list = []

    def submit(self, job, on_success, on_failure) -> None:  # noqa: ANN001
        self.jobs.append((job, on_success, on_failure))

    def run_all(self) -> None:
        while self.jobs:
            job, on_success, _ = self.jobs.pop(0)
            on_success(job())


class ExpansionControllerTests(unittest.TestCase):
    """Valida transiciones, tokens de carga y ausencia de consultas extra."""

    VARIANTS = [
        ProductVariant(color="Red", size="S", sku="P-RED-S"),
        ProductVariant(color="Red", size="M", sku="P-RED-M"),
    ]

    def _build(self, held: bool = False):  # noqa: ANN202
        provider = _CountingProvider()
        dispatcher = _HeldDispatcher() if held else None
        cache = VariantInventoryCache(provider, dispatcher)
        changes: list[tuple[str, ExpansionState]] = []
        controller = ExpansionController(cache, on_change=lambda pid, st: changes.append((pid, st)))
        controller.register("p1", self.VARIANTS)
        return controller, provider, dispatcher, changes

    def test_producto_sin_variantes_no_se_registra(self) -> None:
        """Un producto sin variantes no tiene estado expandible."""
        controller, _, _, _ = self._build()

        self.assertFalse(controller.register("p2", []))
        self.assertIs(controller.state("p2"), ExpansionState.COLLAPSED)
        with self.assertRaises(KeyError):
            controller.toggle("p2")

    def test_expandir_carga_y_termina_expandido(self) -> None:
        """Expandir pasa por expanding y termina en expanded."""
        controller, provider, _, changes = self._build()

        state = controller.toggle("p1")

        self.assertIs(state, ExpansionState.EXPANDED)
        self.assertEqual(provider.calls, 1)
        self.assertEqual(
            changes,
            [("p1", ExpansionState.EXPANDING), ("p1", ExpansionState.EXPANDED)],
        )

    def test_colapsar_y_reexpandir_no_consulta(self) -> None:
        """Colapsar y volver a expandir no genera consultas nuevas."""
        controller, provider, _, _ = self._build()
        controller.toggle("p1")

        self.assertIs(controller.toggle("p1"), ExpansionState.COLLAPSED)
        self.assertIs(controller.toggle("p1"), ExpansionState.EXPANDED)
        self.assertEqual(provider.calls, 1)

    def test_colapsar_durante_carga_no_reabre(self) -> None:
        """Si se colapsa mientras carga, la respuesta llena el cache pero no reabre la fila."""
        provider = _CountingProvider()
        dispatcher = _HeldDispatcher()
        cache = VariantInventoryCache(provider, dispatcher)
        controller = ExpansionController(cache)
        controller.register("p1", self.VARIANTS)

        self.assertIs(controller.toggle("p1"), ExpansionState.EXPANDING)
        self.assertIs(controller.toggle("p1"), ExpansionState.COLLAPSED)
        dispatcher.run_all()

        self.assertIs(controller.state("p1"), ExpansionState.COLLAPSED)
        self.assertEqual(provider.calls, 1)
        self.assertIn("P-RED-S", cache)
        self.assertIn("P-RED-M", cache)
        aggregator = StockAggregator(cache)
        self.assertEqual(aggregator.total_stock(self.VARIANTS), 8)
        self.assertTrue(aggregator.is_fully_loaded(self.VARIANTS))

        self.assertIs(controller.toggle("p1"), ExpansionState.EXPANDED)
        self.assertEqual(provider.calls, 1)

    def test_reexpandir_durante_carga_espera_el_mismo_lote(self) -> None:
        """Reexpandir con la consulta en curso no duplica la consulta."""
        controller, provider, dispatcher, _ = self._build(held=True)

        controller.toggle("p1")
        controller.toggle("p1")
        self.assertIs(controller.toggle("p1"), ExpansionState.EXPANDING)
        self.assertEqual(len(dispatcher.jobs), 1)

        dispatcher.run_all()

        self.assertIs(controller.state("p1"), ExpansionState.EXPANDED)
        self.assertEqual(provider.calls, 1)

    def test_fallo_de_carga_termina_expandido(self) -> None:
        """Un fallo de consulta deja la fila expandida sin datos."""
        controller, provider, _, _ = self._build()
        provider.fail = True

        with self.assertLogs("cliente.backend.inventory_cache", level="WARNING"):
            state = controller.toggle("p1")

        self.assertIs(state, ExpansionState.EXPANDED)
        self.assertFalse(controller.is_loading("p1"))

    def test_clear_descarta_estados(self) -> None:
        """Al limpiar, los productos vuelven a no estar registrados."""
        controller, _, _, _ = self._build()
        controller.toggle("p1")

        controller.clear()

        self.assertFalse(controller.is_open("p1"))
        with self.assertRaises(KeyError):
            controller.toggle("p1")


if __name__ == "__main__":
    unittest.main()
