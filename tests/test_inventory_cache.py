"""Tests del cache de inventario por variante."""

from __future__ import annotations

import unittest
from typing import Any, Callable

from cliente.backend.inventory_cache import LoadOutcome, VariantInventoryCache
from shared.errors import ServiceError
from shared.protocol import InventoryBatchRequest, InventoryBatchResponse, InventoryRecord


class FakeInventoryProvider:
    """Proveedor en memoria que registra cada consulta por lote."""

    def __init__(self, stock: dict[str, tuple[int, int]] | None = None) -> None:
        self.stock = stock or {}
        self.requests: list[set[str]] = []
        self.fail_with: Exception | None = None

    def fetch_inventory_batch(self, request: InventoryBatchRequest) -> InventoryBatchResponse:
        self.requests.append(set(request.skus))
        if self.fail_with is not None:
            raise self.fail_with
        return InventoryBatchResponse(
            records={
                sku: InventoryRecord(sku=sku, quantity_available=avail, quantity_reserved=res)
                for sku, (avail, res) in self.stock.items()
                if sku in request.skus
            }
        )


class ManualDispatcher:
    """Retiene los trabajos hasta que el test decide completarlos."""

    def __init__(self) -> None:
        self.jobs: list[tuple[Callable[[], Any], Callable[[Any], None], Callable[[Exception], None]]] = []

    def submit(self, job, on_success, on_failure) -> None:  # noqa: ANN001
        self.jobs.append((job, on_success, on_failure))

    def run_next(self) -> None:
        job, on_success, on_failure = self.jobs.pop(0)
        try:
            result = job()
        except Exception as exc:  # noqa: BLE001
            on_failure(exc)
            return
        on_success(result)


class VariantInventoryCacheTests(unittest.TestCase):
    """Valida de-duplicacion, aplicacion por lote y manejo de fallos."""

    def test_solo_consulta_skus_faltantes(self) -> None:
        """Con A-1 en cache, debe consultar solo B-2 en una llamada."""
        provider = FakeInventoryProvider({"A-1": (5, 0), "B-2": (3, 1)})
        cache = VariantInventoryCache(provider)
        cache.ensure_loaded("p0", ["A-1"])
        provider.requests.clear()

        cache.ensure_loaded("p1", ["A-1", "B-2"])

        self.assertEqual(provider.requests, [{"B-2"}])
        self.assertEqual(cache.get("B-2").quantity_reserved, 1)

    def test_todo_en_cache_retorna_sin_consultar(self) -> None:
        """Debe completar de inmediato y sin red cuando todo esta en cache."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        cache = VariantInventoryCache(provider)
        cache.ensure_loaded("p1", ["A-1"])
        provider.requests.clear()
        outcomes: list[LoadOutcome] = []

        loaded = cache.ensure_loaded("p1", ["A-1"], on_complete=outcomes.append)

        self.assertTrue(loaded)
        self.assertEqual(provider.requests, [])
        self.assertEqual(outcomes, [LoadOutcome(product_id="p1", succeeded=True)])

    def test_sku_en_curso_no_se_consulta_dos_veces(self) -> None:
        """Dos productos que comparten un SKU en curso no duplican la consulta."""
        provider = FakeInventoryProvider({"A-1": (5, 0), "B-2": (3, 0), "C-3": (1, 0)})
        dispatcher = ManualDispatcher()
        cache = VariantInventoryCache(provider, dispatcher)
        first: list[LoadOutcome] = []
        second: list[LoadOutcome] = []

        cache.ensure_loaded("p1", ["A-1", "B-2"], on_complete=first.append)
        cache.ensure_loaded("p2", ["B-2", "C-3"], on_complete=second.append)

        self.assertEqual(len(dispatcher.jobs), 2)
        self.assertTrue(cache.is_fetching("B-2"))
        dispatcher.run_next()
        dispatcher.run_next()

        self.assertEqual(provider.requests, [{"A-1", "B-2"}, {"C-3"}])
        self.assertEqual(first, [LoadOutcome("p1", True)])
        self.assertEqual(second, [LoadOutcome("p2", True)])
        self.assertEqual(cache.in_flight_skus, frozenset())

    def test_carga_que_solo_espera_lote_ajeno_completa_con_ese_lote(self) -> None:
        """Una carga sin SKU propios por consultar termina cuando termina el lote en curso."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        dispatcher = ManualDispatcher()
        cache = VariantInventoryCache(provider, dispatcher)
        outcomes: list[LoadOutcome] = []

        cache.ensure_loaded("p1", ["A-1"])
        cache.ensure_loaded("p2", ["A-1"], on_complete=outcomes.append)

        self.assertEqual(len(dispatcher.jobs), 1)
        self.assertEqual(outcomes, [])
        dispatcher.run_next()
        self.assertEqual(outcomes, [LoadOutcome("p2", True)])

    def test_sku_omitido_cuenta_como_cargado_sin_registro(self) -> None:
        """Un SKU omitido por el servidor queda cargado pero sin registro."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        cache = VariantInventoryCache(provider)

        cache.ensure_loaded("p1", ["A-1", "GHOST"])

        self.assertIn("GHOST", cache)
        self.assertIsNone(cache.get("GHOST"))
        self.assertEqual(len(cache), 2)
        provider.requests.clear()
        self.assertTrue(cache.ensure_loaded("p1", ["A-1", "GHOST"]))
        self.assertEqual(provider.requests, [])

    def test_largo_coincide_con_pertenencia(self) -> None:
        """len cuenta cada SKU cargado una vez, tenga o no registro."""
        provider = FakeInventoryProvider({})
        cache = VariantInventoryCache(provider)
        cache.ensure_loaded("p1", ["A-1", "B-2"])
        self.assertEqual(len(cache), 2)

        provider.stock = {"A-1": (3, 0)}
        cache.invalidate(["A-1"])
        self.assertEqual(len(cache), 1)
        cache.ensure_loaded("p1", ["A-1", "B-2"])

        self.assertEqual(len(cache), 2)
        self.assertEqual(len(cache), sum(1 for sku in ("A-1", "B-2") if sku in cache))
        self.assertEqual(cache.get("A-1").quantity_available, 3)

    def test_fallo_no_modifica_cache_y_permite_reintento(self) -> None:
        """Ante un fallo no se escribe el cache y una nueva carga reintenta."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        provider.fail_with = ServiceError("sin red")
        cache = VariantInventoryCache(provider)
        outcomes: list[LoadOutcome] = []

        with self.assertLogs("cliente.backend.inventory_cache", level="WARNING"):
            cache.ensure_loaded("p1", ["A-1"], on_complete=outcomes.append)

        self.assertNotIn("A-1", cache)
        self.assertTrue(cache.has_failed("A-1"))
        self.assertFalse(cache.is_fetching("A-1"))
        self.assertEqual(outcomes, [LoadOutcome("p1", False)])

        provider.fail_with = None
        cache.ensure_loaded("p1", ["A-1"])

        self.assertEqual(len(provider.requests), 2)
        self.assertEqual(cache.get("A-1").quantity_available, 5)
        self.assertFalse(cache.has_failed("A-1"))

    def test_refetch_reemplaza_registro_completo(self) -> None:
        """Una nueva consulta reemplaza el registro entero del SKU."""
        provider = FakeInventoryProvider({"A-1": (5, 2)})
        cache = VariantInventoryCache(provider)
        cache.ensure_loaded("p1", ["A-1"])

        provider.stock = {"A-1": (1, 0)}
        cache.invalidate(["A-1"])
        cache.ensure_loaded("p1", ["A-1"])

        record = cache.get("A-1")
        self.assertEqual((record.quantity_available, record.quantity_reserved), (1, 0))

    def test_invalidate_completo_fuerza_nueva_consulta(self) -> None:
        """Tras invalidar todo, la siguiente carga vuelve a consultar."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        cache = VariantInventoryCache(provider)
        cache.ensure_loaded("p1", ["A-1", "GHOST"])

        cache.invalidate()

        self.assertNotIn("A-1", cache)
        self.assertNotIn("GHOST", cache)
        self.assertEqual(len(cache), 0)
        self.assertFalse(cache.ensure_loaded("p1", ["A-1"]))
        self.assertEqual(len(provider.requests), 2)

    def test_listener_recibe_cada_lote(self) -> None:
        """Los listeners reciben el conjunto de SKU de cada lote terminado."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        cache = VariantInventoryCache(provider)
        batches: list[frozenset[str]] = []
        cache.add_listener(batches.append)

        cache.ensure_loaded("p1", ["A-1", "B-2"])

        self.assertEqual(batches, [frozenset({"A-1", "B-2"})])

    def test_skus_vacios_se_ignoran(self) -> None:
        """Variantes sin SKU no generan consultas."""
        provider = FakeInventoryProvider()
        cache = VariantInventoryCache(provider)

        self.assertTrue(cache.ensure_loaded("p1", [None, ""]))
        self.assertEqual(provider.requests, [])

    def test_close_descarta_callbacks_pendientes(self) -> None:
        """Un lote que termina tras cerrar el listado no invoca callbacks."""
        provider = FakeInventoryProvider({"A-1": (5, 0)})
        dispatcher = ManualDispatcher()
        cache = VariantInventoryCache(provider, dispatcher)
        outcomes: list[LoadOutcome] = []
        cache.ensure_loaded("p1", ["A-1"], on_complete=outcomes.append)

        cache.close()
        dispatcher.run_next()

        self.assertEqual(outcomes, [])


if __name__ == "__main__":
    unittest.main()
