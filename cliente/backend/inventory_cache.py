"""Cache de inventario por SKU para las variantes del listado de productos."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from typing import Protocol

from shared.protocol import InventoryBatchRequest, InventoryBatchResponse, InventoryRecord

from .dispatch import FetchDispatcher, ImmediateDispatcher

LOGGER = logging.getLogger(__name__)

CacheListener = Callable[[frozenset[str]], None]


class InventoryProvider(Protocol):
    """Origen de inventario por lote (el gateway del servidor)."""

    def fetch_inventory_batch(
        self,
        request: InventoryBatchRequest,
    ) -> InventoryBatchResponse:
        """Retorna los registros existentes para los SKU solicitados."""


@dataclass(slots=True)
class LoadOutcome:
    """Resultado de una carga solicitada para un producto."""

    product_id: str
    succeeded: bool


@dataclass(slots=True)
class _PendingLoad:
    product_id: str
    waiting_on: set[str]
    on_complete: Callable[[LoadOutcome], None] | None
    failed: bool = field(default=False)


class VariantInventoryCache:
    """Mapa SKU -> InventoryRecord compartido por todos los productos de un listado.

    Solo las consultas por lote de esta clase escriben en el mapa. Cada lote se
    aplica completo o no se aplica. Un SKU nunca es parte de dos consultas en
    curso al mismo tiempo.

    Un SKU que el servidor omite en la respuesta queda marcado como "sin
    registro": cuenta como cargado, pero ``get`` retorna None.
    """

    def __init__(
        self,
        provider: InventoryProvider,
        dispatcher: FetchDispatcher | None = None,
    ) -> None:
        self._provider = provider
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._records: dict[str, InventoryRecord] = {}
        self._known_absent: set[str] = set()
        self._in_flight: set[str] = set()
        self._failed: set[str] = set()
        self._pending: list[_PendingLoad] = []
        self._listeners: list[CacheListener] = []

    def __contains__(self, sku: object) -> bool:
        return sku in self._records or sku in self._known_absent

    def __len__(self) -> int:
        """Cantidad de SKU cargados, con o sin registro de inventario."""
        return len(self._records) + len(self._known_absent)

    def get(self, sku: str) -> InventoryRecord | None:
        """Retorna el registro cacheado del SKU, si existe."""
        return self._records.get(sku)

    def is_fetching(self, sku: str) -> bool:
        """Indica si hay una consulta en curso que incluye el SKU."""
        return sku in self._in_flight

    def has_failed(self, sku: str) -> bool:
        """Indica si la ultima consulta del SKU fallo y aun no hay datos."""
        return sku in self._failed

    @property
    def in_flight_skus(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def add_listener(self, listener: CacheListener) -> None:
        """Registra un callback invocado tras aplicar o descartar cada lote."""
        self._listeners.append(listener)

    def ensure_loaded(
        self,
        product_id: str,
        skus: Iterable[str | None],
        on_complete: Callable[[LoadOutcome], None] | None = None,
    ) -> bool:
        """Asegura que los SKU de un producto esten en cache.

        Retorna True si ya estaban todos cargados; en ese caso ``on_complete``
        se invoca de inmediato y no hay consulta al servidor. Si faltan SKU,
        consulta en un solo lote los que no estan en cache ni en una consulta
        en curso, y ``on_complete`` se invoca cuando todos los faltantes se
        resuelven (con exito o con fallo).
        """
        requested = {sku for sku in skus if sku}
        missing = {sku for sku in requested if sku not in self}

        if not missing:
            LOGGER.debug("Inventario en cache para producto %s", product_id)
            if on_complete is not None:
                on_complete(LoadOutcome(product_id=product_id, succeeded=True))
            return True

        to_fetch = frozenset(missing - self._in_flight)
        self._pending.append(
            _PendingLoad(
                product_id=product_id,
                waiting_on=set(missing),
                on_complete=on_complete,
            )
        )

        if to_fetch:
            self._start_fetch(product_id, to_fetch)
        else:
            LOGGER.debug(
                "SKU de producto %s ya estan en consulta; se espera ese lote.",
                product_id,
            )
        return False

    def invalidate(self, skus: Iterable[str] | None = None) -> None:
        """Descarta entradas para forzar una nueva consulta en la proxima carga."""
        if skus is None:
            self._records.clear()
            self._known_absent.clear()
            self._failed.clear()
            LOGGER.info("Cache de inventario invalidado completo.")
            return

        dropped = set(skus)
        for sku in dropped:
            self._records.pop(sku, None)
        self._known_absent.difference_update(dropped)
        self._failed.difference_update(dropped)
        LOGGER.info("Cache de inventario invalidado para %d SKU.", len(dropped))

    def close(self) -> None:
        """Desconecta listeners y cargas pendientes al cerrar el listado."""
        self._listeners.clear()
        self._pending.clear()

    def _start_fetch(self, product_id: str, skus: frozenset[str]) -> None:
        """Marca los SKU en curso y delega la consulta al dispatcher."""
        self._in_flight.update(skus)
        request = InventoryBatchRequest(skus=tuple(sorted(skus)))
        LOGGER.info(
            "Consultando inventario de %d SKU para producto %s",
            len(skus),
            product_id,
        )
        self._dispatcher.submit(
            partial(self._provider.fetch_inventory_batch, request),
            partial(self._on_fetch_succeeded, skus),
            partial(self._on_fetch_failed, skus),
        )

    def _on_fetch_succeeded(
        self,
        skus: frozenset[str],
        response: InventoryBatchResponse,
    ) -> None:
        """Aplica el lote completo como reemplazo de registros."""
        self._in_flight.difference_update(skus)

        absent = skus.difference(response.records)
        self._records.update(response.records)
        for sku in absent:
            self._records.pop(sku, None)
        self._known_absent.difference_update(response.records)
        self._known_absent.update(absent)
        self._failed.difference_update(skus)

        if absent:
            LOGGER.debug("Servidor sin registro de inventario para: %s", sorted(absent))
        self._finish_batch(skus, failed=False)

    def _on_fetch_failed(self, skus: frozenset[str], exc: Exception) -> None:
        """Libera los SKU sin tocar el cache; el reintento es una nueva carga."""
        self._in_flight.difference_update(skus)
        self._failed.update(skus)
        LOGGER.warning(
            "Fallo la consulta de inventario para %d SKU: %s",
            len(skus),
            exc,
        )
        self._finish_batch(skus, failed=True)

    def _finish_batch(self, skus: frozenset[str], failed: bool) -> None:
        """Notifica listeners y completa las cargas que esperaban este lote."""
        completed: list[_PendingLoad] = []
        remaining: list[_PendingLoad] = []
        for pending in self._pending:
            if pending.waiting_on & skus:
                pending.waiting_on -= skus
                pending.failed = pending.failed or failed
            if pending.waiting_on:
                remaining.append(pending)
            else:
                completed.append(pending)
        self._pending = remaining

        for listener in list(self._listeners):
            listener(skus)

        for pending in completed:
            if pending.on_complete is not None:
                pending.on_complete(
                    LoadOutcome(
                        product_id=pending.product_id,
                        succeeded=not pending.failed,
                    )
                )
