"""Estado expandido/colapsado de las filas de producto del listado."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from functools import partial

from shared.protocol import ProductVariant

from .inventory_cache import LoadOutcome, VariantInventoryCache

LOGGER = logging.getLogger(__name__)


class ExpansionState(Enum):
    """Estado de una fila de producto con variantes."""

    COLLAPSED = "collapsed"
    EXPANDING = "expanding"
    EXPANDED = "expanded"


StateListener = Callable[[str, ExpansionState], None]


class ExpansionController:
    """Maquina de estados por producto que dispara la carga de inventario.

    collapsed -> expanding al expandir, expanding -> expanded cuando la carga
    termina (con exito o con fallo), y cualquier estado abierto -> collapsed al
    colapsar. Colapsar no cancela la consulta ni limpia el cache.
    """

    def __init__(
        self,
        cache: VariantInventoryCache,
        on_change: StateListener | None = None,
    ) -> None:
        self._cache = cache
        self._on_change = on_change
        self._states: dict[str, ExpansionState] = {}
        self._variant_skus: dict[str, tuple[str, ...]] = {}
        # Cada expansion recibe un token; una carga que termina con un token
        # viejo no reabre la fila.
        self._tokens: dict[str, int] = {}

    def register(self, product_id: str, variants: Sequence[ProductVariant]) -> bool:
        """Crea el estado colapsado de un producto con al menos una variante."""
        if not variants:
            return False

        self._variant_skus[product_id] = tuple(
            variant.sku for variant in variants if variant.sku
        )
        self._states.setdefault(product_id, ExpansionState.COLLAPSED)
        self._tokens.setdefault(product_id, 0)
        return True

    def clear(self) -> None:
        """Destruye todos los estados (el listado se cierra)."""
        self._states.clear()
        self._variant_skus.clear()
        self._tokens.clear()

    def state(self, product_id: str) -> ExpansionState:
        """Retorna el estado del producto; productos sin variantes quedan colapsados."""
        return self._states.get(product_id, ExpansionState.COLLAPSED)

    def is_open(self, product_id: str) -> bool:
        """Indica si las filas de variantes se muestran (cargando o cargadas)."""
        return self.state(product_id) is not ExpansionState.COLLAPSED

    def is_loading(self, product_id: str) -> bool:
        return self.state(product_id) is ExpansionState.EXPANDING

    def toggle(self, product_id: str) -> ExpansionState:
        """Alterna la fila del producto y retorna el estado resultante."""
        if product_id not in self._states:
            raise KeyError(f"Producto sin variantes registradas: {product_id}")

        if self._states[product_id] is ExpansionState.COLLAPSED:
            return self._expand(product_id)

        self._set_state(product_id, ExpansionState.COLLAPSED)
        return ExpansionState.COLLAPSED

    def _expand(self, product_id: str) -> ExpansionState:
        """Pasa a expanding y pide al cache los SKU faltantes."""
        token = self._tokens[product_id] + 1
        self._tokens[product_id] = token
        self._set_state(product_id, ExpansionState.EXPANDING)

        self._cache.ensure_loaded(
            product_id,
            self._variant_skus[product_id],
            on_complete=partial(self._on_load_complete, token),
        )
        return self._states[product_id]

    def _on_load_complete(self, token: int, outcome: LoadOutcome) -> None:
        """Termina la expansion si la fila sigue esperando esta carga."""
        product_id = outcome.product_id
        if self._tokens.get(product_id) != token:
            LOGGER.debug("Carga descartada para producto %s (token viejo)", product_id)
            return
        if self._states.get(product_id) is not ExpansionState.EXPANDING:
            LOGGER.debug("Carga terminada con producto %s colapsado", product_id)
            return

        if not outcome.succeeded:
            LOGGER.info(
                "Producto %s expandido sin inventario completo (fallo de consulta).",
                product_id,
            )
        self._set_state(product_id, ExpansionState.EXPANDED)

    def _set_state(self, product_id: str, state: ExpansionState) -> None:
        self._states[product_id] = state
        if self._on_change is not None:
            self._on_change(product_id, state)
