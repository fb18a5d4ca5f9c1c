"""DTOs del protocolo cliente-servidor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class ProductVariant:
    """Variante color/talla de un producto.

    ``sku`` es None mientras el producto se esta creando (solo preview) y
    queda asignado por el servidor al guardar.
    """

    color: str = ""
    size: str = ""
    initial_stock: int = 0
    sku: str | None = None


@dataclass(frozen=True, slots=True)
class InventoryRecord:
    """Registro de inventario de un SKU, tal como lo entrega el backend."""

    sku: str
    quantity_available: int
    quantity_reserved: int
    reorder_point: int = 0
    updated_at: datetime | None = None


@dataclass(slots=True)
class ProductSummary:
    """Producto tal como se muestra en el listado."""

    product_id: str
    name: str
    price: float
    sku: str = ""
    description: str = ""
    brand: str = ""
    category: str = ""
    status: str = "active"
    variants: list[ProductVariant] = field(default_factory=list)

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)


@dataclass(slots=True)
class ProductDraft:
    """DTO para capturar datos del dialogo de creacion de productos."""

    name: str
    price: float
    description: str = ""
    brand: str = ""
    category: str = ""
    variants: list[ProductVariant] = field(default_factory=list)


@dataclass(slots=True)
class ListProductsRequest:
    """Solicitud de listado de productos."""

    search: str = ""
    category: str = ""
    status: str = ""


@dataclass(slots=True)
class ListProductsResponse:
    """Respuesta con los productos del catalogo."""

    products: list[ProductSummary]


@dataclass(slots=True)
class CreateProductRequest:
    """Solicitud para crear un producto con sus variantes."""

    product: ProductDraft


@dataclass(slots=True)
class CreateProductResponse:
    """Respuesta con el producto creado y sus SKU definitivos."""

    product: ProductSummary


@dataclass(slots=True)
class InventoryBatchRequest:
    """Solicitud de inventario para un lote de SKU."""

    skus: tuple[str, ...]


@dataclass(slots=True)
class InventoryBatchResponse:
    """Respuesta de inventario por lote.

    Los SKU sin registro de inventario se omiten de ``records``.
    """

    records: dict[str, InventoryRecord]
