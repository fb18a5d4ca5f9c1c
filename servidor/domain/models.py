"""Modelos de dominio del catalogo e inventario."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class StoredVariant:
    """Variante persistida con su SKU definitivo."""

    sku: str
    color: str = ""
    size: str = ""


@dataclass(slots=True)
class StoredProduct:
    """Representa un producto en el catalogo."""

    product_id: str
    name: str
    price: float
    sku: str
    description: str = ""
    brand: str = ""
    category: str = ""
    is_active: bool = True
    variants: list[StoredVariant] = field(default_factory=list)


@dataclass(slots=True)
class StockLevel:
    """Stock de un SKU en inventario."""

    sku: str
    quantity_available: int
    quantity_reserved: int = 0
    reorder_point: int = 0
    updated_at: datetime = field(default_factory=datetime.now)
