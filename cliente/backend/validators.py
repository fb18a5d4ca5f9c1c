"""Validaciones para entradas del cliente."""

from __future__ import annotations

from shared.errors import ValidationError
from shared.protocol import ProductDraft


def validate_product_draft(draft: ProductDraft) -> None:
    """Valida el producto antes de enviarlo al servidor.

    Reune todos los problemas y los reporta en un solo ValidationError.
    """
    problems: list[str] = []

    if not draft.name.strip():
        problems.append("Nombre")
    if draft.price <= 0:
        problems.append("Precio (debe ser mayor a 0)")
    if not draft.variants:
        problems.append("Variantes (agrega al menos una)")

    for index, variant in enumerate(draft.variants, start=1):
        if not variant.color.strip() and not variant.size.strip():
            problems.append(f"Variante {index} (indica color o talla)")
        if variant.initial_stock < 0:
            problems.append(f"Variante {index} (stock inicial no puede ser negativo)")

    if problems:
        raise ValidationError("Completa los campos obligatorios: " + ", ".join(problems))
