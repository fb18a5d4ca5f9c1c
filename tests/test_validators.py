"""Tests de validaciones de productos."""

from __future__ import annotations

import unittest

from cliente.backend.validators import validate_product_draft
from shared.errors import ValidationError
from shared.protocol import ProductDraft, ProductVariant


class ValidateProductDraftTests(unittest.TestCase):
    """Valida reglas obligatorias del draft de producto."""

    def test_draft_valido(self) -> None:
        """Un draft completo no debe lanzar error."""
        validate_product_draft(
            ProductDraft(name="Basic Tee", price=9.9, variants=[ProductVariant(color="Red")])
        )

    def test_reune_todos_los_problemas(self) -> None:
        """Debe reportar nombre, precio y variantes en un solo mensaje."""
        with self.assertRaises(ValidationError) as ctx:
            validate_product_draft(ProductDraft(name=" ", price=0))

        message = str(ctx.exception)
        self.assertIn("Nombre", message)
        self.assertIn("Precio", message)
        self.assertIn("Variantes", message)

    def test_variante_sin_atributos_o_stock_negativo(self) -> None:
        """Variantes sin color ni talla, o con stock negativo, son invalidas."""
        with self.assertRaises(ValidationError) as ctx:
            validate_product_draft(
                ProductDraft(
                    name="Basic Tee",
                    price=9.9,
                    variants=[ProductVariant(), ProductVariant(size="M", initial_stock=-1)],
                )
            )

        message = str(ctx.exception)
        self.assertIn("Variante 1 (indica color o talla)", message)
        self.assertIn("Variante 2 (stock inicial no puede ser negativo)", message)


if __name__ == "__main__":
    unittest.main()
