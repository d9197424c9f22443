from __future__ import annotations

from decimal import Decimal

import pytest

from vendas.models.line_item import LineItemInput, TaxExemptionFlags


class TestLineItemInput:
    def test_from_dict_sale_item_names(self, racao_dict):
        item = LineItemInput.from_dict(racao_dict)
        assert item.product_id == 1
        assert item.name == "Ração Premium 15kg"
        assert item.quantity == Decimal(1)
        assert item.unit_price == Decimal(100)
        assert item.ipi_rate == Decimal(10)
        assert item.icms_rate == Decimal(18)
        assert item.st_rate == 0
        assert item.icms_own_rate == Decimal(4)
        assert item.ncm == "23091000"

    def test_from_dict_product_column_names(self):
        item = LineItemInput.from_dict(
            {"id": 7, "quantidade": "2", "preco_venda": "19.90", "ipi": 5, "icms": 12, "st": 3.5}
        )
        assert item.product_id == 7
        assert item.unit_price == Decimal("19.90")
        assert item.ipi_rate == Decimal(5)
        assert item.icms_rate == Decimal(12)
        assert item.st_rate == Decimal("3.5")

    def test_sale_item_names_take_priority(self):
        item = LineItemInput.from_dict(
            {"produto_id": 1, "quantidade": 1, "preco_unitario": 10, "ipi_aliquota": 8, "ipi": 99}
        )
        assert item.ipi_rate == Decimal(8)

    def test_icms_own_default_when_zero(self):
        item = LineItemInput.from_dict(
            {"produto_id": 1, "quantidade": 1, "preco_unitario": 10, "icms_proprio_aliquota": 0}
        )
        assert item.icms_own_rate == Decimal(4)

    def test_icms_own_explicit(self):
        item = LineItemInput.from_dict(
            {"produto_id": 1, "quantidade": 1, "preco_unitario": 10, "icms_proprio_aliquota": 7}
        )
        assert item.icms_own_rate == Decimal(7)

    def test_float_values_keep_printed_form(self):
        item = LineItemInput.from_dict({"produto_id": 1, "quantidade": 3, "preco_unitario": 0.1})
        assert item.gross_subtotal == Decimal("0.3")

    def test_ncm_dots_stripped(self):
        item = LineItemInput.from_dict(
            {"produto_id": 1, "quantidade": 1, "preco_unitario": 10, "ncm": "2309.10.00"}
        )
        assert item.ncm == "23091000"

    def test_missing_product_raises(self):
        with pytest.raises(ValueError, match="produto_id"):
            LineItemInput.from_dict({"quantidade": 1, "preco_unitario": 10})

    def test_zero_quantity_raises(self):
        with pytest.raises(ValueError, match="positiva"):
            LineItemInput.from_dict({"produto_id": 1, "quantidade": 0, "preco_unitario": 10})

    def test_negative_price_raises(self):
        with pytest.raises(ValueError, match="negativo"):
            LineItemInput.from_dict({"produto_id": 1, "quantidade": 1, "preco_unitario": -1})

    def test_rate_out_of_range_raises(self):
        with pytest.raises(ValueError, match="IPI"):
            LineItemInput.from_dict(
                {"produto_id": 1, "quantidade": 1, "preco_unitario": 1, "ipi_aliquota": 120}
            )

    def test_frozen(self, racao):
        with pytest.raises(AttributeError):
            racao.quantity = Decimal(2)  # type: ignore[misc]


class TestTaxExemptionFlags:
    def test_defaults(self):
        flags = TaxExemptionFlags()
        assert flags.no_ipi is False
        assert flags.no_st is False

    def test_from_dict_portuguese_keys(self):
        flags = TaxExemptionFlags.from_dict({"sem_ipi": True, "sem_st": False})
        assert flags == TaxExemptionFlags(no_ipi=True, no_st=False)

    def test_from_dict_missing(self):
        assert TaxExemptionFlags.from_dict({}) == TaxExemptionFlags()
