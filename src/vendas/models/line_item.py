from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from vendas.config import ICMS_PROPRIO_PADRAO
from vendas.utils.validators import validate_quantity, validate_rate, validate_unit_price


def _first(d: dict, *keys: str):
    """Return the first key present in d (historical payloads used several names)."""
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return None


@dataclass(frozen=True)
class LineItemInput:
    """One sale line as fed to the calculator. Rates are percents."""

    product_id: int | str
    quantity: Decimal
    unit_price: Decimal
    ipi_rate: Decimal = Decimal(0)
    icms_rate: Decimal = Decimal(0)
    st_rate: Decimal = Decimal(0)
    icms_own_rate: Decimal = ICMS_PROPRIO_PADRAO
    ncm: str | None = None
    name: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> LineItemInput:
        """Normalize a catalog/form dict into a LineItemInput.

        Accepts both the sale-item column names (``preco_unitario``,
        ``ipi_aliquota``...) and the bare product columns (``ipi``, ``st``...).
        Raises ValueError for invalid quantities, prices or rates.
        """
        product_id = _first(d, "product_id", "produto_id", "id")
        if product_id is None:
            raise ValueError("Item sem produto_id")
        icms_own = _first(d, "icms_own_rate", "icms_proprio_aliquota")
        ncm = _first(d, "ncm")
        return cls(
            product_id=product_id,
            quantity=validate_quantity(_first(d, "quantity", "quantidade")),
            unit_price=validate_unit_price(
                _first(d, "unit_price", "preco_unitario", "preco_venda")
            ),
            ipi_rate=validate_rate(_first(d, "ipi_rate", "ipi_aliquota", "ipi"), "IPI"),
            icms_rate=validate_rate(_first(d, "icms_rate", "icms_aliquota", "icms"), "ICMS"),
            st_rate=validate_rate(_first(d, "st_rate", "st_aliquota", "st"), "ST"),
            # 0 or missing falls back to the 4% interstate rate
            icms_own_rate=validate_rate(icms_own, "ICMS proprio") or ICMS_PROPRIO_PADRAO,
            ncm=str(ncm).replace(".", "") if ncm is not None else None,
            name=_first(d, "name", "produto_nome", "nome"),
        )

    @property
    def gross_subtotal(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class LineItemComputed:
    """Derived amounts for one line, all rounded to cents."""

    gross_subtotal: Decimal
    proportional_discount: Decimal
    net_subtotal: Decimal
    ipi_amount: Decimal
    icms_amount: Decimal  # informative, never part of total_item
    st_amount: Decimal
    total_item: Decimal


@dataclass(frozen=True)
class TaxExemptionFlags:
    """Per-order overrides that zero IPI and/or ST on every line."""

    no_ipi: bool = False
    no_st: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> TaxExemptionFlags:
        return cls(
            no_ipi=bool(_first(d, "no_ipi", "sem_ipi") or False),
            no_st=bool(_first(d, "no_st", "sem_st") or False),
        )
