"""Full recomputation of a sale: lines, totals, installments and payload.

The form calls ``compute_all`` whenever items, discount or exemption flags
change; ST rates are resolved beforehand with ``apply_st_rates``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Protocol

from vendas.models.fiscal import StResolution
from vendas.models.installment import Installment
from vendas.models.line_item import LineItemComputed, LineItemInput, TaxExemptionFlags
from vendas.models.totals import OrderTotals
from vendas.services.aggregator import aggregate
from vendas.services.installments import installments_match_total
from vendas.services.tax_line import NO_EXEMPTIONS, allocate_discounts, compute_with_discount

logger = logging.getLogger(__name__)


class StResolver(Protocol):
    def resolve(self, uf: str, ncm: str) -> StResolution: ...


def apply_st_rates(
    items: Sequence[LineItemInput], uf: str, resolver: StResolver
) -> list[LineItemInput]:
    """Return items with st_rate resolved for destination UF.

    Items without an NCM keep their stored st_rate.
    """
    resolved = []
    for item in items:
        if not item.ncm:
            resolved.append(item)
            continue
        st = resolver.resolve(uf, item.ncm)
        resolved.append(replace(item, st_rate=st.st_rate_percent))
    return resolved


def compute_all(
    items: Sequence[LineItemInput],
    discount_total: Decimal,
    exemptions: TaxExemptionFlags = NO_EXEMPTIONS,
) -> tuple[list[LineItemComputed], OrderTotals | None]:
    """Compute every line and the order totals in one pass.

    Discount shares are allocated so they sum exactly to discount_total.
    """
    shares = allocate_discounts(items, discount_total)
    lines = [
        compute_with_discount(item, share, exemptions)
        for item, share in zip(items, shares)
    ]
    return lines, aggregate(lines, discount_total)


def sale_item_record(item: LineItemInput, computed: LineItemComputed) -> dict:
    """Flatten a line into the persisted sale-item record."""
    return {
        "produto_id": item.product_id,
        "quantidade": str(item.quantity),
        "preco_unitario": str(item.unit_price),
        "subtotal": str(computed.total_item),
        "subtotal_bruto": str(computed.gross_subtotal),
        "desconto_proporcional": str(computed.proportional_discount),
        "subtotal_liquido": str(computed.net_subtotal),
        "ipi_aliquota": str(item.ipi_rate),
        "ipi_valor": str(computed.ipi_amount),
        "icms_aliquota": str(item.icms_rate),
        "icms_valor": str(computed.icms_amount),
        "st_aliquota": str(item.st_rate),
        "st_valor": str(computed.st_amount),
        "total_item": str(computed.total_item),
        "icms_proprio_aliquota": str(item.icms_own_rate),
    }


def sale_totals_record(totals: OrderTotals) -> dict:
    return {
        "total_produtos_bruto": str(totals.gross_total),
        "desconto_total": str(totals.discount_total),
        "total_produtos_liquido": str(totals.net_total),
        "total_ipi": str(totals.ipi_total),
        "total_icms": str(totals.icms_total),
        "total_st": str(totals.st_total),
        "total_geral": str(totals.grand_total),
    }


def build_sale_payload(
    items: Sequence[LineItemInput],
    discount_total: Decimal,
    exemptions: TaxExemptionFlags = NO_EXEMPTIONS,
    installments: Sequence[Installment] = (),
) -> dict:
    """Assemble the body sent to the sales API.

    Raises ValueError for an empty item list; the API rejects those.
    """
    if not items:
        raise ValueError("A venda deve conter pelo menos um item")
    lines, totals = compute_all(items, discount_total, exemptions)
    assert totals is not None
    if installments:
        installments_match_total(installments, totals.grand_total)
    return {
        "desconto": str(totals.discount_total),
        "sem_ipi": exemptions.no_ipi,
        "sem_st": exemptions.no_st,
        "valor_total": str(totals.gross_total),
        "valor_final": str(totals.grand_total),
        **sale_totals_record(totals),
        "itens": [sale_item_record(i, c) for i, c in zip(items, lines)],
        "parcelas": [p.to_record() for p in installments],
    }
