from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from vendas.models.line_item import LineItemComputed
from vendas.models.totals import OrderTotals
from vendas.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


def aggregate(
    lines: Sequence[LineItemComputed], discount_total: Decimal
) -> OrderTotals | None:
    """Fold computed lines into order totals.

    Returns None for an empty order (nothing to render). The grand total
    excludes ICMS. The discount total is summed from the lines so that
    net = gross - discount always holds; a mismatching ``discount_total``
    is only logged.
    """
    if not lines:
        return None

    def total(attr: str) -> Decimal:
        return sum((getattr(line, attr) for line in lines), ZERO)

    discount = total("proportional_discount")
    if discount != round2(discount_total):
        logger.warning(
            "Line discounts sum to %s but order discount is %s", discount, round2(discount_total)
        )
    net = total("net_subtotal")
    ipi = total("ipi_amount")
    st = total("st_amount")
    return OrderTotals(
        gross_total=total("gross_subtotal"),
        discount_total=discount,
        net_total=net,
        ipi_total=ipi,
        icms_total=total("icms_amount"),
        st_total=st,
        grand_total=net + ipi + st,
    )
