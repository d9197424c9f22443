"""Per-line discount allocation and IPI / ICMS / ST amounts.

ICMS is informative: it is always computed, never zeroed by exemption
flags, and never part of ``total_item``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import ROUND_DOWN, Decimal

from vendas.models.line_item import LineItemComputed, LineItemInput, TaxExemptionFlags
from vendas.utils.money import CENT, ZERO, percent_of, round2

logger = logging.getLogger(__name__)

NO_EXEMPTIONS = TaxExemptionFlags()


def proportional_share(
    gross_subtotal: Decimal, order_discount_total: Decimal, order_gross_total: Decimal
) -> Decimal:
    """Discount share of a line, proportional to its gross over the order gross."""
    if order_gross_total <= 0:
        return ZERO
    return order_discount_total * (gross_subtotal / order_gross_total)


def allocate_discounts(
    items: Sequence[LineItemInput], discount_total: Decimal
) -> list[Decimal]:
    """Split a non-negative order discount across lines, summing exactly to it.

    Largest remainder: every proportional share is truncated to cents, then
    the leftover cents go one each to the lines with the biggest truncated
    fractions (ties go to the later line). No share drops below zero, and
    none exceeds its line's gross while the discount fits the order gross.
    """
    gross_total = sum((item.gross_subtotal for item in items), ZERO)
    if discount_total == 0 or gross_total == 0:
        return [ZERO for _ in items]

    target = round2(discount_total)
    raw = [target * item.gross_subtotal / gross_total for item in items]
    shares = [share.quantize(CENT, rounding=ROUND_DOWN) for share in raw]
    leftover = int((target - sum(shares, ZERO)) / CENT)
    ranked = sorted(range(len(items)), key=lambda i: (raw[i] - shares[i], i), reverse=True)
    for index in ranked[:leftover]:
        shares[index] += CENT
    return shares


def compute_with_discount(
    item: LineItemInput,
    discount: Decimal,
    exemptions: TaxExemptionFlags = NO_EXEMPTIONS,
) -> LineItemComputed:
    """Compute a line given its already-allocated discount."""
    gross = round2(item.gross_subtotal)
    discount = round2(discount)
    net = gross - discount
    if net < 0:
        # Not clamped: totals must keep net = gross - discount
        logger.warning(
            "Negative net subtotal for product %s: gross=%s discount=%s",
            item.product_id,
            gross,
            discount,
        )

    ipi = ZERO if exemptions.no_ipi else round2(percent_of(net, item.ipi_rate))
    icms = round2(percent_of(net, item.icms_rate))
    st = ZERO if exemptions.no_st else round2(percent_of(net, item.st_rate))

    logger.debug(
        "Line %s: net=%s ipi=%s icms=%s st=%s", item.product_id, net, ipi, icms, st
    )
    return LineItemComputed(
        gross_subtotal=gross,
        proportional_discount=discount,
        net_subtotal=net,
        ipi_amount=ipi,
        icms_amount=icms,
        st_amount=st,
        total_item=net + ipi + st,
    )


def compute_line(
    item: LineItemInput,
    order_discount_total: Decimal,
    order_gross_total: Decimal,
    exemptions: TaxExemptionFlags = NO_EXEMPTIONS,
) -> LineItemComputed:
    """Compute one line against the order's discount and gross total.

    ``order_gross_total`` must be the same value used for every sibling
    line so shares stay consistent. Use ``compute_all`` when the shares
    must add up to the discount to the cent.
    """
    discount = proportional_share(item.gross_subtotal, order_discount_total, order_gross_total)
    return compute_with_discount(item, discount, exemptions)
