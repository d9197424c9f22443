"""Installment (parcela) schedules for a sale total.

Both modes give every installment but the last ``round2(total / n)``; the
last one absorbs the rounding remainder so amounts sum exactly to the total.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal

from vendas.config import TOLERANCIA_PARCELAS
from vendas.models.installment import Installment
from vendas.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's last day.

    2024-01-31 + 1 month -> 2024-02-29; + 2 months -> 2024-03-31.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def split_amounts(total: Decimal, count: int) -> list[Decimal]:
    """Split total into count cents-rounded parts; the last absorbs the remainder."""
    if count < 1:
        return []
    share = round2(total / count)
    amounts = [share] * (count - 1)
    amounts.append(round2(total) - share * (count - 1))
    return amounts


def schedule_note(number: int, count: int, offset: int) -> str:
    if offset == 0:
        return f"Parcela {number}/{count} - à vista"
    return f"Parcela {number}/{count} - {offset} dias"


def generate_equal(total: Decimal, count: int, first_due_date: date) -> list[Installment]:
    """Equal monthly installments starting at first_due_date.

    Installment n is due first_due_date + (n - 1) calendar months. Returns
    an empty list when count < 1.
    """
    amounts = split_amounts(total, count)
    return [
        Installment(
            installment_number=n,
            amount=amount,
            due_date=add_months(first_due_date, n - 1),
        )
        for n, amount in enumerate(amounts, start=1)
    ]


def generate_from_schedule(
    total: Decimal, day_offsets: Sequence[int], base_date: date
) -> list[Installment]:
    """One installment per day offset, due base_date + offset days.

    Offsets are taken in ascending order so due dates never decrease.
    Raises ValueError for a negative offset.
    """
    if any(offset < 0 for offset in day_offsets):
        raise ValueError(f"Prazo negativo na condição de pagamento: {list(day_offsets)}")
    day_offsets = sorted(day_offsets)
    count = len(day_offsets)
    amounts = split_amounts(total, count)
    return [
        Installment(
            installment_number=n,
            amount=amount,
            due_date=base_date + timedelta(days=offset),
            note=schedule_note(n, count, offset),
        )
        for n, (amount, offset) in enumerate(zip(amounts, day_offsets), start=1)
    ]


def installments_total(installments: Sequence[Installment]) -> Decimal:
    return sum((i.amount for i in installments), ZERO)


def installments_match_total(
    installments: Sequence[Installment],
    total: Decimal,
    tolerance: Decimal = TOLERANCIA_PARCELAS,
) -> bool:
    """Check a (possibly hand-edited) installment list against the sale total.

    Divergence is logged but not raised; the sale can still be submitted.
    """
    diff = abs(installments_total(installments) - total)
    if diff > tolerance:
        logger.warning(
            "Installments sum to %s but sale total is %s (diff %s)",
            installments_total(installments),
            total,
            diff,
        )
        return False
    return True
