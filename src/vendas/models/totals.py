from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class OrderTotals:
    gross_total: Decimal
    discount_total: Decimal
    net_total: Decimal
    ipi_total: Decimal
    icms_total: Decimal  # informative only
    st_total: Decimal
    grand_total: Decimal  # net + IPI + ST
