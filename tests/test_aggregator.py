from __future__ import annotations

import logging
from decimal import Decimal

from vendas.models.line_item import LineItemComputed
from vendas.services.aggregator import aggregate
from vendas.services.tax_line import compute_line


def _line(gross, discount, ipi="0", icms="0", st="0") -> LineItemComputed:
    gross, discount = Decimal(gross), Decimal(discount)
    net = gross - discount
    ipi, icms, st = Decimal(ipi), Decimal(icms), Decimal(st)
    return LineItemComputed(
        gross_subtotal=gross,
        proportional_discount=discount,
        net_subtotal=net,
        ipi_amount=ipi,
        icms_amount=icms,
        st_amount=st,
        total_item=net + ipi + st,
    )


class TestAggregate:
    def test_empty_is_none(self):
        assert aggregate([], Decimal(0)) is None

    def test_sums_fields(self):
        lines = [
            _line("100.00", "10.00", ipi="9.00", icms="16.20", st="65.74"),
            _line("200.00", "20.00", ipi="9.00", icms="32.40"),
        ]
        totals = aggregate(lines, Decimal(30))
        assert totals.gross_total == Decimal("300.00")
        assert totals.discount_total == Decimal("30.00")
        assert totals.net_total == Decimal("270.00")
        assert totals.ipi_total == Decimal("18.00")
        assert totals.icms_total == Decimal("48.60")
        assert totals.st_total == Decimal("65.74")
        assert totals.grand_total == Decimal("353.74")

    def test_grand_total_excludes_icms(self):
        lines = [_line("1000.00", "0", ipi="100.00", icms="180.00", st="50.00")]
        totals = aggregate(lines, Decimal(0))
        assert totals.grand_total == totals.net_total + totals.ipi_total + totals.st_total
        assert totals.grand_total == Decimal("1150.00")

    def test_grand_total_equals_sum_of_items(self):
        lines = [
            _line("12.34", "0.56", ipi="0.78", st="1.11"),
            _line("99.99", "4.44", ipi="3.21", icms="7.77", st="0.01"),
            _line("0.01", "0.00"),
        ]
        totals = aggregate(lines, Decimal("5.00"))
        assert totals.grand_total == sum(line.total_item for line in lines)
        assert totals.net_total == totals.gross_total - totals.discount_total

    def test_idempotent(self):
        lines = [_line("10.00", "1.00", ipi="0.90")]
        assert aggregate(lines, Decimal(1)) == aggregate(lines, Decimal(1))

    def test_discount_summed_from_compute_line_output(self, three_thirds, caplog):
        gross = sum(item.gross_subtotal for item in three_thirds)
        lines = [compute_line(item, Decimal(10), gross) for item in three_thirds]
        with caplog.at_level(logging.WARNING, logger="vendas.services.aggregator"):
            totals = aggregate(lines, Decimal(10))
        assert totals.discount_total == Decimal("9.99")
        assert totals.net_total == totals.gross_total - totals.discount_total
        assert "Line discounts sum to 9.99" in caplog.text
