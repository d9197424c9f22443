from __future__ import annotations

from decimal import Decimal


def format_brl(value: Decimal | str) -> str:
    """Format a numeric value as R$ X.XXX,XX."""
    d = Decimal(value)
    formatted = f"{d:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def format_percent(value: Decimal | str) -> str:
    """Format a percent value as 12,50%."""
    d = Decimal(value)
    return f"{d:.2f}".replace(".", ",") + "%"


def format_date_br(value) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")
