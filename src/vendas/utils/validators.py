from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from vendas.utils.money import to_decimal

_UFS = frozenset({
    "AC", "AL", "AM", "AP", "BA", "CE", "DF", "ES", "GO",
    "MA", "MG", "MS", "MT", "PA", "PB", "PE", "PI", "PR",
    "RJ", "RN", "RO", "RR", "RS", "SC", "SE", "SP", "TO",
})


def _parse(value: object, label: str) -> Decimal:
    try:
        d = to_decimal(value)
        if not d.is_finite():
            raise InvalidOperation
    except (InvalidOperation, ValueError):
        raise ValueError(f"{label} invalido: '{value}'") from None
    return d


def validate_quantity(value: object) -> Decimal:
    """Validate an item quantity. Must be a finite number greater than zero."""
    d = _parse(value, "Quantidade")
    if d <= 0:
        raise ValueError(f"Quantidade deve ser positiva: '{value}'")
    return d


def validate_unit_price(value: object) -> Decimal:
    """Validate a unit price. Zero is allowed (bonus items), negatives are not."""
    d = _parse(value, "Preco unitario")
    if d < 0:
        raise ValueError(f"Preco unitario nao pode ser negativo: '{value}'")
    return d


def validate_discount(value: object) -> Decimal:
    """Validate an order-level discount amount (non-negative)."""
    d = _parse(value, "Desconto")
    if d < 0:
        raise ValueError(f"Desconto nao pode ser negativo: '{value}'")
    return d


def validate_monetary(value: object) -> Decimal:
    """Validate a positive monetary amount (e.g. an installment total)."""
    d = _parse(value, "Valor numerico")
    if d <= 0:
        raise ValueError(f"Valor deve ser positivo: '{value}'")
    return d


def validate_rate(value: object, label: str = "Aliquota") -> Decimal:
    """Validate a tax rate percentage (0-100). None means zero."""
    if value is None or value == "":
        return Decimal(0)
    d = _parse(value, label)
    if d < 0 or d > 100:
        raise ValueError(f"{label} deve estar entre 0 e 100")
    return d


def validate_installment_count(value: object) -> int:
    try:
        n = int(str(value))
    except ValueError:
        raise ValueError(f"Numero de parcelas invalido: '{value}'") from None
    if n < 1:
        raise ValueError("Numero de parcelas deve ser ao menos 1")
    return n


def validate_date(value: str) -> date:
    """Validate an ISO date string (YYYY-MM-DD) and return the date."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Data invalida: '{value}'. Use YYYY-MM-DD.") from None


def validate_uf(value: str) -> str:
    """Validate a Brazilian state code, returning it upper-cased."""
    uf = value.strip().upper()
    if uf not in _UFS:
        raise ValueError(f"UF invalida: '{value}'")
    return uf


def validate_ncm(value: str) -> str:
    """Validate an NCM code: 4 to 8 digits, dots allowed (2309.10.00)."""
    digits = value.replace(".", "").strip()
    if not re.fullmatch(r"\d{4,8}", digits):
        raise ValueError(f"NCM invalido: '{value}'")
    return digits
