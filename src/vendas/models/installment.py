from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class Installment:
    """One dated installment (parcela), numbered from 1."""

    installment_number: int
    amount: Decimal
    due_date: date
    note: str | None = None

    def to_record(self) -> dict:
        """Shape used by the sale payload (venda_parcelas rows)."""
        return {
            "numero_parcela": self.installment_number,
            "valor_parcela": str(self.amount),
            "data_vencimento": self.due_date.isoformat(),
            "observacoes": self.note,
        }
