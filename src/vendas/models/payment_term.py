from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentTerm:
    """Named payment condition (condicao de pagamento), e.g. "30/60/90".

    ``dias_parcelas`` holds sorted, non-negative day offsets. ``(0,)`` is cash.
    """

    nome: str
    dias_parcelas: tuple[int, ...]
    descricao: str | None = None
    ativo: bool = True
    ordem: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> PaymentTerm:
        """Create a PaymentTerm from a YAML-loaded dict.

        Raises ValueError if no valid day offset is given.
        """
        raw = d.get("dias_parcelas", [])
        if isinstance(raw, str):
            from vendas.utils.payment_terms import parse_days

            days = parse_days(raw)
        else:
            days = sorted(int(x) for x in raw if int(x) >= 0)
        if not days:
            raise ValueError(
                f"Condicao '{d.get('nome')}': informe ao menos um prazo de pagamento (em dias)"
            )
        return cls(
            nome=str(d["nome"]),
            dias_parcelas=tuple(days),
            descricao=d.get("descricao"),
            ativo=bool(d.get("ativo", True)),
            ordem=int(d.get("ordem", 0)),
        )

    def to_dict(self) -> dict:
        out: dict = {"nome": self.nome, "dias_parcelas": list(self.dias_parcelas)}
        if self.descricao:
            out["descricao"] = self.descricao
        out["ativo"] = self.ativo
        out["ordem"] = self.ordem
        return out

    @property
    def is_cash(self) -> bool:
        return self.dias_parcelas == (0,)
