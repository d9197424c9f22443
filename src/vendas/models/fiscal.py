from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from vendas.utils.money import HUNDRED, to_decimal


def _opt_decimal(value: object) -> Decimal | None:
    return None if value is None else to_decimal(value)


@dataclass(frozen=True)
class MvaEntry:
    """Row of the MVA table for a (UF, NCM) pair. Rates are fractions (0.18 = 18%)."""

    uf: str
    ncm: str
    descricao: str | None = None
    aliquota_interna: Decimal | None = None
    aliquota_fundo: Decimal | None = None
    aliquota_efetiva: Decimal | None = None
    mva: Decimal | None = None
    sujeito_st: bool = True
    ativo: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> MvaEntry:
        """Create an MvaEntry from a tabela_mva.yaml row. Raises ValueError without uf/ncm."""
        if not d.get("uf") or not d.get("ncm"):
            raise ValueError(f"Linha da tabela MVA sem uf/ncm: {d}")
        return cls(
            uf=str(d["uf"]).upper(),
            ncm=str(d["ncm"]).replace(".", ""),
            descricao=d.get("descricao"),
            aliquota_interna=_opt_decimal(d.get("aliquota_interna")),
            aliquota_fundo=_opt_decimal(d.get("aliquota_fundo")),
            aliquota_efetiva=_opt_decimal(d.get("aliquota_efetiva")),
            mva=_opt_decimal(d.get("mva")),
            sujeito_st=bool(d.get("sujeito_st", True)),
            ativo=bool(d.get("ativo", True)),
        )


@dataclass(frozen=True)
class StResolution:
    """Result of resolving ST for a product NCM in a destination state."""

    subject_to_st: bool
    mva_rate: Decimal  # fraction, e.g. 0.7304

    @property
    def st_rate_percent(self) -> Decimal:
        """Percent fed to the line calculator as st_rate."""
        if not self.subject_to_st:
            return Decimal(0)
        return self.mva_rate * HUNDRED


@dataclass(frozen=True)
class IcmsStResult:
    base_calculo_st: Decimal
    icms_proprio: Decimal
    icms_st_total: Decimal
    icms_st_recolher: Decimal
    mva_aplicado: Decimal
    aliquota_icms: Decimal
