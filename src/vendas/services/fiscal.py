"""ST (substituicao tributaria) resolution from the MVA table.

The MVA table is keyed by destination UF and NCM. Rates in the table are
fractions (``mva: 0.7304`` is 73,04%); the line calculator takes percents,
so callers use ``StResolution.st_rate_percent``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from vendas import config as _config
from vendas.models.fiscal import IcmsStResult, MvaEntry, StResolution
from vendas.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class MvaTable:
    """In-memory MVA table with (UF, NCM) lookup.

    Lookups try the full NCM first, then its 4-digit heading, so a row for
    ``2309`` covers ``23091000``.
    """

    def __init__(self, entries: Iterable[MvaEntry]) -> None:
        self._rows: dict[tuple[str, str], MvaEntry] = {}
        for entry in entries:
            if not entry.ativo:
                continue
            self._rows[(entry.uf, entry.ncm)] = entry

    @classmethod
    def from_config(cls) -> MvaTable:
        """Build the table from config/tabela_mva.yaml."""
        return cls(MvaEntry.from_dict(d) for d in _config.load_mva_table())

    def __len__(self) -> int:
        return len(self._rows)

    def ufs(self) -> list[str]:
        return sorted({uf for uf, _ in self._rows})

    def lookup(self, uf: str, ncm: str) -> MvaEntry | None:
        uf = uf.upper()
        ncm = ncm.replace(".", "")
        entry = self._rows.get((uf, ncm))
        if entry is None and len(ncm) > 4:
            entry = self._rows.get((uf, ncm[:4]))
        return entry

    def resolve(self, uf: str, ncm: str) -> StResolution:
        """Resolve ST applicability and MVA for a destination UF and NCM."""
        entry = self.lookup(uf, ncm)
        subject = is_subject_to_st(uf, entry)
        mva = get_mva_value(entry) if subject else ZERO
        logger.debug("ST %s/%s: subject=%s mva=%s", uf, ncm, subject, mva)
        return StResolution(subject_to_st=subject, mva_rate=mva)


def is_subject_to_st(uf: str, entry: MvaEntry | None = None) -> bool:
    """The table row decides; without one, ST applies outside UFS_SEM_ST."""
    if entry is not None:
        return entry.sujeito_st
    return uf.upper() not in _config.UFS_SEM_ST


def get_mva_value(entry: MvaEntry | None, manual: Decimal | None = None) -> Decimal:
    """MVA priority: manual override, table row, zero."""
    if manual is not None:
        return manual
    if entry is not None and entry.mva is not None:
        return entry.mva
    return ZERO


def get_icms_rate(entry: MvaEntry | None, manual: Decimal | None = None) -> Decimal:
    """ICMS rate priority: manual, aliquota_efetiva, aliquota_interna, 18%."""
    if manual is not None:
        return manual
    if entry is not None:
        if entry.aliquota_efetiva is not None:
            return entry.aliquota_efetiva
        if entry.aliquota_interna is not None:
            return entry.aliquota_interna
    return _config.ALIQUOTA_ICMS_PADRAO


def calculate_icms_st(
    valor_mercadoria: Decimal,
    frete: Decimal = ZERO,
    outras_despesas: Decimal = ZERO,
    *,
    mva: Decimal,
    aliquota_icms: Decimal,
) -> IcmsStResult:
    """ICMS-ST to collect for a merchandise value.

    base = mercadoria + frete + despesas
    base ST = base * (1 + MVA); own ICMS = base * aliquota
    ST total = base ST * aliquota; to collect = ST total - own ICMS
    """
    base = valor_mercadoria + frete + outras_despesas
    base_st = base * (1 + mva)
    icms_proprio = base * aliquota_icms
    icms_st_total = base_st * aliquota_icms
    return IcmsStResult(
        base_calculo_st=round2(base_st),
        icms_proprio=round2(icms_proprio),
        icms_st_total=round2(icms_st_total),
        icms_st_recolher=round2(icms_st_total - icms_proprio),
        mva_aplicado=mva,
        aliquota_icms=aliquota_icms,
    )
