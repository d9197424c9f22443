"""Payment-terms registry (condicoes de pagamento).

Each named term maps to sorted day offsets; ``[0]`` alone means cash.
Terms live in ``<config>/condicoes_pagamento.yaml`` and every
read-modify-write holds a file lock.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import yaml
from filelock import FileLock

from vendas import config as _config
from vendas.models.payment_term import PaymentTerm

logger = logging.getLogger(__name__)


def parse_days(text: str) -> list[int]:
    """Parse "30, 60, 90" into sorted non-negative ints, skipping junk."""
    days = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = int(part)
        except ValueError:
            continue
        if value >= 0:
            days.append(value)
    return sorted(days)


def format_days(days: Iterable[int]) -> str:
    """Human label: "À Vista" for [0], "30 dias / 60 dias" otherwise."""
    days = list(days)
    if not days:
        return "-"
    if days == [0]:
        return "À Vista"
    return " / ".join(f"{d} dias" for d in days)


def _terms_path() -> Path:
    return _config.get_config_dir() / _config.PAYMENT_TERMS_FILE


def _backup_corrupt(path: Path) -> Path:
    """Rename a corrupt file to a timestamped backup before it gets overwritten."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup = path.with_name(f"{path.name}.corrupt.{ts}")
    path.rename(backup)
    logger.warning("Corrupt file backed up: %s → %s", path, backup)
    return backup


@contextmanager
def _locked() -> Iterator[None]:
    """Hold an exclusive file lock during registry read-modify-write."""
    tp = _terms_path()
    tp.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(tp.with_suffix(".lock"))
    with lock:
        yield


def _load() -> list[dict]:
    tp = _terms_path()
    if not tp.exists():
        return []
    try:
        data = yaml.safe_load(tp.read_text()) or {}
    except yaml.YAMLError:
        _backup_corrupt(tp)
        return []
    return data.get("condicoes", [])


def _save(entries: list[dict]) -> None:
    tp = _terms_path()
    tp.parent.mkdir(parents=True, exist_ok=True)
    tmp = tp.with_suffix(".tmp")
    tmp.write_text(
        yaml.dump({"condicoes": entries}, default_flow_style=False, allow_unicode=True)
    )
    os.replace(tmp, tp)


def list_terms(active_only: bool = True) -> list[PaymentTerm]:
    """Return registered terms ordered by (ordem, nome)."""
    with _locked():
        entries = _load()
    terms = [PaymentTerm.from_dict(e) for e in entries]
    if active_only:
        terms = [t for t in terms if t.ativo]
    return sorted(terms, key=lambda t: (t.ordem, t.nome))


def get_term(nome: str) -> PaymentTerm:
    """Look up a term by name (case-insensitive). Raises KeyError if unknown."""
    wanted = nome.strip().lower()
    for term in list_terms(active_only=False):
        if term.nome.lower() == wanted:
            return term
    raise KeyError(nome)


def save_term(term: PaymentTerm) -> PaymentTerm:
    """Insert or replace a term by name."""
    with _locked():
        entries = _load()
        entries = [e for e in entries if str(e.get("nome", "")).lower() != term.nome.lower()]
        entries.append(term.to_dict())
        _save(entries)
    return term


def remove_term(nome: str) -> bool:
    """Remove a term by name. Returns False if it was not registered."""
    with _locked():
        entries = _load()
        filtered = [e for e in entries if str(e.get("nome", "")).lower() != nome.lower()]
        if len(filtered) == len(entries):
            return False
        _save(filtered)
        return True
