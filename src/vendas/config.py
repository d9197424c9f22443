from __future__ import annotations

import os
from datetime import timedelta, timezone
from decimal import Decimal
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "vendas-calc"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Only checks sources available before .env is loaded (env var set in
    shell, dev layout, an existing platformdirs directory).
    """
    from_env = os.environ.get("VENDAS_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/vendas/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("VENDAS_CONFIG_DIR", "config")


BRT = timezone(timedelta(hours=-3))

# Fiscal defaults
ICMS_PROPRIO_PADRAO = Decimal("4")
ALIQUOTA_ICMS_PADRAO = Decimal("0.18")
# States that do not apply ST to pet food (NCM 2309) when no MVA row exists
UFS_SEM_ST = frozenset({"BA", "GO", "RN", "RO", "SC"})

# Max divergence between installment sum and order total before warning
TOLERANCIA_PARCELAS = Decimal("0.10")

PAYMENT_TERMS_FILE = "condicoes_pagamento.yaml"
MVA_TABLE_FILE = "tabela_mva.yaml"


def get_uf_origem() -> str | None:
    """Return the seller's home state from VENDAS_UF_ORIGEM, if set."""
    uf = os.environ.get("VENDAS_UF_ORIGEM")
    return uf.strip().upper() if uf else None


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text()) or {}


def load_mva_table() -> list[dict]:
    """Load MVA rows from config/tabela_mva.yaml. Missing file means no rows."""
    path = get_config_dir() / MVA_TABLE_FILE
    if not path.exists():
        return []
    return load_yaml(path).get("tabela_mva", [])


def load_order(path: Path) -> dict:
    """Load a sale order description (items, discount, flags) from YAML."""
    return load_yaml(path)
