from __future__ import annotations

from decimal import Decimal

import pytest
import yaml

from vendas.models.line_item import LineItemInput


def D(value) -> Decimal:
    return Decimal(str(value))


# --- Line item fixtures ---


@pytest.fixture
def racao_dict() -> dict:
    return {
        "produto_id": 1,
        "produto_nome": "Ração Premium 15kg",
        "quantidade": 1,
        "preco_unitario": 100,
        "ipi_aliquota": 10,
        "icms_aliquota": 18,
        "ncm": "23091000",
    }


@pytest.fixture
def petisco_dict() -> dict:
    return {
        "produto_id": 2,
        "produto_nome": "Petisco Bifinho",
        "quantidade": 4,
        "preco_unitario": 50,
        "ipi_aliquota": 5,
        "icms_aliquota": 18,
    }


@pytest.fixture
def racao(racao_dict) -> LineItemInput:
    return LineItemInput.from_dict(racao_dict)


@pytest.fixture
def petisco(petisco_dict) -> LineItemInput:
    return LineItemInput.from_dict(petisco_dict)


@pytest.fixture
def two_items() -> list[LineItemInput]:
    """Gross 100 + 200 = 300, no taxes."""
    return [
        LineItemInput(product_id=1, quantity=D(1), unit_price=D(100)),
        LineItemInput(product_id=2, quantity=D(1), unit_price=D(200)),
    ]


@pytest.fixture
def three_thirds() -> list[LineItemInput]:
    """Three equal lines; a 10.00 discount does not split evenly."""
    return [
        LineItemInput(product_id=i, quantity=D(1), unit_price=D("33.33"), ipi_rate=D(10))
        for i in range(1, 4)
    ]


# --- Config dir fixtures ---


@pytest.fixture
def payment_terms_dict() -> dict:
    return {
        "condicoes": [
            {"nome": "À Vista", "dias_parcelas": [0], "ordem": 0},
            {"nome": "30/60/90", "dias_parcelas": [30, 60, 90], "ordem": 2},
            {"nome": "30 dias", "dias_parcelas": [30], "ordem": 1},
            {"nome": "Antiga", "dias_parcelas": [10, 20], "ativo": False, "ordem": 9},
        ]
    }


@pytest.fixture
def mva_table_dict() -> dict:
    return {
        "tabela_mva": [
            {"uf": "SP", "ncm": "2309", "aliquota_interna": 0.18, "mva": 0.7304, "sujeito_st": True},
            {
                "uf": "RJ",
                "ncm": "23091000",
                "aliquota_interna": 0.20,
                "aliquota_efetiva": 0.22,
                "mva": 0.8363,
                "sujeito_st": True,
            },
            {"uf": "SC", "ncm": "2309", "sujeito_st": False},
            {"uf": "MG", "ncm": "2309", "mva": 0.5, "ativo": False},
        ]
    }


@pytest.fixture
def config_dir(tmp_path, monkeypatch, payment_terms_dict, mva_table_dict):
    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "condicoes_pagamento.yaml").write_text(
        yaml.dump(payment_terms_dict, allow_unicode=True)
    )
    (cfg / "tabela_mva.yaml").write_text(yaml.dump(mva_table_dict))
    monkeypatch.setenv("VENDAS_CONFIG_DIR", str(cfg))
    return cfg
