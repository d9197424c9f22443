from __future__ import annotations

import sys
from datetime import date, datetime
from importlib.resources import files
from pathlib import Path

USAGE = """Uso:
  vendas-calc init
  vendas-calc pedido <arquivo.yaml>
  vendas-calc parcelas <total> <n|condicao> [YYYY-MM-DD]
  vendas-calc condicoes"""

_TEMPLATES = {
    "condicoes_pagamento.yaml.example": "condicoes_pagamento.yaml",
    "tabela_mva.yaml.example": "tabela_mva.yaml",
    "pedido.yaml.example": "pedido.yaml.example",
}


def _today() -> date:
    from vendas.config import BRT

    return datetime.now(BRT).date()


def _init_config() -> None:
    """Copy bundled config templates to the user's config directory."""
    from vendas.config import get_config_dir

    config_dir = get_config_dir()
    templates = files("vendas") / "templates"
    config_dir.mkdir(parents=True, exist_ok=True)

    copied = 0
    for src_name, dest_name in _TEMPLATES.items():
        dest = config_dir / dest_name
        if dest.exists():
            print(f"  já existe: {dest}")
            continue
        src = templates / src_name
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  criado: {dest}")
        copied += 1

    print()
    print(f"Configuração: {config_dir}")
    if not copied:
        print("Nenhum arquivo novo criado (todos já existiam).")


def _print_installments(installments) -> None:
    from vendas.utils.formatters import format_brl, format_date_br

    print()
    print("Parcelas")
    print("────────")
    for p in installments:
        note = f"  {p.note}" if p.note else ""
        print(
            f"  {p.installment_number:>2}  {format_date_br(p.due_date)}  "
            f"{format_brl(p.amount):>16}{note}"
        )


def _installments_for(total, plan: str, base: date):
    """Build installments from a registered term name, else a count ("3")."""
    from vendas.services.installments import generate_equal, generate_from_schedule
    from vendas.utils.payment_terms import get_term
    from vendas.utils.validators import validate_installment_count

    try:
        term = get_term(plan)
    except KeyError:
        if not plan.strip().isdigit():
            raise
        return generate_equal(total, validate_installment_count(plan), base)
    return generate_from_schedule(total, term.dias_parcelas, base)


def _cmd_pedido(path: Path) -> None:
    from vendas.config import get_uf_origem, load_order
    from vendas.models.line_item import LineItemInput, TaxExemptionFlags
    from vendas.services.fiscal import MvaTable
    from vendas.services.pipeline import apply_st_rates, compute_all
    from vendas.utils.formatters import format_brl
    from vendas.utils.validators import validate_date, validate_discount, validate_uf

    order = load_order(path)
    items = [LineItemInput.from_dict(d) for d in order.get("itens", [])]
    if not items:
        raise ValueError("A venda deve conter pelo menos um item")
    discount = validate_discount(order.get("desconto", 0))
    exemptions = TaxExemptionFlags.from_dict(order)

    uf = order.get("uf_destino") or get_uf_origem()
    if uf:
        items = apply_st_rates(items, validate_uf(uf), MvaTable.from_config())

    lines, totals = compute_all(items, discount, exemptions)

    print(f"{'Produto':<24} {'Bruto':>14} {'Desconto':>12} {'Líquido':>14} "
          f"{'IPI':>12} {'ST':>12} {'Total':>14}")
    for item, line in zip(items, lines):
        label = str(item.name or item.product_id)[:24]
        print(
            f"{label:<24} {format_brl(line.gross_subtotal):>14} "
            f"{format_brl(line.proportional_discount):>12} "
            f"{format_brl(line.net_subtotal):>14} {format_brl(line.ipi_amount):>12} "
            f"{format_brl(line.st_amount):>12} {format_brl(line.total_item):>14}"
        )

    print()
    print(f"Total bruto:      {format_brl(totals.gross_total)}")
    print(f"Desconto:         {format_brl(totals.discount_total)}")
    print(f"Total líquido:    {format_brl(totals.net_total)}")
    print(f"IPI:              {format_brl(totals.ipi_total)}")
    print(f"ST:               {format_brl(totals.st_total)}")
    print(f"ICMS (informativo): {format_brl(totals.icms_total)}")
    print(f"Total geral:      {format_brl(totals.grand_total)}")

    plan = order.get("condicao_pagamento") or order.get("parcelas")
    if plan:
        base = order.get("data_base")
        base_date = validate_date(str(base)) if base else _today()
        _print_installments(_installments_for(totals.grand_total, str(plan), base_date))


def _cmd_parcelas(args: list[str]) -> None:
    from vendas.utils.validators import validate_date, validate_monetary

    if len(args) < 2:
        raise ValueError("Informe o total e o número de parcelas ou a condição")
    total = validate_monetary(args[0])
    base = validate_date(args[2]) if len(args) > 2 else _today()
    _print_installments(_installments_for(total, args[1], base))


def _cmd_condicoes() -> None:
    from vendas.utils.payment_terms import format_days, list_terms

    terms = list_terms()
    if not terms:
        print("Nenhuma condição de pagamento cadastrada.")
        return
    for term in terms:
        n = len(term.dias_parcelas)
        parcelas = "1 parcela" if n == 1 else f"{n} parcelas"
        print(f"  {term.nome:<20} {format_days(term.dias_parcelas):<32} {parcelas}")


def main() -> None:
    """Entry point for the vendas-calc CLI."""
    args = sys.argv[1:]
    if not args or args[0] in ("-h", "--help"):
        print(USAGE)
        return

    command, rest = args[0], args[1:]
    try:
        if command == "init":
            _init_config()
        elif command == "pedido" and rest:
            _cmd_pedido(Path(rest[0]))
        elif command == "parcelas":
            _cmd_parcelas(rest)
        elif command == "condicoes":
            _cmd_condicoes()
        else:
            print(USAGE)
            sys.exit(2)
    except FileNotFoundError as e:
        print(f"Erro: arquivo não encontrado: {e.filename}")
        sys.exit(1)
    except KeyError as e:
        print(f"Erro: condição de pagamento não encontrada: {e.args[0]}")
        sys.exit(1)
    except ValueError as e:
        print(f"Erro: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
