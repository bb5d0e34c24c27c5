"""
Lista as faturas ainda não finalizadas e, opcionalmente, marca as vencidas.

Uso:
    python scripts/list_faturas_abertas.py [--db caminho.db] [--marcar-vencidas]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from repository.types import FATURA_FINALIZADA  # noqa: E402
from services.ledger.service_ledger import LedgerService  # noqa: E402
from shared.config import caminho_banco  # noqa: E402
from utils.utils import formatar_data, formatar_moeda  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Faturas em aberto do LevaETras")
    parser.add_argument("--db", default=caminho_banco(), help="Caminho do banco SQLite")
    parser.add_argument("--marcar-vencidas", action="store_true", help="Marca como Vencida antes de listar")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    os.makedirs(os.path.dirname(args.db) or ".", exist_ok=True)
    ledger = LedgerService(db_path=args.db)

    if args.marcar_vencidas:
        vencidas = ledger.atualizar_vencidas()
        print(f"{len(vencidas)} fatura(s) marcada(s) como vencida(s)")

    abertas = [f for f in ledger.faturas_repo.itens if f.status_geral != FATURA_FINALIZADA]
    print(f"DB: {args.db}")
    print("Faturas não finalizadas:")
    if not abertas:
        print("  (nenhuma)")
    for f in abertas:
        print(
            f"  {f.numero}  {f.cliente_nome:<28} venc={formatar_data(f.data_vencimento)}"
            f"  taxas={formatar_moeda(f.valor_taxas)} ({f.status_taxas})"
            f"  repasse={formatar_moeda(f.valor_repasse)} ({f.status_repasse})  [{f.status_geral}]"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
