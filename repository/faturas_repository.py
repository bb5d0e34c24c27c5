"""
Módulo Faturas (Repositório)
============================

Coleção `app_faturas`. Cada registro é uma `Fatura` com suas entregas
incluídas e histórico; as datas (emissão, vencimento, entregas e histórico)
voltam como `datetime` na leitura.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from repository.base_repository import ColecaoRepository
from repository.types import Fatura


class FaturasRepository(ColecaoRepository[Fatura]):
    CHAVE = "app_faturas"

    def _parse_item(self, dados: Any) -> Fatura:
        if isinstance(dados, Fatura):
            return dados
        return Fatura.from_dict(dados)

    def _dump_item(self, item: Fatura) -> Dict[str, Any]:
        return item.to_dict()

    def do_cliente(self, cliente_id: str) -> List[Fatura]:
        return [f for f in self._itens if f.cliente_id == cliente_id]

    def numeros(self) -> List[str]:
        return [f.numero for f in self._itens]

    def listar_df(self) -> pd.DataFrame:
        """Resumo para tabelas (sem entregas/histórico aninhados)."""
        linhas = [
            {
                "id": f.id,
                "numero": f.numero,
                "cliente": f.cliente_nome,
                "emissao": f.data_emissao,
                "vencimento": f.data_vencimento,
                "entregas": f.total_entregas,
                "valor_taxas": f.valor_taxas,
                "status_taxas": f.status_taxas,
                "valor_repasse": f.valor_repasse,
                "status_repasse": f.status_repasse,
                "status": f.status_geral,
            }
            for f in self._itens
        ]
        return pd.DataFrame(
            linhas,
            columns=[
                "id", "numero", "cliente", "emissao", "vencimento", "entregas",
                "valor_taxas", "status_taxas", "valor_repasse", "status_repasse", "status",
            ],
        )


__all__ = ["FaturasRepository"]
