"""
Módulo Solicitações (Repositório)
=================================

Coleção `app_solicitacoes`, mais recentes primeiro.

Na leitura, rotas gravadas sem `id` recebem um novo id: a conciliação é
indexada por rota e precisa de ids estáveis.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List

import pandas as pd

from repository.base_repository import ColecaoRepository
from repository.types import Solicitacao
from shared.ids import novo_id


class SolicitacoesRepository(ColecaoRepository[Solicitacao]):
    CHAVE = "app_solicitacoes"

    def _parse_item(self, dados: Any) -> Solicitacao:
        sol = dados if isinstance(dados, Solicitacao) else Solicitacao.from_dict(dados)
        if any(not r.id for r in sol.rotas):
            sol.rotas = [r if r.id else replace(r, id=novo_id()) for r in sol.rotas]
        return sol

    def _dump_item(self, item: Solicitacao) -> Dict[str, Any]:
        return item.to_dict()

    def codigos(self) -> List[str]:
        return [s.codigo for s in self._itens]

    def listar_df(self) -> pd.DataFrame:
        linhas = [
            {
                "id": s.id,
                "codigo": s.codigo,
                "cliente": s.cliente_nome,
                "entregador": s.entregador_nome or "",
                "status": s.status,
                "data": s.data_solicitacao,
                "rotas": len(s.rotas),
                "taxas": s.valor_total_taxas,
                "repasse": s.valor_total_repasse,
                "conciliada": s.conciliacao is not None,
            }
            for s in self._itens
        ]
        return pd.DataFrame(
            linhas,
            columns=["id", "codigo", "cliente", "entregador", "status", "data", "rotas", "taxas", "repasse", "conciliada"],
        )


__all__ = ["SolicitacoesRepository"]
