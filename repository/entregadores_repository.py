"""
Módulo Entregadores (Repositório)
=================================

Coleção `app_entregadores`: cadastro dos entregadores (documento, veículo,
comissão). O avatar é sempre derivado do nome.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from repository.base_repository import ColecaoRepository
from shared.ids import avatar_url, novo_id, sanitize

logger = logging.getLogger(__name__)

Entregador = Dict[str, Any]

TIPOS_COMISSAO = ("percentual", "fixo")


def _entregadores_padrao() -> List[Entregador]:
    return [
        {
            "id": "entregador-1",
            "nome": "Ana Silva",
            "documento": "11122233344",
            "email": "ana.silva@entregas.com",
            "telefone": "(11) 98765-4321",
            "cidade": "São Paulo",
            "bairro": "Pinheiros",
            "veiculo": "Moto - Honda CG 160",
            "status": "ativo",
            "tipoComissao": "percentual",
            "valorComissao": 10,
            "avatar": avatar_url("Ana Silva"),
        },
        {
            "id": "entregador-2",
            "nome": "Carlos Souza",
            "documento": "55566677788",
            "email": "carlos.souza@entregas.com",
            "telefone": "(11) 91234-5678",
            "cidade": "São Paulo",
            "bairro": "Vila Madalena",
            "veiculo": "Carro - Fiat Fiorino",
            "status": "ativo",
            "tipoComissao": "fixo",
            "valorComissao": 7.5,
            "avatar": avatar_url("Carlos Souza"),
        },
    ]


class EntregadoresRepository(ColecaoRepository[Entregador]):
    CHAVE = "app_entregadores"

    def _padrao(self) -> List[Any]:
        return _entregadores_padrao()

    def adicionar_entregador(self, dados: Dict[str, Any]) -> Entregador:
        nome = sanitize(dados.get("nome"))
        if not nome:
            raise ValueError("Nome do entregador é obrigatório.")
        tipo = dados.get("tipoComissao") or "fixo"
        if tipo not in TIPOS_COMISSAO:
            raise ValueError(f"tipoComissao inválido: {tipo!r}")
        entregador: Entregador = {**dados, "id": novo_id(), "nome": nome, "tipoComissao": tipo, "avatar": avatar_url(nome)}
        self.adicionar(entregador, no_inicio=True)
        logger.info("Entregador %s cadastrado", nome)
        return entregador

    def atualizar_entregador(self, entregador_id: str, dados: Dict[str, Any]) -> Optional[Entregador]:
        dados = {k: v for k, v in dados.items() if k not in ("id", "avatar")}

        def _merge(e: Entregador) -> Entregador:
            novo = {**e, **dados}
            novo["avatar"] = avatar_url(novo.get("nome"))
            return novo

        return self.atualizar(entregador_id, _merge)

    def excluir_entregador(self, entregador_id: str) -> bool:
        return self.remover(entregador_id)

    def ativos(self) -> List[Entregador]:
        return [e for e in self._itens if e.get("status", "ativo") == "ativo"]


__all__ = ["EntregadoresRepository", "Entregador", "TIPOS_COMISSAO"]
