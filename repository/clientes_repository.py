"""
Módulo Clientes (Repositório)
=============================

Coleção `app_clients`. Os registros são mantidos como dicts no formato do
front-end (camelCase), pois carregam campos livres de cadastro e de
preferência de faturamento (`frequenciaFaturamento`, `diaDaSemanaFaturamento`...).

O núcleo só consome `modalidade` (`pré-pago` | `faturado`) e a identidade
do cliente (id, nome, avatar).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from repository.base_repository import ColecaoRepository
from repository.types import MODALIDADE_FATURADO, MODALIDADE_PRE_PAGO
from shared.ids import avatar_url, novo_id, sanitize

logger = logging.getLogger(__name__)

Cliente = Dict[str, Any]


def _clientes_padrao() -> List[Cliente]:
    return [
        {
            "id": "client-1",
            "nome": "Padaria Pão Quente",
            "tipo": "pessoa_juridica",
            "email": "padaria@email.com",
            "telefone": "(21) 98877-6655",
            "endereco": "Av. Atlântica, 1702",
            "bairro": "Copacabana",
            "cidade": "Rio de Janeiro",
            "uf": "RJ",
            "status": "ativo",
            "totalPedidos": 58,
            "valorTotal": 1250.70,
            "modalidade": MODALIDADE_FATURADO,
            "ativarFaturamentoAutomatico": True,
            "frequenciaFaturamento": "semanal",
            "diaDaSemanaFaturamento": "sexta",
        },
        {
            "id": "client-2",
            "nome": "Restaurante Sabor Divino",
            "tipo": "pessoa_juridica",
            "email": "restaurante@email.com",
            "telefone": "(21) 97766-5544",
            "endereco": "R. Conde de Bonfim, 444",
            "bairro": "Tijuca",
            "cidade": "Rio de Janeiro",
            "uf": "RJ",
            "status": "ativo",
            "totalPedidos": 120,
            "valorTotal": 3420.00,
            "modalidade": MODALIDADE_PRE_PAGO,
        },
    ]


class ClientesRepository(ColecaoRepository[Cliente]):
    """CRUD de clientes e consulta da modalidade de cobrança."""

    CHAVE = "app_clients"

    def _padrao(self) -> List[Any]:
        return _clientes_padrao()

    def adicionar_cliente(self, dados: Dict[str, Any]) -> Cliente:
        """Novo cliente (id gerado, contadores zerados), inserido no topo."""
        nome = sanitize(dados.get("nome"))
        if not nome:
            raise ValueError("Nome do cliente é obrigatório.")
        cliente: Cliente = {
            **dados,
            "id": novo_id(),
            "nome": nome,
            "modalidade": dados.get("modalidade") or MODALIDADE_PRE_PAGO,
            "totalPedidos": 0,
            "valorTotal": 0,
        }
        cliente.setdefault("avatar", avatar_url(nome))
        self.adicionar(cliente, no_inicio=True)
        logger.info("Cliente %s criado (%s)", nome, cliente["modalidade"])
        return cliente

    def atualizar_cliente(self, cliente_id: str, dados: Dict[str, Any]) -> Optional[Cliente]:
        dados = {k: v for k, v in dados.items() if k != "id"}
        return self.atualizar(cliente_id, lambda c: {**c, **dados})

    def excluir_cliente(self, cliente_id: str) -> bool:
        return self.remover(cliente_id)

    def modalidade(self, cliente_id: str) -> Optional[str]:
        cliente = self.obter(cliente_id)
        return cliente.get("modalidade") if cliente else None

    def avatar(self, cliente: Cliente) -> str:
        return cliente.get("avatar") or avatar_url(cliente.get("nome"))


__all__ = ["ClientesRepository", "Cliente"]
