"""
Módulo Transações (Repositório)
===============================

Livro de créditos/débitos dos clientes pré-pagos (`app_transactions`).

Funcionalidades principais
--------------------------
- `add_transaction`: lançamento append-only (mais recente primeiro).
- `transacoes_do_cliente` / `saldo_cliente`: extrato e saldo (créditos − débitos).
- `extrato_df`: extrato em DataFrame, com filtros de tipo e período, pronto
  para a página financeira do cliente.

Observações
-----------
- O vínculo transação → cliente é pelo nome (`clientName`), como gravado
  pelo front-end.
- Não há edição nem exclusão de lançamentos.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from repository.base_repository import ColecaoRepository
from repository.types import ORIGENS_TRANSACAO, TIPO_CREDITO, TIPO_DEBITO, Transacao
from shared.ids import novo_id
from utils.utils import arredondar_moeda, coerce_data

logger = logging.getLogger(__name__)

_COLUNAS_EXTRATO = ["data", "tipo", "origem", "descricao", "valor", "valor_assinado"]


class TransacoesRepository(ColecaoRepository[Transacao]):
    CHAVE = "app_transactions"

    def _parse_item(self, dados: Any) -> Transacao:
        if isinstance(dados, Transacao):
            return dados
        return Transacao.from_dict(dados)

    def _dump_item(self, item: Transacao) -> Dict[str, Any]:
        return item.to_dict()

    def add_transaction(
        self,
        type: str,
        origin: str,
        description: str,
        value: float,
        client_name: str,
        client_avatar: str = "",
        date: Optional[datetime] = None,
    ) -> Transacao:
        """
        Registra um crédito (`credit`) ou débito (`debit`).

        Parâmetros:
            type (str): `credit` | `debit`.
            origin (str): Uma das chaves de `ORIGENS_TRANSACAO`.
            value (float): Valor positivo; o sinal vem do `type`.
        """
        if type not in (TIPO_CREDITO, TIPO_DEBITO):
            raise ValueError(f"Tipo de transação inválido: {type!r}")
        if origin not in ORIGENS_TRANSACAO:
            raise ValueError(f"Origem de transação inválida: {origin!r}")
        tx = Transacao(
            id=novo_id(),
            type=type,
            origin=origin,
            description=description,
            value=arredondar_moeda(value),
            client_name=client_name,
            client_avatar=client_avatar,
            date=date or datetime.now(),
        )
        self.adicionar(tx, no_inicio=True)
        logger.info("Transação %s %s de %.2f para %s (%s)", type, origin, tx.value, client_name, description)
        return tx

    def transacoes_do_cliente(self, client_name: str) -> List[Transacao]:
        return [t for t in self._itens if t.client_name == client_name]

    def saldo_cliente(self, client_name: str) -> float:
        """Créditos − débitos do cliente."""
        saldo = 0.0
        for t in self.transacoes_do_cliente(client_name):
            saldo += t.value if t.type == TIPO_CREDITO else -t.value
        return arredondar_moeda(saldo)

    def extrato_df(
        self,
        client_name: str,
        tipo: Optional[str] = None,
        data_inicio: Optional[date] = None,
        data_fim: Optional[date] = None,
    ) -> pd.DataFrame:
        """
        Extrato do cliente como DataFrame (mais recente primeiro).

        Parâmetros:
            tipo (str | None): `credit`, `debit` ou None/`todos` para ambos.
            data_inicio / data_fim (date | None): período inclusivo.

        Colunas:
            data, tipo, origem (rótulo), descricao, valor, valor_assinado
        """
        linhas = [
            {
                "data": t.date,
                "tipo": t.type,
                "origem": ORIGENS_TRANSACAO.get(t.origin, t.origin),
                "descricao": t.description,
                "valor": t.value,
                "valor_assinado": t.value if t.type == TIPO_CREDITO else -t.value,
            }
            for t in self.transacoes_do_cliente(client_name)
        ]
        df = pd.DataFrame(linhas, columns=_COLUNAS_EXTRATO)
        if df.empty:
            return df

        df["data"] = pd.to_datetime(df["data"])
        if tipo and tipo != "todos":
            df = df[df["tipo"] == tipo]
        if data_inicio is not None:
            df = df[df["data"].dt.date >= coerce_data(data_inicio)]
        if data_fim is not None:
            df = df[df["data"].dt.date <= coerce_data(data_fim)]
        return df.sort_values("data", ascending=False).reset_index(drop=True)


__all__ = ["TransacoesRepository"]
