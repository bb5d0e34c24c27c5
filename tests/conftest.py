"""
Fixtures compartilhadas dos testes do LevaETras.

Todos os testes usam `MemoryKeyValueStore` e um relógio fixo que avança um
minuto a cada leitura (datas de histórico previsíveis e crescentes).
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from repository.faturas_repository import FaturasRepository
from repository.settings_repository import SettingsRepository
from repository.types import PagamentoConciliado, Rota, RotaConciliada, Solicitacao
from services.ledger.service_ledger import LedgerService
from services.ledger.service_ledger_fatura import ServiceLedgerFatura
from shared.storage import MemoryKeyValueStore


class Relogio:
    """Relógio de teste: devolve `atual` e avança `passo` a cada chamada."""

    def __init__(self, inicio: datetime = datetime(2025, 6, 10, 9, 0), passo: timedelta = timedelta(minutes=1)):
        self.atual = inicio
        self.passo = passo

    def __call__(self) -> datetime:
        valor = self.atual
        self.atual = self.atual + self.passo
        return valor


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def relogio():
    return Relogio()


@pytest.fixture
def ledger(store, relogio):
    return LedgerService(store=store, agora=relogio)


@pytest.fixture
def formas(store):
    return SettingsRepository(store).listar_formas_conciliacao()


@pytest.fixture
def faturas_repo(store):
    return FaturasRepository(store)


@pytest.fixture
def fatura_ledger(faturas_repo, relogio):
    return ServiceLedgerFatura(faturas_repo, agora=relogio)


def nova_solicitacao(sol_id="sol-1", codigo="SOL-1001", cliente_id="client-1", rotas=None):
    """Solicitação em andamento com as rotas A (taxa 10) e B (taxa 15, extra 50)."""
    if rotas is None:
        rotas = [
            Rota(id=f"{sol_id}-a", bairro_destino_id="bairro-copacabana", taxa_entrega=10.0, responsavel="João"),
            Rota(
                id=f"{sol_id}-b",
                bairro_destino_id="bairro-tijuca",
                taxa_entrega=15.0,
                valor_extra=50.0,
                responsavel="Maria",
            ),
        ]
    return Solicitacao(
        id=sol_id,
        codigo=codigo,
        cliente_id=cliente_id,
        cliente_nome="Padaria Pão Quente",
        status="em_andamento",
        data_solicitacao=datetime(2025, 6, 1, 10, 0),
        rotas=rotas,
        valor_total_taxas=sum(r.taxa_entrega for r in rotas),
        valor_total_repasse=sum(r.repasse for r in rotas),
    )


def conciliacao_exemplo(sol_id="sol-1"):
    """Taxas faturadas (10 + 15) e repasse de 50 recebido pela empresa."""
    return {
        f"{sol_id}-a": RotaConciliada(
            pagamentos_taxa=[PagamentoConciliado(id="p1", valor=10.0, forma_pagamento_id="faturar-taxa")],
        ),
        f"{sol_id}-b": RotaConciliada(
            pagamentos_taxa=[PagamentoConciliado(id="p2", valor=15.0, forma_pagamento_id="faturar-taxa")],
            pagamentos_repasse=[PagamentoConciliado(id="p3", valor=50.0, forma_pagamento_id="repassar-valor")],
        ),
    }


@pytest.fixture
def solicitacao():
    return nova_solicitacao()


@pytest.fixture
def conciliacao():
    return conciliacao_exemplo()
