# services/ledger/service_ledger.py
"""
LedgerService
=============

Fachada do Ledger do LevaETras. Monta, uma vez por sessão, os repositórios
sobre o mesmo armazenamento e os serviços que dependem deles:

- Conciliação (funções puras) via `service_ledger_conciliacao`
- Faturas via `ServiceLedgerFatura`
- Solicitações (ciclo de vida + conclusão) via `ServiceLedgerSolicitacao`
- Livro de transações, clientes, entregadores e configurações

Notas:
- Não reimplementa regras: apenas delega.
- Aceita um `store` já pronto (testes usam `MemoryKeyValueStore`) ou um
  `db_path` para o SQLite.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from repository.clientes_repository import ClientesRepository
from repository.entregadores_repository import EntregadoresRepository
from repository.faturas_repository import FaturasRepository
from repository.settings_repository import SettingsRepository
from repository.solicitacoes_repository import SolicitacoesRepository
from repository.transacoes_repository import TransacoesRepository
from repository.types import ConciliacaoData, Fatura, Solicitacao
from services.ledger.service_ledger_conciliacao import (
    ClassificacaoConciliacao,
    classificar_pagamentos,
    conciliacao_completa,
    montar_conciliacao,
)
from services.ledger.service_ledger_fatura import ServiceLedgerFatura
from services.ledger.service_ledger_solicitacao import (
    DetalhesStatus,
    ResultadoConclusao,
    ServiceLedgerSolicitacao,
)
from services.notificacoes import NotificacoesService
from shared.config import caminho_banco
from shared.storage import KeyValueStore, SQLiteKeyValueStore

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Fachada central do Ledger.

    Parâmetros
    ----------
    db_path : str | None
        Caminho do banco SQLite (padrão: `shared.config.caminho_banco()`).
    store : KeyValueStore | None
        Armazenamento já construído; tem precedência sobre `db_path`.
    agora : callable
        Relógio usado em datas de criação e histórico.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        agora: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.db_path = db_path or caminho_banco()
        self.store = store if store is not None else SQLiteKeyValueStore(self.db_path)

        self.settings_repo = SettingsRepository(self.store)
        self.clientes_repo = ClientesRepository(self.store)
        self.entregadores_repo = EntregadoresRepository(self.store)
        self.transacoes_repo = TransacoesRepository(self.store)
        self.faturas_repo = FaturasRepository(self.store)
        self.solicitacoes_repo = SolicitacoesRepository(self.store)

        self.faturas = ServiceLedgerFatura(self.faturas_repo, agora=agora)
        self.solicitacoes = ServiceLedgerSolicitacao(
            self.solicitacoes_repo,
            settings_repo=self.settings_repo,
            fatura_ledger=self.faturas,
            transacoes_repo=self.transacoes_repo,
            clientes_repo=self.clientes_repo,
            agora=agora,
        )
        self.notificacoes = NotificacoesService(self.store, self.solicitacoes_repo)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<LedgerService store={self.store!r}>"

    # =========================
    # Conciliação
    # =========================
    def classificar(self, conciliacao: ConciliacaoData) -> ClassificacaoConciliacao:
        return classificar_pagamentos(conciliacao, self.settings_repo.listar_formas_conciliacao())

    def conciliacao_completa(self, solicitacao: Solicitacao, conciliacao: Optional[ConciliacaoData]) -> bool:
        return conciliacao_completa(solicitacao, conciliacao, self.settings_repo.listar_formas_conciliacao())

    def salvar_conciliacao(self, solicitacao_id: str, formulario: Mapping[str, Any]) -> Optional[Solicitacao]:
        """Converte o formulário (valores em texto) e grava na solicitação."""
        sol = self.solicitacoes.obter(solicitacao_id)
        if sol is None:
            logger.warning("Solicitação %s não encontrada; conciliação descartada", solicitacao_id)
            return None
        return self.solicitacoes.atualizar_conciliacao(solicitacao_id, montar_conciliacao(sol, formulario))

    # =========================
    # Solicitações
    # =========================
    def concluir(self, solicitacao_id: str, detalhes: Optional[DetalhesStatus] = None) -> ResultadoConclusao:
        return self.solicitacoes.concluir(solicitacao_id, detalhes)

    def pode_concluir(self, solicitacao: Solicitacao) -> bool:
        return self.solicitacoes.pode_concluir(solicitacao)

    # =========================
    # Faturas
    # =========================
    def registrar_pagamento_taxa(self, fatura_id: str, detalhes: str = "") -> Optional[Fatura]:
        return self.faturas.registrar_pagamento_taxa(fatura_id, detalhes)

    def registrar_pagamento_repasse(self, fatura_id: str, detalhes: str = "") -> Optional[Fatura]:
        return self.faturas.registrar_pagamento_repasse(fatura_id, detalhes)

    def atualizar_vencidas(self) -> List[Fatura]:
        return self.faturas.marcar_vencidas()


__all__ = ["LedgerService"]
