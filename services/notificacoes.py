"""
Notificações de solicitações pendentes (badge do menu).

O badge mostra quantas solicitações `pendente` surgiram desde a última vez
que o admin abriu a lista. A contagem vista fica em
`app_seen_notifications_count`.
"""

from __future__ import annotations

import logging

from repository.solicitacoes_repository import SolicitacoesRepository
from repository.types import STATUS_PENDENTE
from shared.storage import KeyValueStore, load_from_storage, save_to_storage

logger = logging.getLogger(__name__)

CHAVE_VISTAS = "app_seen_notifications_count"


class NotificacoesService:
    def __init__(self, store: KeyValueStore, solicitacoes_repo: SolicitacoesRepository) -> None:
        self.store = store
        self.solicitacoes_repo = solicitacoes_repo
        self._vistas: int = load_from_storage(store, CHAVE_VISTAS, 0, parse=int)

    def total_pendentes(self) -> int:
        return sum(1 for s in self.solicitacoes_repo.itens if s.status == STATUS_PENDENTE)

    def contagem_nao_vistas(self) -> int:
        return max(0, self.total_pendentes() - self._vistas)

    def houve_novas(self, total_anterior: int) -> bool:
        """True se o total de pendentes cresceu desde `total_anterior`."""
        return self.total_pendentes() > total_anterior

    def marcar_como_vistas(self) -> None:
        self._vistas = self.total_pendentes()
        save_to_storage(self.store, CHAVE_VISTAS, self._vistas)
        logger.debug("Notificações marcadas como vistas (%d pendentes)", self._vistas)


__all__ = ["NotificacoesService", "CHAVE_VISTAS"]
