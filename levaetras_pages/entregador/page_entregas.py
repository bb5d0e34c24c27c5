"""
Página de Entregas do Entregador
================================

Tarefas atribuídas ao entregador: `aceita` (a iniciar) e `em_andamento`.
Concluir uma entrega de cliente faturado depende da conciliação feita pelo
admin.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from levaetras_pages.common import obter_ledger
from repository.types import STATUS_ACEITA, STATUS_EM_ANDAMENTO, Solicitacao
from services.ledger.service_ledger import LedgerService
from shared.debug_trace import debug_wrap_ctx
from utils.utils import formatar_moeda


def _card(ledger: LedgerService, sol: Solicitacao) -> None:
    bairros = {b["id"]: b["nome"] for b in ledger.settings_repo.bairros.itens}
    with st.container(border=True):
        st.markdown(f"**{sol.codigo}** · {sol.cliente_nome}")
        st.caption(f"Coleta: {sol.ponto_coleta or '—'}")
        for rota in sol.rotas:
            extra = f" · receber {formatar_moeda(rota.repasse)}" if rota.receber_do_cliente and rota.repasse else ""
            st.write(f"📍 {bairros.get(rota.bairro_destino_id, '—')} · {rota.responsavel} {rota.telefone}{extra}")

        if sol.status == STATUS_ACEITA:
            if st.button("▶️ Iniciar entrega", key=f"ini_{sol.id}"):
                with debug_wrap_ctx("Erro ao iniciar entrega"):
                    ledger.solicitacoes.atualizar_status(sol.id, STATUS_EM_ANDAMENTO)
                    st.rerun()
        elif sol.status == STATUS_EM_ANDAMENTO:
            if ledger.pode_concluir(sol):
                if st.button("✅ Concluir entrega", key=f"fim_{sol.id}"):
                    with debug_wrap_ctx("Erro ao concluir entrega"):
                        ledger.concluir(sol.id)
                        st.rerun()
            else:
                st.caption("⏳ Aguardando conciliação do administrador para concluir.")


def render(caminho_banco: str, usuario: Optional[Dict[str, Any]] = None) -> None:
    if not usuario:
        st.warning("⚠️ Usuário não identificado.")
        return
    ledger = obter_ledger(caminho_banco)
    tarefas = ledger.solicitacoes.tarefas_do_entregador(usuario["id"])

    col_a, col_b = st.columns(2)
    with col_a:
        st.subheader(f"📋 A fazer ({len(tarefas[STATUS_ACEITA])})")
        for sol in tarefas[STATUS_ACEITA]:
            _card(ledger, sol)
        if not tarefas[STATUS_ACEITA]:
            st.info("Nenhuma tarefa a iniciar.")
    with col_b:
        st.subheader(f"🚚 Em andamento ({len(tarefas[STATUS_EM_ANDAMENTO])})")
        for sol in tarefas[STATUS_EM_ANDAMENTO]:
            _card(ledger, sol)
        if not tarefas[STATUS_EM_ANDAMENTO]:
            st.info("Nenhuma entrega em andamento.")


__all__ = ["render"]
