"""
Página de Solicitações (admin)
==============================

- Lista as solicitações com filtro de status (zera o badge de notificações).
- Mudança de status pela máquina de estados, com justificativa e entregador.
- Conciliação por rota (pagamentos da taxa e do repasse) antes de concluir
  solicitações de clientes faturados.
- Formulário de nova solicitação.
"""

from __future__ import annotations

from typing import Any, Dict, List

import streamlit as st

from levaetras_pages.common import df_moeda, obter_ledger
from levaetras_pages.solicitacoes.form_solicitacao import render_form_solicitacao
from repository.types import (
    MODALIDADE_FATURADO,
    STATUS_ACEITA,
    STATUS_COM_JUSTIFICATIVA,
    STATUS_CONCLUIDA,
    STATUS_EM_ANDAMENTO,
    TRANSICOES_SOLICITACAO,
    Solicitacao,
)
from services.ledger.service_ledger import LedgerService
from services.ledger.service_ledger_conciliacao import (
    TIPO_REPASSE,
    TIPO_TAXA,
    formulario_inicial,
    valor_restante,
)
from services.ledger.service_ledger_solicitacao import (
    EFEITO_DEBITO_PRE_PAGO,
    EFEITO_FATURA,
    EFEITO_SEM_IMPACTO,
    DetalhesStatus,
)
from shared.debug_trace import debug_wrap_ctx
from utils.utils import formatar_moeda

_ROTULOS = {
    "pendente": "⏳ Pendente",
    "aceita": "👍 Aceita",
    "em_andamento": "🚚 Em andamento",
    "concluida": "✅ Concluída",
    "cancelada": "🚫 Cancelada",
    "rejeitada": "⛔ Rejeitada",
}


def _form_conciliacao(ledger: LedgerService, sol: Solicitacao) -> None:
    formas = ledger.settings_repo.listar_formas_conciliacao()
    ids_formas = [""] + [f.id for f in formas]
    nomes = {f.id: f.nome for f in formas}
    inicial = formulario_inicial(sol)
    bairros = {b["id"]: b["nome"] for b in ledger.settings_repo.bairros.itens}

    formulario: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
    for rota in sol.rotas:
        st.markdown(f"**Rota: {rota.responsavel or '—'} ({bairros.get(rota.bairro_destino_id, 'Não encontrado')})**")
        formulario[rota.id] = {}
        tipos = [(TIPO_TAXA, "pagamentosTaxa", rota.taxa_entrega)]
        if rota.repasse > 0:
            tipos.append((TIPO_REPASSE, "pagamentosRepasse", rota.repasse))
        for tipo, chave, esperado in tipos:
            salvos = inicial[rota.id][chave]
            n = int(
                st.number_input(
                    f"Pagamentos da {tipo} ({formatar_moeda(esperado)})",
                    min_value=0,
                    max_value=5,
                    value=max(1, len(salvos)),
                    key=f"n_{sol.id}_{rota.id}_{tipo}",
                )
            )
            linhas = []
            for i in range(n):
                base = salvos[i] if i < len(salvos) else {"valor": "0,00", "formaPagamentoId": ""}
                c1, c2 = st.columns([1, 3])
                with c1:
                    valor = st.text_input("Valor", value=base["valor"], key=f"v_{sol.id}_{rota.id}_{tipo}_{i}")
                with c2:
                    forma = st.selectbox(
                        "Forma",
                        ids_formas,
                        index=ids_formas.index(base["formaPagamentoId"]) if base["formaPagamentoId"] in ids_formas else 0,
                        format_func=lambda fid: nomes.get(fid, "Selecione..."),
                        key=f"f_{sol.id}_{rota.id}_{tipo}_{i}",
                    )
                linhas.append({"id": base.get("id"), "valor": valor, "formaPagamentoId": forma})
            formulario[rota.id][chave] = linhas
            restante = valor_restante(rota, linhas, tipo)
            (st.success if abs(restante) < 0.01 else st.warning)(f"Valor restante: {formatar_moeda(restante)}")

    if st.button("💾 Salvar conciliação", key=f"salvar_conc_{sol.id}"):
        with debug_wrap_ctx("Erro ao salvar conciliação"):
            ledger.salvar_conciliacao(sol.id, formulario)
            st.success("✅ Conciliação salva.")
            st.rerun()


def _acoes_status(ledger: LedgerService, sol: Solicitacao) -> None:
    proximos = sorted(TRANSICOES_SOLICITACAO.get(sol.status, set()))
    if not proximos:
        st.info(f"Solicitação finalizada ({_ROTULOS.get(sol.status, sol.status)}).")
        return

    novo = st.selectbox("Novo status", proximos, format_func=lambda s: _ROTULOS.get(s, s), key=f"novo_{sol.id}")
    detalhes = DetalhesStatus()

    if novo in STATUS_COM_JUSTIFICATIVA:
        detalhes.justificativa = st.text_area("Justificativa", key=f"just_{sol.id}")
    if novo in (STATUS_ACEITA, STATUS_EM_ANDAMENTO):
        entregadores = ledger.entregadores_repo.ativos()
        opcoes = [""] + [e["id"] for e in entregadores]
        atual = sol.entregador_id if sol.entregador_id in opcoes else ""
        ent_id = st.selectbox(
            "Entregador",
            opcoes,
            index=opcoes.index(atual),
            format_func=lambda eid: next((e["nome"] for e in entregadores if e["id"] == eid), "—"),
            key=f"ent_{sol.id}",
        )
        if ent_id:
            detalhes.entregador = ledger.entregadores_repo.obter(ent_id)

    cliente = ledger.clientes_repo.obter(sol.cliente_id)
    if novo == STATUS_CONCLUIDA:
        if cliente and cliente.get("modalidade") == MODALIDADE_FATURADO:
            with st.expander("🧮 Conciliação", expanded=sol.conciliacao is None):
                _form_conciliacao(ledger, sol)
        if not ledger.pode_concluir(sol):
            st.warning("⚠️ Conclua a conciliação de todas as rotas antes de finalizar.")
            return

    if st.button("✔️ Confirmar", key=f"confirmar_{sol.id}"):
        with debug_wrap_ctx("Erro ao atualizar status"):
            if novo == STATUS_CONCLUIDA:
                resultado = ledger.concluir(sol.id, detalhes)
                if EFEITO_DEBITO_PRE_PAGO in resultado.efeitos:
                    st.success(f"✅ Débito de {formatar_moeda(resultado.transacao.value)} lançado no saldo do cliente.")
                elif EFEITO_FATURA in resultado.efeitos:
                    st.success(f"✅ Entregas lançadas na fatura {resultado.fatura.numero}.")
                elif EFEITO_SEM_IMPACTO in resultado.efeitos:
                    st.info("ℹ️ Conciliação sem impacto financeiro; nenhuma fatura alterada.")
            else:
                ledger.solicitacoes.atualizar_status(sol.id, novo, detalhes)
            st.rerun()


def render(caminho_banco: str) -> None:
    ledger = obter_ledger(caminho_banco)
    ledger.notificacoes.marcar_como_vistas()

    aba_lista, aba_nova = st.tabs(["📋 Solicitações", "➕ Nova"])

    with aba_nova:
        render_form_solicitacao(ledger, por_admin=True, key="admin_sol")

    with aba_lista:
        filtro = st.multiselect(
            "Status", list(_ROTULOS), default=["pendente", "aceita", "em_andamento"], format_func=_ROTULOS.get
        )
        df = ledger.solicitacoes_repo.listar_df()
        if filtro and not df.empty:
            df = df[df["status"].isin(filtro)]
        if df.empty:
            st.info("ℹ️ Nenhuma solicitação encontrada.")
            return
        st.dataframe(
            df_moeda(df.drop(columns=["id"]), ["taxas", "repasse"], ["data"]),
            use_container_width=True,
            hide_index=True,
        )

        ids = df["id"].tolist()
        sel = st.selectbox(
            "Solicitação",
            ids,
            format_func=lambda sid: f"{df.loc[df['id'] == sid, 'codigo'].iloc[0]} - {df.loc[df['id'] == sid, 'cliente'].iloc[0]}",
        )
        sol = ledger.solicitacoes.obter(sel) if sel else None
        if sol is None:
            return

        st.markdown(
            f"### {sol.codigo} · {_ROTULOS.get(sol.status, sol.status)}\n"
            f"Cliente: **{sol.cliente_nome}** · Entregador: **{sol.entregador_nome or '—'}** · "
            f"Taxas: **{formatar_moeda(sol.valor_total_taxas)}** · Repasse: **{formatar_moeda(sol.valor_total_repasse)}**"
        )
        if sol.justificativa:
            st.caption(f"Justificativa: {sol.justificativa}")
        _acoes_status(ledger, sol)

        with st.expander("🗑️ Excluir solicitação"):
            if st.button("Excluir definitivamente", key=f"excluir_{sol.id}"):
                ledger.solicitacoes.excluir_solicitacao(sol.id)
                st.rerun()


__all__ = ["render"]
