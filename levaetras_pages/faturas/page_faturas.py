"""
Página de Faturas (admin)
=========================

Resumo de valores pendentes, lista de faturas por status e, para a fatura
selecionada: entregas, histórico, pagamentos (taxa / repasse), fechamento,
entregas manuais e exclusão.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from levaetras_pages.common import df_moeda, obter_ledger
from repository.types import (
    FATURA_ABERTA,
    FATURA_FECHADA,
    FATURA_FINALIZADA,
    FATURA_PAGA,
    FATURA_VENCIDA,
    REPASSE_REPASSADO,
    TAXAS_PAGA,
    Fatura,
)
from services.ledger.service_ledger import LedgerService
from shared.debug_trace import debug_wrap_ctx
from utils.utils import formatar_data, formatar_moeda, parse_moeda

_STATUS = [FATURA_ABERTA, FATURA_FECHADA, FATURA_PAGA, FATURA_VENCIDA, FATURA_FINALIZADA]


def _detalhe(ledger: LedgerService, fatura: Fatura) -> None:
    final = ledger.faturas.valor_final(fatura)
    c1, c2, c3 = st.columns(3)
    c1.metric("Taxas", formatar_moeda(fatura.valor_taxas), fatura.status_taxas)
    c2.metric("Repasse", formatar_moeda(fatura.valor_repasse), fatura.status_repasse)
    c3.metric("Valor final", formatar_moeda(final), "a repassar" if final >= 0 else "a receber")
    st.caption(
        f"Emissão {formatar_data(fatura.data_emissao)} · Vencimento {formatar_data(fatura.data_vencimento)} · "
        f"{fatura.total_entregas} entrega(s) · {fatura.tipo_faturamento}"
    )

    entregas = pd.DataFrame(
        [
            {
                "data": e.data,
                "descricao": e.descricao,
                "entregador": e.entregador_nome,
                "taxa": e.taxa_entrega,
                "extras": sum(t.valor for t in e.taxas_extras),
                "repasse": e.valor_repasse,
            }
            for e in fatura.entregas
        ]
    )
    if not entregas.empty:
        st.dataframe(df_moeda(entregas, ["taxa", "extras", "repasse"], ["data"]), use_container_width=True, hide_index=True)

    with st.expander("🕓 Histórico"):
        for h in fatura.historico:
            st.write(f"{h.data:%d/%m/%Y %H:%M} · **{h.acao}**" + (f" · {h.detalhes}" if h.detalhes else ""))

    detalhes = st.text_input("Detalhes do pagamento", key=f"det_{fatura.id}")
    b1, b2, b3 = st.columns(3)
    with b1:
        if st.button("💰 Registrar pagamento da taxa", disabled=fatura.status_taxas == TAXAS_PAGA, key=f"pt_{fatura.id}"):
            with debug_wrap_ctx("Erro ao registrar pagamento"):
                ledger.registrar_pagamento_taxa(fatura.id, detalhes)
                st.rerun()
    with b2:
        if st.button(
            "🔁 Registrar repasse",
            disabled=fatura.status_repasse == REPASSE_REPASSADO or fatura.valor_repasse == 0,
            key=f"pr_{fatura.id}",
        ):
            with debug_wrap_ctx("Erro ao registrar repasse"):
                ledger.registrar_pagamento_repasse(fatura.id, detalhes)
                st.rerun()
    with b3:
        if st.button("🔒 Fechar fatura", disabled=fatura.status_geral != FATURA_ABERTA, key=f"fc_{fatura.id}"):
            with debug_wrap_ctx("Erro ao fechar fatura"):
                ledger.faturas.fechar_fatura(fatura.id, detalhes or None)
                st.rerun()

    with st.expander("➕ Entrega manual"):
        with st.form(f"form_entrega_{fatura.id}"):
            descricao = st.text_input("Descrição")
            entregador = st.text_input("Entregador")
            taxa = st.text_input("Taxa", value="0,00")
            extra_nome = st.text_input("Taxa extra (nome)")
            extra_valor = st.text_input("Taxa extra (valor)", value="0,00")
            repasse = st.text_input("Repasse", value="0,00")
            if st.form_submit_button("Adicionar"):
                extras = [{"nome": extra_nome, "valor": parse_moeda(extra_valor)}] if extra_nome else []
                with debug_wrap_ctx("Erro ao adicionar entrega"):
                    ledger.faturas.adicionar_entrega(
                        fatura.id,
                        {
                            "descricao": descricao,
                            "entregadorNome": entregador,
                            "taxaEntrega": taxa,
                            "taxasExtras": extras,
                            "valorRepasse": repasse,
                        },
                    )
                    st.rerun()
        if fatura.entregas:
            alvo = st.selectbox(
                "Remover entrega",
                [e.id for e in fatura.entregas],
                format_func=lambda eid: next(e.descricao for e in fatura.entregas if e.id == eid),
                key=f"rm_sel_{fatura.id}",
            )
            if st.button("🗑️ Remover entrega", key=f"rm_{fatura.id}"):
                ledger.faturas.remover_entrega(fatura.id, alvo)
                st.rerun()

    with st.expander("🗑️ Excluir fatura"):
        if st.button("Excluir definitivamente", key=f"del_{fatura.id}"):
            ledger.faturas.excluir_fatura(fatura.id)
            st.rerun()


def render(caminho_banco: str) -> None:
    ledger = obter_ledger(caminho_banco)
    ledger.atualizar_vencidas()

    resumo = ledger.faturas.resumo()
    c1, c2, c3 = st.columns(3)
    c1.metric("Taxas a receber", formatar_moeda(resumo["taxas_pendentes"]))
    c2.metric("Repasses a fazer", formatar_moeda(resumo["repasses_pendentes"]))
    c3.metric("Faturas vencidas", int(resumo["vencidas"]))

    filtro = st.multiselect("Status", _STATUS, default=[FATURA_ABERTA, FATURA_FECHADA, FATURA_PAGA, FATURA_VENCIDA])
    df = ledger.faturas_repo.listar_df()
    if filtro and not df.empty:
        df = df[df["status"].isin(filtro)]
    if df.empty:
        st.info("ℹ️ Nenhuma fatura encontrada.")
        return

    st.dataframe(
        df_moeda(df.drop(columns=["id"]), ["valor_taxas", "valor_repasse"], ["emissao", "vencimento"]),
        use_container_width=True,
        hide_index=True,
    )
    sel = st.selectbox(
        "Fatura",
        df["id"].tolist(),
        format_func=lambda fid: f"{df.loc[df['id'] == fid, 'numero'].iloc[0]} - {df.loc[df['id'] == fid, 'cliente'].iloc[0]}",
    )
    fatura = ledger.faturas.obter_fatura(sel) if sel else None
    if fatura is not None:
        st.markdown(f"### {fatura.numero} · {fatura.status_geral}")
        _detalhe(ledger, fatura)


__all__ = ["render"]
