"""
Página Inicial do Cliente: últimas solicitações e pedido de nova entrega
(criada como `pendente`, aguardando o admin).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from levaetras_pages.common import df_moeda, obter_ledger
from levaetras_pages.solicitacoes.form_solicitacao import render_form_solicitacao


def render(caminho_banco: str, usuario: Optional[Dict[str, Any]] = None) -> None:
    ledger = obter_ledger(caminho_banco)
    cliente = ledger.clientes_repo.obter(usuario["id"]) if usuario else None
    if cliente is None:
        st.warning("⚠️ Cliente não encontrado para o usuário atual.")
        return

    st.subheader("📦 Últimas solicitações")
    recentes = ledger.solicitacoes.solicitacoes_do_cliente(cliente["id"])[:5]
    if recentes:
        df = ledger.solicitacoes_repo.listar_df()
        df = df[df["id"].isin([s.id for s in recentes])]
        st.dataframe(
            df_moeda(df[["codigo", "status", "data", "rotas", "taxas"]], ["taxas"], ["data"]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("ℹ️ Você ainda não fez solicitações.")

    st.subheader("➕ Nova solicitação")
    render_form_solicitacao(ledger, cliente=cliente, por_admin=False, key="cliente_sol")


__all__ = ["render"]
