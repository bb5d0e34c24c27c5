"""
Página Financeiro do Cliente
============================

Saldo (créditos − débitos) e extrato de movimentações do cliente pré-pago,
com filtros por tipo e período.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from levaetras_pages.common import df_moeda, obter_ledger
from repository.types import TIPO_CREDITO, TIPO_DEBITO
from utils.utils import formatar_moeda

_TIPOS = {"todos": "Todos", TIPO_CREDITO: "Crédito", TIPO_DEBITO: "Débito"}


def render(caminho_banco: str, usuario: Optional[Dict[str, Any]] = None) -> None:
    ledger = obter_ledger(caminho_banco)
    cliente = ledger.clientes_repo.obter(usuario["id"]) if usuario else None
    if cliente is None:
        st.warning("⚠️ Cliente não encontrado para o usuário atual.")
        return

    st.caption("Consulte seu saldo e extrato de movimentações.")
    saldo = ledger.transacoes_repo.saldo_cliente(cliente["nome"])
    st.metric("Saldo atual", formatar_moeda(saldo))
    if saldo < 0:
        st.error("Saldo negativo: faça uma recarga para novas solicitações.")

    c1, c2, c3 = st.columns(3)
    with c1:
        tipo = st.selectbox("Tipo", list(_TIPOS), format_func=_TIPOS.get)
    with c2:
        inicio = st.date_input("De", value=None)
    with c3:
        fim = st.date_input("Até", value=None)

    df = ledger.transacoes_repo.extrato_df(cliente["nome"], tipo=tipo, data_inicio=inicio, data_fim=fim)
    if df.empty:
        st.info("Nenhuma transação encontrada.")
        return
    df["tipo"] = df["tipo"].map(_TIPOS.get)
    st.dataframe(
        df_moeda(df.drop(columns=["valor_assinado"]), ["valor"], ["data"]),
        use_container_width=True,
        hide_index=True,
    )


__all__ = ["render"]
