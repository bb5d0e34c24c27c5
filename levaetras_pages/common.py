"""
Helpers comuns às páginas do LevaETras.

- `obter_ledger`: uma `LedgerService` por sessão do Streamlit.
- `df_moeda`: formata colunas monetárias de um DataFrame para exibição.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd
import streamlit as st

from services.ledger.service_ledger import LedgerService
from utils.utils import formatar_data, formatar_moeda


def obter_ledger(caminho_banco: str) -> LedgerService:
    """LedgerService da sessão (recriada se o banco mudar)."""
    atual = st.session_state.get("_ledger")
    if atual is None or atual.db_path != caminho_banco:
        atual = LedgerService(caminho_banco)
        st.session_state["_ledger"] = atual
    return atual


def df_moeda(df: pd.DataFrame, colunas_moeda: Iterable[str] = (), colunas_data: Iterable[str] = ()) -> pd.DataFrame:
    """Cópia do DataFrame com moeda em `R$ 1.234,56` e datas em `dd/mm/aaaa`."""
    out = df.copy()
    for col in colunas_moeda:
        if col in out.columns:
            out[col] = out[col].map(formatar_moeda)
    for col in colunas_data:
        if col in out.columns:
            out[col] = out[col].map(formatar_data)
    return out


__all__ = ["obter_ledger", "df_moeda"]
