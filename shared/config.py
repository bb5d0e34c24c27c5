"""
Configuração do LevaETras.

Valores fixos das regras de faturamento e caminho padrão do banco SQLite
(sobrescrevível pela variável de ambiente `LEVAETRAS_DB_PATH`).
"""

from __future__ import annotations

import os

DB_PATH_PADRAO = os.path.join("data", "levaetras_data.db")

# Regras de negócio
DIAS_VENCIMENTO_FATURA = 30
EPS_MOEDA = 0.01  # tolerância para comparar valores em reais
CODIGO_SOLICITACAO_BASE = 1000


def caminho_banco() -> str:
    """Caminho do banco (env `LEVAETRAS_DB_PATH` ou `data/levaetras_data.db`)."""
    return os.environ.get("LEVAETRAS_DB_PATH") or DB_PATH_PADRAO


__all__ = [
    "DB_PATH_PADRAO",
    "DIAS_VENCIMENTO_FATURA",
    "EPS_MOEDA",
    "CODIGO_SOLICITACAO_BASE",
    "caminho_banco",
]
