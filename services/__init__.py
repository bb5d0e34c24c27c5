"""
Pacote Services
===============

Camada de serviços de domínio do LevaETras.

Subpacotes e módulos
--------------------
- ledger ......... conciliação, faturas e solicitações (fachada `LedgerService`).
- notificacoes ... contagem de solicitações pendentes não vistas.
"""

from __future__ import annotations

from . import ledger, notificacoes

__all__ = ["ledger", "notificacoes"]
