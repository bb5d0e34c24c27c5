"""
Pacote Ledger
=============

Regras de negócio do faturamento do LevaETras, um módulo por assunto:

- service_ledger_conciliacao .. classificação e completude da conciliação
- service_ledger_fatura ....... faturas (entregas, pagamentos, status)
- service_ledger_solicitacao .. solicitações (estados e conclusão)
- service_ledger .............. fachada `LedgerService`

Uso recomendado (fora deste pacote):
    from services.ledger.service_ledger import LedgerService
"""

# Exponha somente a fachada pública
from .service_ledger import LedgerService

__all__ = ["LedgerService"]
