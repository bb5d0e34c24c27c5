"""
Pacote LevaETras Pages
======================

Páginas Streamlit do LevaETras, roteadas por `main.py` conforme o papel do
usuário.

Subpacotes
----------
- faturas ......... faturas dos clientes faturados (admin)
- solicitacoes .... solicitações, status e conciliação (admin)
- cliente ......... início e financeiro do cliente
- entregador ...... tarefas do entregador

⚠️ Não importa submódulos aqui: cada página importa Streamlit e o ledger.
   Use `importlib` (como o `main.py`) ou importe o módulo da página diretamente.
"""

__all__ = []
