"""
Pacote Shared
=============

Componentes de infraestrutura usados em todo o LevaETras.

Submódulos
----------
- config ...... caminho do banco e constantes de faturamento
- db .......... conexão SQLite (`get_conn`, `conn_ctx`)
- storage ..... armazenamento chave-valor e (de)serialização JSON
- ids ......... ids, códigos `SOL-*` / `FAT-*`, sanitização
- errors ...... exceções de regra de negócio
- debug_trace . proteção de handlers da UI
"""

from shared.db import get_conn
from shared.ids import novo_id, sanitize
from shared.storage import (
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
    load_from_storage,
    save_to_storage,
)

__all__ = [
    "get_conn",
    "novo_id",
    "sanitize",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "load_from_storage",
    "save_to_storage",
]
