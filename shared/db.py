"""
Módulo DB (Shared)
==================

Conexão SQLite usada pelo armazenamento chave-valor do LevaETras.

Funcionalidades principais
--------------------------
- `get_conn`: abre conexões já configuradas (PRAGMAs do projeto).
- `conn_ctx`: context manager que faz commit/rollback e **fecha** a conexão.

Detalhes técnicos
-----------------
- `journal_mode = WAL` e `busy_timeout = 30000 ms` (evita *database is locked*).
- `foreign_keys = ON`, `synchronous = NORMAL`.
- `row_factory = sqlite3.Row`: acesso às colunas por nome.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from utils.utils import resolve_db_path


def get_conn(db_path_like: Any) -> sqlite3.Connection:
    """
    Abre uma conexão SQLite pronta para uso.

    Args:
        db_path_like (Any): caminho (str/PathLike) ou objeto com atributo
            `db_path`, `caminho_banco` ou `database`.

    Returns:
        sqlite3.Connection: conexão aberta. O chamador é responsável por fechá-la.
    """
    db_path = resolve_db_path(db_path_like)

    conn = sqlite3.connect(db_path, timeout=30)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA busy_timeout=30000;")
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def conn_ctx(db_path_like: Any) -> Iterator[sqlite3.Connection]:
    """Abre, faz commit (ou rollback em erro) e fecha a conexão."""
    conn = get_conn(db_path_like)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


__all__ = ["get_conn", "conn_ctx"]
