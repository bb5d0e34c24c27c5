"""
Módulo Storage (Shared)
=======================

Armazenamento chave-valor onde cada coleção do LevaETras é gravada como um
documento JSON (`app_faturas`, `app_solicitacoes`, ...).

Funcionalidades principais
--------------------------
- `KeyValueStore`: contrato mínimo `get` / `set` / `delete` por chave string.
- `SQLiteKeyValueStore`: tabela `kv_store` no SQLite do projeto.
- `MemoryKeyValueStore`: dicionário em memória (testes e demonstrações).
- `load_from_storage` / `save_to_storage`: (de)serialização JSON tolerante a
  falhas. Erros são logados e nunca propagados ao chamador.

Observações
-----------
- Datas são gravadas como texto ISO; a conversão de volta é feita pelo
  `parse` de cada repositório.
- Gravação é "best effort": não há transação entre coleções.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, TypeVar

from shared.db import conn_ctx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStore:
    """Contrato do armazenamento chave-valor (valores já serializados em texto)."""

    def get(self, chave: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, chave: str, valor: str) -> None:
        raise NotImplementedError

    def delete(self, chave: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Store em memória."""

    def __init__(self, inicial: Optional[Dict[str, str]] = None) -> None:
        self._dados: Dict[str, str] = dict(inicial or {})

    def get(self, chave: str) -> Optional[str]:
        return self._dados.get(chave)

    def set(self, chave: str, valor: str) -> None:
        self._dados[chave] = valor

    def delete(self, chave: str) -> None:
        self._dados.pop(chave, None)

    def __contains__(self, chave: object) -> bool:
        return chave in self._dados


class SQLiteKeyValueStore(KeyValueStore):
    """
    Store persistido na tabela `kv_store` (uma linha por chave).

    Parâmetros:
        db_path (str): Caminho do arquivo SQLite.
    """

    def __init__(self, db_path: Any) -> None:
        self.db_path = db_path
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Cria `kv_store` se não existir (idempotente)."""
        with conn_ctx(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    chave         TEXT PRIMARY KEY,
                    valor         TEXT NOT NULL,
                    atualizado_em TEXT NOT NULL
                );
                """
            )

    def get(self, chave: str) -> Optional[str]:
        with conn_ctx(self.db_path) as conn:
            row = conn.execute("SELECT valor FROM kv_store WHERE chave = ?", (chave,)).fetchone()
        return row["valor"] if row else None

    def set(self, chave: str, valor: str) -> None:
        with conn_ctx(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (chave, valor, atualizado_em)
                VALUES (?, ?, ?)
                ON CONFLICT(chave) DO UPDATE SET
                    valor = excluded.valor,
                    atualizado_em = excluded.atualizado_em
                """,
                (chave, valor, datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            )

    def delete(self, chave: str) -> None:
        with conn_ctx(self.db_path) as conn:
            conn.execute("DELETE FROM kv_store WHERE chave = ?", (chave,))

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SQLiteKeyValueStore db_path={self.db_path!r}>"


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Tipo não serializável: {type(obj).__name__}")


def load_from_storage(
    store: KeyValueStore,
    chave: str,
    default: T,
    parse: Optional[Callable[[Any], T]] = None,
) -> T:
    """
    Lê e decodifica o JSON da `chave`.

    Retorna `default` quando a chave não existe ou quando o conteúdo/`parse`
    falha (o erro é logado).
    """
    try:
        bruto = store.get(chave)
        if not bruto:
            return default
        dados = json.loads(bruto)
        return parse(dados) if parse else dados
    except Exception:
        logger.exception("Erro ao carregar %s do armazenamento; usando valor padrão", chave)
        return default


def save_to_storage(store: KeyValueStore, chave: str, valor: Any) -> bool:
    """Serializa `valor` em JSON e grava na `chave`. Retorna False se falhar (logado)."""
    try:
        store.set(chave, json.dumps(valor, default=_json_default, ensure_ascii=False))
        return True
    except Exception:
        logger.exception("Erro ao salvar %s no armazenamento", chave)
        return False


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "load_from_storage",
    "save_to_storage",
]
