# shared/ids.py
"""
Módulo IDs (Shared)
===================

Geradores de identificadores e códigos legíveis do LevaETras.

Funcionalidades principais
--------------------------
- `novo_id`: UUID4 em texto (ids de registros, pagamentos, histórico).
- `proximo_codigo_solicitacao`: código sequencial `SOL-<1000+n>`.
- `proximo_numero_fatura`: número sequencial por ano `FAT-<ano>-<seq>`.
- `avatar_url`: avatar de iniciais (DiceBear) a partir do nome.
- Sanitização de textos (`sanitize`).

Detalhes técnicos
-----------------
- Códigos são gerados uma única vez, na criação; nunca são recalculados.
- A sequência considera o maior código já existente, de modo que excluir
  registros não gera códigos repetidos.
"""

from __future__ import annotations

import re
import unicodedata
import uuid
from typing import Any, Iterable

from shared.config import CODIGO_SOLICITACAO_BASE

_CTRL_RE = re.compile(r"[\x00-\x1F\x7F]")
_SOL_RE = re.compile(r"^SOL-(\d+)$")
_FAT_RE = re.compile(r"^FAT-(\d{4})-(\d+)$")


def _to_str(x: Any) -> str:
    """Converte para string segura (None -> ''), normaliza Unicode e remove controles."""
    if x is None:
        return ""
    s = unicodedata.normalize("NFKC", str(x))
    return _CTRL_RE.sub("", s)


def sanitize(s: Any) -> str:
    """Trim simples + normalização Unicode."""
    return _to_str(s).strip()


def novo_id() -> str:
    return str(uuid.uuid4())


def proximo_codigo_solicitacao(codigos_existentes: Iterable[str], total_existente: int = 0) -> str:
    """
    Próximo código `SOL-<1000+n>`.

    `n` é a posição na ordem de criação (`total_existente + 1`), avançando além
    do maior código já usado quando houver exclusões.
    """
    maior = CODIGO_SOLICITACAO_BASE
    for codigo in codigos_existentes:
        m = _SOL_RE.match(sanitize(codigo))
        if m:
            maior = max(maior, int(m.group(1)))
    proximo = max(CODIGO_SOLICITACAO_BASE + total_existente + 1, maior + 1)
    return f"SOL-{proximo}"


def proximo_numero_fatura(numeros_existentes: Iterable[str], ano: int) -> str:
    """Próximo número `FAT-<ano>-<seq:04d>`; a sequência reinicia a cada ano."""
    maior = 0
    for numero in numeros_existentes:
        m = _FAT_RE.match(sanitize(numero))
        if m and int(m.group(1)) == int(ano):
            maior = max(maior, int(m.group(2)))
    return f"FAT-{int(ano)}-{maior + 1:04d}"


def avatar_url(nome: Any) -> str:
    """Avatar de iniciais (DiceBear), espaços viram '+'."""
    seed = re.sub(r"\s", "+", sanitize(nome))
    return f"https://api.dicebear.com/7.x/initials/svg?seed={seed}"


__all__ = [
    "sanitize",
    "novo_id",
    "proximo_codigo_solicitacao",
    "proximo_numero_fatura",
    "avatar_url",
]
