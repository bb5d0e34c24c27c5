"""
Módulo Utils
============

Funções utilitárias de uso geral no LevaETras.

Inclui:
- Moeda: formatação BR (`formatar_moeda`), leitura de texto digitado
  (`parse_moeda`), arredondamento financeiro (`arredondar_moeda`) e
  comparação com tolerância (`moeda_igual`).
- Datas: `coerce_data` (date) e `parse_datetime` (ISO → datetime).
- Infra: `resolve_db_path`.

Observações
-----------
- `parse_moeda` é o único ponto de conversão de texto em valor monetário:
  conciliação, formulários e páginas usam a mesma regra.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from types import SimpleNamespace
from typing import Any, Optional

logger = logging.getLogger(__name__)

_EPS_PADRAO = 0.01
_ESPACOS_RE = re.compile(r"\s+")


# -----------------------------------------------------------------------------
# Moeda
# -----------------------------------------------------------------------------
def _to_decimal(valor) -> Decimal:
    """Converte `valor` para Decimal, retornando 0 em caso de falha."""
    if isinstance(valor, Decimal):
        return valor
    try:
        return Decimal(str(valor))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def formatar_moeda(valor) -> str:
    """
    Formata um valor numérico no padrão BR: `R$ 1.234,56`.
    """
    v = _to_decimal(valor).quantize(Decimal("0.01"))
    s = f"{v:,.2f}"
    s = s.replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {s}"


def parse_moeda(valor: Any) -> float:
    """
    Converte um valor monetário digitado (pt-BR) em float.

    Regras
    ------
    - Números (int/float/Decimal) passam direto.
    - Texto: remove `R$` e espaços, remove `.` (separador de milhar) e troca
      a vírgula decimal por ponto.
    - Vazio, None ou texto não numérico → 0 (logado em nível debug).

    Exemplos
    --------
    >>> parse_moeda("R$ 1.234,56")
    1234.56
    >>> parse_moeda("abc")
    0.0
    """
    if isinstance(valor, bool):
        return 0.0
    if isinstance(valor, (int, float, Decimal)):
        return float(valor)
    if not isinstance(valor, str) or not valor.strip():
        return 0.0

    txt = valor.replace("R$", "")
    txt = _ESPACOS_RE.sub("", txt)
    txt = txt.replace(".", "").replace(",", ".", 1)
    try:
        dec = Decimal(txt)
    except (InvalidOperation, ValueError):
        dec = None
    if dec is None or not dec.is_finite():
        logger.debug("Valor monetário inválido %r; usando 0", valor)
        return 0.0
    return float(dec)


def arredondar_moeda(valor) -> float:
    """Arredonda para centavos (`ROUND_HALF_UP`) e devolve float."""
    return float(_to_decimal(valor).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def moeda_igual(a, b, eps: float = _EPS_PADRAO) -> bool:
    """True se |a - b| <= eps (absorve arredondamento de ponto flutuante)."""
    return abs(float(a or 0) - float(b or 0)) <= eps + 1e-9


# -----------------------------------------------------------------------------
# Datas
# -----------------------------------------------------------------------------
def coerce_data(value=None) -> date:
    """
    Normaliza 'value' para datetime.date.
    Aceita: None, date, datetime, 'YYYY-MM-DD', 'DD/MM/YYYY', 'DD-MM-YYYY'.
    Se vier vazio/None, retorna a data de hoje.
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y"):
            try:
                return datetime.strptime(value.strip()[:10], fmt).date()
            except ValueError:
                continue
    raise ValueError(f"Data inválida: {value!r}")


def parse_datetime(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
    """
    Converte texto ISO (como gravado no armazenamento) em datetime.

    Aceita o sufixo `Z` do JavaScript; datas com fuso são convertidas para
    horário local ingênuo. Valores inválidos retornam `default`.
    """
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    txt = str(value).strip()
    if txt.endswith("Z"):
        txt = txt[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(txt)
    except ValueError:
        logger.debug("Data inválida %r; usando padrão", value)
        return default
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def formatar_data(value: Any, fmt: str = "%d/%m/%Y") -> str:
    dt = parse_datetime(value)
    return dt.strftime(fmt) if dt else ""


# -----------------------------------------------------------------------------
# Infra
# -----------------------------------------------------------------------------
def resolve_db_path(obj) -> str:
    """
    Normaliza o 'caminho do banco' aceitando string/Path/objetos de config.
    Levanta TypeError se não conseguir resolver.
    """
    if obj is None:
        raise TypeError("Caminho do banco não informado.")

    if isinstance(obj, (str, os.PathLike)):
        return str(obj)

    if isinstance(obj, SimpleNamespace) or hasattr(obj, "__dict__"):
        for key in ("db_path", "caminho_banco", "database"):
            if hasattr(obj, key):
                return str(getattr(obj, key))

    raise TypeError(f"expected str, bytes or os.PathLike object, got {type(obj).__name__}")
