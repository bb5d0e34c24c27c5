"""
Pacote utils
============

Reexporta utilitários comuns do LevaETras para facilitar imports.
"""

from .utils import (
    formatar_moeda,
    parse_moeda,
    arredondar_moeda,
    moeda_igual,
    coerce_data,
    parse_datetime,
    formatar_data,
    resolve_db_path,
)

__all__ = [
    "formatar_moeda",
    "parse_moeda",
    "arredondar_moeda",
    "moeda_igual",
    "coerce_data",
    "parse_datetime",
    "formatar_data",
    "resolve_db_path",
]
