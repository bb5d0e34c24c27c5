# shared/debug_trace.py
"""
Proteção de handlers de UI (botões/forms do Streamlit).

Uso rápido
----------
    from shared.debug_trace import debug_wrap

    @debug_wrap("Erro ao registrar pagamento")
    def on_click():
        ...

    with debug_wrap_ctx("Erro ao concluir solicitação"):
        ...

- Regras de negócio (`RegraDeNegocioError`) viram `st.error(mensagem)` e não
  são relançadas: é o caminho normal de exibição para o usuário.
- Qualquer outra exceção é logada com traceback, exibida e **re-lançada**.
"""

from __future__ import annotations

import logging
import traceback
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional, TypeVar

from shared.errors import RegraDeNegocioError

__all__ = ["debug_wrap", "debug_wrap_ctx"]

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _mostrar(titulo: str, mensagem: str, tb: Optional[str] = None) -> None:
    try:
        import streamlit as st

        st.error(f"{titulo}: {mensagem}" if mensagem else titulo)
        if tb:
            st.code(tb)
    except Exception:
        # sem frontend do Streamlit
        pass


def debug_wrap(titulo: str = "Erro no handler") -> Callable[[Callable[..., R]], Callable[..., Optional[R]]]:
    """Decorator: exibe regras violadas; loga, exibe e re-lança o resto."""

    def deco(fn: Callable[..., R]) -> Callable[..., Optional[R]]:
        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Optional[R]:
            with debug_wrap_ctx(titulo):
                return fn(*args, **kwargs)
            return None

        return wrapper

    return deco


@contextmanager
def debug_wrap_ctx(titulo: str = "Erro no handler") -> Generator[None, None, None]:
    """Context manager equivalente ao `debug_wrap`."""
    try:
        yield
    except RegraDeNegocioError as e:
        logger.info("%s: %s", titulo, e.mensagem)
        _mostrar(titulo, e.mensagem)
    except Exception:
        logger.exception(titulo)
        _mostrar(titulo, "", traceback.format_exc())
        raise
