"""
Módulo Base (Repositório)
=========================

Define `ColecaoRepository`, base dos repositórios do LevaETras. Cada
repositório é dono de uma coleção gravada como um único documento JSON no
armazenamento chave-valor (`app_faturas`, `app_clients`, ...).

Funcionalidades principais
--------------------------
- Carga na construção (`load_from_storage`), com padrão quando a chave não
  existe ou o conteúdo está corrompido.
- Mutação por cópia-e-troca da coleção inteira (`substituir`), seguida de
  gravação imediata (`save_to_storage`).
- Busca/atualização/remoção por `id` com política de no-op quando o registro
  não existe (logado em nível warning).
- `listar_df` para consumo direto pelas páginas.

Detalhes técnicos
-----------------
- Itens podem ser dataclasses (com `from_dict`/`to_dict`) ou dicts simples;
  as subclasses definem `_parse_item` e `_dump_item`.
- Um item inválido no JSON é descartado (logado) sem derrubar a coleção.
- Sem controle de concorrência: último a gravar vence.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

import pandas as pd

from shared.storage import KeyValueStore, load_from_storage, save_to_storage

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _id_de(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("id") or "")
    return str(getattr(item, "id", "") or "")


class ColecaoRepository(Generic[T]):
    """
    Repositório de uma coleção persistida em uma chave do store.

    Parâmetros:
        store (KeyValueStore): Armazenamento chave-valor.
        padrao (list | None): Itens iniciais quando a chave ainda não existe.
    """

    CHAVE: str = ""

    def __init__(self, store: KeyValueStore, padrao: Optional[List[Any]] = None) -> None:
        self.store = store
        if padrao is None:
            padrao = self._padrao()
        self._itens: List[T] = load_from_storage(
            store,
            self.CHAVE,
            [self._parse_item(p) for p in padrao],
            parse=self._parse_lista,
        )

    # ------------------------------------------------------------------
    # (De)serialização: sobrescrever nas subclasses
    # ------------------------------------------------------------------
    def _padrao(self) -> List[Any]:
        return []

    def _parse_item(self, dados: Any) -> T:
        return dict(dados)  # type: ignore[return-value]

    def _dump_item(self, item: T) -> Dict[str, Any]:
        return dict(item)  # type: ignore[arg-type]

    def _parse_lista(self, dados: Any) -> List[T]:
        if not isinstance(dados, list):
            raise TypeError(f"{self.CHAVE}: esperado uma lista, recebido {type(dados).__name__}")
        itens: List[T] = []
        for bruto in dados:
            try:
                itens.append(self._parse_item(bruto))
            except (TypeError, ValueError, AttributeError):
                logger.exception("%s: registro inválido descartado: %r", self.CHAVE, bruto)
        return itens

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    @property
    def itens(self) -> List[T]:
        """Lista atual (mesma referência até a próxima mutação)."""
        return self._itens

    def listar(self) -> List[T]:
        return list(self._itens)

    def obter(self, item_id: str) -> Optional[T]:
        for item in self._itens:
            if _id_de(item) == item_id:
                return item
        return None

    def listar_df(self) -> pd.DataFrame:
        """Coleção como DataFrame (colunas no formato gravado)."""
        return pd.DataFrame([self._dump_item(i) for i in self._itens])

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------
    def substituir(self, novos: List[T]) -> List[T]:
        """Troca a coleção inteira e persiste."""
        self._itens = novos
        self._persistir()
        return self._itens

    def _persistir(self) -> None:
        save_to_storage(self.store, self.CHAVE, [self._dump_item(i) for i in self._itens])

    def adicionar(self, item: T, no_inicio: bool = False) -> T:
        self.substituir([item, *self._itens] if no_inicio else [*self._itens, item])
        return item

    def atualizar(self, item_id: str, alterar: Callable[[T], T]) -> Optional[T]:
        """
        Aplica `alterar` ao item `item_id` e persiste.

        Retorno:
            O item alterado, ou `None` (coleção intacta) se o id não existir.
        """
        atual = self.obter(item_id)
        if atual is None:
            logger.warning("%s: id %s não encontrado; nada alterado", self.CHAVE, item_id)
            return None
        novo = alterar(atual)
        self.substituir([novo if _id_de(i) == item_id else i for i in self._itens])
        return novo

    def remover(self, item_id: str) -> bool:
        if self.obter(item_id) is None:
            logger.warning("%s: id %s não encontrado; nada removido", self.CHAVE, item_id)
            return False
        self.substituir([i for i in self._itens if _id_de(i) != item_id])
        return True

    def __len__(self) -> int:
        return len(self._itens)


__all__ = ["ColecaoRepository"]
