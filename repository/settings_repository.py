"""
Módulo Configurações (Repositório)
==================================

Agrupa as coleções de configuração do LevaETras, cada uma em sua chave:

- `app_regions` / `app_bairros` ...... regiões e bairros (com taxa de entrega)
- `app_payment_methods` .............. métodos de pagamento (habilitado ou não)
- `app_formas_pagamento_conciliacao` . formas usadas na conciliação e sua ação
- `app_users` / `app_cargos` ......... usuários e cargos (permissões)
- `app_categories` ................... categorias de receitas/despesas

Regras
------
- Excluir uma região remove também seus bairros.
- Excluir um cargo em uso por algum usuário levanta `CargoEmUsoError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from repository.base_repository import ColecaoRepository
from repository.types import (
    ACAO_GERAR_CREDITO_REPASSE,
    ACAO_GERAR_DEBITO_TAXA,
    ACAO_NENHUMA,
    ALLOWED_ACOES,
    FormaPagamentoConciliacao,
)
from shared.errors import CargoEmUsoError
from shared.ids import avatar_url, novo_id, sanitize
from shared.storage import KeyValueStore, load_from_storage, save_to_storage
from utils.utils import parse_moeda

logger = logging.getLogger(__name__)

TIPOS_CATEGORIA = ("receitas", "despesas")

PERMISSOES = [
    "dashboard:view",
    "solicitacoes:view",
    "solicitacoes:create",
    "solicitacoes:edit",
    "solicitacoes:manage_status",
    "clientes:view",
    "clientes:create",
    "clientes:edit",
    "entregadores:view",
    "entregadores:create",
    "entregadores:edit",
    "entregas:view",
    "financeiro:view",
    "faturas:view",
    "faturas:manage",
    "settings:view",
    "settings:edit",
]


# =====================================================================
# Valores iniciais
# =====================================================================
def _regioes_padrao() -> List[Dict[str, Any]]:
    return [
        {"id": "zona-sul", "name": "Zona Sul"},
        {"id": "zona-norte", "name": "Zona Norte"},
        {"id": "zona-oeste", "name": "Zona Oeste"},
        {"id": "zona-leste", "name": "Zona Leste"},
        {"id": "centro", "name": "Centro"},
    ]


def _bairros_padrao() -> List[Dict[str, Any]]:
    return [
        {"id": "bairro-copacabana", "nome": "Copacabana", "taxa": 7.00, "regionId": "zona-sul"},
        {"id": "bairro-ipanema", "nome": "Ipanema", "taxa": 8.50, "regionId": "zona-sul"},
        {"id": "bairro-tijuca", "nome": "Tijuca", "taxa": 6.00, "regionId": "zona-norte"},
        {"id": "bairro-barra", "nome": "Barra da Tijuca", "taxa": 12.00, "regionId": "zona-oeste"},
        {"id": "bairro-tatuape", "nome": "Tatuapé", "taxa": 9.00, "regionId": "zona-leste"},
        {"id": "bairro-se", "nome": "Sé", "taxa": 5.00, "regionId": "centro"},
    ]


def _metodos_padrao() -> List[Dict[str, Any]]:
    return [
        {"id": "pm-pix", "name": "Pix", "enabled": True, "description": "Pagamentos instantâneos via Pix."},
        {"id": "pm-cartao", "name": "Cartão de Crédito", "enabled": False, "description": "Visa, Mastercard, etc. (requer gateway)."},
        {"id": "pm-dinheiro", "name": "Dinheiro na Entrega", "enabled": True, "description": "Pagamento em espécie ao entregador."},
    ]


def _formas_conciliacao_padrao() -> List[Dict[str, Any]]:
    return [
        {"id": "pix-levaetras", "nome": "PIX Leva e Trás", "acaoFaturamento": ACAO_NENHUMA},
        {"id": "dinheiro-levaetras", "nome": "Dinheiro Leva e Trás", "acaoFaturamento": ACAO_NENHUMA},
        {"id": "faturar-taxa", "nome": "Faturar Taxa (Pago pela Loja)", "acaoFaturamento": ACAO_GERAR_DEBITO_TAXA},
        {"id": "repassar-valor", "nome": "Repassar Valor (Recebido pela Leva e Trás)", "acaoFaturamento": ACAO_GERAR_CREDITO_REPASSE},
        {"id": "pix-loja", "nome": "PIX Loja (Resolvido)", "acaoFaturamento": ACAO_NENHUMA},
    ]


def _cargos_padrao() -> List[Dict[str, Any]]:
    return [
        {
            "id": "admin-master",
            "name": "Administrador Master",
            "description": "Acesso total a todas as funcionalidades do sistema.",
            "permissions": list(PERMISSOES),
        },
        {
            "id": "gerente-logistica",
            "name": "Gerente de Logística",
            "description": "Gerencia solicitações e entregadores, mas não tem acesso ao financeiro.",
            "permissions": [
                "dashboard:view", "solicitacoes:view", "solicitacoes:create", "solicitacoes:edit",
                "solicitacoes:manage_status", "clientes:view", "entregadores:view",
                "entregadores:create", "entregadores:edit", "entregas:view",
            ],
        },
    ]


def _usuarios_padrao() -> List[Dict[str, Any]]:
    return [
        {"id": "admin-1", "nome": "Ricardo Martins", "email": "ricardo@empresa.com", "role": "admin",
         "cargoId": "admin-master", "avatar": avatar_url("Ricardo Martins")},
        {"id": "admin-2", "nome": "Ana Silva", "email": "ana.silva@empresa.com", "role": "admin",
         "cargoId": "gerente-logistica", "avatar": avatar_url("Ana Silva")},
        {"id": "entregador-1", "nome": "Carlos Souza", "email": "carlos.souza@entregas.com", "role": "entregador",
         "avatar": avatar_url("Carlos Souza")},
        {"id": "client-1", "nome": "Padaria Pão Quente", "email": "padaria@email.com", "role": "cliente",
         "avatar": avatar_url("Padaria")},
        {"id": "client-2", "nome": "Restaurante Sabor Divino", "email": "restaurante@email.com", "role": "cliente",
         "avatar": avatar_url("Restaurante")},
    ]


def _categorias_padrao() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "receitas": [
            {"id": "cat-taxa-entrega", "name": "Taxa de Entrega"},
            {"id": "cat-venda-produtos", "name": "Venda de Produtos"},
        ],
        "despesas": [
            {"id": "cat-combustivel", "name": "Combustível"},
            {"id": "cat-manutencao", "name": "Manutenção"},
            {"id": "cat-alimentacao", "name": "Alimentação"},
        ],
    }


# =====================================================================
# Coleções
# =====================================================================
class _ColecaoConfig(ColecaoRepository[Dict[str, Any]]):
    """Coleção de dicts com chave definida na instância."""

    def __init__(self, store: KeyValueStore, chave: str, padrao: List[Dict[str, Any]]) -> None:
        self.CHAVE = chave
        super().__init__(store, padrao)


class _FormasConciliacao(ColecaoRepository[FormaPagamentoConciliacao]):
    CHAVE = "app_formas_pagamento_conciliacao"

    def _padrao(self) -> List[Any]:
        return _formas_conciliacao_padrao()

    def _parse_item(self, dados: Any) -> FormaPagamentoConciliacao:
        if isinstance(dados, FormaPagamentoConciliacao):
            return dados
        return FormaPagamentoConciliacao.from_dict(dados)

    def _dump_item(self, item: FormaPagamentoConciliacao) -> Dict[str, Any]:
        return item.to_dict()


class SettingsRepository:
    """
    Configurações do sistema (somente leitura para o núcleo de faturamento).

    Parâmetros:
        store (KeyValueStore): Armazenamento chave-valor.
    """

    CHAVE_CATEGORIAS = "app_categories"

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.regioes = _ColecaoConfig(store, "app_regions", _regioes_padrao())
        self.bairros = _ColecaoConfig(store, "app_bairros", _bairros_padrao())
        self.metodos_pagamento = _ColecaoConfig(store, "app_payment_methods", _metodos_padrao())
        self.formas_conciliacao = _FormasConciliacao(store)
        self.usuarios = _ColecaoConfig(store, "app_users", _usuarios_padrao())
        self.cargos = _ColecaoConfig(store, "app_cargos", _cargos_padrao())
        self._categorias: Dict[str, List[Dict[str, Any]]] = load_from_storage(
            store, self.CHAVE_CATEGORIAS, _categorias_padrao()
        )

    # ------------- regiões / bairros -------------

    def adicionar_regiao(self, nome: str) -> Dict[str, Any]:
        return self.regioes.adicionar({"id": novo_id(), "name": sanitize(nome)})

    def atualizar_regiao(self, regiao_id: str, nome: str) -> Optional[Dict[str, Any]]:
        return self.regioes.atualizar(regiao_id, lambda r: {**r, "name": sanitize(nome)})

    def excluir_regiao(self, regiao_id: str) -> None:
        """Remove a região e, em cascata, os bairros dela."""
        self.regioes.remover(regiao_id)
        restantes = [b for b in self.bairros.itens if b.get("regionId") != regiao_id]
        if len(restantes) != len(self.bairros):
            self.bairros.substituir(restantes)

    def adicionar_bairro(self, nome: str, taxa: Any, regiao_id: str) -> Dict[str, Any]:
        bairro = {"id": novo_id(), "nome": sanitize(nome), "taxa": parse_moeda(taxa), "regionId": regiao_id}
        return self.bairros.adicionar(bairro)

    def atualizar_bairro(self, bairro_id: str, nome: str, taxa: Any, regiao_id: str) -> Optional[Dict[str, Any]]:
        return self.bairros.atualizar(
            bairro_id,
            lambda b: {**b, "nome": sanitize(nome), "taxa": parse_moeda(taxa), "regionId": regiao_id},
        )

    def excluir_bairro(self, bairro_id: str) -> bool:
        return self.bairros.remover(bairro_id)

    def taxa_do_bairro(self, bairro_id: str) -> float:
        """Taxa configurada do bairro (0 se o bairro não existir)."""
        bairro = self.bairros.obter(bairro_id)
        return parse_moeda(bairro.get("taxa")) if bairro else 0.0

    # ------------- métodos de pagamento -------------

    def adicionar_metodo_pagamento(self, nome: str, descricao: str = "") -> Dict[str, Any]:
        return self.metodos_pagamento.adicionar(
            {"id": novo_id(), "name": sanitize(nome), "description": descricao, "enabled": True}
        )

    def atualizar_metodo_pagamento(self, metodo_id: str, nome: str, descricao: str = "") -> Optional[Dict[str, Any]]:
        return self.metodos_pagamento.atualizar(
            metodo_id, lambda m: {**m, "name": sanitize(nome), "description": descricao}
        )

    def alternar_metodo_pagamento(self, metodo_id: str) -> Optional[Dict[str, Any]]:
        return self.metodos_pagamento.atualizar(metodo_id, lambda m: {**m, "enabled": not m.get("enabled", False)})

    def excluir_metodo_pagamento(self, metodo_id: str) -> bool:
        return self.metodos_pagamento.remover(metodo_id)

    def metodos_habilitados(self) -> List[Dict[str, Any]]:
        return [m for m in self.metodos_pagamento.itens if m.get("enabled")]

    # ------------- formas de pagamento (conciliação) -------------

    def listar_formas_conciliacao(self) -> List[FormaPagamentoConciliacao]:
        return self.formas_conciliacao.listar()

    def adicionar_forma_conciliacao(self, nome: str, acao_faturamento: str) -> FormaPagamentoConciliacao:
        if acao_faturamento not in ALLOWED_ACOES:
            raise ValueError(f"Ação de faturamento inválida: {acao_faturamento!r}")
        forma = FormaPagamentoConciliacao(id=novo_id(), nome=sanitize(nome), acao_faturamento=acao_faturamento)
        return self.formas_conciliacao.adicionar(forma)

    def atualizar_forma_conciliacao(
        self, forma_id: str, nome: Optional[str] = None, acao_faturamento: Optional[str] = None
    ) -> Optional[FormaPagamentoConciliacao]:
        if acao_faturamento is not None and acao_faturamento not in ALLOWED_ACOES:
            raise ValueError(f"Ação de faturamento inválida: {acao_faturamento!r}")

        def _merge(f: FormaPagamentoConciliacao) -> FormaPagamentoConciliacao:
            return FormaPagamentoConciliacao(
                id=f.id,
                nome=sanitize(nome) if nome is not None else f.nome,
                acao_faturamento=acao_faturamento or f.acao_faturamento,
            )

        return self.formas_conciliacao.atualizar(forma_id, _merge)

    def excluir_forma_conciliacao(self, forma_id: str) -> bool:
        return self.formas_conciliacao.remover(forma_id)

    # ------------- usuários / cargos -------------

    def adicionar_usuario(self, dados: Dict[str, Any]) -> Dict[str, Any]:
        nome = sanitize(dados.get("nome"))
        usuario = {**dados, "id": novo_id(), "nome": nome, "avatar": avatar_url(nome)}
        return self.usuarios.adicionar(usuario)

    def atualizar_usuario(self, usuario_id: str, dados: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        dados = {k: v for k, v in dados.items() if k not in ("id", "avatar")}

        def _merge(u: Dict[str, Any]) -> Dict[str, Any]:
            novo = {**u, **dados}
            novo["avatar"] = avatar_url(novo.get("nome"))
            return novo

        return self.usuarios.atualizar(usuario_id, _merge)

    def excluir_usuario(self, usuario_id: str) -> bool:
        return self.usuarios.remover(usuario_id)

    def adicionar_cargo(self, dados: Dict[str, Any]) -> Dict[str, Any]:
        return self.cargos.adicionar({**dados, "id": novo_id()})

    def atualizar_cargo(self, cargo_id: str, dados: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        dados = {k: v for k, v in dados.items() if k != "id"}
        return self.cargos.atualizar(cargo_id, lambda c: {**c, **dados})

    def excluir_cargo(self, cargo_id: str) -> bool:
        """Remove o cargo. Levanta `CargoEmUsoError` se algum usuário o utiliza."""
        if any(u.get("cargoId") == cargo_id for u in self.usuarios.itens):
            raise CargoEmUsoError(cargo_id)
        return self.cargos.remover(cargo_id)

    def permissoes_do_usuario(self, usuario_id: str) -> List[str]:
        usuario = self.usuarios.obter(usuario_id)
        if not usuario or not usuario.get("cargoId"):
            return []
        cargo = self.cargos.obter(usuario["cargoId"])
        return list(cargo.get("permissions") or []) if cargo else []

    # ------------- categorias -------------

    @property
    def categorias(self) -> Dict[str, List[Dict[str, Any]]]:
        return self._categorias

    def _salvar_categorias(self, novas: Dict[str, List[Dict[str, Any]]]) -> None:
        self._categorias = novas
        save_to_storage(self.store, self.CHAVE_CATEGORIAS, novas)

    def _checar_tipo(self, tipo: str) -> None:
        if tipo not in TIPOS_CATEGORIA:
            raise ValueError(f"Tipo de categoria inválido: {tipo!r}")

    def adicionar_categoria(self, tipo: str, nome: str) -> Dict[str, Any]:
        self._checar_tipo(tipo)
        categoria = {"id": novo_id(), "name": sanitize(nome)}
        self._salvar_categorias({**self._categorias, tipo: [*self._categorias.get(tipo, []), categoria]})
        return categoria

    def atualizar_categoria(self, tipo: str, categoria_id: str, nome: str) -> None:
        self._checar_tipo(tipo)
        itens = [
            {**c, "name": sanitize(nome)} if c.get("id") == categoria_id else c
            for c in self._categorias.get(tipo, [])
        ]
        self._salvar_categorias({**self._categorias, tipo: itens})

    def excluir_categoria(self, tipo: str, categoria_id: str) -> None:
        self._checar_tipo(tipo)
        itens = [c for c in self._categorias.get(tipo, []) if c.get("id") != categoria_id]
        self._salvar_categorias({**self._categorias, tipo: itens})


__all__ = ["SettingsRepository", "PERMISSOES", "TIPOS_CATEGORIA"]
