"""
Formulário de nova solicitação (admin e cliente).

Cada rota escolhe o bairro de destino; a taxa vem do bairro. O admin cria a
solicitação já `aceita`, o cliente cria `pendente`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import streamlit as st

from services.ledger.service_ledger import LedgerService
from shared.debug_trace import debug_wrap_ctx
from utils.utils import formatar_moeda, parse_moeda


def render_form_solicitacao(
    ledger: LedgerService,
    cliente: Optional[Dict[str, Any]] = None,
    por_admin: bool = True,
    key: str = "nova_sol",
) -> None:
    clientes = ledger.clientes_repo.listar()
    bairros = ledger.settings_repo.bairros.listar()
    metodos = ledger.settings_repo.metodos_habilitados()
    if not bairros:
        st.info("ℹ️ Cadastre bairros antes de criar solicitações.")
        return

    n_rotas = int(st.number_input("Quantidade de rotas", min_value=1, max_value=10, value=1, key=f"{key}_n"))

    with st.form(f"form_{key}"):
        if cliente is None:
            idx = st.selectbox(
                "Cliente",
                list(range(len(clientes))),
                format_func=lambda i: f"{clientes[i]['nome']} ({clientes[i].get('modalidade', '')})",
            )
            escolhido = clientes[idx] if idx is not None else None
        else:
            escolhido = cliente
            st.markdown(f"**Cliente:** {cliente['nome']}")

        ponto_coleta = st.text_input("Ponto de coleta")
        descricao = st.text_input("Descrição da operação", value="Coletar na loja e entregar ao cliente")

        rotas: List[Dict[str, Any]] = []
        for i in range(n_rotas):
            st.markdown(f"**Rota {i + 1}**")
            c1, c2, c3 = st.columns([3, 2, 2])
            with c1:
                b_idx = st.selectbox(
                    "Bairro",
                    list(range(len(bairros))),
                    format_func=lambda j: f"{bairros[j]['nome']} ({formatar_moeda(bairros[j]['taxa'])})",
                    key=f"{key}_bairro_{i}",
                )
                responsavel = st.text_input("Responsável", key=f"{key}_resp_{i}")
            with c2:
                telefone = st.text_input("Telefone", key=f"{key}_tel_{i}")
                extra = st.text_input("Valor a receber (repasse)", value="0,00", key=f"{key}_extra_{i}")
            with c3:
                formas = st.multiselect(
                    "Formas aceitas",
                    [m["id"] for m in metodos],
                    format_func=lambda mid: next((m["name"] for m in metodos if m["id"] == mid), mid),
                    key=f"{key}_formas_{i}",
                )
                obs = st.text_input("Observações", key=f"{key}_obs_{i}")
            valor_extra = parse_moeda(extra)
            rotas.append(
                {
                    "bairroDestinoId": bairros[b_idx]["id"],
                    "responsavel": responsavel,
                    "telefone": telefone,
                    "observacoes": obs,
                    "valorExtra": valor_extra if valor_extra > 0 else None,
                    "receberDoCliente": valor_extra > 0,
                    "formasPagamentoAceitas": formas,
                }
            )

        enviado = st.form_submit_button("💾 Criar Solicitação")

    if enviado:
        if escolhido is None:
            st.error("❗ Selecione um cliente.")
            return
        with debug_wrap_ctx("Erro ao criar solicitação"):
            sol = ledger.solicitacoes.adicionar_solicitacao(
                {
                    "clienteId": escolhido["id"],
                    "clienteNome": escolhido["nome"],
                    "clienteAvatar": escolhido.get("avatar") or "",
                    "tipoOperacao": "coleta",
                    "operationDescription": descricao,
                    "pontoColeta": ponto_coleta,
                    "rotas": rotas,
                },
                por_admin=por_admin,
            )
            st.success(f"✅ Solicitação {sol.codigo} criada ({formatar_moeda(sol.valor_total_taxas)} em taxas).")


__all__ = ["render_form_solicitacao"]
