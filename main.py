"""
LevaETras — Main App
====================

Ponto de entrada do aplicativo Streamlit do LevaETras (back-office de
entregas: solicitações, conciliação e faturas).

Execução:
    streamlit run main.py
"""

from __future__ import annotations

import importlib
import inspect
import logging
import os

import streamlit as st

from levaetras_pages.common import obter_ledger
from shared.config import caminho_banco as _caminho_banco

logging.basicConfig(
    level=os.environ.get("LEVAETRAS_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ======================================================================================
# Configuração inicial da página
# ======================================================================================
st.set_page_config(page_title="LevaETras", layout="wide")

caminho_banco = _caminho_banco()
os.makedirs(os.path.dirname(caminho_banco) or ".", exist_ok=True)

ledger = obter_ledger(caminho_banco)


# ======================================================================================
# Estado de sessão
# ======================================================================================
if "usuario_logado" not in st.session_state:
    st.session_state.usuario_logado = None
if "pagina_atual" not in st.session_state:
    st.session_state.pagina_atual = None


# ======================================================================================
# Rotas por papel
# ======================================================================================
ROTAS = {
    "admin": {
        "📋 Solicitações": "levaetras_pages.solicitacoes.page_solicitacoes",
        "🧾 Faturas": "levaetras_pages.faturas.page_faturas",
    },
    "cliente": {
        "🏠 Início": "levaetras_pages.cliente.page_inicio",
        "💰 Financeiro": "levaetras_pages.cliente.page_financeiro",
    },
    "entregador": {
        "🚚 Minhas Entregas": "levaetras_pages.entregador.page_entregas",
    },
}


def _call_page(module_path: str) -> None:
    """
    Importa o módulo indicado e chama sua função `render`.

    Fornece `caminho_banco` e `usuario` quando a função aceitar esses parâmetros.
    """
    try:
        mod = importlib.import_module(module_path)
    except ImportError as e:
        st.error(f"Falha ao importar módulo '{module_path}': {e}")
        return

    fn = getattr(mod, "render", None)
    if not callable(fn):
        st.warning(f"O módulo '{module_path}' não possui função `render`.")
        return

    known = {"caminho_banco": caminho_banco, "usuario": st.session_state.usuario_logado}
    kwargs = {name: known[name] for name in inspect.signature(fn).parameters if name in known}
    fn(**kwargs)


# ======================================================================================
# LOGIN (seleção de usuário cadastrado)
# ======================================================================================
if not st.session_state.usuario_logado:
    st.title("🔐 Entrar")
    usuarios = ledger.settings_repo.usuarios.listar()

    with st.form("form_login"):
        idx = st.selectbox(
            "Usuário",
            list(range(len(usuarios))),
            format_func=lambda i: f"{usuarios[i]['nome']} ({usuarios[i].get('role', '')})",
        )
        submitted = st.form_submit_button("Entrar")

        if submitted and idx is not None:
            st.session_state.usuario_logado = usuarios[idx]
            st.session_state.pagina_atual = None
            st.rerun()
    st.stop()


# ======================================================================================
# Sidebar: usuário + navegação
# ======================================================================================
usuario = st.session_state.usuario_logado
papel = usuario.get("role", "admin")
rotas = dict(ROTAS.get(papel, {}))
if papel == "admin" and "faturas:view" not in ledger.settings_repo.permissoes_do_usuario(usuario["id"]):
    rotas.pop("🧾 Faturas", None)

st.sidebar.markdown(f"👤 **{usuario['nome']}**\n🔐 Papel: `{papel}`")

if st.sidebar.button("🚪 Sair", use_container_width=True):
    st.session_state.usuario_logado = None
    st.session_state.pagina_atual = None
    st.rerun()

st.sidebar.markdown("---")
st.sidebar.markdown("## 🧭 Menu de Navegação")

for rotulo in rotas:
    texto = rotulo
    if papel == "admin" and rotulo == "📋 Solicitações":
        novas = ledger.notificacoes.contagem_nao_vistas()
        if novas:
            texto = f"{rotulo} 🔴 {novas}"
    if st.sidebar.button(texto, use_container_width=True, key=f"nav_{rotulo}"):
        st.session_state.pagina_atual = rotulo
        st.rerun()

if st.session_state.pagina_atual not in rotas:
    st.session_state.pagina_atual = next(iter(rotas), None)


# ======================================================================================
# Título principal + roteamento
# ======================================================================================
if st.session_state.pagina_atual is None:
    st.warning("Nenhuma página disponível para este usuário.")
    st.stop()

st.title(st.session_state.pagina_atual)
_call_page(rotas[st.session_state.pagina_atual])
