# services/ledger/service_ledger_solicitacao.py
"""
Service: SOLICITAÇÕES (ciclo de vida + efeitos da conclusão)

Regras principais:
- Criação: `aceita` quando feita pelo admin, `pendente` quando feita pelo
  cliente; código `SOL-<1000+n>` gerado uma vez; rotas ganham id e, sem taxa
  informada, a taxa do bairro de destino.
- Totais derivados: `valor_total_taxas` = Σ taxa_entrega, `valor_total_repasse`
  = Σ valor_extra (recalculados sempre que as rotas mudam).
- Máquina de estados:
    pendente → aceita → em_andamento → concluida
    pendente | aceita → cancelada
    pendente → rejeitada
  Outras mudanças levantam `TransicaoInvalidaError`; cancelar/rejeitar exige
  justificativa (`JustificativaObrigatoriaError`).
- Taxa de rota conciliada é imutável (`TaxaImutavelError`).
- Conclusão (`concluir_solicitacao`):
    • cliente pré-pago → 1 débito `delivery_fee` de `valor_total_taxas`.
    • cliente faturado com conciliação → classifica e lança na fatura.
    • faturado sem conciliação → nada lançado (logado); a UI bloqueia antes
      via `pode_concluir`.
- Solicitação inexistente → no-op (logado), retorno `None`.

Dependências:
- SolicitacoesRepository, SettingsRepository (taxas de bairro e formas de conciliação)
- ServiceLedgerFatura, TransacoesRepository, ClientesRepository (conclusão)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from repository.clientes_repository import ClientesRepository
from repository.settings_repository import SettingsRepository
from repository.solicitacoes_repository import SolicitacoesRepository
from repository.transacoes_repository import TransacoesRepository
from repository.types import (
    MODALIDADE_FATURADO,
    MODALIDADE_PRE_PAGO,
    STATUS_ACEITA,
    STATUS_COM_JUSTIFICATIVA,
    STATUS_CONCLUIDA,
    STATUS_EM_ANDAMENTO,
    STATUS_PENDENTE,
    TIPO_DEBITO,
    TRANSICOES_SOLICITACAO,
    ConciliacaoData,
    Fatura,
    FormaPagamentoConciliacao,
    Rota,
    Solicitacao,
    Transacao,
)
from services.ledger.service_ledger_conciliacao import (
    ClassificacaoConciliacao,
    classificar_pagamentos,
    conciliacao_completa,
    conciliacao_das_rotas,
)
from services.ledger.service_ledger_fatura import ServiceLedgerFatura
from shared.config import EPS_MOEDA
from shared.errors import JustificativaObrigatoriaError, TaxaImutavelError, TransicaoInvalidaError
from shared.ids import avatar_url, novo_id, proximo_codigo_solicitacao, sanitize
from utils.utils import arredondar_moeda, moeda_igual

logger = logging.getLogger(__name__)

# Campos que não mudam depois da criação (nem por `atualizar_solicitacao`)
_CAMPOS_FIXOS = {"id", "codigo", "dataSolicitacao", "status"}

EFEITO_DEBITO_PRE_PAGO = "debito_pre_pago"
EFEITO_FATURA = "fatura"
EFEITO_SEM_IMPACTO = "sem_impacto"
EFEITO_SEM_CONCILIACAO = "sem_conciliacao"
EFEITO_SEM_CLIENTE = "sem_cliente"


@dataclass
class DetalhesStatus:
    """Dados que acompanham uma mudança de status."""
    justificativa: Optional[str] = None
    entregador: Optional[Mapping[str, Any]] = None
    cliente: Optional[Mapping[str, Any]] = None
    conciliacao: Optional[ConciliacaoData] = None
    formas_pagamento: Optional[List[FormaPagamentoConciliacao]] = None


@dataclass
class ResultadoConclusao:
    """Efeitos produzidos pela conclusão de uma solicitação.

    Attributes:
        solicitacao: Solicitação concluída (`None` se o id não existe).
        efeitos: Marcadores `EFEITO_*` na ordem em que ocorreram.
        transacao: Débito lançado (cliente pré-pago).
        classificacao: Resultado da conciliação (cliente faturado).
        fatura: Fatura criada/atualizada.
    """
    solicitacao: Optional[Solicitacao]
    efeitos: List[str] = field(default_factory=list)
    transacao: Optional[Transacao] = None
    classificacao: Optional[ClassificacaoConciliacao] = None
    fatura: Optional[Fatura] = None


def calcular_totais(solicitacao: Solicitacao) -> Solicitacao:
    """Nova solicitação com `valor_total_taxas` e `valor_total_repasse` derivados das rotas."""
    return replace(
        solicitacao,
        valor_total_taxas=arredondar_moeda(sum(r.taxa_entrega for r in solicitacao.rotas)),
        valor_total_repasse=arredondar_moeda(sum(r.repasse for r in solicitacao.rotas)),
    )


class ServiceLedgerSolicitacao:
    """Ledger de solicitações de entrega."""

    def __init__(
        self,
        solicitacoes_repo: SolicitacoesRepository,
        settings_repo: Optional[SettingsRepository] = None,
        fatura_ledger: Optional[ServiceLedgerFatura] = None,
        transacoes_repo: Optional[TransacoesRepository] = None,
        clientes_repo: Optional[ClientesRepository] = None,
        agora: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.solicitacoes_repo = solicitacoes_repo
        self.settings_repo = settings_repo
        self.fatura_ledger = fatura_ledger
        self.transacoes_repo = transacoes_repo
        self.clientes_repo = clientes_repo
        self.agora = agora

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def listar(self) -> List[Solicitacao]:
        return self.solicitacoes_repo.listar()

    def obter(self, solicitacao_id: str) -> Optional[Solicitacao]:
        return self.solicitacoes_repo.obter(solicitacao_id)

    def por_status(self, *status: str) -> List[Solicitacao]:
        return [s for s in self.solicitacoes_repo.itens if s.status in status]

    def solicitacoes_do_cliente(self, cliente_id: str) -> List[Solicitacao]:
        return [s for s in self.solicitacoes_repo.itens if s.cliente_id == cliente_id]

    def tarefas_do_entregador(self, entregador_id: str) -> Dict[str, List[Solicitacao]]:
        """Tarefas ativas do entregador: `aceita` (a iniciar) e `em_andamento`."""
        minhas = [s for s in self.solicitacoes_repo.itens if s.entregador_id == entregador_id]
        return {
            STATUS_ACEITA: [s for s in minhas if s.status == STATUS_ACEITA],
            STATUS_EM_ANDAMENTO: [s for s in minhas if s.status == STATUS_EM_ANDAMENTO],
        }

    # ------------------------------------------------------------------
    # Rotas
    # ------------------------------------------------------------------
    def _taxa_do_bairro(self, bairro_id: str) -> float:
        if self.settings_repo is None:
            return 0.0
        return self.settings_repo.taxa_do_bairro(bairro_id)

    def _preparar_rotas(self, rotas: Iterable[Any]) -> List[Rota]:
        preparadas: List[Rota] = []
        for bruta in rotas or []:
            if isinstance(bruta, Rota):
                rota = bruta
            else:
                rota = Rota.from_dict(bruta)
                if bruta.get("taxaEntrega") in (None, ""):
                    rota = replace(rota, taxa_entrega=self._taxa_do_bairro(rota.bairro_destino_id))
            if not rota.id:
                rota = replace(rota, id=novo_id())
            preparadas.append(rota)
        return preparadas

    @staticmethod
    def _checar_taxas_imutaveis(atual: Solicitacao, novas: List[Rota]) -> None:
        if atual.conciliacao is None:
            return
        anteriores = {r.id: r for r in atual.rotas}
        for rota in novas:
            antiga = anteriores.get(rota.id)
            if antiga is not None and not moeda_igual(antiga.taxa_entrega, rota.taxa_entrega, EPS_MOEDA):
                raise TaxaImutavelError(rota.id)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def adicionar_solicitacao(self, dados: Mapping[str, Any], por_admin: bool = True) -> Solicitacao:
        """
        Cria uma solicitação (no topo da lista).

        Parâmetros:
            dados: Campos no formato gravado (`clienteId`, `clienteNome`, `rotas`...).
            por_admin: True → `aceita`; False (cliente) → `pendente`.
        """
        base = {k: v for k, v in dados.items() if k not in _CAMPOS_FIXOS and k != "rotas"}
        sol = Solicitacao.from_dict(base)
        sol = replace(
            sol,
            id=novo_id(),
            codigo=proximo_codigo_solicitacao(self.solicitacoes_repo.codigos(), len(self.solicitacoes_repo)),
            data_solicitacao=self.agora(),
            status=STATUS_ACEITA if por_admin else STATUS_PENDENTE,
            cliente_avatar=sol.cliente_avatar or avatar_url(sol.cliente_nome),
            rotas=self._preparar_rotas(dados.get("rotas") or []),
        )
        sol = calcular_totais(sol)
        self.solicitacoes_repo.adicionar(sol, no_inicio=True)
        logger.info(
            "Solicitação %s criada para %s (%s, %d rota(s), taxas=%.2f)",
            sol.codigo, sol.cliente_nome, sol.status, len(sol.rotas), sol.valor_total_taxas,
        )
        return sol

    def atualizar_solicitacao(self, solicitacao_id: str, dados: Mapping[str, Any]) -> Optional[Solicitacao]:
        """
        Mescla `dados` na solicitação. Id, código, data e status não mudam aqui.
        Rotas removidas perdem sua entrada na conciliação salva.

        Levanta:
            TaxaImutavelError: taxa de rota alterada depois da conciliação.
        """
        atual = self.solicitacoes_repo.obter(solicitacao_id)
        if atual is None:
            logger.warning("Solicitação %s não encontrada; nada alterado", solicitacao_id)
            return None

        novas_rotas = self._preparar_rotas(dados["rotas"]) if "rotas" in dados else atual.rotas
        self._checar_taxas_imutaveis(atual, novas_rotas)

        campos = {k: v for k, v in dados.items() if k not in _CAMPOS_FIXOS and k != "rotas"}

        def _merge(s: Solicitacao) -> Solicitacao:
            novo = replace(Solicitacao.from_dict({**s.to_dict(), **campos}), rotas=novas_rotas)
            if novo.conciliacao is not None:
                novo = replace(novo, conciliacao=conciliacao_das_rotas(novo, novo.conciliacao))
            return calcular_totais(novo)

        return self.solicitacoes_repo.atualizar(solicitacao_id, _merge)

    def excluir_solicitacao(self, solicitacao_id: str) -> bool:
        return self.solicitacoes_repo.remover(solicitacao_id)

    def atualizar_conciliacao(self, solicitacao_id: str, conciliacao: ConciliacaoData) -> Optional[Solicitacao]:
        return self.solicitacoes_repo.atualizar(solicitacao_id, lambda s: replace(s, conciliacao=conciliacao))

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def _aplicar_status(
        self, solicitacao_id: str, novo_status: str, detalhes: Optional[DetalhesStatus]
    ) -> Optional[Solicitacao]:
        detalhes = detalhes or DetalhesStatus()
        atual = self.solicitacoes_repo.obter(solicitacao_id)
        if atual is None:
            logger.warning("Solicitação %s não encontrada; status não alterado", solicitacao_id)
            return None

        if novo_status not in TRANSICOES_SOLICITACAO.get(atual.status, set()):
            raise TransicaoInvalidaError(atual.status, novo_status)
        justificativa = sanitize(detalhes.justificativa)
        if novo_status in STATUS_COM_JUSTIFICATIVA and not justificativa:
            raise JustificativaObrigatoriaError(novo_status)

        def _mudar(s: Solicitacao) -> Solicitacao:
            novo = replace(s, status=novo_status)
            if justificativa:
                novo = replace(novo, justificativa=justificativa)
            if detalhes.entregador:
                ent = detalhes.entregador
                novo = replace(
                    novo,
                    entregador_id=str(ent.get("id") or "") or None,
                    entregador_nome=ent.get("nome"),
                    entregador_avatar=ent.get("avatar") or avatar_url(ent.get("nome")),
                )
            if detalhes.conciliacao is not None:
                novo = replace(novo, conciliacao=detalhes.conciliacao)
            return novo

        sol = self.solicitacoes_repo.atualizar(solicitacao_id, _mudar)
        logger.debug("Solicitação %s: %s → %s", atual.codigo, atual.status, novo_status)
        return sol

    def atualizar_status(
        self, solicitacao_id: str, novo_status: str, detalhes: Optional[DetalhesStatus] = None
    ) -> Optional[Solicitacao]:
        """
        Muda o status respeitando a máquina de estados.

        A conclusão é delegada a `concluir` (lançamentos financeiros); use-o
        diretamente para obter o `ResultadoConclusao`.
        """
        if novo_status == STATUS_CONCLUIDA:
            return self.concluir(solicitacao_id, detalhes).solicitacao
        return self._aplicar_status(solicitacao_id, novo_status, detalhes)

    def _cliente_de(self, solicitacao: Solicitacao, detalhes: DetalhesStatus) -> Optional[Mapping[str, Any]]:
        if detalhes.cliente is not None:
            return detalhes.cliente
        if self.clientes_repo is not None:
            return self.clientes_repo.obter(solicitacao.cliente_id)
        return None

    def _formas(self, detalhes: DetalhesStatus) -> Optional[List[FormaPagamentoConciliacao]]:
        if detalhes.formas_pagamento is not None:
            return detalhes.formas_pagamento
        if self.settings_repo is not None:
            return self.settings_repo.listar_formas_conciliacao()
        return None

    def concluir(self, solicitacao_id: str, detalhes: Optional[DetalhesStatus] = None) -> ResultadoConclusao:
        """Conclui usando os colaboradores injetados neste ledger."""
        detalhes = detalhes or DetalhesStatus()
        atual = self.solicitacoes_repo.obter(solicitacao_id)
        cliente = self._cliente_de(atual, detalhes) if atual else None
        return concluir_solicitacao(
            self,
            self.fatura_ledger,
            self.transacoes_repo,
            solicitacao_id,
            cliente=cliente,
            detalhes=replace(detalhes, formas_pagamento=self._formas(detalhes)),
        )

    def pode_concluir(
        self,
        solicitacao: Solicitacao,
        cliente: Optional[Mapping[str, Any]] = None,
        formas: Optional[List[FormaPagamentoConciliacao]] = None,
    ) -> bool:
        """
        True se a solicitação pode ir para `concluida` agora.

        Cliente faturado exige conciliação completa salva na solicitação.
        """
        if STATUS_CONCLUIDA not in TRANSICOES_SOLICITACAO.get(solicitacao.status, set()):
            return False
        cliente = cliente if cliente is not None else self._cliente_de(solicitacao, DetalhesStatus())
        if cliente and cliente.get("modalidade") == MODALIDADE_FATURADO:
            formas = formas if formas is not None else self._formas(DetalhesStatus())
            return conciliacao_completa(solicitacao, solicitacao.conciliacao, formas)
        return True


# =====================================================================
# Orquestração da conclusão
# =====================================================================
def concluir_solicitacao(
    solicitacoes: ServiceLedgerSolicitacao,
    faturas: Optional[ServiceLedgerFatura],
    transacoes: Optional[TransacoesRepository],
    solicitacao_id: str,
    cliente: Optional[Mapping[str, Any]] = None,
    detalhes: Optional[DetalhesStatus] = None,
) -> ResultadoConclusao:
    """
    Conclui a solicitação e executa, em ordem, os lançamentos financeiros.

    Sequência:
        1) status → `concluida` (regras da máquina de estados);
        2) pré-pago → débito da taxa no livro de transações;
        3) faturado com conciliação e formas → classificação + fatura.

    Retorno:
        ResultadoConclusao descrevendo o que foi feito.
    """
    detalhes = detalhes or DetalhesStatus()
    modalidade = (cliente or {}).get("modalidade")
    if modalidade == MODALIDADE_PRE_PAGO and transacoes is None:
        raise RuntimeError("Livro de transações não configurado para cliente pré-pago.")
    if modalidade == MODALIDADE_FATURADO and faturas is None:
        raise RuntimeError("Ledger de faturas não configurado para cliente faturado.")

    sol = solicitacoes._aplicar_status(solicitacao_id, STATUS_CONCLUIDA, detalhes)
    resultado = ResultadoConclusao(solicitacao=sol)
    if sol is None:
        return resultado

    if cliente is None:
        logger.warning("%s concluída sem cliente identificado; nenhum lançamento", sol.codigo)
        resultado.efeitos.append(EFEITO_SEM_CLIENTE)
        return resultado

    if modalidade == MODALIDADE_PRE_PAGO:
        resultado.transacao = transacoes.add_transaction(
            type=TIPO_DEBITO,
            origin="delivery_fee",
            description=f"Taxa da entrega {sol.codigo}",
            value=sol.valor_total_taxas,
            client_name=sol.cliente_nome,
            client_avatar=sol.cliente_avatar,
            date=solicitacoes.agora(),
        )
        resultado.efeitos.append(EFEITO_DEBITO_PRE_PAGO)
        return resultado

    if modalidade == MODALIDADE_FATURADO:
        conciliacao = conciliacao_das_rotas(sol, sol.conciliacao)
        formas = detalhes.formas_pagamento
        if not conciliacao or formas is None:
            logger.warning("%s concluída sem conciliação; fatura não alterada", sol.codigo)
            resultado.efeitos.append(EFEITO_SEM_CONCILIACAO)
            return resultado
        resultado.classificacao = classificar_pagamentos(conciliacao, formas)
        resultado.fatura = faturas.adicionar_entrega_a_fatura(sol, resultado.classificacao)
        resultado.efeitos.append(EFEITO_FATURA if resultado.fatura is not None else EFEITO_SEM_IMPACTO)
        return resultado

    logger.warning("%s: modalidade desconhecida %r; nenhum lançamento", sol.codigo, modalidade)
    return resultado


__all__ = [
    "ServiceLedgerSolicitacao",
    "DetalhesStatus",
    "ResultadoConclusao",
    "concluir_solicitacao",
    "calcular_totais",
    "EFEITO_DEBITO_PRE_PAGO",
    "EFEITO_FATURA",
    "EFEITO_SEM_IMPACTO",
    "EFEITO_SEM_CONCILIACAO",
    "EFEITO_SEM_CLIENTE",
]
