# services/ledger/service_ledger_fatura.py
"""
Service: FATURAS (entregas conciliadas → fatura do cliente faturado)

Regras principais:
- Totais são SEMPRE derivados das entregas (`recalcular_totais`):
    • valor_taxas    = Σ (taxa_entrega + Σ taxas_extras.valor)
    • valor_repasse  = Σ valor_repasse
    • total_entregas = nº de entregas
- Uma fatura `Aberta` por cliente: é nela que novas entregas entram.
- Solicitação concluída (`adicionar_entrega_a_fatura`):
    • conciliação sem impacto (taxa = repasse = 0) → nada muda.
    • cliente com fatura aberta → acrescenta uma entrega por rota.
    • sem fatura aberta → cria `FAT-<ano>-<seq>` (Aberta, taxas/repasse Pendente,
      vencimento = emissão + 30 dias, histórico `criada`).
- Pagamentos:
    • taxa paga    → `Paga`; se repasse já repassado (ou zero) → `Finalizada`.
    • repasse pago → `Repassado`; se taxa já paga → `Finalizada`.
- `Fechada` só por ação explícita (`fechar_fatura`); `Vencida` por
  `marcar_vencidas` (vencimento passado e taxa não paga).
- Histórico só cresce e fica ordenado por data.
- Fatura inexistente → no-op (logado), retorno `None`.

Dependências (Repository):
- FaturasRepository (coleção `app_faturas`)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from repository.faturas_repository import FaturasRepository
from repository.types import (
    FATURA_ABERTA,
    FATURA_FECHADA,
    FATURA_FINALIZADA,
    FATURA_PAGA,
    FATURA_VENCIDA,
    HIST_CRIADA,
    HIST_ENTREGA_ADICIONADA,
    HIST_ENTREGA_ATUALIZADA,
    HIST_ENTREGA_REMOVIDA,
    HIST_FECHADA,
    HIST_FINALIZADA,
    HIST_PAGAMENTO_REPASSE,
    HIST_PAGAMENTO_TAXA,
    HIST_VENCIDA,
    REPASSE_PENDENTE,
    REPASSE_REPASSADO,
    TAXAS_PAGA,
    TAXAS_PENDENTE,
    TAXAS_VENCIDA,
    EntregaIncluida,
    Fatura,
    HistoricoItem,
    Solicitacao,
    TaxaExtra,
)
from services.ledger.service_ledger_conciliacao import ClassificacaoConciliacao
from shared.config import DIAS_VENCIMENTO_FATURA
from shared.errors import RegraDeNegocioError
from shared.ids import novo_id, proximo_numero_fatura, sanitize
from utils.utils import arredondar_moeda, coerce_data, parse_datetime, parse_moeda

logger = logging.getLogger(__name__)


class ServiceLedgerFatura:
    """Ledger de faturas: criação, entregas, pagamentos e status."""

    def __init__(self, faturas_repo: FaturasRepository, agora: Callable[[], datetime] = datetime.now) -> None:
        self.faturas_repo = faturas_repo
        self.agora = agora

    # ------------------------------------------------------------------
    # Cálculo
    # ------------------------------------------------------------------
    @staticmethod
    def recalcular_totais(fatura: Fatura) -> Fatura:
        """Nova `Fatura` com os totais derivados das entregas (função pura)."""
        valor_taxas = sum(e.total_taxas for e in fatura.entregas)
        valor_repasse = sum(float(e.valor_repasse) for e in fatura.entregas)
        return replace(
            fatura,
            valor_taxas=arredondar_moeda(valor_taxas),
            valor_repasse=arredondar_moeda(valor_repasse),
            total_entregas=len(fatura.entregas),
        )

    @staticmethod
    def valor_final(fatura: Fatura) -> float:
        """Repasse − taxas. Positivo: a empresa deve ao cliente; negativo: o cliente deve."""
        return arredondar_moeda(fatura.valor_repasse - fatura.valor_taxas)

    def _com_historico(self, fatura: Fatura, acao: str, detalhes: Optional[str] = None) -> List[HistoricoItem]:
        item = HistoricoItem(id=novo_id(), acao=acao, data=self.agora(), detalhes=detalhes or None)
        return sorted([*fatura.historico, item], key=lambda h: h.data)

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def obter_fatura(self, fatura_id: str) -> Optional[Fatura]:
        return self.faturas_repo.obter(fatura_id)

    def faturas_do_cliente(self, cliente_id: str) -> List[Fatura]:
        return self.faturas_repo.do_cliente(cliente_id)

    def fatura_aberta_do_cliente(self, cliente_id: str) -> Optional[Fatura]:
        for f in self.faturas_repo.itens:
            if f.cliente_id == cliente_id and f.status_geral == FATURA_ABERTA:
                return f
        return None

    def faturas_por_status(self, *status: str) -> List[Fatura]:
        return [f for f in self.faturas_repo.itens if f.status_geral in status]

    # ------------------------------------------------------------------
    # Solicitação concluída → fatura
    # ------------------------------------------------------------------
    def _entregas_da_solicitacao(
        self, solicitacao: Solicitacao, classificacao: ClassificacaoConciliacao
    ) -> List[EntregaIncluida]:
        entregas = []
        for rota in solicitacao.rotas:
            taxa, repasse = classificacao.por_rota.get(rota.id, (0.0, 0.0))
            entregas.append(
                EntregaIncluida(
                    id=rota.id,
                    data=solicitacao.data_solicitacao,
                    descricao=f"{solicitacao.codigo} - {rota.responsavel or 'Sem responsável'}",
                    entregador_id=solicitacao.entregador_id,
                    entregador_nome=solicitacao.entregador_nome or "N/A",
                    taxa_entrega=taxa,
                    valor_repasse=repasse,
                )
            )
        return entregas

    def adicionar_entrega_a_fatura(
        self, solicitacao: Solicitacao, classificacao: ClassificacaoConciliacao
    ) -> Optional[Fatura]:
        """
        Lança as rotas conciliadas da solicitação na fatura aberta do cliente
        (ou em uma nova).

        Retorno:
            A fatura afetada, ou `None` quando a conciliação não tem impacto.
        """
        if classificacao.sem_impacto:
            logger.debug("%s: conciliação sem impacto financeiro; fatura não alterada", solicitacao.codigo)
            return None

        novas = self._entregas_da_solicitacao(solicitacao, classificacao)
        aberta = self.fatura_aberta_do_cliente(solicitacao.cliente_id)

        if aberta is not None:
            def _acrescentar(f: Fatura) -> Fatura:
                return self.recalcular_totais(replace(f, entregas=[*f.entregas, *novas]))

            fatura = self.faturas_repo.atualizar(aberta.id, _acrescentar)
            logger.info(
                "%s: %d entrega(s) adicionada(s) à fatura %s",
                solicitacao.codigo, len(novas), aberta.numero,
            )
            return fatura

        emissao = self.agora()
        fatura = Fatura(
            id=novo_id(),
            numero=proximo_numero_fatura(self.faturas_repo.numeros(), emissao.year),
            cliente_id=solicitacao.cliente_id,
            cliente_nome=solicitacao.cliente_nome,
            tipo_faturamento="Manual",
            data_emissao=emissao,
            data_vencimento=emissao + timedelta(days=DIAS_VENCIMENTO_FATURA),
            entregas=novas,
            status_taxas=TAXAS_PENDENTE,
            status_repasse=REPASSE_PENDENTE,
            status_geral=FATURA_ABERTA,
            historico=[HistoricoItem(id=novo_id(), acao=HIST_CRIADA, data=emissao)],
        )
        fatura = self.recalcular_totais(fatura)
        self.faturas_repo.adicionar(fatura)
        logger.info(
            "Fatura %s criada para %s (taxas=%.2f repasse=%.2f)",
            fatura.numero, fatura.cliente_nome, fatura.valor_taxas, fatura.valor_repasse,
        )
        return fatura

    # ------------------------------------------------------------------
    # Pagamentos
    # ------------------------------------------------------------------
    def registrar_pagamento_taxa(self, fatura_id: str, detalhes: str = "") -> Optional[Fatura]:
        """Taxas pagas pelo cliente. Finaliza se o repasse já foi feito ou é zero."""

        def _pagar(f: Fatura) -> Fatura:
            historico = self._com_historico(f, HIST_PAGAMENTO_TAXA, detalhes)
            novo = replace(f, status_taxas=TAXAS_PAGA, historico=historico)
            if f.status_repasse == REPASSE_REPASSADO or f.valor_repasse == 0:
                if f.status_geral != FATURA_FINALIZADA:
                    novo = replace(novo, historico=self._com_historico(novo, HIST_FINALIZADA))
                return replace(novo, status_geral=FATURA_FINALIZADA)
            return replace(novo, status_geral=FATURA_PAGA)

        fatura = self.faturas_repo.atualizar(fatura_id, _pagar)
        if fatura is not None:
            logger.info("Fatura %s: taxas pagas → %s", fatura.numero, fatura.status_geral)
        return fatura

    def registrar_pagamento_repasse(self, fatura_id: str, detalhes: str = "") -> Optional[Fatura]:
        """Repasse feito ao cliente. Finaliza se as taxas já foram pagas."""

        def _repassar(f: Fatura) -> Fatura:
            historico = self._com_historico(f, HIST_PAGAMENTO_REPASSE, detalhes)
            novo = replace(f, status_repasse=REPASSE_REPASSADO, historico=historico)
            if f.status_taxas == TAXAS_PAGA:
                if f.status_geral != FATURA_FINALIZADA:
                    novo = replace(novo, historico=self._com_historico(novo, HIST_FINALIZADA))
                return replace(novo, status_geral=FATURA_FINALIZADA)
            return novo

        fatura = self.faturas_repo.atualizar(fatura_id, _repassar)
        if fatura is not None:
            logger.info("Fatura %s: repasse feito → %s", fatura.numero, fatura.status_geral)
        return fatura

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    def fechar_fatura(self, fatura_id: str, detalhes: Optional[str] = None) -> Optional[Fatura]:
        """Aberta → Fechada. Novas entregas do cliente passam a abrir outra fatura."""

        def _fechar(f: Fatura) -> Fatura:
            if f.status_geral != FATURA_ABERTA:
                raise RegraDeNegocioError(
                    f"Somente faturas abertas podem ser fechadas (fatura {f.numero} está '{f.status_geral}').",
                    {"fatura_id": f.id, "status": f.status_geral},
                )
            return replace(f, status_geral=FATURA_FECHADA, historico=self._com_historico(f, HIST_FECHADA, detalhes))

        fatura = self.faturas_repo.atualizar(fatura_id, _fechar)
        if fatura is not None:
            logger.info("Fatura %s fechada", fatura.numero)
        return fatura

    def marcar_vencidas(self, hoje: Union[date, datetime, str, None] = None) -> List[Fatura]:
        """
        Marca como `Vencida` as faturas com vencimento anterior a `hoje` e taxas
        não pagas.

        Retorno:
            Faturas que mudaram de status.
        """
        ref = coerce_data(hoje) if hoje is not None else self.agora().date()
        alvo = [
            f.id
            for f in self.faturas_repo.itens
            if f.data_vencimento.date() < ref
            and f.status_taxas != TAXAS_PAGA
            and f.status_geral not in (FATURA_VENCIDA, FATURA_FINALIZADA)
        ]
        alteradas: List[Fatura] = []
        for fatura_id in alvo:
            fatura = self.faturas_repo.atualizar(
                fatura_id,
                lambda f: replace(
                    f,
                    status_taxas=TAXAS_VENCIDA,
                    status_geral=FATURA_VENCIDA,
                    historico=self._com_historico(f, HIST_VENCIDA, f"Vencimento em {f.data_vencimento:%d/%m/%Y}"),
                ),
            )
            if fatura is not None:
                alteradas.append(fatura)
        if alteradas:
            logger.info("%d fatura(s) marcada(s) como vencida(s)", len(alteradas))
        return alteradas

    def excluir_fatura(self, fatura_id: str) -> bool:
        removida = self.faturas_repo.remover(fatura_id)
        if removida:
            logger.info("Fatura %s excluída", fatura_id)
        return removida

    # ------------------------------------------------------------------
    # Entregas (manutenção manual)
    # ------------------------------------------------------------------
    def _entrega_de(
        self, dados: Union[EntregaIncluida, Mapping[str, Any]], base: Optional[EntregaIncluida] = None
    ) -> EntregaIncluida:
        if isinstance(dados, EntregaIncluida):
            return dados
        atual = base or EntregaIncluida(id=novo_id(), data=self.agora())
        extras = dados.get("taxas_extras", dados.get("taxasExtras"))
        return EntregaIncluida(
            id=atual.id,
            data=parse_datetime(dados.get("data"), atual.data) or atual.data,
            descricao=sanitize(dados.get("descricao", atual.descricao)),
            entregador_id=dados.get("entregador_id", dados.get("entregadorId", atual.entregador_id)),
            entregador_nome=sanitize(dados.get("entregador_nome", dados.get("entregadorNome", atual.entregador_nome))),
            taxa_entrega=parse_moeda(dados.get("taxa_entrega", dados.get("taxaEntrega", atual.taxa_entrega))),
            taxas_extras=(
                [t if isinstance(t, TaxaExtra) else TaxaExtra.from_dict(t) for t in extras]
                if extras is not None
                else list(atual.taxas_extras)
            ),
            valor_repasse=parse_moeda(dados.get("valor_repasse", dados.get("valorRepasse", atual.valor_repasse))),
        )

    def adicionar_entrega(
        self, fatura_id: str, dados: Union[EntregaIncluida, Mapping[str, Any]]
    ) -> Optional[Fatura]:
        entrega = self._entrega_de(dados)

        def _add(f: Fatura) -> Fatura:
            novo = replace(
                f,
                entregas=[*f.entregas, entrega],
                historico=self._com_historico(f, HIST_ENTREGA_ADICIONADA, entrega.descricao),
            )
            return self.recalcular_totais(novo)

        return self.faturas_repo.atualizar(fatura_id, _add)

    def atualizar_entrega(self, fatura_id: str, entrega_id: str, dados: Mapping[str, Any]) -> Optional[Fatura]:
        fatura = self.faturas_repo.obter(fatura_id)
        atual = next((e for e in fatura.entregas if e.id == entrega_id), None) if fatura else None
        if atual is None:
            logger.warning("Entrega %s não encontrada na fatura %s; nada alterado", entrega_id, fatura_id)
            return None
        nova = self._entrega_de(dados, base=atual)

        def _upd(f: Fatura) -> Fatura:
            novo = replace(
                f,
                entregas=[nova if e.id == entrega_id else e for e in f.entregas],
                historico=self._com_historico(f, HIST_ENTREGA_ATUALIZADA, nova.descricao),
            )
            return self.recalcular_totais(novo)

        return self.faturas_repo.atualizar(fatura_id, _upd)

    def remover_entrega(self, fatura_id: str, entrega_id: str) -> Optional[Fatura]:
        fatura = self.faturas_repo.obter(fatura_id)
        alvo = next((e for e in fatura.entregas if e.id == entrega_id), None) if fatura else None
        if alvo is None:
            logger.warning("Entrega %s não encontrada na fatura %s; nada removido", entrega_id, fatura_id)
            return None

        def _rem(f: Fatura) -> Fatura:
            novo = replace(
                f,
                entregas=[e for e in f.entregas if e.id != entrega_id],
                historico=self._com_historico(f, HIST_ENTREGA_REMOVIDA, alvo.descricao),
            )
            return self.recalcular_totais(novo)

        return self.faturas_repo.atualizar(fatura_id, _rem)

    def resumo(self) -> Dict[str, float]:
        """Totais em aberto para os cards da página de faturas."""
        taxas_pendentes = sum(f.valor_taxas for f in self.faturas_repo.itens if f.status_taxas != TAXAS_PAGA)
        repasses_pendentes = sum(
            f.valor_repasse for f in self.faturas_repo.itens if f.status_repasse != REPASSE_REPASSADO
        )
        return {
            "taxas_pendentes": arredondar_moeda(taxas_pendentes),
            "repasses_pendentes": arredondar_moeda(repasses_pendentes),
            "vencidas": float(len(self.faturas_por_status(FATURA_VENCIDA))),
        }


__all__ = ["ServiceLedgerFatura"]
