"""
Módulo Tipos (Repositório)
==========================

Entidades persistidas do LevaETras e constantes de status compartilhadas
entre repositórios e serviços do ledger.

Constantes
----------
- Status da solicitação (`pendente` ... `rejeitada`) e transições permitidas.
- Modalidades de cliente (`pré-pago`, `faturado`).
- Ações de faturamento das formas de pagamento da conciliação.
- Status da fatura (geral, taxas, repasse) e ações do histórico.

Entidades
---------
Dataclasses com `from_dict` / `to_dict`. O formato em JSON mantém os nomes
camelCase do front-end (`clienteId`, `dataEmissao`, `pagamentosTaxa`...).
Datas ficam como `datetime` em memória e viram texto ISO ao salvar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from utils.utils import parse_datetime, parse_moeda

# ------------------ Solicitações ------------------

SolicitacaoStatus = Literal["pendente", "aceita", "em_andamento", "concluida", "cancelada", "rejeitada"]

STATUS_PENDENTE = "pendente"
STATUS_ACEITA = "aceita"
STATUS_EM_ANDAMENTO = "em_andamento"
STATUS_CONCLUIDA = "concluida"
STATUS_CANCELADA = "cancelada"
STATUS_REJEITADA = "rejeitada"

STATUS_COM_JUSTIFICATIVA = {STATUS_CANCELADA, STATUS_REJEITADA}

TRANSICOES_SOLICITACAO: Dict[str, set] = {
    STATUS_PENDENTE: {STATUS_ACEITA, STATUS_CANCELADA, STATUS_REJEITADA},
    STATUS_ACEITA: {STATUS_EM_ANDAMENTO, STATUS_CANCELADA},
    STATUS_EM_ANDAMENTO: {STATUS_CONCLUIDA},
    STATUS_CONCLUIDA: set(),
    STATUS_CANCELADA: set(),
    STATUS_REJEITADA: set(),
}

# ------------------ Clientes ------------------

Modalidade = Literal["pré-pago", "faturado"]

MODALIDADE_PRE_PAGO = "pré-pago"
MODALIDADE_FATURADO = "faturado"

# ------------------ Conciliação ------------------

AcaoFaturamento = Literal["NENHUMA", "GERAR_DEBITO_TAXA", "GERAR_CREDITO_REPASSE"]

ACAO_NENHUMA = "NENHUMA"
ACAO_GERAR_DEBITO_TAXA = "GERAR_DEBITO_TAXA"
ACAO_GERAR_CREDITO_REPASSE = "GERAR_CREDITO_REPASSE"

ALLOWED_ACOES = {ACAO_NENHUMA, ACAO_GERAR_DEBITO_TAXA, ACAO_GERAR_CREDITO_REPASSE}

# ------------------ Faturas ------------------

FaturaStatusGeral = Literal["Aberta", "Fechada", "Paga", "Finalizada", "Vencida"]
FaturaStatusPagamento = Literal["Pendente", "Paga", "Vencida"]
FaturaStatusRepasse = Literal["Pendente", "Repassado"]

FATURA_ABERTA = "Aberta"
FATURA_FECHADA = "Fechada"
FATURA_PAGA = "Paga"
FATURA_FINALIZADA = "Finalizada"
FATURA_VENCIDA = "Vencida"

TAXAS_PENDENTE = "Pendente"
TAXAS_PAGA = "Paga"
TAXAS_VENCIDA = "Vencida"

REPASSE_PENDENTE = "Pendente"
REPASSE_REPASSADO = "Repassado"

HIST_CRIADA = "criada"
HIST_PAGAMENTO_TAXA = "pagamento_taxa"
HIST_PAGAMENTO_REPASSE = "pagamento_repasse"
HIST_FINALIZADA = "finalizada"
HIST_FECHADA = "fechada"
HIST_VENCIDA = "vencida"
HIST_ENTREGA_ADICIONADA = "entrega_adicionada"
HIST_ENTREGA_ATUALIZADA = "entrega_atualizada"
HIST_ENTREGA_REMOVIDA = "entrega_removida"

# ------------------ Transações ------------------

TIPO_CREDITO = "credit"
TIPO_DEBITO = "debit"

ORIGENS_TRANSACAO = {
    "recharge_pix": "Recarga Pix",
    "recharge_card": "Recarga Cartão",
    "recharge_manual": "Crédito Manual",
    "delivery_fee": "Taxa de Entrega",
    "cancellation_fee": "Taxa de Cancelamento",
}


def _dt(v: Any) -> datetime:
    return parse_datetime(v) or datetime.now()


def _opt_str(v: Any) -> Optional[str]:
    return None if v in (None, "") else str(v)


# =====================================================================
# Conciliação
# =====================================================================
@dataclass
class PagamentoConciliado:
    """Um pagamento registrado para a taxa ou para o repasse de uma rota."""

    id: str
    valor: float
    forma_pagamento_id: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PagamentoConciliado":
        return cls(
            id=str(d.get("id") or ""),
            valor=parse_moeda(d.get("valor")),
            forma_pagamento_id=str(d.get("formaPagamentoId") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "valor": self.valor, "formaPagamentoId": self.forma_pagamento_id}


@dataclass
class RotaConciliada:
    pagamentos_taxa: List[PagamentoConciliado] = field(default_factory=list)
    pagamentos_repasse: List[PagamentoConciliado] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RotaConciliada":
        return cls(
            pagamentos_taxa=[PagamentoConciliado.from_dict(p) for p in d.get("pagamentosTaxa") or []],
            pagamentos_repasse=[PagamentoConciliado.from_dict(p) for p in d.get("pagamentosRepasse") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pagamentosTaxa": [p.to_dict() for p in self.pagamentos_taxa],
            "pagamentosRepasse": [p.to_dict() for p in self.pagamentos_repasse],
        }


ConciliacaoData = Dict[str, RotaConciliada]


def conciliacao_from_dict(d: Optional[Dict[str, Any]]) -> Optional[ConciliacaoData]:
    if not d:
        return None
    return {str(rota_id): RotaConciliada.from_dict(v or {}) for rota_id, v in d.items()}


def conciliacao_to_dict(c: Optional[ConciliacaoData]) -> Optional[Dict[str, Any]]:
    if c is None:
        return None
    return {rota_id: rc.to_dict() for rota_id, rc in c.items()}


@dataclass
class FormaPagamentoConciliacao:
    """Forma de pagamento usada na conciliação e seu efeito no faturamento."""

    id: str
    nome: str
    acao_faturamento: str = ACAO_NENHUMA

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FormaPagamentoConciliacao":
        acao = str(d.get("acaoFaturamento") or ACAO_NENHUMA)
        return cls(
            id=str(d.get("id") or ""),
            nome=str(d.get("nome") or ""),
            acao_faturamento=acao if acao in ALLOWED_ACOES else ACAO_NENHUMA,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "nome": self.nome, "acaoFaturamento": self.acao_faturamento}


# =====================================================================
# Solicitações
# =====================================================================
@dataclass
class Rota:
    """Um trecho da solicitação, com destino em um bairro."""

    id: str
    bairro_destino_id: str
    taxa_entrega: float = 0.0
    valor_extra: Optional[float] = None
    responsavel: str = ""
    telefone: str = ""
    observacoes: str = ""
    receber_do_cliente: bool = False
    formas_pagamento_aceitas: List[str] = field(default_factory=list)
    status: str = STATUS_PENDENTE

    @property
    def repasse(self) -> float:
        return float(self.valor_extra or 0.0)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Rota":
        extra = d.get("valorExtra")
        return cls(
            id=str(d.get("id") or ""),
            bairro_destino_id=str(d.get("bairroDestinoId") or ""),
            taxa_entrega=parse_moeda(d.get("taxaEntrega")),
            valor_extra=None if extra in (None, "") else parse_moeda(extra),
            responsavel=str(d.get("responsavel") or ""),
            telefone=str(d.get("telefone") or ""),
            observacoes=str(d.get("observacoes") or ""),
            receber_do_cliente=bool(d.get("receberDoCliente", False)),
            formas_pagamento_aceitas=list(d.get("formasPagamentoAceitas") or []),
            status=str(d.get("status") or STATUS_PENDENTE),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bairroDestinoId": self.bairro_destino_id,
            "responsavel": self.responsavel,
            "telefone": self.telefone,
            "observacoes": self.observacoes,
            "receberDoCliente": self.receber_do_cliente,
            "valorExtra": self.valor_extra,
            "taxaEntrega": self.taxa_entrega,
            "formasPagamentoAceitas": list(self.formas_pagamento_aceitas),
            "status": self.status,
        }


@dataclass
class Solicitacao:
    """Pedido de entrega de um cliente, agregando uma ou mais rotas."""

    id: str
    codigo: str
    cliente_id: str
    cliente_nome: str
    status: str
    data_solicitacao: datetime
    rotas: List[Rota] = field(default_factory=list)
    cliente_avatar: str = ""
    entregador_id: Optional[str] = None
    entregador_nome: Optional[str] = None
    entregador_avatar: Optional[str] = None
    tipo_operacao: str = ""
    operation_description: str = ""
    ponto_coleta: str = ""
    valor_total_taxas: float = 0.0
    valor_total_repasse: float = 0.0
    justificativa: Optional[str] = None
    conciliacao: Optional[ConciliacaoData] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Solicitacao":
        return cls(
            id=str(d.get("id") or ""),
            codigo=str(d.get("codigo") or ""),
            cliente_id=str(d.get("clienteId") or ""),
            cliente_nome=str(d.get("clienteNome") or ""),
            cliente_avatar=str(d.get("clienteAvatar") or ""),
            entregador_id=_opt_str(d.get("entregadorId")),
            entregador_nome=_opt_str(d.get("entregadorNome")),
            entregador_avatar=_opt_str(d.get("entregadorAvatar")),
            status=str(d.get("status") or STATUS_PENDENTE),
            data_solicitacao=_dt(d.get("dataSolicitacao")),
            tipo_operacao=str(d.get("tipoOperacao") or ""),
            operation_description=str(d.get("operationDescription") or ""),
            ponto_coleta=str(d.get("pontoColeta") or ""),
            rotas=[Rota.from_dict(r) for r in d.get("rotas") or []],
            valor_total_taxas=parse_moeda(d.get("valorTotalTaxas")),
            valor_total_repasse=parse_moeda(d.get("valorTotalRepasse")),
            justificativa=_opt_str(d.get("justificativa")),
            conciliacao=conciliacao_from_dict(d.get("conciliacao")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "codigo": self.codigo,
            "clienteId": self.cliente_id,
            "clienteNome": self.cliente_nome,
            "clienteAvatar": self.cliente_avatar,
            "entregadorId": self.entregador_id,
            "entregadorNome": self.entregador_nome,
            "entregadorAvatar": self.entregador_avatar,
            "status": self.status,
            "dataSolicitacao": self.data_solicitacao,
            "tipoOperacao": self.tipo_operacao,
            "operationDescription": self.operation_description,
            "pontoColeta": self.ponto_coleta,
            "rotas": [r.to_dict() for r in self.rotas],
            "valorTotalTaxas": self.valor_total_taxas,
            "valorTotalRepasse": self.valor_total_repasse,
            "justificativa": self.justificativa,
        }
        if self.conciliacao is not None:
            out["conciliacao"] = conciliacao_to_dict(self.conciliacao)
        return out


# =====================================================================
# Faturas
# =====================================================================
@dataclass
class TaxaExtra:
    nome: str
    valor: float

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TaxaExtra":
        return cls(nome=str(d.get("nome") or ""), valor=parse_moeda(d.get("valor")))

    def to_dict(self) -> Dict[str, Any]:
        return {"nome": self.nome, "valor": self.valor}


@dataclass
class EntregaIncluida:
    """Linha da fatura: uma entrega cobrada (taxa + extras) e seu repasse."""

    id: str
    data: datetime
    descricao: str = ""
    entregador_id: Optional[str] = None
    entregador_nome: str = ""
    taxa_entrega: float = 0.0
    taxas_extras: List[TaxaExtra] = field(default_factory=list)
    valor_repasse: float = 0.0

    @property
    def total_taxas(self) -> float:
        return float(self.taxa_entrega) + sum(float(t.valor) for t in self.taxas_extras)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EntregaIncluida":
        return cls(
            id=str(d.get("id") or ""),
            data=_dt(d.get("data")),
            descricao=str(d.get("descricao") or ""),
            entregador_id=_opt_str(d.get("entregadorId")),
            entregador_nome=str(d.get("entregadorNome") or ""),
            taxa_entrega=parse_moeda(d.get("taxaEntrega")),
            taxas_extras=[TaxaExtra.from_dict(t) for t in d.get("taxasExtras") or []],
            valor_repasse=parse_moeda(d.get("valorRepasse")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "data": self.data,
            "descricao": self.descricao,
            "entregadorId": self.entregador_id,
            "entregadorNome": self.entregador_nome,
            "taxaEntrega": self.taxa_entrega,
            "taxasExtras": [t.to_dict() for t in self.taxas_extras],
            "valorRepasse": self.valor_repasse,
        }


@dataclass
class HistoricoItem:
    id: str
    acao: str
    data: datetime
    detalhes: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HistoricoItem":
        return cls(
            id=str(d.get("id") or ""),
            acao=str(d.get("acao") or ""),
            data=_dt(d.get("data")),
            detalhes=_opt_str(d.get("detalhes")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "acao": self.acao, "data": self.data}
        if self.detalhes is not None:
            out["detalhes"] = self.detalhes
        return out


@dataclass
class Fatura:
    """
    Fatura de um cliente faturado.

    `valor_taxas`, `valor_repasse` e `total_entregas` são sempre derivados de
    `entregas` (ver `ServiceLedgerFatura.recalcular_totais`).
    """

    id: str
    numero: str
    cliente_id: str
    cliente_nome: str
    data_emissao: datetime
    data_vencimento: datetime
    tipo_faturamento: str = "Manual"
    entregas: List[EntregaIncluida] = field(default_factory=list)
    total_entregas: int = 0
    valor_taxas: float = 0.0
    status_taxas: str = TAXAS_PENDENTE
    valor_repasse: float = 0.0
    status_repasse: str = REPASSE_PENDENTE
    status_geral: str = FATURA_ABERTA
    observacoes: str = ""
    historico: List[HistoricoItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Fatura":
        return cls(
            id=str(d.get("id") or ""),
            numero=str(d.get("numero") or ""),
            cliente_id=str(d.get("clienteId") or ""),
            cliente_nome=str(d.get("clienteNome") or ""),
            tipo_faturamento=str(d.get("tipoFaturamento") or "Manual"),
            data_emissao=_dt(d.get("dataEmissao")),
            data_vencimento=_dt(d.get("dataVencimento")),
            entregas=[EntregaIncluida.from_dict(e) for e in d.get("entregas") or []],
            total_entregas=int(d.get("totalEntregas") or 0),
            valor_taxas=parse_moeda(d.get("valorTaxas")),
            status_taxas=str(d.get("statusTaxas") or TAXAS_PENDENTE),
            valor_repasse=parse_moeda(d.get("valorRepasse")),
            status_repasse=str(d.get("statusRepasse") or REPASSE_PENDENTE),
            status_geral=str(d.get("statusGeral") or FATURA_ABERTA),
            observacoes=str(d.get("observacoes") or ""),
            historico=[HistoricoItem.from_dict(h) for h in d.get("historico") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "numero": self.numero,
            "clienteId": self.cliente_id,
            "clienteNome": self.cliente_nome,
            "tipoFaturamento": self.tipo_faturamento,
            "totalEntregas": self.total_entregas,
            "dataEmissao": self.data_emissao,
            "dataVencimento": self.data_vencimento,
            "valorTaxas": self.valor_taxas,
            "statusTaxas": self.status_taxas,
            "valorRepasse": self.valor_repasse,
            "statusRepasse": self.status_repasse,
            "statusGeral": self.status_geral,
            "observacoes": self.observacoes,
            "entregas": [e.to_dict() for e in self.entregas],
            "historico": [h.to_dict() for h in self.historico],
        }


# =====================================================================
# Transações (extrato de clientes pré-pagos)
# =====================================================================
@dataclass
class Transacao:
    id: str
    type: str
    origin: str
    description: str
    value: float
    client_name: str
    client_avatar: str = ""
    date: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transacao":
        return cls(
            id=str(d.get("id") or ""),
            type=str(d.get("type") or TIPO_DEBITO),
            origin=str(d.get("origin") or ""),
            description=str(d.get("description") or ""),
            value=parse_moeda(d.get("value")),
            client_name=str(d.get("clientName") or ""),
            client_avatar=str(d.get("clientAvatar") or ""),
            date=_dt(d.get("date")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "origin": self.origin,
            "description": self.description,
            "value": self.value,
            "clientName": self.client_name,
            "clientAvatar": self.client_avatar,
            "date": self.date,
        }


__all__ = [
    "PagamentoConciliado",
    "RotaConciliada",
    "ConciliacaoData",
    "conciliacao_from_dict",
    "conciliacao_to_dict",
    "FormaPagamentoConciliacao",
    "Rota",
    "Solicitacao",
    "TaxaExtra",
    "EntregaIncluida",
    "HistoricoItem",
    "Fatura",
    "Transacao",
]
