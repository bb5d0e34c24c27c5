# services/ledger/service_ledger_conciliacao.py
"""
Service: CONCILIAÇÃO (pagamentos por rota → efeito no faturamento)

Regras principais:
- Cada rota da solicitação recebe pagamentos da taxa e do repasse, cada um
  com uma forma de pagamento de conciliação.
- Classificação (`classificar_pagamentos`):
    • pagamento da TAXA com forma `GERAR_DEBITO_TAXA` → soma em `debitos_taxa`.
    • pagamento do REPASSE com forma `GERAR_CREDITO_REPASSE` → soma em `creditos_repasse`.
    • forma desconhecida ou `NENHUMA` → sem efeito.
- Completude (`conciliacao_completa`): por rota, soma da taxa == taxa de entrega
  e soma do repasse == valor extra (tolerância 0,01), e todo pagamento > 0 tem
  forma de pagamento. Falta de entrada para alguma rota, ou entrada para rota
  que a solicitação não tem → incompleta.
- Entradas de rotas removidas são descartadas (`conciliacao_das_rotas`) antes
  de classificar, para que os totais batam com os itens da fatura.
- Valores digitados (texto pt-BR) passam por `utils.utils.parse_moeda`.

Sem efeitos colaterais: funções puras sobre os tipos de `repository.types`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from repository.types import (
    ACAO_GERAR_CREDITO_REPASSE,
    ACAO_GERAR_DEBITO_TAXA,
    ConciliacaoData,
    FormaPagamentoConciliacao,
    PagamentoConciliado,
    Rota,
    RotaConciliada,
    Solicitacao,
)
from shared.config import EPS_MOEDA
from shared.ids import novo_id
from utils.utils import arredondar_moeda, moeda_igual, parse_moeda

logger = logging.getLogger(__name__)

TIPO_TAXA = "taxa"
TIPO_REPASSE = "repasse"


@dataclass
class ClassificacaoConciliacao:
    """Efeito financeiro de uma conciliação.

    Attributes:
        debitos_taxa: Total a cobrar do cliente na fatura (taxas).
        creditos_repasse: Total a repassar ao cliente na fatura.
        por_rota: `rota_id -> (debito_taxa, credito_repasse)`.
    """
    debitos_taxa: float = 0.0
    creditos_repasse: float = 0.0
    por_rota: Dict[str, Tuple[float, float]] = field(default_factory=dict)

    @property
    def sem_impacto(self) -> bool:
        return self.debitos_taxa == 0 and self.creditos_repasse == 0


def _acoes_por_forma(formas: Iterable[FormaPagamentoConciliacao]) -> Dict[str, str]:
    return {f.id: f.acao_faturamento for f in formas}


def _soma(pagamentos: Iterable[PagamentoConciliado]) -> float:
    return sum(float(p.valor) for p in pagamentos)


def conciliacao_das_rotas(solicitacao: Solicitacao, conciliacao: Optional[ConciliacaoData]) -> ConciliacaoData:
    """Só as entradas cujas chaves são rotas atuais da solicitação."""
    ids = {r.id for r in solicitacao.rotas}
    filtrada = {rota_id: rc for rota_id, rc in (conciliacao or {}).items() if rota_id in ids}
    descartadas = len(conciliacao or {}) - len(filtrada)
    if descartadas:
        logger.info("%s: %d entrada(s) de conciliação sem rota descartada(s)", solicitacao.codigo, descartadas)
    return filtrada


def classificar_pagamentos(
    conciliacao: ConciliacaoData,
    formas: Iterable[FormaPagamentoConciliacao],
) -> ClassificacaoConciliacao:
    """
    Soma os pagamentos que geram débito de taxa e crédito de repasse.

    Retorno:
        ClassificacaoConciliacao com totais arredondados a centavos.
    """
    acoes = _acoes_por_forma(formas)
    total_taxa = 0.0
    total_repasse = 0.0
    por_rota: Dict[str, Tuple[float, float]] = {}

    for rota_id, rc in (conciliacao or {}).items():
        taxa = sum(
            float(p.valor) for p in rc.pagamentos_taxa if acoes.get(p.forma_pagamento_id) == ACAO_GERAR_DEBITO_TAXA
        )
        repasse = sum(
            float(p.valor)
            for p in rc.pagamentos_repasse
            if acoes.get(p.forma_pagamento_id) == ACAO_GERAR_CREDITO_REPASSE
        )
        por_rota[rota_id] = (arredondar_moeda(taxa), arredondar_moeda(repasse))
        total_taxa += taxa
        total_repasse += repasse

    resultado = ClassificacaoConciliacao(
        debitos_taxa=arredondar_moeda(total_taxa),
        creditos_repasse=arredondar_moeda(total_repasse),
        por_rota=por_rota,
    )
    logger.debug(
        "Conciliação classificada: taxa=%.2f repasse=%.2f (%d rotas)",
        resultado.debitos_taxa, resultado.creditos_repasse, len(por_rota),
    )
    return resultado


def _pagamentos_validos(pagamentos: List[PagamentoConciliado], formas_validas: Optional[set]) -> bool:
    for p in pagamentos:
        if p.valor > 0:
            if not p.forma_pagamento_id:
                return False
            if formas_validas is not None and p.forma_pagamento_id not in formas_validas:
                return False
    return True


def conciliacao_completa(
    solicitacao: Solicitacao,
    conciliacao: Optional[ConciliacaoData],
    formas: Optional[Iterable[FormaPagamentoConciliacao]] = None,
) -> bool:
    """
    True se todas as rotas estão integralmente conciliadas.

    Parâmetros:
        formas: Quando informado, a forma de cada pagamento > 0 também precisa
            existir nesta lista.
    """
    if not conciliacao:
        return False
    formas_validas = {f.id for f in formas} if formas is not None else None

    sobrando = set(conciliacao) - {r.id for r in solicitacao.rotas}
    if sobrando:
        logger.debug("%s: conciliação com rotas inexistentes %s", solicitacao.codigo, sorted(sobrando))
        return False

    for rota in solicitacao.rotas:
        rc = conciliacao.get(rota.id)
        if rc is None:
            logger.debug("%s: rota %s sem conciliação", solicitacao.codigo, rota.id)
            return False
        if not moeda_igual(_soma(rc.pagamentos_taxa), rota.taxa_entrega, EPS_MOEDA):
            return False
        if not moeda_igual(_soma(rc.pagamentos_repasse), rota.repasse, EPS_MOEDA):
            return False
        if not _pagamentos_validos(rc.pagamentos_taxa, formas_validas):
            return False
        if not _pagamentos_validos(rc.pagamentos_repasse, formas_validas):
            return False
    return True


def valor_restante(rota: Rota, pagamentos: Iterable[Any], tipo: str = TIPO_TAXA) -> float:
    """Quanto falta conciliar na rota (negativo se pago a mais).

    `pagamentos` aceita `PagamentoConciliado` ou dicts do formulário
    (`{"valor": "10,00", ...}`).
    """
    esperado = rota.taxa_entrega if tipo == TIPO_TAXA else rota.repasse
    pago = 0.0
    for p in pagamentos:
        valor = p.get("valor") if isinstance(p, Mapping) else p.valor
        pago += parse_moeda(valor)
    return arredondar_moeda(esperado - pago)


def _pagamentos_do_formulario(linhas: Iterable[Mapping[str, Any]]) -> List[PagamentoConciliado]:
    pagamentos: List[PagamentoConciliado] = []
    for linha in linhas or []:
        valor = parse_moeda(linha.get("valor"))
        if valor <= 0:
            continue
        pagamentos.append(
            PagamentoConciliado(
                id=str(linha.get("id") or novo_id()),
                valor=valor,
                forma_pagamento_id=str(linha.get("formaPagamentoId") or ""),
            )
        )
    return pagamentos


def montar_conciliacao(solicitacao: Solicitacao, formulario: Mapping[str, Mapping[str, Any]]) -> ConciliacaoData:
    """
    Converte o formulário de conciliação em `ConciliacaoData`.

    Parâmetros:
        formulario: `rota_id -> {"pagamentosTaxa": [...], "pagamentosRepasse": [...]}`
            com valores em texto pt-BR.

    Observações:
        - Toda rota da solicitação ganha uma entrada (vazia se ausente).
        - Pagamentos com valor ≤ 0 são descartados.
    """
    conciliacao: ConciliacaoData = {}
    for rota in solicitacao.rotas:
        dados = formulario.get(rota.id) or {}
        conciliacao[rota.id] = RotaConciliada(
            pagamentos_taxa=_pagamentos_do_formulario(dados.get("pagamentosTaxa") or []),
            pagamentos_repasse=_pagamentos_do_formulario(dados.get("pagamentosRepasse") or []),
        )
    return conciliacao


def formulario_inicial(solicitacao: Solicitacao) -> Dict[str, Dict[str, List[Dict[str, Any]]]]:
    """Valores iniciais do formulário a partir da conciliação já salva (vírgula decimal)."""
    salva = solicitacao.conciliacao or {}
    form: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
    for rota in solicitacao.rotas:
        rc = salva.get(rota.id) or RotaConciliada()
        form[rota.id] = {
            "pagamentosTaxa": [
                {**p.to_dict(), "valor": f"{p.valor:.2f}".replace(".", ",")} for p in rc.pagamentos_taxa
            ],
            "pagamentosRepasse": [
                {**p.to_dict(), "valor": f"{p.valor:.2f}".replace(".", ",")} for p in rc.pagamentos_repasse
            ],
        }
    return form


__all__ = [
    "ClassificacaoConciliacao",
    "classificar_pagamentos",
    "conciliacao_das_rotas",
    "conciliacao_completa",
    "valor_restante",
    "montar_conciliacao",
    "formulario_inicial",
    "TIPO_TAXA",
    "TIPO_REPASSE",
]
