"""
Testes do ledger de faturas.

Cobrem criação a partir de solicitações conciliadas, conservação dos totais,
progressão de status por pagamentos, histórico e manutenção manual.
"""

from datetime import date, datetime, timedelta

import pytest
from conftest import conciliacao_exemplo, nova_solicitacao

from repository.faturas_repository import FaturasRepository
from repository.types import (
    FATURA_ABERTA,
    FATURA_FECHADA,
    FATURA_FINALIZADA,
    FATURA_PAGA,
    FATURA_VENCIDA,
    HIST_CRIADA,
    HIST_FINALIZADA,
    HIST_PAGAMENTO_REPASSE,
    HIST_PAGAMENTO_TAXA,
    REPASSE_PENDENTE,
    REPASSE_REPASSADO,
    TAXAS_PAGA,
    TAXAS_PENDENTE,
    TAXAS_VENCIDA,
    EntregaIncluida,
    Fatura,
    TaxaExtra,
)
from services.ledger.service_ledger_conciliacao import ClassificacaoConciliacao, classificar_pagamentos
from services.ledger.service_ledger_fatura import ServiceLedgerFatura
from shared.errors import RegraDeNegocioError


@pytest.fixture
def fatura(fatura_ledger, solicitacao, conciliacao, formas):
    return fatura_ledger.adicionar_entrega_a_fatura(solicitacao, classificar_pagamentos(conciliacao, formas))


def _acoes(f):
    return [h.acao for h in f.historico]


class TestCriacao:
    def test_cria_fatura_aberta_para_o_cliente(self, fatura):
        assert fatura.numero == "FAT-2025-0001"
        assert fatura.cliente_id == "client-1"
        assert fatura.valor_taxas == 25.0
        assert fatura.valor_repasse == 50.0
        assert fatura.total_entregas == 2
        assert fatura.status_geral == FATURA_ABERTA
        assert fatura.status_taxas == TAXAS_PENDENTE
        assert fatura.status_repasse == REPASSE_PENDENTE
        assert fatura.tipo_faturamento == "Manual"
        assert fatura.data_vencimento == fatura.data_emissao + timedelta(days=30)
        assert _acoes(fatura) == [HIST_CRIADA]

    def test_linhas_usam_valores_classificados_por_rota(self, fatura):
        linhas = {e.id: e for e in fatura.entregas}
        assert linhas["sol-1-a"].taxa_entrega == 10.0
        assert linhas["sol-1-a"].valor_repasse == 0.0
        assert linhas["sol-1-b"].valor_repasse == 50.0
        assert linhas["sol-1-b"].descricao == "SOL-1001 - Maria"
        assert linhas["sol-1-a"].entregador_nome == "N/A"
        assert linhas["sol-1-a"].data == datetime(2025, 6, 1, 10, 0)

    def test_conciliacao_sem_impacto_nao_altera_nada(self, fatura_ledger, faturas_repo, solicitacao):
        antes = faturas_repo.itens
        assert fatura_ledger.adicionar_entrega_a_fatura(solicitacao, ClassificacaoConciliacao()) is None
        assert faturas_repo.itens is antes

    def test_acrescenta_na_fatura_aberta_existente(self, fatura_ledger, fatura, formas):
        outra = nova_solicitacao(sol_id="sol-2", codigo="SOL-1002")
        classificacao = classificar_pagamentos(conciliacao_exemplo("sol-2"), formas)
        atualizada = fatura_ledger.adicionar_entrega_a_fatura(outra, classificacao)

        assert atualizada.id == fatura.id
        assert atualizada.valor_taxas == fatura.valor_taxas + classificacao.debitos_taxa
        assert atualizada.valor_repasse == fatura.valor_repasse + classificacao.creditos_repasse
        assert atualizada.total_entregas == 4
        assert len(fatura_ledger.faturas_do_cliente("client-1")) == 1

    def test_fatura_fechada_faz_abrir_outra(self, fatura_ledger, fatura, formas):
        fatura_ledger.fechar_fatura(fatura.id)
        outra = nova_solicitacao(sol_id="sol-2", codigo="SOL-1002")
        nova = fatura_ledger.adicionar_entrega_a_fatura(
            outra, classificar_pagamentos(conciliacao_exemplo("sol-2"), formas)
        )
        assert nova.id != fatura.id
        assert nova.numero == "FAT-2025-0002"
        assert fatura_ledger.obter_fatura(fatura.id).status_geral == FATURA_FECHADA

    def test_clientes_diferentes_tem_faturas_separadas(self, fatura_ledger, fatura, formas):
        outra = nova_solicitacao(sol_id="sol-2", codigo="SOL-1002", cliente_id="client-9")
        nova = fatura_ledger.adicionar_entrega_a_fatura(
            outra, classificar_pagamentos(conciliacao_exemplo("sol-2"), formas)
        )
        assert nova.id != fatura.id
        assert fatura_ledger.obter_fatura(fatura.id).total_entregas == 2


class TestTotais:
    def test_recalcular_e_idempotente_e_puro(self):
        bruta = Fatura(
            id="f1",
            numero="FAT-2025-0001",
            cliente_id="c",
            cliente_nome="C",
            data_emissao=datetime(2025, 6, 1),
            data_vencimento=datetime(2025, 7, 1),
            entregas=[
                EntregaIncluida(id="e1", data=datetime(2025, 6, 1), taxa_entrega=7.0,
                                taxas_extras=[TaxaExtra("Espera", 2.5)], valor_repasse=30.0),
                EntregaIncluida(id="e2", data=datetime(2025, 6, 2), taxa_entrega=5.0),
            ],
            valor_taxas=999.0,
        )
        uma = ServiceLedgerFatura.recalcular_totais(bruta)
        duas = ServiceLedgerFatura.recalcular_totais(uma)
        assert uma == duas
        assert (uma.valor_taxas, uma.valor_repasse, uma.total_entregas) == (14.5, 30.0, 2)
        assert bruta.valor_taxas == 999.0

    def test_valor_final(self, fatura):
        assert ServiceLedgerFatura.valor_final(fatura) == 25.0


class TestPagamentos:
    def test_taxa_depois_repasse(self, fatura_ledger, fatura):
        paga = fatura_ledger.registrar_pagamento_taxa(fatura.id, "Pix recebido")
        assert paga.status_taxas == TAXAS_PAGA
        assert paga.status_geral == FATURA_PAGA

        final = fatura_ledger.registrar_pagamento_repasse(fatura.id)
        assert final.status_repasse == REPASSE_REPASSADO
        assert final.status_geral == FATURA_FINALIZADA
        assert _acoes(final) == [HIST_CRIADA, HIST_PAGAMENTO_TAXA, HIST_PAGAMENTO_REPASSE, HIST_FINALIZADA]
        assert final.historico[1].detalhes == "Pix recebido"

    def test_repasse_depois_taxa(self, fatura_ledger, fatura):
        repassada = fatura_ledger.registrar_pagamento_repasse(fatura.id)
        assert repassada.status_repasse == REPASSE_REPASSADO
        assert repassada.status_geral == FATURA_ABERTA

        final = fatura_ledger.registrar_pagamento_taxa(fatura.id)
        assert final.status_geral == FATURA_FINALIZADA

    def test_sem_repasse_taxa_paga_finaliza(self, fatura_ledger, solicitacao):
        classificacao = ClassificacaoConciliacao(
            debitos_taxa=25.0, por_rota={"sol-1-a": (10.0, 0.0), "sol-1-b": (15.0, 0.0)}
        )
        fatura = fatura_ledger.adicionar_entrega_a_fatura(solicitacao, classificacao)
        assert fatura.valor_repasse == 0
        final = fatura_ledger.registrar_pagamento_taxa(fatura.id)
        assert final.status_geral == FATURA_FINALIZADA
        assert _acoes(final)[-1] == HIST_FINALIZADA

    def test_fatura_inexistente_e_no_op(self, fatura_ledger, faturas_repo):
        antes = faturas_repo.itens
        assert fatura_ledger.registrar_pagamento_taxa("nao-existe") is None
        assert fatura_ledger.registrar_pagamento_repasse("nao-existe") is None
        assert fatura_ledger.fechar_fatura("nao-existe") is None
        assert faturas_repo.itens is antes

    def test_resumo(self, fatura_ledger, fatura):
        assert fatura_ledger.resumo() == {"taxas_pendentes": 25.0, "repasses_pendentes": 50.0, "vencidas": 0.0}
        fatura_ledger.registrar_pagamento_taxa(fatura.id)
        assert fatura_ledger.resumo()["taxas_pendentes"] == 0.0


class TestHistoricoECicloDeVida:
    def test_historico_cresce_e_fica_ordenado(self, fatura_ledger, fatura):
        fatura_ledger.registrar_pagamento_repasse(fatura.id)
        atual = fatura_ledger.registrar_pagamento_taxa(fatura.id)
        datas = [h.data for h in atual.historico]
        assert datas == sorted(datas)
        assert len(atual.historico) > len(fatura.historico)

    def test_historico_ordenado_mesmo_com_relogio_atrasado(self, faturas_repo, fatura):
        atrasado = ServiceLedgerFatura(faturas_repo, agora=lambda: datetime(2025, 1, 1))
        atual = atrasado.registrar_pagamento_repasse(fatura.id)
        assert _acoes(atual) == [HIST_PAGAMENTO_REPASSE, HIST_CRIADA]

    def test_fechar_somente_aberta(self, fatura_ledger, fatura):
        fechada = fatura_ledger.fechar_fatura(fatura.id, "Fechamento semanal")
        assert fechada.status_geral == FATURA_FECHADA
        with pytest.raises(RegraDeNegocioError):
            fatura_ledger.fechar_fatura(fatura.id)

    def test_marcar_vencidas(self, fatura_ledger, fatura):
        vencimento = fatura.data_vencimento.date()
        assert fatura_ledger.marcar_vencidas(vencimento) == []

        alteradas = fatura_ledger.marcar_vencidas(vencimento + timedelta(days=1))
        assert [f.id for f in alteradas] == [fatura.id]
        assert alteradas[0].status_geral == FATURA_VENCIDA
        assert alteradas[0].status_taxas == TAXAS_VENCIDA
        assert fatura_ledger.marcar_vencidas(vencimento + timedelta(days=2)) == []
        assert fatura_ledger.resumo()["vencidas"] == 1.0

    def test_fatura_com_taxa_paga_nao_vence(self, fatura_ledger, fatura):
        fatura_ledger.registrar_pagamento_taxa(fatura.id)
        assert fatura_ledger.marcar_vencidas(date(2026, 1, 1)) == []

    def test_excluir(self, fatura_ledger, fatura):
        assert fatura_ledger.excluir_fatura(fatura.id)
        assert fatura_ledger.obter_fatura(fatura.id) is None
        assert not fatura_ledger.excluir_fatura(fatura.id)


class TestEntregasManuais:
    def test_adicionar_atualizar_remover(self, fatura_ledger, fatura):
        com_avulsa = fatura_ledger.adicionar_entrega(
            fatura.id,
            {"descricao": "Entrega avulsa", "taxaEntrega": "5,00",
             "taxasExtras": [{"nome": "Espera", "valor": 2.5}], "valorRepasse": "0"},
        )
        assert com_avulsa.valor_taxas == 32.5
        assert com_avulsa.total_entregas == 3
        avulsa = com_avulsa.entregas[-1]

        alterada = fatura_ledger.atualizar_entrega(fatura.id, avulsa.id, {"taxa_entrega": 6})
        assert alterada.valor_taxas == 33.5
        assert alterada.entregas[-1].taxas_extras == [TaxaExtra("Espera", 2.5)]

        sem_avulsa = fatura_ledger.remover_entrega(fatura.id, avulsa.id)
        assert sem_avulsa.valor_taxas == fatura.valor_taxas
        assert sem_avulsa.total_entregas == 2
        assert len(sem_avulsa.historico) == 4

    def test_entrega_inexistente_e_no_op(self, fatura_ledger, fatura):
        assert fatura_ledger.atualizar_entrega(fatura.id, "nao-existe", {"taxa_entrega": 1}) is None
        assert fatura_ledger.remover_entrega(fatura.id, "nao-existe") is None
        assert fatura_ledger.obter_fatura(fatura.id) == fatura


def test_fatura_sobrevive_a_recarga_do_armazenamento(store, fatura):
    recarregada = FaturasRepository(store).obter(fatura.id)
    assert recarregada == fatura
    assert isinstance(recarregada.data_emissao, datetime)
    assert isinstance(recarregada.entregas[0].data, datetime)


def test_entrega_lida_apenas_no_formato_atual():
    atual = EntregaIncluida.from_dict(
        {"id": "e1", "data": "2025-06-01T10:00:00", "descricao": "SOL-1001 - João", "entregadorNome": "Ana",
         "taxaEntrega": 7, "valorRepasse": 3}
    )
    assert (atual.descricao, atual.entregador_nome, atual.taxa_entrega, atual.valor_repasse) == (
        "SOL-1001 - João", "Ana", 7.0, 3.0
    )

    outra = EntregaIncluida.from_dict({"id": "e2", "endereco": "Rua A", "taxa": 7, "valorExtra": 3})
    assert (outra.descricao, outra.taxa_entrega, outra.valor_repasse) == ("", 0.0, 0.0)


def test_listagem_em_dataframe(faturas_repo, fatura):
    df = faturas_repo.listar_df()
    assert list(df["numero"]) == ["FAT-2025-0001"]
    assert df.loc[0, "valor_taxas"] == 25.0
