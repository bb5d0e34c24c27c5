"""Testes da classificação e da completude da conciliação."""

from conftest import conciliacao_exemplo, nova_solicitacao

from repository.types import PagamentoConciliado, Rota, RotaConciliada
from services.ledger.service_ledger_conciliacao import (
    TIPO_REPASSE,
    classificar_pagamentos,
    conciliacao_completa,
    conciliacao_das_rotas,
    formulario_inicial,
    montar_conciliacao,
    valor_restante,
)


class TestClassificacao:
    def test_exemplo_taxas_faturadas_e_repasse(self, conciliacao, formas):
        resultado = classificar_pagamentos(conciliacao, formas)
        assert resultado.debitos_taxa == 25.0
        assert resultado.creditos_repasse == 50.0
        assert resultado.por_rota == {"sol-1-a": (10.0, 0.0), "sol-1-b": (15.0, 50.0)}
        assert not resultado.sem_impacto

    def test_formas_sem_acao_e_desconhecidas_nao_contam(self, formas):
        conciliacao = {
            "r1": RotaConciliada(
                pagamentos_taxa=[
                    PagamentoConciliado(id="p1", valor=5.0, forma_pagamento_id="pix-levaetras"),
                    PagamentoConciliado(id="p2", valor=3.0, forma_pagamento_id="forma-apagada"),
                ],
                pagamentos_repasse=[PagamentoConciliado(id="p3", valor=9.0, forma_pagamento_id="pix-loja")],
            )
        }
        resultado = classificar_pagamentos(conciliacao, formas)
        assert resultado.sem_impacto

    def test_acao_trocada_de_lado_nao_conta(self, formas):
        # forma de repasse usada na taxa e vice-versa
        conciliacao = {
            "r1": RotaConciliada(
                pagamentos_taxa=[PagamentoConciliado(id="p1", valor=5.0, forma_pagamento_id="repassar-valor")],
                pagamentos_repasse=[PagamentoConciliado(id="p2", valor=7.0, forma_pagamento_id="faturar-taxa")],
            )
        }
        assert classificar_pagamentos(conciliacao, formas).sem_impacto

    def test_conciliacao_vazia(self, formas):
        assert classificar_pagamentos({}, formas).sem_impacto


class TestCompletude:
    def test_completa(self, solicitacao, conciliacao, formas):
        assert conciliacao_completa(solicitacao, conciliacao, formas)

    def test_vazia_ou_ausente_e_incompleta(self, solicitacao):
        assert not conciliacao_completa(solicitacao, None)
        assert not conciliacao_completa(solicitacao, {})

    def test_rota_sem_entrada(self, solicitacao, conciliacao):
        del conciliacao["sol-1-b"]
        assert not conciliacao_completa(solicitacao, conciliacao)

    def test_diferenca_acima_de_um_centavo(self, solicitacao, conciliacao):
        conciliacao["sol-1-a"].pagamentos_taxa[0].valor = 9.98
        assert not conciliacao_completa(solicitacao, conciliacao)

    def test_diferenca_dentro_da_tolerancia(self, solicitacao, conciliacao):
        conciliacao["sol-1-a"].pagamentos_taxa[0].valor = 9.995
        assert conciliacao_completa(solicitacao, conciliacao)

    def test_repasse_divergente(self, solicitacao, conciliacao):
        conciliacao["sol-1-b"].pagamentos_repasse[0].valor = 40.0
        assert not conciliacao_completa(solicitacao, conciliacao)

    def test_pagamento_sem_forma(self, solicitacao, conciliacao):
        conciliacao["sol-1-a"].pagamentos_taxa[0].forma_pagamento_id = ""
        assert not conciliacao_completa(solicitacao, conciliacao)

    def test_forma_inexistente_quando_formas_informadas(self, solicitacao, conciliacao, formas):
        conciliacao["sol-1-a"].pagamentos_taxa[0].forma_pagamento_id = "forma-apagada"
        assert conciliacao_completa(solicitacao, conciliacao)
        assert not conciliacao_completa(solicitacao, conciliacao, formas)

    def test_pagamento_dividido_em_duas_formas(self, solicitacao, conciliacao, formas):
        conciliacao["sol-1-b"].pagamentos_taxa = [
            PagamentoConciliado(id="x1", valor=5.0, forma_pagamento_id="pix-levaetras"),
            PagamentoConciliado(id="x2", valor=10.0, forma_pagamento_id="faturar-taxa"),
        ]
        assert conciliacao_completa(solicitacao, conciliacao, formas)
        assert classificar_pagamentos(conciliacao, formas).debitos_taxa == 20.0

    def test_entrada_de_rota_inexistente(self, solicitacao, conciliacao, formas):
        conciliacao["rota-apagada"] = RotaConciliada()
        assert not conciliacao_completa(solicitacao, conciliacao, formas)
        assert conciliacao_completa(solicitacao, conciliacao_das_rotas(solicitacao, conciliacao), formas)

    def test_so_rotas_atuais_entram_na_classificacao(self, solicitacao, conciliacao, formas):
        conciliacao["rota-apagada"] = RotaConciliada(
            pagamentos_taxa=[PagamentoConciliado(id="px", valor=40.0, forma_pagamento_id="faturar-taxa")]
        )
        filtrada = conciliacao_das_rotas(solicitacao, conciliacao)
        assert set(filtrada) == {"sol-1-a", "sol-1-b"}
        assert classificar_pagamentos(filtrada, formas).debitos_taxa == 25.0
        assert conciliacao_das_rotas(solicitacao, None) == {}

    def test_rota_de_taxa_zero_sem_pagamentos(self, formas):
        sol = nova_solicitacao(rotas=[Rota(id="r0", bairro_destino_id="bairro-se", taxa_entrega=0.0)])
        assert conciliacao_completa(sol, {"r0": RotaConciliada()}, formas)


class TestFormulario:
    def test_montar_converte_texto_e_descarta_zeros(self, solicitacao):
        formulario = {
            "sol-1-a": {
                "pagamentosTaxa": [
                    {"valor": "10,00", "formaPagamentoId": "faturar-taxa"},
                    {"valor": "0", "formaPagamentoId": "pix-loja"},
                    {"valor": "abc", "formaPagamentoId": "pix-loja"},
                ],
            },
        }
        conciliacao = montar_conciliacao(solicitacao, formulario)
        assert set(conciliacao) == {"sol-1-a", "sol-1-b"}
        taxa = conciliacao["sol-1-a"].pagamentos_taxa
        assert [(p.valor, p.forma_pagamento_id) for p in taxa] == [(10.0, "faturar-taxa")]
        assert taxa[0].id
        assert conciliacao["sol-1-b"] == RotaConciliada()

    def test_formulario_inicial_usa_virgula_decimal(self, solicitacao):
        solicitacao.conciliacao = conciliacao_exemplo()
        form = formulario_inicial(solicitacao)
        assert form["sol-1-b"]["pagamentosRepasse"][0]["valor"] == "50,00"
        assert form["sol-1-a"]["pagamentosRepasse"] == []

    def test_valor_restante(self, solicitacao):
        rota_b = solicitacao.rotas[1]
        assert valor_restante(rota_b, [{"valor": "5,00"}]) == 10.0
        assert valor_restante(rota_b, [PagamentoConciliado(id="p", valor=60.0)], TIPO_REPASSE) == -10.0
