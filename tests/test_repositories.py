"""Testes dos repositórios de cadastro, do livro de transações e das notificações."""

from datetime import date, datetime

import pytest

from repository.clientes_repository import ClientesRepository
from repository.entregadores_repository import EntregadoresRepository
from repository.settings_repository import SettingsRepository
from repository.transacoes_repository import TransacoesRepository
from repository.types import ACAO_GERAR_DEBITO_TAXA, MODALIDADE_FATURADO, MODALIDADE_PRE_PAGO
from services.notificacoes import NotificacoesService
from shared.errors import CargoEmUsoError


class TestSettings:
    def test_formas_de_conciliacao_padrao(self, store):
        formas = {f.id: f.acao_faturamento for f in SettingsRepository(store).listar_formas_conciliacao()}
        assert formas["faturar-taxa"] == ACAO_GERAR_DEBITO_TAXA
        assert len(formas) == 5

    def test_forma_com_acao_invalida(self, store):
        settings = SettingsRepository(store)
        with pytest.raises(ValueError):
            settings.adicionar_forma_conciliacao("Boleto", "COBRAR_DOBRADO")
        nova = settings.adicionar_forma_conciliacao("Boleto Loja", ACAO_GERAR_DEBITO_TAXA)
        assert SettingsRepository(store).formas_conciliacao.obter(nova.id) == nova

    def test_taxa_do_bairro(self, store):
        settings = SettingsRepository(store)
        assert settings.taxa_do_bairro("bairro-barra") == 12.0
        assert settings.taxa_do_bairro("nao-existe") == 0.0
        bairro = settings.adicionar_bairro("Leblon", "9,90", "zona-sul")
        assert settings.taxa_do_bairro(bairro["id"]) == 9.9

    def test_excluir_regiao_remove_bairros(self, store):
        settings = SettingsRepository(store)
        settings.excluir_regiao("zona-sul")
        assert settings.regioes.obter("zona-sul") is None
        assert settings.bairros.obter("bairro-copacabana") is None
        assert settings.bairros.obter("bairro-tijuca") is not None

    def test_alternar_metodo_pagamento(self, store):
        settings = SettingsRepository(store)
        assert settings.alternar_metodo_pagamento("pm-cartao")["enabled"] is True
        assert {m["id"] for m in settings.metodos_habilitados()} == {"pm-pix", "pm-cartao", "pm-dinheiro"}

    def test_cargo_em_uso_nao_pode_ser_excluido(self, store):
        settings = SettingsRepository(store)
        with pytest.raises(CargoEmUsoError):
            settings.excluir_cargo("admin-master")
        settings.excluir_usuario("admin-2")
        assert settings.excluir_cargo("gerente-logistica")

    def test_permissoes_do_usuario(self, store):
        settings = SettingsRepository(store)
        assert "faturas:view" in settings.permissoes_do_usuario("admin-1")
        assert "faturas:view" not in settings.permissoes_do_usuario("admin-2")
        assert settings.permissoes_do_usuario("client-1") == []

    def test_categorias(self, store):
        settings = SettingsRepository(store)
        nova = settings.adicionar_categoria("despesas", "Pedágio")
        assert nova in SettingsRepository(store).categorias["despesas"]
        settings.excluir_categoria("despesas", nova["id"])
        assert nova not in settings.categorias["despesas"]
        with pytest.raises(ValueError):
            settings.adicionar_categoria("outros", "X")


class TestCadastros:
    def test_modalidade_do_cliente(self, store):
        clientes = ClientesRepository(store)
        assert clientes.modalidade("client-1") == MODALIDADE_FATURADO
        assert clientes.modalidade("client-2") == MODALIDADE_PRE_PAGO
        assert clientes.modalidade("nao-existe") is None

    def test_novo_cliente_no_topo_e_pre_pago_por_padrao(self, store):
        clientes = ClientesRepository(store)
        novo = clientes.adicionar_cliente({"nome": "  Mercado Bom Preço ", "totalPedidos": 99})
        assert clientes.itens[0]["id"] == novo["id"]
        assert (novo["nome"], novo["modalidade"], novo["totalPedidos"]) == ("Mercado Bom Preço", MODALIDADE_PRE_PAGO, 0)
        with pytest.raises(ValueError):
            clientes.adicionar_cliente({"nome": " "})

    def test_entregador_atualizado_recalcula_avatar(self, store):
        entregadores = EntregadoresRepository(store)
        atualizado = entregadores.atualizar_entregador("entregador-2", {"nome": "Carlos Souza Jr"})
        assert atualizado["avatar"].endswith("Carlos+Souza+Jr")
        assert len(entregadores.ativos()) == 2


class TestTransacoes:
    @pytest.fixture
    def transacoes(self, store):
        repo = TransacoesRepository(store)
        repo.add_transaction("credit", "recharge_pix", "Recarga", 100, "Loja", date=datetime(2025, 6, 1, 9))
        repo.add_transaction("debit", "delivery_fee", "Taxa SOL-1001", 8.5, "Loja", date=datetime(2025, 6, 2, 9))
        repo.add_transaction("debit", "delivery_fee", "Taxa SOL-1002", 7, "Outra", date=datetime(2025, 6, 3, 9))
        return repo

    def test_saldo(self, transacoes):
        assert transacoes.saldo_cliente("Loja") == 91.5
        assert transacoes.saldo_cliente("Outra") == -7.0
        assert transacoes.saldo_cliente("Ninguém") == 0.0

    def test_mais_recente_primeiro(self, transacoes):
        assert [t.description for t in transacoes.itens][0] == "Taxa SOL-1002"

    def test_tipo_ou_origem_invalidos(self, transacoes):
        with pytest.raises(ValueError):
            transacoes.add_transaction("refund", "delivery_fee", "x", 1, "Loja")
        with pytest.raises(ValueError):
            transacoes.add_transaction("debit", "gorjeta", "x", 1, "Loja")

    def test_extrato_com_filtros(self, transacoes):
        df = transacoes.extrato_df("Loja")
        assert list(df["descricao"]) == ["Taxa SOL-1001", "Recarga"]
        assert list(df["valor_assinado"]) == [-8.5, 100.0]
        assert df.loc[0, "origem"] == "Taxa de Entrega"

        assert list(transacoes.extrato_df("Loja", tipo="credit")["descricao"]) == ["Recarga"]
        assert len(transacoes.extrato_df("Loja", tipo="todos")) == 2
        assert list(transacoes.extrato_df("Loja", data_inicio=date(2025, 6, 2))["descricao"]) == ["Taxa SOL-1001"]
        assert list(transacoes.extrato_df("Loja", data_fim=date(2025, 6, 1))["descricao"]) == ["Recarga"]

    def test_extrato_vazio_mantem_colunas(self, transacoes):
        df = transacoes.extrato_df("Ninguém")
        assert df.empty
        assert "valor_assinado" in df.columns


class TestNotificacoes:
    def test_contagem_desde_a_ultima_visualizacao(self, ledger, store):
        novos = [
            ledger.solicitacoes.adicionar_solicitacao({"clienteId": "client-1", "rotas": []}, por_admin=False)
            for _ in range(2)
        ]
        assert ledger.notificacoes.contagem_nao_vistas() == 2
        ledger.notificacoes.marcar_como_vistas()
        assert ledger.notificacoes.contagem_nao_vistas() == 0

        ledger.solicitacoes.adicionar_solicitacao({"clienteId": "client-1", "rotas": []}, por_admin=False)
        assert NotificacoesService(store, ledger.solicitacoes_repo).contagem_nao_vistas() == 1
        assert ledger.notificacoes.houve_novas(2)

        ledger.solicitacoes.atualizar_status(novos[0].id, "aceita")
        assert ledger.notificacoes.total_pendentes() == 2
