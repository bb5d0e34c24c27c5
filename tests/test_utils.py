"""Testes dos utilitários de moeda, datas e identificadores."""

from datetime import date, datetime

import pytest

from shared.ids import avatar_url, proximo_codigo_solicitacao, proximo_numero_fatura, sanitize
from utils.utils import (
    arredondar_moeda,
    coerce_data,
    formatar_data,
    formatar_moeda,
    moeda_igual,
    parse_datetime,
    parse_moeda,
)


@pytest.mark.parametrize(
    "entrada, esperado",
    [
        ("R$ 1.234,56", 1234.56),
        ("10,00", 10.0),
        ("  7,5 ", 7.5),
        (12, 12.0),
        (8.25, 8.25),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("nan", 0.0),
        ("Infinity", 0.0),
    ],
)
def test_parse_moeda(entrada, esperado):
    assert parse_moeda(entrada) == esperado


def test_formatar_moeda_padrao_brasileiro():
    assert formatar_moeda(1234.5) == "R$ 1.234,50"
    assert formatar_moeda(0) == "R$ 0,00"


def test_arredondar_moeda_meio_para_cima():
    assert arredondar_moeda(2.675) == 2.68
    assert arredondar_moeda("0.005") == 0.01


def test_moeda_igual_tolerancia_de_centavo():
    assert moeda_igual(10.0, 10.009)
    assert moeda_igual(10.0, 10.01)
    assert not moeda_igual(10.0, 10.02)


def test_parse_datetime_aceita_sufixo_z_e_invalido_usa_padrao():
    assert parse_datetime("2025-06-01T10:00:00") == datetime(2025, 6, 1, 10, 0)
    assert parse_datetime("2025-06-01T10:00:00Z").tzinfo is None
    padrao = datetime(2000, 1, 1)
    assert parse_datetime("ontem", padrao) is padrao
    assert parse_datetime(None) is None


def test_coerce_data_formatos():
    assert coerce_data("2025-06-01") == date(2025, 6, 1)
    assert coerce_data("01/06/2025") == date(2025, 6, 1)
    assert coerce_data(datetime(2025, 6, 1, 23, 59)) == date(2025, 6, 1)
    with pytest.raises(ValueError):
        coerce_data("junho")


def test_formatar_data():
    assert formatar_data("2025-06-01T10:00:00") == "01/06/2025"
    assert formatar_data(None) == ""


class TestIdentificadores:
    def test_codigo_solicitacao_sequencial(self):
        assert proximo_codigo_solicitacao([], 0) == "SOL-1001"
        assert proximo_codigo_solicitacao(["SOL-1001", "SOL-1002"], 2) == "SOL-1003"

    def test_codigo_solicitacao_avanca_alem_do_maior_existente(self):
        # SOL-1001 excluída: contagem diz 1002, mas 1002 já existe
        assert proximo_codigo_solicitacao(["SOL-1002"], 1) == "SOL-1003"

    def test_numero_fatura_reinicia_por_ano(self):
        numeros = ["FAT-2024-0007", "FAT-2025-0001", "FAT-2025-0002"]
        assert proximo_numero_fatura(numeros, 2025) == "FAT-2025-0003"
        assert proximo_numero_fatura(numeros, 2026) == "FAT-2026-0001"

    def test_avatar_e_sanitize(self):
        assert avatar_url("Ana Silva").endswith("seed=Ana+Silva")
        assert sanitize("  Loja\x00 Centro ") == "Loja Centro"
