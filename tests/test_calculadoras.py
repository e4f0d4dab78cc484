"""
Testes dos tributos atuais, do IVA Dual e da ponderação da transição.
"""

import dataclasses

import pytest

from calculadoras import CalculadoraIVADual, CalculadoraTributosAtuais


def test_tributos_atuais_comercio(perfil_base, configuracao):
    impostos = CalculadoraTributosAtuais(configuracao).calcular_todos_impostos(perfil_base)

    assert impostos["PIS"] == pytest.approx(1650)
    assert impostos["COFINS"] == pytest.approx(7600)
    assert impostos["ICMS"] == pytest.approx(18000)
    assert impostos["IPI"] == pytest.approx(10000)
    assert "ISS" not in impostos
    assert impostos["total"] == pytest.approx(37250)
    assert len(impostos["memoria_critica"]) > 0


def test_tributos_atuais_servicos_cumulativo(perfil_base, configuracao):
    perfil = dataclasses.replace(perfil_base, empresa_servicos=True, regime_cumulativo=True)
    impostos = CalculadoraTributosAtuais(configuracao).calcular_todos_impostos(perfil)

    assert impostos["PIS"] == pytest.approx(650)
    assert impostos["COFINS"] == pytest.approx(3000)
    assert impostos["ISS"] == pytest.approx(5000)
    assert "ICMS" not in impostos
    assert impostos["total"] == pytest.approx(8650)


def test_creditos_nao_geram_imposto_negativo(configuracao):
    calculadora = CalculadoraTributosAtuais(configuracao)

    assert calculadora.calcular_pis(1000, creditos=100) == 0
    assert calculadora.calcular_icms(1000, creditos=500) == 0
    # No regime cumulativo os créditos são ignorados
    assert calculadora.calcular_cofins(1000, creditos=1000, regime_cumulativo=True) == pytest.approx(30)


def test_icms_substituicao_tributaria(configuracao):
    assert CalculadoraTributosAtuais(configuracao).calcular_icms(1000, substituicao_tributaria=True) == 0


def test_total_iva_padrao(configuracao):
    iva = CalculadoraIVADual(configuracao).calcular_total_iva(100000)

    assert iva["CBS"] == pytest.approx(8800)
    assert iva["IBS"] == pytest.approx(17700)
    assert iva["total"] == pytest.approx(26500)


def test_total_iva_categorias_e_creditos(configuracao):
    calculadora = CalculadoraIVADual(configuracao)

    reduzida = calculadora.calcular_total_iva(100000, categoria="reduzida")
    assert reduzida["total"] == pytest.approx(13250)

    assert calculadora.calcular_total_iva(100000, categoria="isenta")["total"] == 0

    com_creditos = calculadora.calcular_total_iva(100000, creditos={"CBS": 10000, "IBS": 1700})
    assert com_creditos["CBS"] == 0
    assert com_creditos["IBS"] == pytest.approx(16000)


@pytest.mark.parametrize("tributo,ano,esperado", [
    ("CBS", 2026, 0.0),
    ("CBS", 2027, 1.0),
    ("CBS", 2030, 1.0),
    ("IBS", 2028, 0.0),
    ("IBS", 2029, 0.0),
    ("IBS", 2031, 0.5),
    ("IBS", 2033, 1.0),
])
def test_fator_transicao(configuracao, tributo, ano, esperado):
    assert CalculadoraIVADual(configuracao).obter_fator_transicao(tributo, ano) == pytest.approx(esperado)


def test_transicao_meio_da_janela(perfil_base, configuracao):
    calculadora = CalculadoraIVADual(configuracao)
    atuais = CalculadoraTributosAtuais(configuracao).calcular_todos_impostos(perfil_base)

    transicao = calculadora.calcular_transicao(100000, 2031, atuais)

    assert transicao["PIS"] == 0
    assert transicao["COFINS"] == 0
    assert transicao["CBS"] == pytest.approx(8800)
    assert transicao["ICMS"] == pytest.approx(9000)
    assert transicao["IBS"] == pytest.approx(8850)
    assert transicao["IPI"] == pytest.approx(10000)
    assert transicao["total"] == pytest.approx(36650)
    # O dicionário de origem não é alterado
    assert atuais["PIS"] == pytest.approx(1650)


def test_transicao_antes_da_janela(perfil_base, configuracao):
    calculadora = CalculadoraIVADual(configuracao)
    atuais = CalculadoraTributosAtuais(configuracao).calcular_todos_impostos(perfil_base)

    transicao = calculadora.calcular_transicao(100000, 2026, atuais)

    assert "CBS" not in transicao
    assert "IBS" not in transicao
    assert transicao["total"] == pytest.approx(atuais["total"])


def test_comparativo_por_ano(perfil_base, configuracao):
    comparativo = CalculadoraIVADual(configuracao).calcular_comparativo(perfil_base, [2026, 2033])

    assert list(comparativo) == [2026, 2033]
    assert comparativo[2026]["diferenca"] == pytest.approx(0)
    # 2033: apenas IPI permanece do sistema atual
    assert comparativo[2033]["impostos_transicao"] == pytest.approx(26500 + 10000)
