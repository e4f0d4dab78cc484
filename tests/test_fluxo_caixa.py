"""
Testes do fluxo de caixa no regime atual e no Split Payment.
"""

import dataclasses

import pytest

from fluxo_caixa import CalculadoraFluxoCaixa, calcular_tempo_medio_capital_giro


def test_tempo_medio_capital_giro():
    assert calcular_tempo_medio_capital_giro(30, 25, 0.3, 0.7) == pytest.approx(7.5)
    assert calcular_tempo_medio_capital_giro(10, 25, 0.5, 0.5) == pytest.approx(20)


def test_fluxo_atual(perfil_base, configuracao):
    fluxo = CalculadoraFluxoCaixa(configuracao).calcular_fluxo_atual(perfil_base)

    assert fluxo["valor_imposto_liquido"] == pytest.approx(26500)
    assert fluxo["capital_giro_disponivel"] == pytest.approx(26500)
    assert fluxo["tempo_medio_capital_giro"] == pytest.approx(7.5)
    assert fluxo["beneficio_dias_capital_giro"] == pytest.approx(1.9875)
    assert fluxo["fluxo_caixa_liquido"] == pytest.approx(73500)
    assert fluxo["impostos"]["total"] > 0


def test_fluxo_split_payment_2026(perfil_base, configuracao):
    fluxo = CalculadoraFluxoCaixa(configuracao).calcular_fluxo_split_payment(perfil_base, 2026)

    assert fluxo["percentual_implementacao"] == 0.10
    assert fluxo["valor_imposto_split"] == pytest.approx(2650)
    assert fluxo["capital_giro_disponivel"] == pytest.approx(23850)
    assert fluxo["recebimento_vista"] == pytest.approx(29205)
    assert fluxo["recebimento_prazo"] == pytest.approx(68145)
    assert fluxo["beneficio_dias_capital_giro"] == pytest.approx(1.78875)
    assert fluxo["impostos_iva"] is None


def test_fluxo_split_payment_integral(perfil_base, configuracao):
    fluxo = CalculadoraFluxoCaixa(configuracao).calcular_fluxo_split_payment(perfil_base, 2033)

    assert fluxo["capital_giro_disponivel"] == 0
    assert fluxo["impostos_iva"]["total"] == pytest.approx(26500)
    assert fluxo["impostos_transicao"]["fator_ibs"] == 1.0


def test_sem_implementacao_capital_igual_ao_atual(perfil_base, configuracao):
    calculadora = CalculadoraFluxoCaixa(configuracao)
    atual = calculadora.calcular_fluxo_atual(perfil_base)
    split = calculadora.calcular_fluxo_split_payment(perfil_base, 2025)

    assert split["percentual_implementacao"] == 0
    assert split["capital_giro_disponivel"] == atual["capital_giro_disponivel"]


def test_creditos_maiores_que_imposto(perfil_base, configuracao):
    perfil = dataclasses.replace(perfil_base, creditos=50000)
    fluxo = CalculadoraFluxoCaixa(configuracao).calcular_fluxo_split_payment(perfil, 2030)

    assert fluxo["valor_imposto_liquido"] == 0
    assert fluxo["capital_giro_disponivel"] == 0


def test_faturamento_zero(perfil_base, configuracao):
    perfil = perfil_base.com_faturamento(0.0)
    calculadora = CalculadoraFluxoCaixa(configuracao)

    assert calculadora.calcular_fluxo_atual(perfil)["beneficio_dias_capital_giro"] == 0
    assert calculadora.calcular_fluxo_split_payment(perfil, 2026)["beneficio_dias_capital_giro"] == 0


def test_cronograma_setorial(perfil_base, configuracao):
    combustiveis = configuracao.obter_parametros_setoriais("combustiveis")
    fluxo = CalculadoraFluxoCaixa(configuracao).calcular_fluxo_split_payment(perfil_base, 2026, combustiveis)

    assert fluxo["valor_imposto_split"] == pytest.approx(5300)
