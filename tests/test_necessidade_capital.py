"""
Testes da necessidade adicional de capital e das opções de financiamento.
"""

import dataclasses

import pytest

from necessidade_capital import CalculadoraNecessidadeCapital


def test_fatores_reportados_separadamente(perfil_base, configuracao):
    necessidade = CalculadoraNecessidadeCapital(configuracao).calcular_necessidade(perfil_base, 2026)

    assert necessidade["necessidade_basica"] == pytest.approx(2650)
    assert necessidade["fator_margem_seguranca"] == 1.2
    assert necessidade["fator_sazonalidade"] == 1.3
    assert necessidade["fator_crescimento"] == pytest.approx(1.0)
    assert necessidade["necessidade_com_margem_seguranca"] == pytest.approx(3180)
    assert necessidade["necessidade_com_sazonalidade"] == pytest.approx(3445)
    assert necessidade["necessidade_total"] == pytest.approx(2650 * 1.2 * 1.3)


def test_fator_crescimento_composto(perfil_base, configuracao):
    calculadora = CalculadoraNecessidadeCapital(configuracao)

    assert calculadora.calcular_fator_crescimento(perfil_base, 2028) == pytest.approx(1.05 ** 2)

    otimista = dataclasses.replace(perfil_base, cenario="otimista")
    assert calculadora.calcular_fator_crescimento(otimista, 2029) == pytest.approx(1.08 ** 3)

    personalizado = dataclasses.replace(perfil_base, cenario="personalizado", taxa_crescimento=None)
    assert calculadora.calcular_fator_crescimento(personalizado, 2027) == pytest.approx(1.05)


def test_opcoes_financiamento(perfil_base, configuracao):
    resultado = CalculadoraNecessidadeCapital(configuracao).calcular_opcoes_financiamento(perfil_base, 4134)
    opcoes = {opcao["tipo"]: opcao for opcao in resultado["opcoes"]}

    capital = opcoes["Capital de Giro"]
    assert capital["valor_aprovado"] == pytest.approx(4134)
    assert capital["custo_total"] == pytest.approx(4134 * 0.021 * 9)
    assert capital["taxa_efetiva_anual"] == pytest.approx(1.021 ** 12 - 1)
    assert capital["valor_parcela"] == pytest.approx(4134 / 12 + 4134 * 0.021)

    bancario = opcoes["Empréstimo Bancário"]
    assert bancario["taxa_mensal"] == pytest.approx(0.026)
    assert bancario["custo_total"] == pytest.approx(4134 * 0.026 * 18)

    assert resultado["opcao_recomendada"]["tipo"] == "Antecipação de Recebíveis"
    custos = [opcao["custo_total"] for opcao in resultado["opcoes"]]
    assert custos == sorted(custos)


def test_limite_antecipacao(perfil_base, configuracao):
    resultado = CalculadoraNecessidadeCapital(configuracao).calcular_opcoes_financiamento(perfil_base, 500000)
    antecipacao = next(o for o in resultado["opcoes"] if o["tipo"] == "Antecipação de Recebíveis")

    assert antecipacao["valor_maximo"] == pytest.approx(210000)
    assert antecipacao["valor_aprovado"] == pytest.approx(210000)


def test_empate_mantem_ordem_configurada(perfil_base, configuracao):
    configuracao.linhas_financiamento = [
        {"tipo": "A", "taxa": "taxa_antecipacao", "prazo": 6, "carencia": 0, "base_limite": "necessidade",
         "multiplicador_limite": 1},
        {"tipo": "B", "taxa": "taxa_antecipacao", "prazo": 6, "carencia": 0, "base_limite": "necessidade",
         "multiplicador_limite": 1}
    ]
    resultado = CalculadoraNecessidadeCapital(configuracao).calcular_opcoes_financiamento(perfil_base, 1000)

    assert [o["tipo"] for o in resultado["opcoes"]] == ["A", "B"]
    assert resultado["opcao_recomendada"]["tipo"] == "A"


def test_impacto_resultado(perfil_base, configuracao):
    resultado = CalculadoraNecessidadeCapital(configuracao).calcular_impacto_resultado(perfil_base, 1800)

    assert resultado["faturamento_anual"] == 1200000
    assert resultado["lucro_operacional_anual"] == pytest.approx(180000)
    assert resultado["percentual_da_receita"] == pytest.approx(0.15)
    assert resultado["percentual_do_lucro"] == pytest.approx(1.0)
    assert resultado["margem_ajustada"] == pytest.approx(178200 / 1200000)


def test_impacto_resultado_sem_faturamento(perfil_base, configuracao):
    perfil = perfil_base.com_faturamento(0.0)
    resultado = CalculadoraNecessidadeCapital(configuracao).calcular_impacto_resultado(perfil, 100)

    assert resultado["percentual_da_receita"] == 0
    assert resultado["margem_ajustada"] == 0


def test_memorias_de_financiamento_e_resultado(perfil_base, configuracao):
    necessidade = CalculadoraNecessidadeCapital(configuracao).calcular_necessidade(perfil_base, 2026)

    opcoes = necessidade["opcoes_financiamento"]["memoria_critica"]
    assert len(opcoes.por_rotulo("Opções")) == len(configuracao.linhas_financiamento)
    assert opcoes.por_rotulo("Recomendação") == [necessidade["opcoes_financiamento"]["opcao_recomendada"]["tipo"]]
    assert len(necessidade["impacto_resultado"]["memoria_critica"]) == 2
