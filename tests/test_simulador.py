"""
Testes de ponta a ponta do simulador.
"""

import pytest

from simulador import SimuladorSplitPayment


def test_simular(perfil_base, configuracao, caplog):
    caplog.set_level("INFO")
    resultado = SimuladorSplitPayment(configuracao).simular(perfil_base, 2026, 2028)

    assert set(resultado) == {"impacto_base", "projecao_temporal", "necessidade_capital",
                              "impacto_ciclo_financeiro", "comparativo_regimes", "memoria_critica"}
    assert resultado["impacto_base"]["diferenca_capital_giro"] == pytest.approx(-2650)
    assert list(resultado["projecao_temporal"]["resultados_anuais"]) == [2026, 2027, 2028]
    assert list(resultado["comparativo_regimes"]) == [2026, 2027, 2028]
    assert resultado["necessidade_capital"]["necessidade_total"] == pytest.approx(2650 * 1.2 * 1.3)
    assert len(resultado["memoria_critica"]) > 0
    assert "Simulando Split Payment" in caplog.text


def test_simular_ate_o_fim_do_cronograma(perfil_base, configuracao):
    resultado = SimuladorSplitPayment(configuracao).simular(perfil_base)

    assert max(resultado["projecao_temporal"]["resultados_anuais"]) == configuracao.ano_final_cronograma


def test_simular_parametros_setoriais(perfil_base, configuracao):
    saude = configuracao.obter_parametros_setoriais("saude")
    resultado = SimuladorSplitPayment(configuracao).simular(perfil_base, 2026, 2026, saude)

    assert resultado["impacto_base"]["diferenca_capital_giro"] == pytest.approx(-26500 * 0.05)


def test_avaliar_mitigacao(perfil_base, configuracao, estrategias_padrao):
    resultado = SimuladorSplitPayment(configuracao).avaliar_mitigacao(perfil_base, estrategias_padrao)

    assert len(resultado["resultados_estrategias"]) == 6
    assert resultado["estrategia_mais_efetiva"][0] == "renegociacao_prazos"
    efetividades = [r.efetividade_percentual for _, r in resultado["estrategias_ordenadas"]]
    assert efetividades == sorted(efetividades, reverse=True)
    assert resultado["efetividade_combinada"]["estrategias_ativas"] == 6
    assert resultado["combinacao_otima"]["estrategias_selecionadas"]


def test_avaliar_mitigacao_com_distribuicao_invalida(perfil_base, configuracao, estrategias_padrao):
    estrategias_padrao["meios_pagamento"]["distribuicao_nova"] = {"vista": 40, "dias30": 30, "dias60": 20,
                                                                   "dias90": 6}
    resultado = SimuladorSplitPayment(configuracao).avaliar_mitigacao(perfil_base, estrategias_padrao)

    assert not resultado["resultados_estrategias"]["meios_pagamento"].valido
    assert resultado["estrategias_ordenadas"][-1][0] == "meios_pagamento"
    assert resultado["efetividade_combinada"]["estrategias_ativas"] == 5
    assert "meios_pagamento" not in resultado["combinacao_otima"]["estrategias_selecionadas"]


def test_avaliar_mitigacao_sem_estrategias(perfil_base, configuracao):
    resultado = SimuladorSplitPayment(configuracao).avaliar_mitigacao(perfil_base, {})

    assert resultado["estrategia_mais_efetiva"] is None
    assert resultado["combinacao_otima"]["estrategias_selecionadas"] == []
