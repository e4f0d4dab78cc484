"""
Testes da projeção temporal e da análise de elasticidade.
"""

import math

import pytest

from config import ConfiguracaoSplitPayment
from projecao import ProjecaoTemporal, resolver_taxa_crescimento


@pytest.mark.parametrize("cenario,taxa,esperado", [
    ("conservador", None, 0.02),
    ("moderado", None, 0.05),
    ("otimista", None, 0.08),
    ("personalizado", 0.10, 0.10),
    ("personalizado", -0.02, -0.02),
    ("personalizado", 0.0, 0.0),
])
def test_resolver_taxa_crescimento(cenario, taxa, esperado):
    assert resolver_taxa_crescimento(cenario, taxa) == esperado


def test_personalizado_sem_taxa_usa_moderado(caplog):
    assert resolver_taxa_crescimento("personalizado", None) == 0.05
    assert "personalizado" in caplog.text


def test_cenario_desconhecido_usa_moderado(caplog):
    assert resolver_taxa_crescimento("pessimista") == 0.05
    assert "pessimista" in caplog.text


def test_crescimento_composto(perfil_base, configuracao):
    projecao = ProjecaoTemporal(configuracao).calcular_projecao(
        perfil_base, 2026, 2028, "moderado", incluir_elasticidade=False)

    anuais = projecao["resultados_anuais"]
    assert list(anuais) == [2026, 2027, 2028]
    assert anuais[2026]["resultado_atual"]["faturamento"] == pytest.approx(100000)
    assert anuais[2028]["resultado_atual"]["faturamento"] == pytest.approx(100000 * 1.05 ** 2)
    assert perfil_base.faturamento == 100000


def test_impacto_acumulado(perfil_base, configuracao):
    projecao = ProjecaoTemporal(configuracao).calcular_projecao(
        perfil_base, 2026, 2028, "moderado", incluir_elasticidade=False)
    acumulado = projecao["impacto_acumulado"]
    anuais = projecao["resultados_anuais"].values()

    diferencas = 2650 + 27825 * 0.25 + 29216.25 * 0.40
    assert acumulado["total_necessidade_capital_giro"] == pytest.approx(diferencas * 1.2)
    assert acumulado["custo_financeiro_total"] == pytest.approx(
        sum(a["impacto_margem"]["custo_anual_capital_giro"] for a in anuais))
    assert acumulado["impacto_medio_margem"] == pytest.approx(
        sum(a["impacto_margem"]["impacto_percentual"] for a in anuais) / 3)
    assert projecao["analise_elasticidade"] is None
    assert projecao["parametros"]["taxa_crescimento"] == 0.05


def test_ano_unico(perfil_base, configuracao):
    projecao = ProjecaoTemporal(configuracao).calcular_projecao(
        perfil_base, 2030, 2030, incluir_elasticidade=False)

    assert list(projecao["resultados_anuais"]) == [2030]


def test_elasticidade(perfil_base, configuracao):
    projecao = ProjecaoTemporal(configuracao).calcular_projecao(perfil_base, 2026, 2028, "moderado")
    elasticidade = projecao["analise_elasticidade"]

    assert "Moderado" not in elasticidade["elasticidades"]
    assert set(elasticidade["elasticidades"]) == {"Recessão", "Estagnação", "Conservador", "Otimista", "Acelerado"}
    assert all(math.isfinite(valor) for valor in elasticidade["elasticidades"].values())
    assert "Moderado" in elasticidade["resultados"]
    # Crescimento maior gera impacto acumulado maior
    assert elasticidade["elasticidades"]["Acelerado"] > 0
    assert elasticidade["resultados"]["Acelerado"]["impacto_acumulado"] > \
        elasticidade["resultados"]["Recessão"]["impacto_acumulado"]


def test_elasticidade_referencia_com_taxa_zero(perfil_base):
    config = ConfiguracaoSplitPayment()
    config.cenarios_elasticidade = [
        {"nome": "Estagnação", "taxa": 0.0},
        {"nome": "Moderado", "taxa": 0.0},
        {"nome": "Otimista", "taxa": 0.08}
    ]
    elasticidade = ProjecaoTemporal(config).calcular_analise_elasticidade(perfil_base, 2026, 2027)

    assert elasticidade["elasticidades"] == {"Estagnação": 0.0, "Otimista": 0.0}


def test_elasticidade_sem_impacto(perfil_base):
    config = ConfiguracaoSplitPayment()
    config.cronograma_implementacao = {}
    elasticidade = ProjecaoTemporal(config).calcular_analise_elasticidade(perfil_base, 2026, 2027)

    assert all(valor == 0 for valor in elasticidade["elasticidades"].values())


def test_elasticidade_com_memoria(perfil_base, configuracao):
    elasticidade = ProjecaoTemporal(configuracao).calcular_analise_elasticidade(perfil_base, 2026, 2027)

    assert len(elasticidade["memoria_critica"].por_rotulo("Elasticidades")) == 5
