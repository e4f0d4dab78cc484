import pytest

from config import ConfiguracaoSplitPayment
from impacto import AnalisadorImpacto
from modelos import PerfilEmpresa


@pytest.fixture
def configuracao():
    return ConfiguracaoSplitPayment()


@pytest.fixture
def perfil_base():
    """Empresa de referência: R$ 100 mil/mês, alíquota efetiva de 26,5%, sem créditos."""
    return PerfilEmpresa(
        faturamento=100000.0,
        margem=0.15,
        pmr=30,
        pmp=30,
        pme=30,
        perc_vista=0.3,
        perc_prazo=0.7,
        aliquota=0.265,
        creditos=0.0
    )


@pytest.fixture
def impacto_2026(perfil_base, configuracao):
    return AnalisadorImpacto(configuracao).calcular_impacto(perfil_base, 2026)


@pytest.fixture
def estrategias_padrao():
    return {
        "ajuste_precos": {"ativar": True, "percentual_aumento": 5, "elasticidade": -0.5, "periodo_ajuste": 12},
        "renegociacao_prazos": {"ativar": True, "aumento_prazo": 15, "percentual_fornecedores": 60,
                                "contrapartidas": "nenhuma", "custo_contrapartida": 0},
        "antecipacao_recebiveis": {"ativar": True, "percentual_antecipacao": 50, "taxa_desconto": 0.018,
                                   "prazo_antecipacao": 30},
        "capital_giro": {"ativar": True, "valor_captacao": 100, "taxa_juros": 0.021, "prazo_pagamento": 12,
                         "carencia": 3},
        "mix_produtos": {"ativar": True, "percentual_ajuste": 30, "foco_ajuste": "ciclo", "impacto_receita": 5,
                         "impacto_margem": 1},
        "meios_pagamento": {"ativar": True, "distribuicao_atual": {"vista": 30, "prazo": 70},
                            "distribuicao_nova": {"vista": 60, "dias30": 30, "dias60": 10, "dias90": 0},
                            "taxa_incentivo": 3}
    }
