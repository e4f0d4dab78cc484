import logging

from config import ConfiguracaoSplitPayment
from impacto import AnalisadorImpacto
from memoria import MemoriaCritica
from utils import formatar_br

logger = logging.getLogger(__name__)


def resolver_taxa_crescimento(cenario, taxa_personalizada=None, configuracao=None):
    """Taxa anual de crescimento de um cenário.

    No cenário "personalizado" sem taxa informada, e para cenários
    desconhecidos, vale a taxa do cenário padrão (moderado).
    """
    config = configuracao or ConfiguracaoSplitPayment()
    taxa_padrao = config.cenarios_crescimento[config.cenario_padrao]

    if cenario == "personalizado":
        if taxa_personalizada is None:
            logger.warning("Cenário personalizado sem taxa de crescimento; usando %s.", config.cenario_padrao)
            return taxa_padrao
        return taxa_personalizada

    if cenario not in config.cenarios_crescimento:
        logger.warning("Cenário de crescimento desconhecido '%s'; usando %s.", cenario, config.cenario_padrao)
        return taxa_padrao

    return config.cenarios_crescimento[cenario]


class ProjecaoTemporal:
    """Projeção ano a ano do impacto, com crescimento composto do faturamento."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.analisador = AnalisadorImpacto(self.config)

    def calcular_projecao(self, perfil, ano_inicial=2026, ano_final=2033, cenario="moderado",
                          taxa_personalizada=None, parametros_setoriais=None, incluir_elasticidade=True):
        taxa_crescimento = resolver_taxa_crescimento(cenario, taxa_personalizada, self.config)

        resultados_anuais = {}
        total_necessidade = 0.0
        custo_financeiro_total = 0.0
        soma_impacto_margem = 0.0

        perfil_ano = perfil
        for ano in range(ano_inicial, ano_final + 1):
            impacto_ano = self.analisador.calcular_impacto(perfil_ano, ano, parametros_setoriais)
            resultados_anuais[ano] = impacto_ano

            total_necessidade += impacto_ano["necessidade_adicional_capital_giro"]
            custo_financeiro_total += impacto_ano["impacto_margem"]["custo_anual_capital_giro"]
            soma_impacto_margem += impacto_ano["impacto_margem"]["impacto_percentual"]

            perfil_ano = perfil_ano.com_faturamento(perfil_ano.faturamento * (1 + taxa_crescimento))

        num_anos = ano_final - ano_inicial + 1
        impacto_acumulado = {
            "total_necessidade_capital_giro": total_necessidade,
            "custo_financeiro_total": custo_financeiro_total,
            "impacto_medio_margem": soma_impacto_margem / num_anos if num_anos > 0 else 0.0
        }

        analise_elasticidade = None
        if incluir_elasticidade:
            analise_elasticidade = self.calcular_analise_elasticidade(
                perfil, ano_inicial, ano_final, parametros_setoriais)

        memoria = MemoriaCritica(f"Projeção Temporal {ano_inicial}-{ano_final}")
        memoria.adicionar("Parâmetros", f"Cenário {cenario}: crescimento de "
                                        f"{formatar_br(taxa_crescimento * 100)}% a.a.")
        for ano, impacto_ano in resultados_anuais.items():
            memoria.adicionar("Anos", f"{ano}: faturamento R$ {formatar_br(impacto_ano['resultado_atual']['faturamento'])}, "
                                      f"diferença R$ {formatar_br(impacto_ano['diferenca_capital_giro'])}")
        memoria.adicionar("Acumulado", "Necessidade total de capital de giro: "
                                       f"R$ {formatar_br(total_necessidade)}")
        memoria.adicionar("Acumulado", f"Custo financeiro total: R$ {formatar_br(custo_financeiro_total)}")

        logger.debug("Projeção %s-%s concluída com taxa %.4f", ano_inicial, ano_final, taxa_crescimento)

        return {
            "parametros": {
                "ano_inicial": ano_inicial,
                "ano_final": ano_final,
                "cenario_taxa_crescimento": cenario,
                "taxa_crescimento": taxa_crescimento
            },
            "resultados_anuais": resultados_anuais,
            "impacto_acumulado": impacto_acumulado,
            "analise_elasticidade": analise_elasticidade,
            "memoria_critica": memoria
        }

    def calcular_analise_elasticidade(self, perfil, ano_inicial, ano_final, parametros_setoriais=None):
        """Elasticidade do impacto acumulado em relação à taxa de crescimento.

        Cada cenário é comparado ao cenário de referência, que fica fora do
        mapa de elasticidades.
        """
        resultados = {}
        for cenario in self.config.cenarios_elasticidade:
            projecao = self.calcular_projecao(perfil, ano_inicial, ano_final, "personalizado", cenario["taxa"],
                                              parametros_setoriais, incluir_elasticidade=False)
            acumulado = projecao["impacto_acumulado"]
            resultados[cenario["nome"]] = {
                "taxa": cenario["taxa"],
                "impacto_acumulado": acumulado["total_necessidade_capital_giro"],
                "custo_financeiro_total": acumulado["custo_financeiro_total"],
                "impacto_medio_margem": acumulado["impacto_medio_margem"]
            }

        nome_referencia = self.config.cenario_referencia_elasticidade
        referencia = resultados[nome_referencia]
        elasticidades = {}
        for nome, resultado in resultados.items():
            if nome == nome_referencia:
                continue
            if referencia["impacto_acumulado"]:
                variacao_impacto = ((resultado["impacto_acumulado"] - referencia["impacto_acumulado"])
                                    / referencia["impacto_acumulado"])
            else:
                variacao_impacto = 0.0
            if referencia["taxa"]:
                variacao_taxa = (resultado["taxa"] - referencia["taxa"]) / referencia["taxa"]
            else:
                variacao_taxa = 0.0
            elasticidades[nome] = variacao_impacto / variacao_taxa if variacao_taxa != 0 else 0.0

        memoria = MemoriaCritica(f"Análise de Elasticidade - {ano_inicial} a {ano_final}")
        memoria.adicionar("Referência", f"Cenário {nome_referencia}: "
                                        f"{formatar_br(referencia['taxa'] * 100, 1)}% a.a.")
        for nome, elasticidade in elasticidades.items():
            memoria.adicionar("Elasticidades", f"{nome}: {formatar_br(elasticidade, 4)}")

        return {
            "cenarios": [dict(cenario) for cenario in self.config.cenarios_elasticidade],
            "resultados": resultados,
            "elasticidades": elasticidades,
            "memoria_critica": memoria
        }
