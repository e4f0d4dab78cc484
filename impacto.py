import logging

from config import ConfiguracaoSplitPayment
from fluxo_caixa import CalculadoraFluxoCaixa
from memoria import MemoriaCritica
from utils import formatar_br

logger = logging.getLogger(__name__)


class AnalisadorImpacto:
    """Compara o regime atual com o Split Payment para um ano.

    `diferenca_capital_giro` (Split Payment - atual) é a referência de sinal
    para todos os cálculos seguintes: negativa significa menos capital de giro
    disponível no novo regime.
    """

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.fluxo_caixa = CalculadoraFluxoCaixa(self.config)

    def calcular_impacto(self, perfil, ano, parametros_setoriais=None):
        resultado_atual = self.fluxo_caixa.calcular_fluxo_atual(perfil)
        resultado_split = self.fluxo_caixa.calcular_fluxo_split_payment(perfil, ano, parametros_setoriais)

        capital_atual = resultado_atual["capital_giro_disponivel"]
        diferenca_capital_giro = resultado_split["capital_giro_disponivel"] - capital_atual
        if capital_atual == 0:
            logger.debug("Capital de giro atual nulo; percentual de impacto considerado zero.")
            percentual_impacto = 0.0
        else:
            percentual_impacto = diferenca_capital_giro / capital_atual * 100

        fator = self.config.parametros_financeiros["fator_necessidade_impacto"]
        necessidade_adicional = abs(diferenca_capital_giro) * fator
        impacto_dias_faturamento = (resultado_atual["beneficio_dias_capital_giro"]
                                    - resultado_split["beneficio_dias_capital_giro"])

        analise_sensibilidade = self.calcular_analise_sensibilidade(perfil, ano, parametros_setoriais)
        impacto_margem = self.calcular_impacto_margem(perfil, diferenca_capital_giro)

        memoria = MemoriaCritica(f"Impacto do Split Payment no Capital de Giro - {ano}")
        memoria.adicionar("Resultados", f"Capital de giro no regime atual: R$ {formatar_br(capital_atual)}")
        memoria.adicionar("Resultados", "Capital de giro com Split Payment: "
                                        f"R$ {formatar_br(resultado_split['capital_giro_disponivel'])}")
        memoria.adicionar("Resultados", f"Diferença: R$ {formatar_br(diferenca_capital_giro)} "
                                        f"({formatar_br(percentual_impacto)}%)")
        memoria.adicionar("Necessidade", f"|R$ {formatar_br(diferenca_capital_giro)}| × {formatar_br(fator, 1)} = "
                                         f"R$ {formatar_br(necessidade_adicional)}")
        memoria.adicionar("Margem", f"Margem operacional: {formatar_br(perfil.margem * 100)}% → "
                                    f"{formatar_br(impacto_margem['margem_ajustada'] * 100)}%")
        memoria.itens.extend(analise_sensibilidade["memoria_critica"].itens)

        return {
            "ano": ano,
            "resultado_atual": resultado_atual,
            "resultado_split_payment": resultado_split,
            "diferenca_capital_giro": diferenca_capital_giro,
            "percentual_impacto": percentual_impacto,
            "necessidade_adicional_capital_giro": necessidade_adicional,
            "impacto_dias_faturamento": impacto_dias_faturamento,
            "margem_operacional_original": perfil.margem,
            "margem_operacional_ajustada": impacto_margem["margem_ajustada"],
            "impacto_margem": impacto_margem,
            "analise_sensibilidade": analise_sensibilidade,
            "memoria_critica": memoria
        }

    def calcular_analise_sensibilidade(self, perfil, ano, parametros_setoriais=None):
        """Diferença de capital de giro do ano para cada percentual de implementação."""
        percentual_original = self.config.obter_percentual_implementacao(ano, parametros_setoriais)
        capital_atual = self.fluxo_caixa.calcular_fluxo_atual(perfil)["capital_giro_disponivel"]

        resultados = {}
        for percentual in self.config.percentuais_sensibilidade:
            parametros = dict(parametros_setoriais or {})
            parametros["cronograma_proprio"] = True
            parametros["cronograma"] = {**parametros.get("cronograma", {}), ano: percentual}
            split = self.fluxo_caixa.calcular_fluxo_split_payment(perfil, ano, parametros)
            resultados[percentual] = split["capital_giro_disponivel"] - capital_atual

        impacto_total = resultados.get(1.0, 0.0)
        impacto_por_percentual = abs(impacto_total / 100)

        memoria = MemoriaCritica(f"Sensibilidade ao Percentual de Implementação - {ano}")
        for percentual, diferenca in resultados.items():
            memoria.adicionar("Sensibilidade", f"{formatar_br(percentual * 100, 0)}% implementado: "
                                               f"R$ {formatar_br(diferenca)}")
        memoria.adicionar("Sensibilidade", "Cada 10% de implementação representa "
                                           f"R$ {formatar_br(impacto_por_percentual * 10)}")

        return {
            "percentuais": list(self.config.percentuais_sensibilidade),
            "resultados": resultados,
            "percentual_original": percentual_original,
            "impacto_por_percentual": impacto_por_percentual,
            "impacto_por_10_percent": impacto_por_percentual * 10,
            "memoria_critica": memoria
        }

    def calcular_impacto_margem(self, perfil, diferenca_capital_giro):
        """Custo de financiar a diferença de capital de giro e seu efeito na margem."""
        taxa = perfil.taxa_capital_giro
        if taxa is None:
            taxa = self.config.parametros_financeiros["taxa_capital_giro"]

        custo_mensal = abs(diferenca_capital_giro) * taxa
        custo_anual = custo_mensal * 12
        impacto_percentual = custo_mensal / perfil.faturamento * 100 if perfil.faturamento else 0.0
        margem_ajustada = perfil.margem - impacto_percentual / 100
        if perfil.margem:
            percentual_reducao_margem = impacto_percentual / (perfil.margem * 100) * 100
        else:
            percentual_reducao_margem = 0.0

        memoria = MemoriaCritica("Impacto na Margem Operacional")
        memoria.adicionar("Cálculo", f"Custo mensal: |R$ {formatar_br(diferenca_capital_giro)}| × "
                                     f"{formatar_br(taxa * 100)}% = R$ {formatar_br(custo_mensal)}")
        memoria.adicionar("Cálculo", f"Custo anual: R$ {formatar_br(custo_anual)}")
        memoria.adicionar("Cálculo", f"Impacto na margem: {formatar_br(impacto_percentual, 3)} p.p.")

        return {
            "taxa_capital_giro": taxa,
            "custo_mensal_capital_giro": custo_mensal,
            "custo_anual_capital_giro": custo_anual,
            "impacto_percentual": impacto_percentual,
            "margem_original": perfil.margem,
            "margem_ajustada": margem_ajustada,
            "percentual_reducao_margem": percentual_reducao_margem,
            "memoria_critica": memoria
        }

    def calcular_impacto_ciclo_financeiro(self, perfil, ano, parametros_setoriais=None):
        """Dias adicionais no ciclo financeiro equivalentes ao imposto retido."""
        ciclo_atual = perfil.ciclo_financeiro
        percentual_implementacao = self.config.obter_percentual_implementacao(ano, parametros_setoriais)

        imposto_split = perfil.faturamento * perfil.aliquota * percentual_implementacao
        dias_adicionais = imposto_split / perfil.faturamento * 30 if perfil.faturamento else 0.0
        ciclo_ajustado = ciclo_atual + dias_adicionais

        ncg_atual = perfil.faturamento / 30 * ciclo_atual
        ncg_ajustada = perfil.faturamento / 30 * ciclo_ajustado

        memoria = MemoriaCritica(f"Impacto no Ciclo Financeiro - {ano}")
        memoria.adicionar("Ciclo", f"PMR + PME - PMP = {formatar_br(perfil.pmr, 0)} + {formatar_br(perfil.pme, 0)} - "
                                   f"{formatar_br(perfil.pmp, 0)} = {formatar_br(ciclo_atual, 0)} dias")
        memoria.adicionar("Ciclo", f"Dias adicionais: {formatar_br(dias_adicionais, 1)}")
        memoria.adicionar("NCG", f"NCG: R$ {formatar_br(ncg_atual)} → R$ {formatar_br(ncg_ajustada)}")

        return {
            "ciclo_financeiro_atual": ciclo_atual,
            "ciclo_financeiro_ajustado": ciclo_ajustado,
            "dias_adicionais": dias_adicionais,
            "percentual_implementacao": percentual_implementacao,
            "ncg_atual": ncg_atual,
            "ncg_ajustada": ncg_ajustada,
            "diferenca_ncg": ncg_ajustada - ncg_atual,
            "memoria_critica": memoria
        }
