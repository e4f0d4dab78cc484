import logging

from config import ConfiguracaoSplitPayment
from impacto import AnalisadorImpacto
from memoria import MemoriaCritica
from projecao import resolver_taxa_crescimento
from utils import formatar_br

logger = logging.getLogger(__name__)


class CalculadoraNecessidadeCapital:
    """Necessidade adicional de capital e opções de financiamento."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.analisador = AnalisadorImpacto(self.config)

    def calcular_fator_sazonalidade(self, perfil):
        # Fator fixo: ainda não há dados históricos de sazonalidade por empresa ou setor
        return self.config.parametros_financeiros["fator_sazonalidade"]

    def calcular_fator_crescimento(self, perfil, ano):
        taxa = resolver_taxa_crescimento(perfil.cenario, perfil.taxa_crescimento, self.config)
        anos_decorridos = ano - self.config.parametros_financeiros["ano_base"]
        return (1 + taxa) ** anos_decorridos

    def calcular_necessidade(self, perfil, ano, parametros_setoriais=None):
        impacto = self.analisador.calcular_impacto(perfil, ano, parametros_setoriais)
        necessidade_basica = abs(impacto["diferenca_capital_giro"])

        fator_margem_seguranca = self.config.parametros_financeiros["margem_seguranca"]
        fator_sazonalidade = self.calcular_fator_sazonalidade(perfil)
        fator_crescimento = self.calcular_fator_crescimento(perfil, ano)

        necessidade_total = necessidade_basica * fator_margem_seguranca * fator_sazonalidade * fator_crescimento

        opcoes_financiamento = self.calcular_opcoes_financiamento(perfil, necessidade_total)
        recomendada = opcoes_financiamento["opcao_recomendada"]
        impacto_resultado = self.calcular_impacto_resultado(perfil, recomendada["custo_anual"])

        memoria = MemoriaCritica(f"Necessidade Adicional de Capital - {ano}")
        memoria.adicionar("Base", f"Necessidade básica: R$ {formatar_br(necessidade_basica)}")
        memoria.adicionar("Fatores", f"Margem de segurança: {formatar_br(fator_margem_seguranca)}")
        memoria.adicionar("Fatores", f"Sazonalidade: {formatar_br(fator_sazonalidade)}")
        memoria.adicionar("Fatores", f"Crescimento: {formatar_br(fator_crescimento, 4)}")
        memoria.adicionar("Total", f"Necessidade total: R$ {formatar_br(necessidade_total)}")
        memoria.adicionar("Financiamento", f"Opção recomendada: {recomendada['tipo']} "
                                           f"(custo total R$ {formatar_br(recomendada['custo_total'])})")

        return {
            "ano": ano,
            "necessidade_basica": necessidade_basica,
            "fator_margem_seguranca": fator_margem_seguranca,
            "fator_sazonalidade": fator_sazonalidade,
            "fator_crescimento": fator_crescimento,
            "necessidade_com_margem_seguranca": necessidade_basica * fator_margem_seguranca,
            "necessidade_com_sazonalidade": necessidade_basica * fator_sazonalidade,
            "necessidade_com_crescimento": necessidade_basica * fator_crescimento,
            "necessidade_total": necessidade_total,
            "opcoes_financiamento": opcoes_financiamento,
            "impacto_resultado": impacto_resultado,
            "memoria_critica": memoria
        }

    def _limite_linha(self, perfil, linha, valor_necessidade):
        if linha["base_limite"] == "vendas_prazo":
            base = perfil.faturamento * perfil.perc_prazo
        else:
            base = valor_necessidade
        return base * linha["multiplicador_limite"]

    def calcular_opcoes_financiamento(self, perfil, valor_necessidade):
        """Custo de cada linha de financiamento; a mais barata é a recomendada."""
        opcoes = []
        for linha in self.config.linhas_financiamento:
            taxa_mensal = self.config.obter_taxa(linha["taxa"])
            if linha["taxa"] == "taxa_capital_giro" and perfil.taxa_capital_giro is not None:
                taxa_mensal = perfil.taxa_capital_giro

            valor_maximo = self._limite_linha(perfil, linha, valor_necessidade)
            valor_aprovado = min(valor_necessidade, valor_maximo)
            custo_mensal = valor_aprovado * taxa_mensal

            opcoes.append({
                "tipo": linha["tipo"],
                "taxa_mensal": taxa_mensal,
                "prazo": linha["prazo"],
                "carencia": linha["carencia"],
                "valor_maximo": valor_maximo,
                "valor_aprovado": valor_aprovado,
                "custo_mensal": custo_mensal,
                "custo_total": custo_mensal * (linha["prazo"] - linha["carencia"]),
                "custo_anual": custo_mensal * 12,
                "taxa_efetiva_anual": (1 + taxa_mensal) ** 12 - 1,
                "valor_parcela": valor_aprovado / linha["prazo"] + custo_mensal
            })

        # sorted() é estável: empates mantêm a ordem das linhas configuradas
        opcoes = sorted(opcoes, key=lambda opcao: opcao["custo_total"])

        memoria = MemoriaCritica("Opções de Financiamento")
        for opcao in opcoes:
            memoria.adicionar("Opções", f"{opcao['tipo']}: R$ {formatar_br(opcao['valor_aprovado'])} a "
                                        f"{formatar_br(opcao['taxa_mensal'] * 100)}% a.m., custo total "
                                        f"R$ {formatar_br(opcao['custo_total'])}")
        memoria.adicionar("Recomendação", opcoes[0]["tipo"])

        return {
            "opcoes": opcoes,
            "opcao_recomendada": opcoes[0],
            "memoria_critica": memoria
        }

    def calcular_impacto_resultado(self, perfil, custo_anual):
        faturamento_anual = perfil.faturamento * 12
        lucro_operacional_anual = faturamento_anual * perfil.margem
        resultado_ajustado = lucro_operacional_anual - custo_anual
        percentual_da_receita = custo_anual / faturamento_anual * 100 if faturamento_anual else 0.0
        percentual_do_lucro = custo_anual / lucro_operacional_anual * 100 if lucro_operacional_anual else 0.0

        memoria = MemoriaCritica("Impacto do Financiamento no Resultado")
        memoria.adicionar("Cálculo", f"Lucro operacional anual: R$ {formatar_br(lucro_operacional_anual)}")
        memoria.adicionar("Cálculo", f"Custo anual: R$ {formatar_br(custo_anual)} "
                                     f"({formatar_br(percentual_da_receita)}% da receita, "
                                     f"{formatar_br(percentual_do_lucro)}% do lucro)")

        return {
            "faturamento_anual": faturamento_anual,
            "lucro_operacional_anual": lucro_operacional_anual,
            "custo_anual": custo_anual,
            "percentual_da_receita": percentual_da_receita,
            "percentual_do_lucro": percentual_do_lucro,
            "resultado_ajustado": resultado_ajustado,
            "margem_ajustada": resultado_ajustado / faturamento_anual if faturamento_anual else 0.0,
            "memoria_critica": memoria
        }
