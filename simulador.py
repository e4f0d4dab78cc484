import logging

from calculadoras import CalculadoraIVADual
from config import ConfiguracaoSplitPayment
from estrategias import NOMES_ESTRATEGIAS, avaliar_estrategias
from impacto import AnalisadorImpacto
from memoria import MemoriaCritica
from necessidade_capital import CalculadoraNecessidadeCapital
from otimizacao import combinar_estrategias, identificar_combinacao_otima
from projecao import ProjecaoTemporal
from utils import formatar_br

logger = logging.getLogger(__name__)


class SimuladorSplitPayment:
    """Ponto de entrada único: impacto, necessidade de capital, projeção e mitigação."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.analisador = AnalisadorImpacto(self.config)
        self.necessidade = CalculadoraNecessidadeCapital(self.config)
        self.projecao = ProjecaoTemporal(self.config)
        self.calculadora_iva = CalculadoraIVADual(self.config)

    def _parametros_setoriais(self, perfil, parametros_setoriais):
        if parametros_setoriais is not None:
            return parametros_setoriais
        return self.config.obter_parametros_setoriais(perfil.setor)

    def simular(self, perfil, ano_inicial=2026, ano_final=None, parametros_setoriais=None):
        """Simulação completa para o perfil, do ano inicial ao fim do cronograma."""
        if ano_final is None:
            ano_final = self.config.ano_final_cronograma
        parametros = self._parametros_setoriais(perfil, parametros_setoriais)

        logger.info("Simulando Split Payment de %s a %s (setor: %s)", ano_inicial, ano_final, perfil.setor or "padrão")

        impacto_base = self.analisador.calcular_impacto(perfil, ano_inicial, parametros)
        projecao = self.projecao.calcular_projecao(
            perfil, ano_inicial, ano_final, perfil.cenario, perfil.taxa_crescimento, parametros)
        necessidade = self.necessidade.calcular_necessidade(perfil, ano_inicial, parametros)
        ciclo = self.analisador.calcular_impacto_ciclo_financeiro(perfil, ano_inicial, parametros)
        comparativo = self.calculadora_iva.calcular_comparativo(perfil, range(ano_inicial, ano_final + 1))

        memoria = MemoriaCritica("Simulação do Split Payment")
        memoria.adicionar("Parâmetros", f"Faturamento mensal: R$ {formatar_br(perfil.faturamento)}")
        memoria.adicionar("Parâmetros", f"Alíquota efetiva: {formatar_br(perfil.aliquota * 100)}%")
        memoria.adicionar("Resultados", f"Impacto em {ano_inicial}: "
                                        f"R$ {formatar_br(impacto_base['diferenca_capital_giro'])}")
        memoria.adicionar("Resultados", "Necessidade total de capital: "
                                        f"R$ {formatar_br(necessidade['necessidade_total'])}")

        return {
            "impacto_base": impacto_base,
            "projecao_temporal": projecao,
            "necessidade_capital": necessidade,
            "impacto_ciclo_financeiro": ciclo,
            "comparativo_regimes": comparativo,
            "memoria_critica": memoria
        }

    def avaliar_mitigacao(self, perfil, estrategias, ano=2026, parametros_setoriais=None):
        """Avalia as estratégias de mitigação contra o impacto do ano."""
        parametros = self._parametros_setoriais(perfil, parametros_setoriais)
        impacto_base = self.analisador.calcular_impacto(perfil, ano, parametros)

        resultados = avaliar_estrategias(perfil, estrategias, impacto_base, self.config)
        efetividade_combinada = combinar_estrategias(perfil, resultados, impacto_base, self.config)
        combinacao_otima = identificar_combinacao_otima(resultados, self.config)

        ordenadas = sorted(resultados.items(), key=lambda item: item[1].efetividade_percentual, reverse=True)
        mais_efetiva = ordenadas[0] if ordenadas else None

        memoria = MemoriaCritica(f"Estratégias de Mitigação - {ano}")
        for nome, resultado in ordenadas:
            situacao = resultado.erro or f"{formatar_br(resultado.efetividade_percentual)}%"
            memoria.adicionar("Estratégias", f"{NOMES_ESTRATEGIAS.get(nome, nome)}: {situacao}")
        memoria.adicionar("Combinação", f"Efetividade combinada: "
                                        f"{formatar_br(efetividade_combinada['efetividade_percentual'])}%")

        return {
            "impacto_base": impacto_base,
            "resultados_estrategias": resultados,
            "efetividade_combinada": efetividade_combinada,
            "estrategias_ordenadas": ordenadas,
            "estrategia_mais_efetiva": mais_efetiva,
            "combinacao_otima": combinacao_otima,
            "memoria_critica": memoria
        }
