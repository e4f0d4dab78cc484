import logging

from calculadoras import CalculadoraIVADual, CalculadoraTributosAtuais
from config import ConfiguracaoSplitPayment
from memoria import MemoriaCritica
from utils import formatar_br

logger = logging.getLogger(__name__)


def calcular_tempo_medio_capital_giro(pmr, prazo_recolhimento, perc_vista, perc_prazo):
    """Dias médios em que o imposto fica em caixa antes do recolhimento.

    Vendas à vista ficam o prazo de recolhimento inteiro; vendas a prazo só
    ficam pelo que sobra do prazo após o recebimento.
    """
    tempo_vista = prazo_recolhimento
    tempo_prazo = max(0, prazo_recolhimento - pmr)
    return perc_vista * tempo_vista + perc_prazo * tempo_prazo


def _beneficio_dias(capital, faturamento, tempo_medio):
    if faturamento == 0:
        return 0.0
    return (capital / faturamento) * tempo_medio


class CalculadoraFluxoCaixa:
    """Fluxo de caixa do imposto no regime atual e no regime de Split Payment."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.calculadora_atual = CalculadoraTributosAtuais(self.config)
        self.calculadora_iva = CalculadoraIVADual(self.config)

    @property
    def prazo_recolhimento(self):
        return self.config.parametros_financeiros["prazo_recolhimento"]

    def calcular_fluxo_atual(self, perfil):
        """Regime atual: todo o imposto líquido fica em caixa até o recolhimento."""
        faturamento = perfil.faturamento
        valor_imposto_total = faturamento * perfil.aliquota
        valor_imposto_liquido = max(0, valor_imposto_total - perfil.creditos)

        capital_giro_disponivel = valor_imposto_liquido
        tempo_medio = calcular_tempo_medio_capital_giro(
            perfil.pmr, self.prazo_recolhimento, perfil.perc_vista, perfil.perc_prazo)
        beneficio_dias = _beneficio_dias(capital_giro_disponivel, faturamento, tempo_medio)

        memoria = MemoriaCritica("Regime Atual (Pré-Split Payment)")
        memoria.adicionar("Regime", f"O tributo é recolhido no mês subsequente, até o dia {self.prazo_recolhimento}.")
        memoria.adicionar("Cálculo", f"Imposto total: R$ {formatar_br(faturamento)} × "
                                     f"{formatar_br(perfil.aliquota * 100)}% = R$ {formatar_br(valor_imposto_total)}")
        memoria.adicionar("Cálculo", f"Imposto líquido: R$ {formatar_br(valor_imposto_total)} - "
                                     f"R$ {formatar_br(perfil.creditos)} = R$ {formatar_br(valor_imposto_liquido)}")
        memoria.adicionar("Cálculo", f"Capital de giro disponível: R$ {formatar_br(capital_giro_disponivel)} "
                                     f"por {formatar_br(tempo_medio, 1)} dias em média")
        memoria.adicionar("Observações", f"Equivale a {formatar_br(beneficio_dias, 1)} dias de faturamento. "
                                         f"Vendas à vista: {formatar_br(perfil.perc_vista * 100, 1)}%, "
                                         f"a prazo: {formatar_br(perfil.perc_prazo * 100, 1)}%.")

        return {
            "faturamento": faturamento,
            "valor_imposto_total": valor_imposto_total,
            "creditos": perfil.creditos,
            "valor_imposto_liquido": valor_imposto_liquido,
            "recebimento_vista": faturamento * perfil.perc_vista,
            "recebimento_prazo": faturamento * perfil.perc_prazo,
            "prazo_recolhimento": self.prazo_recolhimento,
            "capital_giro_disponivel": capital_giro_disponivel,
            "tempo_medio_capital_giro": tempo_medio,
            "beneficio_dias_capital_giro": beneficio_dias,
            "fluxo_caixa_liquido": faturamento - valor_imposto_liquido,
            "impostos": self.calculadora_atual.calcular_todos_impostos(perfil),
            "memoria_critica": memoria
        }

    def calcular_fluxo_split_payment(self, perfil, ano, parametros_setoriais=None):
        """Regime de Split Payment: a parcela retida deixa de compor o capital de giro."""
        faturamento = perfil.faturamento
        percentual_implementacao = self.config.obter_percentual_implementacao(ano, parametros_setoriais)

        valor_imposto_total = faturamento * perfil.aliquota
        valor_imposto_liquido = max(0, valor_imposto_total - perfil.creditos)
        valor_imposto_split = valor_imposto_liquido * percentual_implementacao
        valor_imposto_normal = valor_imposto_liquido - valor_imposto_split

        if percentual_implementacao > 0:
            capital_giro_disponivel = valor_imposto_normal
        else:
            capital_giro_disponivel = valor_imposto_liquido

        # A retenção é distribuída entre vendas à vista e a prazo
        total_vendas = perfil.perc_vista + perfil.perc_prazo
        parcela_vista = perfil.perc_vista / total_vendas if total_vendas else 0
        parcela_prazo = perfil.perc_prazo / total_vendas if total_vendas else 0
        recebimento_vista = faturamento * perfil.perc_vista - valor_imposto_split * parcela_vista
        recebimento_prazo = faturamento * perfil.perc_prazo - valor_imposto_split * parcela_prazo

        # O prazo de recolhimento vale apenas para a parcela não retida
        tempo_medio = calcular_tempo_medio_capital_giro(
            perfil.pmr, self.prazo_recolhimento, perfil.perc_vista, perfil.perc_prazo)
        beneficio_dias = _beneficio_dias(capital_giro_disponivel, faturamento, tempo_medio)

        impostos_atuais = self.calculadora_atual.calcular_todos_impostos(perfil)
        impostos_iva = None
        if ano >= self.config.periodos_transicao["CBS"]["inicio"]:
            impostos_iva = self.calculadora_iva.calcular_total_iva(faturamento)

        memoria = MemoriaCritica(f"Regime de Split Payment - {ano}")
        memoria.adicionar("Regime", f"Percentual de implementação em {ano}: "
                                    f"{formatar_br(percentual_implementacao * 100)}%")
        memoria.adicionar("Cálculo", f"Imposto retido: R$ {formatar_br(valor_imposto_liquido)} × "
                                     f"{formatar_br(percentual_implementacao * 100)}% = "
                                     f"R$ {formatar_br(valor_imposto_split)}")
        memoria.adicionar("Cálculo", f"Imposto não retido: R$ {formatar_br(valor_imposto_liquido)} - "
                                     f"R$ {formatar_br(valor_imposto_split)} = R$ {formatar_br(valor_imposto_normal)}")
        memoria.adicionar("Cálculo", f"Capital de giro disponível: R$ {formatar_br(capital_giro_disponivel)}")

        return {
            "faturamento": faturamento,
            "valor_imposto_total": valor_imposto_total,
            "creditos": perfil.creditos,
            "valor_imposto_liquido": valor_imposto_liquido,
            "valor_imposto_split": valor_imposto_split,
            "valor_imposto_normal": valor_imposto_normal,
            "recebimento_vista": recebimento_vista,
            "recebimento_prazo": recebimento_prazo,
            "percentual_implementacao": percentual_implementacao,
            "prazo_recolhimento": self.prazo_recolhimento,
            "capital_giro_disponivel": capital_giro_disponivel,
            "tempo_medio_capital_giro": tempo_medio,
            "beneficio_dias_capital_giro": beneficio_dias,
            "fluxo_caixa_liquido": recebimento_vista + recebimento_prazo,
            "impostos_atuais": impostos_atuais,
            "impostos_iva": impostos_iva,
            "impostos_transicao": self.calculadora_iva.calcular_transicao(faturamento, ano, impostos_atuais),
            "memoria_critica": memoria
        }
