import logging

from config import ConfiguracaoSplitPayment
from memoria import MemoriaCritica
from utils import formatar_br

logger = logging.getLogger(__name__)

TRIBUTOS_FEDERAIS = ("PIS", "COFINS")
TRIBUTOS_SUBNACIONAIS = ("ICMS", "ISS")


class CalculadoraTributosAtuais:
    """Implementa os cálculos dos tributos do sistema atual (PIS, COFINS, ICMS, IPI, ISS)."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()

    def calcular_pis(self, receita, creditos=0, regime_cumulativo=False):
        aliquotas = self.config.impostos_atuais["PIS"]
        if regime_cumulativo:
            # No regime cumulativo não há aproveitamento de créditos
            return receita * aliquotas["cumulativo"]
        return max(0, receita * aliquotas["nao_cumulativo"] - creditos)

    def calcular_cofins(self, receita, creditos=0, regime_cumulativo=False):
        aliquotas = self.config.impostos_atuais["COFINS"]
        if regime_cumulativo:
            return receita * aliquotas["cumulativo"]
        return max(0, receita * aliquotas["nao_cumulativo"] - creditos)

    def calcular_icms(self, receita, creditos=0, substituicao_tributaria=False):
        if substituicao_tributaria:
            # ICMS já recolhido anteriormente na cadeia
            return 0
        return max(0, receita * self.config.impostos_atuais["ICMS"] - creditos)

    def calcular_ipi(self, valor_produtos, creditos=0):
        return max(0, valor_produtos * self.config.impostos_atuais["IPI"] - creditos)

    def calcular_iss(self, valor_servicos):
        return valor_servicos * self.config.impostos_atuais["ISS"]

    def calcular_todos_impostos(self, perfil):
        """Calcula os tributos atuais sobre o faturamento do perfil, com memória de cálculo."""
        faturamento = perfil.faturamento
        creditos = perfil.creditos_tributos or {}
        memoria = MemoriaCritica("Tributos do Sistema Atual")

        impostos = {
            "PIS": self.calcular_pis(faturamento, creditos.get("PIS", 0), perfil.regime_cumulativo),
            "COFINS": self.calcular_cofins(faturamento, creditos.get("COFINS", 0), perfil.regime_cumulativo)
        }
        regime = "cumulativo" if perfil.regime_cumulativo else "não cumulativo"
        memoria.adicionar("PIS", f"Regime {regime}: PIS devido = R$ {formatar_br(impostos['PIS'])}")
        memoria.adicionar("COFINS", f"Regime {regime}: COFINS devido = R$ {formatar_br(impostos['COFINS'])}")

        if perfil.empresa_servicos:
            impostos["ISS"] = self.calcular_iss(faturamento)
            memoria.adicionar("ISS", f"R$ {formatar_br(faturamento)} × "
                                     f"{formatar_br(self.config.impostos_atuais['ISS'] * 100)}% = "
                                     f"R$ {formatar_br(impostos['ISS'])}")
        else:
            impostos["ICMS"] = self.calcular_icms(faturamento, creditos.get("ICMS", 0))
            impostos["IPI"] = self.calcular_ipi(faturamento, creditos.get("IPI", 0))
            memoria.adicionar("ICMS", f"ICMS devido = R$ {formatar_br(impostos['ICMS'])}")
            memoria.adicionar("IPI", f"IPI devido = R$ {formatar_br(impostos['IPI'])}")

        impostos["total"] = sum(impostos.values())
        memoria.adicionar("total", f"Total de tributos = R$ {formatar_br(impostos['total'])}")
        impostos["memoria_critica"] = memoria

        return impostos


class CalculadoraIVADual:
    """Implementa os cálculos do IVA Dual (CBS/IBS) e da transição a partir do sistema atual."""

    def __init__(self, configuracao=None):
        self.config = configuracao or ConfiguracaoSplitPayment()
        self.calculadora_atual = CalculadoraTributosAtuais(self.config)

    def _aliquota(self, tributo, aliquota=None, categoria="padrao"):
        if categoria != "padrao" and categoria in self.config.aliquotas_iva:
            return self.config.aliquotas_iva[categoria][tributo]
        if aliquota is None:
            return self.config.aliquotas_iva["padrao"][tributo]
        return aliquota

    def calcular_cbs(self, base, aliquota=None, creditos=0, categoria="padrao"):
        return max(0, base * self._aliquota("CBS", aliquota, categoria) - creditos)

    def calcular_ibs(self, base, aliquota=None, creditos=0, categoria="padrao"):
        return max(0, base * self._aliquota("IBS", aliquota, categoria) - creditos)

    def calcular_total_iva(self, base, aliquotas=None, creditos=None, categoria="padrao"):
        """Calcula CBS + IBS sobre a base, descontando os créditos de cada tributo."""
        aliquotas = aliquotas or {}
        creditos = creditos or {}

        cbs = self.calcular_cbs(base, aliquotas.get("CBS"), creditos.get("CBS", 0), categoria)
        ibs = self.calcular_ibs(base, aliquotas.get("IBS"), creditos.get("IBS", 0), categoria)

        return {"CBS": cbs, "IBS": ibs, "total": cbs + ibs}

    def obter_fator_transicao(self, tributo, ano):
        """Fração do novo tributo vigente no ano (0 antes da janela, 1 após o fim)."""
        periodo = self.config.periodos_transicao[tributo]
        inicio, fim = periodo["inicio"], periodo["fim"]

        if ano < inicio:
            return 0.0
        if ano >= fim:
            return 1.0
        return (ano - inicio) / (fim - inicio)

    def calcular_transicao(self, base, ano, impostos_atuais):
        """Pondera tributos atuais e IVA Dual para um ano da transição.

        Os tributos substituídos são reduzidos na mesma proporção em que o novo
        tributo é introduzido.
        """
        resultado = {chave: valor for chave, valor in impostos_atuais.items()
                     if chave not in ("total", "memoria_critica")}
        memoria = MemoriaCritica(f"Transição para o IVA Dual - {ano}")

        fator_cbs = self.obter_fator_transicao("CBS", ano)
        fator_ibs = self.obter_fator_transicao("IBS", ano)

        if fator_cbs > 0:
            for tributo in TRIBUTOS_FEDERAIS:
                if tributo in resultado:
                    resultado[tributo] *= (1 - fator_cbs)
            resultado["CBS"] = self.calcular_cbs(base) * fator_cbs
        memoria.adicionar("CBS", f"Fator de transição da CBS: {formatar_br(fator_cbs * 100)}%")

        if fator_ibs > 0:
            for tributo in TRIBUTOS_SUBNACIONAIS:
                if tributo in resultado:
                    resultado[tributo] *= (1 - fator_ibs)
            resultado["IBS"] = self.calcular_ibs(base) * fator_ibs
        memoria.adicionar("IBS", f"Fator de transição do IBS: {formatar_br(fator_ibs * 100)}%")

        resultado["total"] = sum(resultado.values())
        memoria.adicionar("total", f"Total ponderado: R$ {formatar_br(resultado['total'])}")
        resultado["fator_cbs"] = fator_cbs
        resultado["fator_ibs"] = fator_ibs
        resultado["memoria_critica"] = memoria

        return resultado

    def calcular_comparativo(self, perfil, anos=None):
        """Compara, ano a ano, os tributos atuais com os tributos ponderados da transição."""
        if anos is None:
            anos = list(self.config.cronograma_implementacao.keys())

        impostos_atuais = self.calculadora_atual.calcular_todos_impostos(perfil)
        resultados = {}
        for ano in anos:
            transicao = self.calcular_transicao(perfil.faturamento, ano, impostos_atuais)
            resultados[ano] = {
                "impostos_atuais": impostos_atuais["total"],
                "impostos_transicao": transicao["total"],
                "diferenca": transicao["total"] - impostos_atuais["total"],
                "detalhamento": transicao
            }

        return resultados
