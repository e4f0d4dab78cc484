import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

# Valores padrão usados quando nenhuma configuração é injetada
ANO_BASE = 2026
HORIZONTE_AVALIACAO_PADRAO = 12  # meses
TAXA_CAPITAL_GIRO_PADRAO = 0.021  # 2,1% a.m.
PRAZO_RECOLHIMENTO_PADRAO = 25  # dia 25 do mês subsequente

CRONOGRAMA_PADRAO = {
    2026: 0.10,
    2027: 0.25,
    2028: 0.40,
    2029: 0.55,
    2030: 0.70,
    2031: 0.85,
    2032: 0.95,
    2033: 1.00
}


class ConfiguracaoSplitPayment:
    """Gerencia as configurações do simulador de Split Payment."""

    def __init__(self):
        # Percentual do imposto retido via Split Payment por ano
        self.cronograma_implementacao = dict(CRONOGRAMA_PADRAO)

        # Janelas de transição do IVA Dual (CBS substitui PIS/COFINS, IBS substitui ICMS/ISS)
        self.periodos_transicao = {
            "CBS": {"inicio": 2027, "fim": 2027},  # Transição imediata
            "IBS": {"inicio": 2029, "fim": 2033}  # Transição de 5 anos
        }

        # Alíquotas de referência do IVA Dual
        self.aliquotas_iva = {
            "padrao": {"CBS": 0.088, "IBS": 0.177},  # 8,8% + 17,7%
            "reduzida": {"CBS": 0.044, "IBS": 0.0885},  # 50% da alíquota padrão
            "isenta": {"CBS": 0.0, "IBS": 0.0}
        }

        # Alíquotas do sistema atual
        self.impostos_atuais = {
            "PIS": {"nao_cumulativo": 0.0165, "cumulativo": 0.0065},
            "COFINS": {"nao_cumulativo": 0.076, "cumulativo": 0.03},
            "ICMS": 0.18,  # Alíquota interna média
            "IPI": 0.10,  # Varia conforme NCM
            "ISS": 0.05  # Varia conforme município
        }

        self.parametros_financeiros = {
            "taxa_capital_giro": TAXA_CAPITAL_GIRO_PADRAO,
            "taxa_antecipacao": 0.018,  # 1,8% a.m.
            "spread_bancario": 0.005,  # 0,5% a.m. sobre a taxa de capital de giro
            "prazo_recolhimento": PRAZO_RECOLHIMENTO_PADRAO,
            "fator_necessidade_impacto": 1.2,  # 20% sobre a diferença de capital de giro
            "margem_seguranca": 1.2,
            "fator_sazonalidade": 1.3,  # Valor fixo, sem modelo de sazonalidade
            "horizonte_estrategias": HORIZONTE_AVALIACAO_PADRAO,
            "ano_base": ANO_BASE
        }

        # Linhas de financiamento avaliadas na necessidade de capital.
        # O limite de cada linha é "base" × "multiplicador_limite".
        self.linhas_financiamento = [
            {
                "tipo": "Capital de Giro",
                "taxa": "taxa_capital_giro",
                "prazo": 12,
                "carencia": 3,
                "base_limite": "necessidade",
                "multiplicador_limite": 1.5
            },
            {
                "tipo": "Antecipação de Recebíveis",
                "taxa": "taxa_antecipacao",
                "prazo": 6,
                "carencia": 0,
                "base_limite": "vendas_prazo",
                "multiplicador_limite": 3
            },
            {
                "tipo": "Empréstimo Bancário",
                "taxa": "taxa_capital_giro+spread_bancario",
                "prazo": 24,
                "carencia": 6,
                "base_limite": "necessidade",
                "multiplicador_limite": 2
            }
        ]

        # Taxas anuais de crescimento por cenário
        self.cenarios_crescimento = {
            "conservador": 0.02,
            "moderado": 0.05,
            "otimista": 0.08
        }
        self.cenario_padrao = "moderado"

        # Cenários da análise de elasticidade (ordem preservada nos resultados)
        self.cenarios_elasticidade = [
            {"nome": "Recessão", "taxa": -0.02},
            {"nome": "Estagnação", "taxa": 0.00},
            {"nome": "Conservador", "taxa": 0.02},
            {"nome": "Moderado", "taxa": 0.05},
            {"nome": "Otimista", "taxa": 0.08},
            {"nome": "Acelerado", "taxa": 0.12}
        ]
        self.cenario_referencia_elasticidade = "Moderado"

        # Percentuais usados na análise de sensibilidade
        self.percentuais_sensibilidade = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]

        # Combinação de estratégias
        self.fatores_sobreposicao = {
            "pmr": 0.8,  # 80% do efeito somado
            "pmp": 0.9,
            "margem": 0.85
        }
        self.max_estrategias_combinacao = 5
        self.desconto_por_estrategia = 0.05
        self.efetividade_minima_pareto = 70

        # Parâmetros setoriais, com cronograma próprio opcional
        self.setores_especiais = {
            "padrao": {"cronograma_proprio": False, "cronograma": {}},
            "combustiveis": {
                "cronograma_proprio": True,
                "cronograma": {2026: 0.20, 2027: 0.40, 2028: 0.60, 2029: 0.80}
            },
            "saude": {
                "cronograma_proprio": True,
                "cronograma": {2026: 0.05, 2027: 0.15, 2028: 0.30}
            }
        }

    def carregar_configuracoes(self, arquivo=None):
        """Carrega configurações de um arquivo JSON, se existir.

        O arquivo é validado por inteiro antes de qualquer alteração: se uma
        seção falhar, nenhuma configuração é substituída.
        """
        if arquivo and os.path.exists(arquivo):
            try:
                with open(arquivo, 'r', encoding='utf-8') as f:
                    config = json.load(f)

                novos = {}
                if "cronograma_implementacao" in config:
                    novos["cronograma_implementacao"] = _chaves_ano(config["cronograma_implementacao"])
                if "periodos_transicao" in config:
                    novos["periodos_transicao"] = dict(config["periodos_transicao"])
                if "aliquotas_iva" in config:
                    novos["aliquotas_iva"] = dict(config["aliquotas_iva"])
                if "parametros_financeiros" in config:
                    novos["parametros_financeiros"] = {**self.parametros_financeiros,
                                                       **config["parametros_financeiros"]}
                if "cenarios_crescimento" in config:
                    novos["cenarios_crescimento"] = dict(config["cenarios_crescimento"])
                if "setores_especiais" in config:
                    novos["setores_especiais"] = {
                        setor: {**parametros, "cronograma": _chaves_ano(parametros.get("cronograma", {}))}
                        for setor, parametros in config["setores_especiais"].items()
                    }
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.error("Erro ao carregar configurações de %s: %s", arquivo, e)
                return False

            for atributo, valor in novos.items():
                setattr(self, atributo, valor)
            return True
        return False

    def salvar_configuracoes(self, arquivo):
        """Salva as configurações atuais em um arquivo JSON."""
        try:
            config = {
                "cronograma_implementacao": self.cronograma_implementacao,
                "periodos_transicao": self.periodos_transicao,
                "aliquotas_iva": self.aliquotas_iva,
                "parametros_financeiros": self.parametros_financeiros,
                "cenarios_crescimento": self.cenarios_crescimento,
                "setores_especiais": self.setores_especiais
            }
            with open(arquivo, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=4, ensure_ascii=False)
            return True
        except (OSError, TypeError) as e:
            logger.error("Erro ao salvar configurações em %s: %s", arquivo, e)
            return False

    def obter_percentual_implementacao(self, ano, parametros_setoriais=None):
        """Percentual do imposto líquido retido via Split Payment no ano.

        Um cronograma setorial só substitui os anos que ele define; os demais
        seguem o cronograma padrão. Anos fora do cronograma retornam 0.
        """
        if parametros_setoriais and parametros_setoriais.get("cronograma_proprio"):
            cronograma = parametros_setoriais.get("cronograma") or {}
            if ano in cronograma:
                return min(1.0, max(0.0, cronograma[ano]))

        return self.cronograma_implementacao.get(ano, 0.0)

    def obter_parametros_setoriais(self, setor):
        """Retorna os parâmetros do setor, ou None se o setor não estiver configurado."""
        if not setor:
            return None
        parametros = self.setores_especiais.get(setor)
        if parametros is None:
            logger.warning("Setor '%s' sem parâmetros configurados; usando cronograma padrão.", setor)
            return None
        return copy.deepcopy(parametros)

    def obter_taxa(self, chave):
        """Resolve a taxa de uma linha de financiamento ("a+b" soma parâmetros financeiros)."""
        return sum(self.parametros_financeiros[parte] for parte in chave.split("+"))

    @property
    def ano_final_cronograma(self):
        return max(self.cronograma_implementacao)


def _chaves_ano(mapa):
    """Converte as chaves de um mapa ano→valor lido de JSON para int."""
    return {int(ano): valor for ano, valor in mapa.items()}
