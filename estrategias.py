import logging

from config import ConfiguracaoSplitPayment
from memoria import MemoriaCritica
from modelos import TOLERANCIA_DISTRIBUICAO, ResultadoEstrategia
from utils import formatar_br

logger = logging.getLogger(__name__)

NOMES_ESTRATEGIAS = {
    "ajuste_precos": "Ajuste de Preços",
    "renegociacao_prazos": "Renegociação de Prazos",
    "antecipacao_recebiveis": "Antecipação de Recebíveis",
    "capital_giro": "Capital de Giro",
    "mix_produtos": "Mix de Produtos",
    "meios_pagamento": "Meios de Pagamento"
}

# Pagamentos a fornecedores estimados como 70% dos custos
PARTICIPACAO_FORNECEDORES_CUSTOS = 0.7
# Custo de implementação do ajuste de mix: 10% do valor ajustado
CUSTO_IMPLEMENTACAO_MIX = 0.1


def _horizonte(configuracao):
    config = configuracao or ConfiguracaoSplitPayment()
    return config.parametros_financeiros["horizonte_estrategias"]


def _efetividade(valor, impacto_base):
    necessidade = abs(impacto_base["diferenca_capital_giro"])
    if necessidade == 0:
        return 0.0
    return valor / necessidade * 100


def _razao(numerador, denominador):
    return numerador / denominador if denominador else 0.0


def custo_beneficio(custo, beneficio):
    """Custo por real mitigado: infinito quando há custo sem benefício, zero sem custo."""
    if beneficio:
        return custo / beneficio
    return float("inf") if custo > 0 else 0.0


def avaliar_ajuste_precos(perfil, estrategia, impacto_base, configuracao=None):
    percentual_aumento = estrategia["percentual_aumento"] / 100
    elasticidade = estrategia["elasticidade"]
    periodo = estrategia.get("periodo_ajuste")
    if periodo is None:
        periodo = _horizonte(configuracao)

    impacto_vendas = percentual_aumento * elasticidade
    faturamento_ajustado = perfil.faturamento * (1 + percentual_aumento) * (1 + impacto_vendas)
    fluxo_caixa_adicional = (faturamento_ajustado - perfil.faturamento) * perfil.margem
    mitigacao_total = fluxo_caixa_adicional * periodo

    perda_receita = max(0, perfil.faturamento * abs(impacto_vendas))
    custo = perda_receita * periodo
    relacao_cb = custo_beneficio(custo, mitigacao_total)
    efetividade = _efetividade(mitigacao_total, impacto_base)

    memoria = MemoriaCritica("Ajuste de Preços")
    memoria.adicionar("Cálculo", f"Faturamento ajustado: R$ {formatar_br(perfil.faturamento)} × "
                                 f"(1 + {formatar_br(percentual_aumento * 100)}%) × "
                                 f"(1 + {formatar_br(impacto_vendas * 100)}%) = R$ {formatar_br(faturamento_ajustado)}")
    memoria.adicionar("Cálculo", f"Fluxo adicional mensal: R$ {formatar_br(fluxo_caixa_adicional)}")
    memoria.adicionar("Efetividade", f"R$ {formatar_br(mitigacao_total)} em {periodo} meses = "
                                     f"{formatar_br(efetividade)}%")

    return ResultadoEstrategia(
        estrategia="ajuste_precos",
        efetividade_percentual=efetividade,
        custo=custo,
        custo_beneficio=relacao_cb,
        mitigacao=fluxo_caixa_adicional,
        detalhes={
            "faturamento_original": perfil.faturamento,
            "faturamento_ajustado": faturamento_ajustado,
            "percentual_aumento": percentual_aumento,
            "elasticidade": elasticidade,
            "impacto_vendas": impacto_vendas,
            "fluxo_caixa_adicional": fluxo_caixa_adicional,
            "mitigacao_total": mitigacao_total,
            "periodo_ajuste": periodo
        },
        memoria_critica=memoria
    )


def avaliar_renegociacao_prazos(perfil, estrategia, impacto_base, configuracao=None):
    aumento_prazo = estrategia["aumento_prazo"]
    percentual_fornecedores = estrategia["percentual_fornecedores"] / 100
    custo_contrapartida = estrategia.get("custo_contrapartida", 0) / 100
    duracao = _horizonte(configuracao)

    pagamentos_fornecedores = perfil.faturamento * (1 - perfil.margem) * PARTICIPACAO_FORNECEDORES_CUSTOS
    impacto_fluxo_caixa = (pagamentos_fornecedores / 30 * aumento_prazo
                           * percentual_fornecedores * (1 - custo_contrapartida))
    mitigacao_total = impacto_fluxo_caixa * duracao

    custo_total = pagamentos_fornecedores * percentual_fornecedores * custo_contrapartida * duracao
    relacao_cb = custo_beneficio(custo_total, mitigacao_total)
    efetividade = _efetividade(mitigacao_total, impacto_base)

    novo_pmp = perfil.pmp + aumento_prazo * percentual_fornecedores
    ciclo_ajustado = perfil.pmr + perfil.pme - novo_pmp

    memoria = MemoriaCritica("Renegociação de Prazos")
    memoria.adicionar("Cálculo", f"Pagamentos a fornecedores: R$ {formatar_br(pagamentos_fornecedores)}")
    memoria.adicionar("Cálculo", f"Impacto mensal: R$ {formatar_br(impacto_fluxo_caixa)}")
    memoria.adicionar("Ciclo", f"PMP: {formatar_br(perfil.pmp, 0)} → {formatar_br(novo_pmp, 1)} dias")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    return ResultadoEstrategia(
        estrategia="renegociacao_prazos",
        efetividade_percentual=efetividade,
        custo=custo_total,
        custo_beneficio=relacao_cb,
        mitigacao=impacto_fluxo_caixa,
        impactos={"pmp": novo_pmp - perfil.pmp},
        detalhes={
            "aumento_prazo": aumento_prazo,
            "percentual_fornecedores": estrategia["percentual_fornecedores"],
            "contrapartidas": estrategia.get("contrapartidas"),
            "custo_contrapartida": estrategia.get("custo_contrapartida", 0),
            "pagamentos_fornecedores": pagamentos_fornecedores,
            "impacto_fluxo_caixa": impacto_fluxo_caixa,
            "duracao_efeito": duracao,
            "mitigacao_total": mitigacao_total,
            "novo_pmp": novo_pmp,
            "ciclo_financeiro_ajustado": ciclo_ajustado,
            "diferenca_ciclo": perfil.ciclo_financeiro - ciclo_ajustado
        },
        memoria_critica=memoria
    )


def avaliar_antecipacao_recebiveis(perfil, estrategia, impacto_base, configuracao=None):
    percentual_antecipacao = estrategia["percentual_antecipacao"] / 100
    taxa_desconto = estrategia["taxa_desconto"]
    prazo_antecipacao = estrategia["prazo_antecipacao"]
    duracao = _horizonte(configuracao)

    vendas_prazo = perfil.faturamento * perfil.perc_prazo
    valor_antecipado = vendas_prazo * percentual_antecipacao
    custo_antecipacao = valor_antecipado * taxa_desconto * (prazo_antecipacao / 30)
    impacto_fluxo_caixa = valor_antecipado - custo_antecipacao

    valor_total_antecipado = valor_antecipado * duracao
    custo_total = custo_antecipacao * duracao
    # Efetividade mensal: a antecipação recorrente cobre o impacto mês a mês
    efetividade = _efetividade(impacto_fluxo_caixa, impacto_base)

    pmr_ajustado = perfil.pmr * (1 - percentual_antecipacao * perfil.perc_prazo)
    reducao_pmr = perfil.pmr - pmr_ajustado

    memoria = MemoriaCritica("Antecipação de Recebíveis")
    memoria.adicionar("Cálculo", f"Valor antecipado: R$ {formatar_br(valor_antecipado)}")
    memoria.adicionar("Cálculo", f"Custo da antecipação: R$ {formatar_br(custo_antecipacao)}")
    memoria.adicionar("Ciclo", f"PMR: {formatar_br(perfil.pmr, 0)} → {formatar_br(pmr_ajustado, 1)} dias")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    return ResultadoEstrategia(
        estrategia="antecipacao_recebiveis",
        efetividade_percentual=efetividade,
        custo=custo_total,
        custo_beneficio=custo_beneficio(custo_total, valor_total_antecipado),
        mitigacao=impacto_fluxo_caixa,
        impactos={"pmr": -reducao_pmr},
        detalhes={
            "percentual_antecipacao": estrategia["percentual_antecipacao"],
            "taxa_desconto": taxa_desconto,
            "prazo_antecipacao": prazo_antecipacao,
            "vendas_prazo": vendas_prazo,
            "valor_antecipado": valor_antecipado,
            "custo_antecipacao": custo_antecipacao,
            "impacto_fluxo_caixa": impacto_fluxo_caixa,
            "valor_total_antecipado": valor_total_antecipado,
            "custo_total_antecipacao": custo_total,
            "pmr_ajustado": pmr_ajustado,
            "reducao_pmr": reducao_pmr,
            "ciclo_financeiro_ajustado": pmr_ajustado + perfil.pme - perfil.pmp
        },
        memoria_critica=memoria
    )


def avaliar_capital_giro(perfil, estrategia, impacto_base, configuracao=None):
    valor_captacao = estrategia["valor_captacao"] / 100
    taxa_juros = estrategia["taxa_juros"]
    prazo_pagamento = estrategia["prazo_pagamento"]
    carencia = estrategia.get("carencia", 0)

    necessidade = abs(impacto_base["diferenca_capital_giro"])
    valor_financiamento = necessidade * valor_captacao
    custo_mensal_juros = valor_financiamento * taxa_juros
    custo_carencia = custo_mensal_juros * carencia

    meses_amortizacao = max(prazo_pagamento - carencia, 1)
    valor_parcela = valor_financiamento / meses_amortizacao
    custo_apos_carencia = (valor_parcela + custo_mensal_juros) * meses_amortizacao
    custo_total = custo_carencia + custo_apos_carencia

    efetividade = _efetividade(valor_financiamento, impacto_base)
    impacto_margem_pp = _razao(custo_mensal_juros, perfil.faturamento) * 100

    memoria = MemoriaCritica("Captação de Capital de Giro")
    memoria.adicionar("Cálculo", f"Valor financiado: R$ {formatar_br(valor_financiamento)}")
    memoria.adicionar("Cálculo", f"Juros mensais: R$ {formatar_br(custo_mensal_juros)}")
    memoria.adicionar("Cálculo", f"Custo total: R$ {formatar_br(custo_total)}")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    return ResultadoEstrategia(
        estrategia="capital_giro",
        efetividade_percentual=efetividade,
        custo=custo_total,
        custo_beneficio=custo_beneficio(custo_total, valor_financiamento),
        mitigacao=valor_financiamento,
        impactos={"margem": -impacto_margem_pp / 100},
        detalhes={
            "valor_captacao": estrategia["valor_captacao"],
            "taxa_juros": taxa_juros,
            "prazo_pagamento": prazo_pagamento,
            "carencia": carencia,
            "valor_financiamento": valor_financiamento,
            "custo_mensal_juros": custo_mensal_juros,
            "valor_parcela": valor_parcela,
            "custo_carencia": custo_carencia,
            "custo_apos_carencia": custo_apos_carencia,
            "custo_total_financiamento": custo_total,
            "taxa_efetiva_anual": (1 + taxa_juros) ** 12 - 1,
            "impacto_margem_pp": impacto_margem_pp
        },
        memoria_critica=memoria
    )


def avaliar_mix_produtos(perfil, estrategia, impacto_base, configuracao=None):
    percentual_ajuste = estrategia["percentual_ajuste"] / 100
    foco_ajuste = estrategia.get("foco_ajuste", "margem")
    impacto_receita = estrategia.get("impacto_receita", 0) / 100
    impacto_margem = estrategia.get("impacto_margem", 0) / 100
    duracao = _horizonte(configuracao)

    valor_ajustado = perfil.faturamento * percentual_ajuste
    variacao_receita = valor_ajustado * impacto_receita
    impacto_fluxo_receita = variacao_receita * perfil.margem
    impacto_fluxo_margem = perfil.faturamento * impacto_margem
    impacto_fluxo_caixa = impacto_fluxo_receita + impacto_fluxo_margem
    efetividade = _efetividade(impacto_fluxo_caixa, impacto_base)

    impacto_pmr = 0.0
    if foco_ajuste == "ciclo":
        # Redução de até 20% do PMR, limitada a 5 dias
        impacto_pmr = min(perfil.pmr * 0.2, 5) * percentual_ajuste
    elif foco_ajuste == "vista":
        # Metade do volume ajustado migra para vendas à vista
        impacto_pmr = perfil.pmr * percentual_ajuste * 0.5

    impacto_total = impacto_fluxo_caixa * duracao
    custo_implementacao = valor_ajustado * CUSTO_IMPLEMENTACAO_MIX

    memoria = MemoriaCritica("Ajuste no Mix de Produtos")
    memoria.adicionar("Cálculo", f"Valor ajustado: R$ {formatar_br(valor_ajustado)} (foco: {foco_ajuste})")
    memoria.adicionar("Cálculo", f"Impacto mensal no fluxo: R$ {formatar_br(impacto_fluxo_caixa)}")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    impactos = {"pmr": -impacto_pmr}
    if impacto_margem:
        impactos["margem"] = impacto_margem

    return ResultadoEstrategia(
        estrategia="mix_produtos",
        efetividade_percentual=efetividade,
        custo=custo_implementacao,
        custo_beneficio=custo_beneficio(custo_implementacao, impacto_total),
        mitigacao=impacto_fluxo_caixa,
        impactos=impactos,
        detalhes={
            "percentual_ajuste": estrategia["percentual_ajuste"],
            "foco_ajuste": foco_ajuste,
            "valor_ajustado": valor_ajustado,
            "variacao_receita": variacao_receita,
            "nova_receita": perfil.faturamento + variacao_receita,
            "margem_ajustada": perfil.margem + impacto_margem,
            "impacto_fluxo_receita": impacto_fluxo_receita,
            "impacto_fluxo_margem": impacto_fluxo_margem,
            "impacto_fluxo_caixa": impacto_fluxo_caixa,
            "impacto_pmr": impacto_pmr,
            "reducao_ciclo": impacto_pmr,
            "pmr_ajustado": perfil.pmr - impacto_pmr,
            "ciclo_financeiro_ajustado": perfil.pmr - impacto_pmr + perfil.pme - perfil.pmp,
            "impacto_total": impacto_total,
            "custo_implementacao": custo_implementacao
        },
        memoria_critica=memoria
    )


def avaliar_meios_pagamento(perfil, estrategia, impacto_base, configuracao=None):
    distribuicao_atual = estrategia["distribuicao_atual"]
    distribuicao_nova = estrategia["distribuicao_nova"]
    taxa_incentivo = estrategia.get("taxa_incentivo", 0) / 100
    duracao = _horizonte(configuracao)

    vista_novo = distribuicao_nova.get("vista", 0) / 100
    dias30 = distribuicao_nova.get("dias30", 0) / 100
    dias60 = distribuicao_nova.get("dias60", 0) / 100
    dias90 = distribuicao_nova.get("dias90", 0) / 100

    memoria = MemoriaCritica("Incentivo a Meios de Pagamento")
    soma = vista_novo + dias30 + dias60 + dias90
    if abs(soma - 1) > TOLERANCIA_DISTRIBUICAO:
        mensagem = "A soma dos percentuais da nova distribuição deve ser 100%."
        logger.warning("Distribuição de meios de pagamento inválida (soma %.2f%%).", soma * 100)
        memoria.adicionar("Erro", mensagem)
        return ResultadoEstrategia.invalido("meios_pagamento", mensagem, memoria)

    pmr_novo = 30 * dias30 + 60 * dias60 + 90 * dias90
    varia_pmr = pmr_novo - perfil.pmr
    ciclo_novo = pmr_novo + perfil.pme - perfil.pmp

    aumento_vista = vista_novo - distribuicao_atual.get("vista", 0) / 100
    valor_incentivo_mensal = perfil.faturamento * aumento_vista * taxa_incentivo
    impacto_pmr = perfil.faturamento / 30 * (-varia_pmr)
    impacto_liquido = impacto_pmr - valor_incentivo_mensal
    efetividade = _efetividade(impacto_liquido, impacto_base)

    custo_total_incentivo = valor_incentivo_mensal * duracao
    # Sem redução efetiva de PMR o incentivo não tem contrapartida
    if varia_pmr < 0 and impacto_pmr:
        relacao_cb = valor_incentivo_mensal / abs(impacto_pmr)
    else:
        relacao_cb = float("inf")

    memoria.adicionar("Cálculo", f"PMR: {formatar_br(perfil.pmr, 0)} → {formatar_br(pmr_novo, 1)} dias")
    memoria.adicionar("Cálculo", f"Incentivo mensal: R$ {formatar_br(valor_incentivo_mensal)}")
    memoria.adicionar("Cálculo", f"Impacto líquido mensal: R$ {formatar_br(impacto_liquido)}")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    return ResultadoEstrategia(
        estrategia="meios_pagamento",
        efetividade_percentual=efetividade,
        custo=custo_total_incentivo,
        custo_beneficio=relacao_cb,
        mitigacao=impacto_liquido,
        impactos={"pmr": varia_pmr},
        detalhes={
            "distribuicao_atual": dict(distribuicao_atual),
            "distribuicao_nova": dict(distribuicao_nova),
            "taxa_incentivo": estrategia.get("taxa_incentivo", 0),
            "pmr_atual": perfil.pmr,
            "pmr_novo": pmr_novo,
            "varia_pmr": varia_pmr,
            "ciclo_financeiro_atual": perfil.ciclo_financeiro,
            "ciclo_financeiro_novo": ciclo_novo,
            "variacao_ciclo": ciclo_novo - perfil.ciclo_financeiro,
            "valor_incentivo_mensal": valor_incentivo_mensal,
            "impacto_pmr": impacto_pmr,
            "impacto_liquido": impacto_liquido,
            "impacto_total": impacto_liquido * duracao,
            "custo_total_incentivo": custo_total_incentivo
        },
        memoria_critica=memoria
    )


AVALIADORES = {
    "ajuste_precos": avaliar_ajuste_precos,
    "renegociacao_prazos": avaliar_renegociacao_prazos,
    "antecipacao_recebiveis": avaliar_antecipacao_recebiveis,
    "capital_giro": avaliar_capital_giro,
    "mix_produtos": avaliar_mix_produtos,
    "meios_pagamento": avaliar_meios_pagamento
}


def avaliar_estrategias(perfil, estrategias, impacto_base, configuracao=None):
    """Avalia as estratégias ativas, na ordem do registro de avaliadores.

    Estratégias ausentes ou com `ativar` falso ficam fora do resultado.
    """
    resultados = {}
    for nome, avaliador in AVALIADORES.items():
        parametros = estrategias.get(nome)
        if not parametros or not parametros.get("ativar"):
            continue
        resultados[nome] = avaliador(perfil, parametros, impacto_base, configuracao)
        logger.debug("Estratégia %s: efetividade %.2f%%", nome, resultados[nome].efetividade_percentual)
    return resultados
