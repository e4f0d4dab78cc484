import logging
from itertools import combinations

from config import ConfiguracaoSplitPayment
from estrategias import NOMES_ESTRATEGIAS, custo_beneficio
from memoria import MemoriaCritica
from modelos import CandidatoCombinacao
from utils import formatar_br

logger = logging.getLogger(__name__)


def combinar_estrategias(perfil, resultados, impacto_base, configuracao=None):
    """Efeito combinado das estratégias, com fatores de sobreposição por grupo.

    Os efeitos em PMR, PMP e margem de cada estratégia são somados por grupo e
    descontados para não contar duas vezes efeitos correlacionados.
    """
    config = configuracao or ConfiguracaoSplitPayment()
    ativas = {nome: resultado for nome, resultado in resultados.items()
              if resultado is not None and resultado.valido}

    if not ativas:
        return {
            "estrategias_ativas": 0,
            "efetividade_percentual": 0.0,
            "mitigacao_total": 0.0,
            "custo_total": 0.0,
            "custo_beneficio": 0.0,
            "impactos_mitigados": {},
            "memoria_critica": MemoriaCritica("Efetividade Combinada das Estratégias").adicionar(
                "Resultado", "Nenhuma estratégia válida ativa.")
        }

    mitigacao_total = 0.0
    custo_total = 0.0
    grupos = {"pmr": [], "pmp": [], "margem": []}
    for resultado in ativas.values():
        mitigacao_total += resultado.mitigacao
        custo_total += resultado.custo
        for grupo, valor in resultado.impactos.items():
            if valor:
                grupos[grupo].append(valor)

    fatores = config.fatores_sobreposicao
    impacto_pmr = sum(grupos["pmr"]) * fatores["pmr"]
    impacto_pmp = sum(grupos["pmp"]) * fatores["pmp"]
    impacto_margem = sum(grupos["margem"]) * fatores["margem"]

    pmr_ajustado = perfil.pmr + impacto_pmr
    pmp_ajustado = perfil.pmp + impacto_pmp
    ciclo_ajustado = pmr_ajustado + perfil.pme - pmp_ajustado
    margem_ajustada = perfil.margem + impacto_margem

    necessidade = abs(impacto_base["diferenca_capital_giro"])
    efetividade = mitigacao_total / necessidade * 100 if necessidade else 0.0
    relacao_cb = custo_beneficio(custo_total, mitigacao_total)

    memoria = MemoriaCritica("Efetividade Combinada das Estratégias")
    memoria.adicionar("Estratégias", ", ".join(NOMES_ESTRATEGIAS.get(nome, nome) for nome in ativas))
    memoria.adicionar("Cálculo", f"Mitigação mensal somada: R$ {formatar_br(mitigacao_total)}")
    memoria.adicionar("Ciclo", f"PMR ajustado: {formatar_br(pmr_ajustado, 1)}, PMP ajustado: "
                               f"{formatar_br(pmp_ajustado, 1)}, ciclo: {formatar_br(ciclo_ajustado, 1)} dias")
    memoria.adicionar("Efetividade", f"{formatar_br(efetividade)}%")

    return {
        "estrategias_ativas": len(ativas),
        "efetividade_percentual": efetividade,
        "mitigacao_total": mitigacao_total,
        "custo_total": custo_total,
        "custo_beneficio": relacao_cb,
        "pmr_ajustado": pmr_ajustado,
        "pmp_ajustado": pmp_ajustado,
        "ciclo_financeiro_ajustado": ciclo_ajustado,
        "variacao_ciclo": ciclo_ajustado - perfil.ciclo_financeiro,
        "margem_ajustada": margem_ajustada,
        "impactos_mitigados": ativas,
        "memoria_critica": memoria
    }


def gerar_subconjuntos(itens, tamanho_maximo):
    """Gera os subconjuntos não vazios de `itens` até `tamanho_maximo`, dos menores aos maiores."""
    limite = min(len(itens), tamanho_maximo)
    for tamanho in range(1, limite + 1):
        yield from combinations(itens, tamanho)


def avaliar_candidatos(estrategias_validas, configuracao=None):
    """Pontua cada subconjunto de estratégias.

    `estrategias_validas` é uma lista de (nome, ResultadoEstrategia).
    """
    config = configuracao or ConfiguracaoSplitPayment()
    candidatos = []
    for subconjunto in gerar_subconjuntos(estrategias_validas, config.max_estrategias_combinacao):
        fator_desconto = 1 - config.desconto_por_estrategia * (len(subconjunto) - 1)
        efetividade = min(sum(r.efetividade_percentual for _, r in subconjunto) * fator_desconto, 100)
        custo = sum(r.custo for _, r in subconjunto)
        candidatos.append(CandidatoCombinacao(
            estrategias=tuple(nome for nome, _ in subconjunto),
            efetividade=efetividade,
            custo=custo,
            relacao_cb=custo / efetividade if efetividade else float("inf")
        ))
    return candidatos


def fronteira_pareto(candidatos):
    """Candidatos não dominados, do mais para o menos efetivo.

    Um candidato é dominado quando outro tem efetividade maior com custo
    igual ou menor.
    """
    eficientes = [
        candidato for candidato in candidatos
        if not any(outro.efetividade > candidato.efetividade and outro.custo <= candidato.custo
                   for outro in candidatos)
    ]
    return sorted(eficientes, key=lambda candidato: candidato.efetividade, reverse=True)


def identificar_combinacao_otima(resultados, configuracao=None):
    config = configuracao or ConfiguracaoSplitPayment()
    validas = [(nome, resultado) for nome, resultado in resultados.items()
               if resultado is not None and resultado.valido and resultado.efetividade_percentual > 0]

    if not validas:
        return {
            "estrategias_selecionadas": [],
            "nome_estrategias": [],
            "efetividade_percentual": 0.0,
            "custo_total": 0.0,
            "custo_beneficio": 0.0,
            "alternativas": {},
            "fronteira_pareto": [],
            "memoria_critica": MemoriaCritica("Combinação Ótima de Estratégias").adicionar(
                "Resultado", "Nenhuma estratégia com efetividade positiva.")
        }

    validas.sort(key=lambda item: item[1].custo_beneficio)
    nome_unica, melhor_unica = validas[0]

    candidatos = avaliar_candidatos(validas, config)
    melhor_efetividade = sorted(candidatos, key=lambda c: c.efetividade, reverse=True)[0]
    por_relacao_cb = sorted(candidatos, key=lambda c: c.relacao_cb)
    melhor_relacao_cb = por_relacao_cb[0]

    fronteira = fronteira_pareto(por_relacao_cb)
    efetivas = [c for c in fronteira if c.efetividade >= config.efetividade_minima_pareto]
    if efetivas:
        otima = min(efetivas, key=lambda c: c.custo)
    elif fronteira:
        otima = fronteira[0]
    else:
        otima = melhor_relacao_cb

    nomes = [NOMES_ESTRATEGIAS.get(nome, nome) for nome in otima.estrategias]
    memoria = MemoriaCritica("Combinação Ótima de Estratégias")
    memoria.adicionar("Avaliação", f"{len(candidatos)} combinações avaliadas, "
                                   f"{len(fronteira)} na fronteira de Pareto")
    memoria.adicionar("Resultado", f"Selecionadas: {', '.join(nomes)}")
    memoria.adicionar("Resultado", f"Efetividade: {formatar_br(otima.efetividade)}%, "
                                   f"custo: R$ {formatar_br(otima.custo)}")

    return {
        "estrategias_selecionadas": list(otima.estrategias),
        "nome_estrategias": nomes,
        "efetividade_percentual": otima.efetividade,
        "custo_total": otima.custo,
        "custo_beneficio": otima.relacao_cb,
        "alternativas": {
            "melhor_efetividade": melhor_efetividade.resumo(),
            "melhor_relacao_cb": melhor_relacao_cb.resumo(),
            "melhor_unica": {
                "estrategia": nome_unica,
                "efetividade": melhor_unica.efetividade_percentual,
                "custo": melhor_unica.custo
            }
        },
        "fronteira_pareto": [candidato.resumo() for candidato in fronteira],
        "memoria_critica": memoria
    }
