from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from memoria import MemoriaCritica

TOLERANCIA_DISTRIBUICAO = 0.01


@dataclass(frozen=True)
class PerfilEmpresa:
    """Dados de uma empresa para uma rodada de simulação.

    O perfil não é alterado durante os cálculos; a projeção de cada ano usa
    um novo perfil derivado com `com_faturamento`.
    """

    faturamento: float  # mensal
    margem: float  # margem operacional (0 a 1)
    pmr: float  # prazo médio de recebimento (dias)
    pmp: float  # prazo médio de pagamento (dias)
    pme: float  # prazo médio de estoque (dias)
    perc_vista: float
    perc_prazo: float
    aliquota: float  # alíquota efetiva sobre o faturamento
    creditos: float = 0.0
    cenario: str = "moderado"
    taxa_crescimento: Optional[float] = None  # usado apenas no cenário personalizado
    setor: Optional[str] = None
    empresa_servicos: bool = False
    regime_cumulativo: bool = False
    taxa_capital_giro: Optional[float] = None
    creditos_tributos: Mapping[str, float] = field(default_factory=dict)

    @property
    def ciclo_financeiro(self):
        return self.pmr + self.pme - self.pmp

    def com_faturamento(self, faturamento):
        return replace(self, faturamento=faturamento)


def validar_perfil(perfil):
    """Valida um perfil antes de enviá-lo ao simulador."""
    for campo in ("faturamento", "pmr", "pmp", "pme", "aliquota", "creditos"):
        if getattr(perfil, campo) < 0:
            raise ValueError(f"O campo '{campo}' não pode ser negativo")
    if not 0 <= perfil.margem <= 1:
        raise ValueError("A margem operacional deve estar entre 0 e 1")
    if not (0 <= perfil.perc_vista <= 1 and 0 <= perfil.perc_prazo <= 1):
        raise ValueError("Os percentuais de vendas devem estar entre 0 e 1")
    if abs(perfil.perc_vista + perfil.perc_prazo - 1) > TOLERANCIA_DISTRIBUICAO:
        raise ValueError("Vendas à vista + vendas a prazo devem somar 100%")
    return True


@dataclass
class ResultadoEstrategia:
    """Resultado da avaliação de uma estratégia de mitigação.

    `erro` preenchido indica entrada inválida: nesse caso a efetividade é zero
    e o resultado não participa das combinações.
    """

    estrategia: str
    efetividade_percentual: float
    custo: float = 0.0
    custo_beneficio: float = 0.0
    mitigacao: float = 0.0  # efeito de caixa somado na efetividade combinada
    impactos: Dict[str, float] = field(default_factory=dict)  # chaves: pmr, pmp, margem
    detalhes: Dict[str, Any] = field(default_factory=dict)
    erro: Optional[str] = None
    memoria_critica: Optional[MemoriaCritica] = None

    @property
    def valido(self):
        return self.erro is None

    @classmethod
    def invalido(cls, estrategia, mensagem, memoria_critica=None):
        return cls(estrategia=estrategia, efetividade_percentual=0.0, erro=mensagem,
                   memoria_critica=memoria_critica)


@dataclass(frozen=True)
class CandidatoCombinacao:
    estrategias: Tuple[str, ...]
    efetividade: float
    custo: float
    relacao_cb: float

    @property
    def tamanho(self):
        return len(self.estrategias)

    def resumo(self):
        return {
            "estrategias": list(self.estrategias),
            "efetividade": self.efetividade,
            "custo": self.custo
        }
