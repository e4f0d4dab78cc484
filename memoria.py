from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class MemoriaCritica:
    """Memória de cálculo anexada a cada resultado: linhas rotuladas, em ordem."""

    titulo: str
    itens: List[Tuple[str, str]] = field(default_factory=list)

    def adicionar(self, rotulo, texto):
        self.itens.append((rotulo, texto))
        return self

    def por_rotulo(self, rotulo):
        """Retorna os textos de um rótulo, na ordem em que foram registrados."""
        return [texto for r, texto in self.itens if r == rotulo]

    @property
    def rotulos(self):
        vistos = []
        for rotulo, _ in self.itens:
            if rotulo not in vistos:
                vistos.append(rotulo)
        return vistos

    def como_texto(self):
        linhas = [f"=== {self.titulo} ==="]
        for rotulo in self.rotulos:
            linhas.append(f"\n{rotulo}:")
            linhas.extend(self.por_rotulo(rotulo))
        return "\n".join(linhas)

    def __len__(self):
        return len(self.itens)
