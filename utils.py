import pandas as pd
import plotly.express as px
import plotly.graph_objects as go


def formatar_br(valor, decimais=2):
    """Formata um número no padrão brasileiro (vírgula como separador decimal e ponto como separador de milhar)."""
    return f"{valor:,.{decimais}f}".replace(",", "X").replace(".", ",").replace("X", ".")


def formatar_moeda(valor):
    return f"R$ {formatar_br(valor)}"


def formatar_percentual(fracao, decimais=2):
    """Formata uma fração (0,1) como percentual ("10,00%")."""
    return f"{formatar_br(fracao * 100, decimais)}%"


def _legenda_horizontal(fig):
    fig.update_layout(legend_title_text='',
                      legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1))
    return fig


def tabela_projecao(projecao):
    """Monta a tabela anual da projeção temporal."""
    linhas = []
    for ano, impacto in projecao["resultados_anuais"].items():
        linhas.append({
            'Ano': ano,
            'Faturamento': impacto["resultado_atual"]["faturamento"],
            'Implementação (%)': impacto["resultado_split_payment"]["percentual_implementacao"] * 100,
            'Diferença Capital de Giro': impacto["diferenca_capital_giro"],
            'Necessidade Adicional': impacto["necessidade_adicional_capital_giro"],
            'Custo Anual': impacto["impacto_margem"]["custo_anual_capital_giro"],
            'Impacto na Margem (p.p.)': impacto["impacto_margem"]["impacto_percentual"]
        })
    return pd.DataFrame(linhas)


def tabela_estrategias(resultados, nomes=None):
    """Monta a tabela de resultados das estratégias de mitigação."""
    nomes = nomes or {}
    linhas = []
    for nome, resultado in resultados.items():
        linhas.append({
            'Estratégia': nomes.get(nome, nome),
            'Efetividade (%)': resultado.efetividade_percentual,
            'Custo': resultado.custo,
            'Custo-Benefício': resultado.custo_beneficio,
            'Situação': resultado.erro or 'OK'
        })
    return pd.DataFrame(linhas, columns=['Estratégia', 'Efetividade (%)', 'Custo', 'Custo-Benefício', 'Situação'])


def criar_grafico_projecao(projecao, titulo=None):
    """Cria um gráfico de barras da diferença e da necessidade de capital de giro por ano."""
    if not projecao or not projecao["resultados_anuais"]:
        return None

    df = tabela_projecao(projecao)
    df_melt = pd.melt(df, id_vars=['Ano'], value_vars=['Diferença Capital de Giro', 'Necessidade Adicional'],
                      var_name='Categoria', value_name='Valor')

    fig = px.bar(df_melt, x='Ano', y='Valor', color='Categoria', barmode='group',
                 title=titulo or 'Impacto do Split Payment no Capital de Giro',
                 labels={'Valor': 'Valor (R$)', 'Ano': 'Ano'})

    return _legenda_horizontal(fig)


def criar_grafico_transicao(comparativo, titulo=None):
    """Cria um gráfico comparativo entre sistema atual e tributos ponderados da transição."""
    if not comparativo:
        return None

    anos = list(comparativo.keys())
    df = pd.DataFrame({
        'Ano': anos,
        'Sistema Atual': [comparativo[ano]["impostos_atuais"] for ano in anos],
        'Transição IVA Dual': [comparativo[ano]["impostos_transicao"] for ano in anos]
    })

    df_melt = pd.melt(df, id_vars=['Ano'], value_vars=['Sistema Atual', 'Transição IVA Dual'],
                      var_name='Sistema', value_name='Valor')

    fig = px.bar(df_melt, x='Ano', y='Valor', color='Sistema', barmode='group',
                 title=titulo or 'Evolução Tributária na Transição',
                 labels={'Valor': 'Valor (R$)', 'Ano': 'Ano'})

    return _legenda_horizontal(fig)


def criar_grafico_sensibilidade(analise_sensibilidade, titulo=None):
    """Cria um gráfico de linha da diferença de capital de giro por percentual de implementação."""
    if not analise_sensibilidade or not analise_sensibilidade["resultados"]:
        return None

    resultados = analise_sensibilidade["resultados"]
    df = pd.DataFrame({
        'Implementação (%)': [percentual * 100 for percentual in resultados],
        'Diferença (R$)': list(resultados.values())
    })

    fig = px.line(df, x='Implementação (%)', y='Diferença (R$)', markers=True,
                  title=titulo or 'Sensibilidade ao Percentual de Implementação')

    return fig


def criar_grafico_elasticidade(analise_elasticidade, titulo=None):
    """Cria um gráfico de barras do impacto acumulado por cenário de crescimento."""
    if not analise_elasticidade:
        return None

    resultados = analise_elasticidade["resultados"]
    df = pd.DataFrame({
        'Cenário': list(resultados.keys()),
        'Impacto Acumulado': [resultado["impacto_acumulado"] for resultado in resultados.values()],
        'Elasticidade': [analise_elasticidade["elasticidades"].get(nome) for nome in resultados]
    })

    fig = px.bar(df, x='Cenário', y='Impacto Acumulado', hover_data=['Elasticidade'],
                 title=titulo or 'Impacto Acumulado por Cenário de Crescimento',
                 labels={'Impacto Acumulado': 'Valor (R$)'})

    return fig


def criar_grafico_pareto(combinacao_otima, titulo=None):
    """Cria um gráfico de dispersão custo × efetividade da fronteira de Pareto."""
    fronteira = combinacao_otima.get("fronteira_pareto") if combinacao_otima else None
    if not fronteira:
        return None

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[candidato["custo"] for candidato in fronteira],
        y=[candidato["efetividade"] for candidato in fronteira],
        mode='lines+markers',
        text=[", ".join(candidato["estrategias"]) for candidato in fronteira],
        name='Fronteira de Pareto',
        marker_color='#3498db'
    ))
    fig.add_trace(go.Scatter(
        x=[combinacao_otima["custo_total"]],
        y=[combinacao_otima["efetividade_percentual"]],
        mode='markers',
        name='Combinação Ótima',
        marker=dict(color='#2ecc71', size=14, symbol='star')
    ))

    fig.update_layout(title_text=titulo or 'Combinações de Estratégias: Custo × Efetividade',
                      xaxis_title='Custo (R$)', yaxis_title='Efetividade (%)')

    return _legenda_horizontal(fig)
