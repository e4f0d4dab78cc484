import base64
import logging

import pandas as pd
import streamlit as st

from config import ConfiguracaoSplitPayment
from estrategias import NOMES_ESTRATEGIAS
from modelos import PerfilEmpresa, validar_perfil
from simulador import SimuladorSplitPayment
from utils import (formatar_br, formatar_moeda, formatar_percentual, tabela_projecao, tabela_estrategias,
                   criar_grafico_projecao, criar_grafico_transicao, criar_grafico_sensibilidade,
                   criar_grafico_elasticidade, criar_grafico_pareto)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

ARQUIVO_CONFIGURACAO = "configuracoes_split_payment.json"


# Configuração da página
st.set_page_config(
    page_title="Simulador de Split Payment",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)


# Função para inicializar a sessão
def inicializar_sessao():
    if 'config' not in st.session_state:
        st.session_state.config = ConfiguracaoSplitPayment()
        st.session_state.config.carregar_configuracoes(ARQUIVO_CONFIGURACAO)

    if 'simulador' not in st.session_state:
        st.session_state.simulador = SimuladorSplitPayment(st.session_state.config)

    if 'perfil' not in st.session_state:
        st.session_state.perfil = None

    if 'resultado_simulacao' not in st.session_state:
        st.session_state.resultado_simulacao = None

    if 'resultado_mitigacao' not in st.session_state:
        st.session_state.resultado_mitigacao = None


def executar_simulacao(perfil, ano_inicial, ano_final):
    """Valida o perfil, executa a simulação e guarda o resultado na sessão."""
    try:
        validar_perfil(perfil)
        st.session_state.perfil = perfil
        st.session_state.resultado_simulacao = st.session_state.simulador.simular(perfil, ano_inicial, ano_final)
        return True
    except Exception as e:
        logger.exception("Falha na simulação")
        st.error(f"Erro na simulação: {str(e)}")
        return False


def executar_mitigacao(perfil, estrategias, ano):
    try:
        st.session_state.resultado_mitigacao = st.session_state.simulador.avaliar_mitigacao(perfil, estrategias, ano)
        return True
    except Exception as e:
        logger.exception("Falha na avaliação das estratégias")
        st.error(f"Erro na avaliação das estratégias: {str(e)}")
        return False


def link_download_texto(texto, nome_arquivo):
    b64 = base64.b64encode(texto.encode()).decode()
    return f'<a href="data:file/txt;base64,{b64}" download="{nome_arquivo}">Baixar {nome_arquivo}</a>'


# Inicializar sessão
inicializar_sessao()
config = st.session_state.config
anos_cronograma = sorted(config.cronograma_implementacao.keys())

# Sidebar para navegação
st.sidebar.title("Simulador de Split Payment")
opcao_sidebar = st.sidebar.radio("Navegação", ["Simulação", "Estratégias", "Configurações", "Memória de Cálculo"])

if opcao_sidebar == "Simulação":
    st.title("Impacto do Split Payment no Capital de Giro")

    col1, col2 = st.columns([1, 2])

    with col1:
        st.subheader("Dados da Empresa")

        with st.form(key="form_dados_empresa"):
            faturamento = st.number_input("Faturamento Mensal (R$)", min_value=0.0, value=100000.0, step=1000.0,
                                          format="%.2f")
            margem = st.number_input("Margem Operacional (%)", min_value=0.0, max_value=100.0, value=15.0, step=0.5)
            aliquota = st.number_input("Alíquota Efetiva (%)", min_value=0.0, max_value=100.0, value=26.5, step=0.1)
            creditos = st.number_input("Créditos Tributários Mensais (R$)", min_value=0.0, value=0.0, step=1000.0,
                                       format="%.2f")

            st.subheader("Ciclo Financeiro")
            pmr = st.number_input("PMR (dias)", min_value=0, value=30)
            pmp = st.number_input("PMP (dias)", min_value=0, value=30)
            pme = st.number_input("PME (dias)", min_value=0, value=30)
            perc_vista = st.number_input("Vendas à Vista (%)", min_value=0.0, max_value=100.0, value=30.0, step=1.0)

            st.subheader("Cenário")
            setor = st.selectbox("Setor", list(config.setores_especiais.keys()))
            empresa_servicos = st.checkbox("Empresa prestadora de serviços (ISS)")
            regime_cumulativo = st.checkbox("PIS/COFINS cumulativo")
            cenario = st.selectbox("Cenário de Crescimento", ["conservador", "moderado", "otimista", "personalizado"],
                                   index=1)
            taxa_personalizada = st.number_input("Taxa Personalizada (% a.a.)", value=5.0, step=0.5)

            ano_inicial = st.selectbox("Ano Inicial", anos_cronograma)
            ano_final = st.selectbox("Ano Final", anos_cronograma, index=len(anos_cronograma) - 1)

            simular = st.form_submit_button("Simular")

        if simular:
            perfil = PerfilEmpresa(
                faturamento=faturamento,
                margem=margem / 100,
                pmr=pmr,
                pmp=pmp,
                pme=pme,
                perc_vista=perc_vista / 100,
                perc_prazo=1 - perc_vista / 100,
                aliquota=aliquota / 100,
                creditos=creditos,
                cenario=cenario,
                taxa_crescimento=taxa_personalizada / 100 if cenario == "personalizado" else None,
                setor=setor,
                empresa_servicos=empresa_servicos,
                regime_cumulativo=regime_cumulativo
            )
            with st.spinner("Executando simulação..."):
                if executar_simulacao(perfil, ano_inicial, ano_final):
                    st.success("Simulação concluída com sucesso!")

    with col2:
        resultado = st.session_state.resultado_simulacao
        if resultado:
            impacto = resultado["impacto_base"]
            necessidade = resultado["necessidade_capital"]

            st.subheader(f"Resultados de {impacto['ano']}")
            m1, m2, m3 = st.columns(3)
            m1.metric("Diferença no Capital de Giro", formatar_moeda(impacto["diferenca_capital_giro"]),
                      f"{formatar_br(impacto['percentual_impacto'])}%")
            m2.metric("Necessidade Total de Capital", formatar_moeda(necessidade["necessidade_total"]))
            m3.metric("Margem Ajustada", formatar_percentual(impacto["margem_operacional_ajustada"]))

            st.subheader("Projeção Anual")
            df_projecao = tabela_projecao(resultado["projecao_temporal"])
            st.dataframe(df_projecao.set_index("Ano"), use_container_width=True)

            tab_proj, tab_trans, tab_sens, tab_elas, tab_fin = st.tabs(
                ["Projeção", "Transição Tributária", "Sensibilidade", "Elasticidade", "Financiamento"])

            with tab_proj:
                grafico = criar_grafico_projecao(resultado["projecao_temporal"])
                if grafico:
                    st.plotly_chart(grafico, use_container_width=True)

            with tab_trans:
                grafico = criar_grafico_transicao(resultado["comparativo_regimes"])
                if grafico:
                    st.plotly_chart(grafico, use_container_width=True)

            with tab_sens:
                grafico = criar_grafico_sensibilidade(impacto["analise_sensibilidade"])
                if grafico:
                    st.plotly_chart(grafico, use_container_width=True)

            with tab_elas:
                elasticidade = resultado["projecao_temporal"]["analise_elasticidade"]
                grafico = criar_grafico_elasticidade(elasticidade)
                if grafico:
                    st.plotly_chart(grafico, use_container_width=True)
                if elasticidade:
                    st.dataframe(pd.DataFrame({
                        "Cenário": list(elasticidade["elasticidades"].keys()),
                        "Elasticidade": list(elasticidade["elasticidades"].values())
                    }).set_index("Cenário"), use_container_width=True)

            with tab_fin:
                opcoes = necessidade["opcoes_financiamento"]["opcoes"]
                st.dataframe(pd.DataFrame([{
                    "Linha": opcao["tipo"],
                    "Taxa Mensal (%)": opcao["taxa_mensal"] * 100,
                    "Valor Aprovado": opcao["valor_aprovado"],
                    "Custo Total": opcao["custo_total"],
                    "Parcela": opcao["valor_parcela"]
                } for opcao in opcoes]).set_index("Linha"), use_container_width=True)
                st.info(f"Opção recomendada: {necessidade['opcoes_financiamento']['opcao_recomendada']['tipo']}")

elif opcao_sidebar == "Estratégias":
    st.title("Estratégias de Mitigação")

    perfil = st.session_state.perfil
    if perfil is None:
        st.warning("Execute uma simulação antes de avaliar as estratégias.")
    else:
        with st.form(key="form_estrategias"):
            ano = st.selectbox("Ano de Referência", anos_cronograma)

            with st.expander(NOMES_ESTRATEGIAS["ajuste_precos"]):
                ap_ativar = st.checkbox("Ativar", key="ap_ativar")
                ap_aumento = st.number_input("Aumento de Preço (%)", value=5.0, key="ap_aumento")
                ap_elasticidade = st.number_input("Elasticidade", value=-1.2, key="ap_elasticidade")
                ap_periodo = st.number_input("Período (meses)", min_value=1, value=12, key="ap_periodo")

            with st.expander(NOMES_ESTRATEGIAS["renegociacao_prazos"]):
                rp_ativar = st.checkbox("Ativar", key="rp_ativar")
                rp_aumento = st.number_input("Aumento de Prazo (dias)", value=15, key="rp_aumento")
                rp_fornecedores = st.number_input("Fornecedores Participantes (%)", value=60.0, key="rp_fornecedores")
                rp_contrapartida = st.text_input("Contrapartida", value="nenhuma", key="rp_contrapartida")
                rp_custo = st.number_input("Custo da Contrapartida (%)", value=0.0, key="rp_custo")

            with st.expander(NOMES_ESTRATEGIAS["antecipacao_recebiveis"]):
                ar_ativar = st.checkbox("Ativar", key="ar_ativar")
                ar_percentual = st.number_input("Recebíveis Antecipados (%)", value=50.0, key="ar_percentual")
                ar_taxa = st.number_input("Taxa de Desconto (% a.m.)", value=1.8, key="ar_taxa")
                ar_prazo = st.number_input("Prazo Antecipado (dias)", value=30, key="ar_prazo")

            with st.expander(NOMES_ESTRATEGIAS["capital_giro"]):
                cg_ativar = st.checkbox("Ativar", key="cg_ativar")
                cg_valor = st.number_input("Captação (% da necessidade)", value=100.0, key="cg_valor")
                cg_taxa = st.number_input("Taxa de Juros (% a.m.)", value=2.1, key="cg_taxa")
                cg_prazo = st.number_input("Prazo (meses)", min_value=1, value=12, key="cg_prazo")
                cg_carencia = st.number_input("Carência (meses)", min_value=0, value=3, key="cg_carencia")

            with st.expander(NOMES_ESTRATEGIAS["mix_produtos"]):
                mp_ativar = st.checkbox("Ativar", key="mp_ativar")
                mp_percentual = st.number_input("Faturamento Ajustado (%)", value=30.0, key="mp_percentual")
                mp_foco = st.selectbox("Foco", ["ciclo", "vista", "margem"], key="mp_foco")
                mp_receita = st.number_input("Impacto na Receita (%)", value=5.0, key="mp_receita")
                mp_margem = st.number_input("Impacto na Margem (p.p.)", value=1.0, key="mp_margem")

            with st.expander(NOMES_ESTRATEGIAS["meios_pagamento"]):
                mg_ativar = st.checkbox("Ativar", key="mg_ativar")
                mg_vista = st.number_input("À Vista (%)", value=40.0, key="mg_vista")
                mg_30 = st.number_input("30 dias (%)", value=30.0, key="mg_30")
                mg_60 = st.number_input("60 dias (%)", value=20.0, key="mg_60")
                mg_90 = st.number_input("90 dias (%)", value=10.0, key="mg_90")
                mg_taxa = st.number_input("Incentivo à Vista (%)", value=3.0, key="mg_taxa")

            avaliar = st.form_submit_button("Avaliar Estratégias")

        if avaliar:
            estrategias = {
                "ajuste_precos": {"ativar": ap_ativar, "percentual_aumento": ap_aumento,
                                  "elasticidade": ap_elasticidade, "periodo_ajuste": ap_periodo},
                "renegociacao_prazos": {"ativar": rp_ativar, "aumento_prazo": rp_aumento,
                                        "percentual_fornecedores": rp_fornecedores,
                                        "contrapartidas": rp_contrapartida, "custo_contrapartida": rp_custo},
                "antecipacao_recebiveis": {"ativar": ar_ativar, "percentual_antecipacao": ar_percentual,
                                           "taxa_desconto": ar_taxa / 100, "prazo_antecipacao": ar_prazo},
                "capital_giro": {"ativar": cg_ativar, "valor_captacao": cg_valor, "taxa_juros": cg_taxa / 100,
                                 "prazo_pagamento": cg_prazo, "carencia": cg_carencia},
                "mix_produtos": {"ativar": mp_ativar, "percentual_ajuste": mp_percentual, "foco_ajuste": mp_foco,
                                 "impacto_receita": mp_receita, "impacto_margem": mp_margem},
                "meios_pagamento": {"ativar": mg_ativar,
                                    "distribuicao_atual": {"vista": perfil.perc_vista * 100,
                                                           "prazo": perfil.perc_prazo * 100},
                                    "distribuicao_nova": {"vista": mg_vista, "dias30": mg_30,
                                                          "dias60": mg_60, "dias90": mg_90},
                                    "taxa_incentivo": mg_taxa}
            }
            with st.spinner("Avaliando estratégias..."):
                executar_mitigacao(perfil, estrategias, ano)

        mitigacao = st.session_state.resultado_mitigacao
        if mitigacao:
            for nome, resultado in mitigacao["resultados_estrategias"].items():
                if not resultado.valido:
                    st.error(f"{NOMES_ESTRATEGIAS[nome]}: {resultado.erro}")

            st.subheader("Resultados por Estratégia")
            df_estrategias = tabela_estrategias(mitigacao["resultados_estrategias"], NOMES_ESTRATEGIAS)
            st.dataframe(df_estrategias.set_index("Estratégia"), use_container_width=True)

            combinada = mitigacao["efetividade_combinada"]
            otima = mitigacao["combinacao_otima"]
            c1, c2 = st.columns(2)
            c1.metric("Efetividade Combinada", f"{formatar_br(combinada['efetividade_percentual'])}%")
            c2.metric("Custo Combinado", formatar_moeda(combinada["custo_total"]))

            st.subheader("Combinação Ótima")
            if otima["estrategias_selecionadas"]:
                st.write(", ".join(otima["nome_estrategias"]))
                st.write(f"Efetividade: {formatar_br(otima['efetividade_percentual'])}% | "
                         f"Custo: {formatar_moeda(otima['custo_total'])}")
                grafico = criar_grafico_pareto(otima)
                if grafico:
                    st.plotly_chart(grafico, use_container_width=True)
            else:
                st.info("Nenhuma estratégia com efetividade positiva.")

elif opcao_sidebar == "Configurações":
    st.title("Configurações do Simulador")

    tab1, tab2, tab3 = st.tabs(["Cronograma", "Parâmetros Financeiros", "Salvar/Carregar"])

    with tab1:
        st.subheader("Cronograma de Implementação do Split Payment")
        valores_cronograma = {}
        cols = st.columns(4)
        for i, ano in enumerate(anos_cronograma):
            with cols[i % 4]:
                valor = st.number_input(f"Ano {ano} (%)", min_value=0.0, max_value=100.0,
                                        value=float(config.cronograma_implementacao[ano] * 100),
                                        step=1.0, format="%.1f", key=f"cronograma_{ano}")
                valores_cronograma[ano] = valor / 100

        if st.button("Atualizar Cronograma", key="update_cronograma"):
            config.cronograma_implementacao.update(valores_cronograma)
            st.success("Cronograma atualizado com sucesso!")

    with tab2:
        st.subheader("Parâmetros Financeiros")
        parametros = config.parametros_financeiros
        taxa_cg = st.number_input("Taxa de Capital de Giro (% a.m.)", min_value=0.0,
                                  value=float(parametros["taxa_capital_giro"] * 100), step=0.1, format="%.2f")
        taxa_ant = st.number_input("Taxa de Antecipação (% a.m.)", min_value=0.0,
                                   value=float(parametros["taxa_antecipacao"] * 100), step=0.1, format="%.2f")
        prazo = st.number_input("Prazo de Recolhimento (dia)", min_value=0,
                                value=int(parametros["prazo_recolhimento"]))

        if st.button("Atualizar Parâmetros", key="update_parametros"):
            parametros["taxa_capital_giro"] = taxa_cg / 100
            parametros["taxa_antecipacao"] = taxa_ant / 100
            parametros["prazo_recolhimento"] = prazo
            st.success("Parâmetros atualizados com sucesso!")

    with tab3:
        arquivo = st.text_input("Arquivo de configuração", value=ARQUIVO_CONFIGURACAO)
        col_s, col_c = st.columns(2)
        with col_s:
            if st.button("Salvar Configurações"):
                if config.salvar_configuracoes(arquivo):
                    st.success("Configurações salvas com sucesso!")
                else:
                    st.error("Erro ao salvar configurações.")
        with col_c:
            if st.button("Carregar Configurações"):
                if config.carregar_configuracoes(arquivo):
                    st.success("Configurações carregadas com sucesso!")
                else:
                    st.error("Não foi possível carregar as configurações.")

elif opcao_sidebar == "Memória de Cálculo":
    st.title("Memória de Cálculo")

    resultado = st.session_state.resultado_simulacao
    if not resultado:
        st.warning("Execute uma simulação para visualizar a memória de cálculo.")
    else:
        impacto = resultado["impacto_base"]
        memorias = [
            resultado["memoria_critica"],
            impacto["resultado_atual"]["memoria_critica"],
            impacto["resultado_split_payment"]["memoria_critica"],
            impacto["memoria_critica"],
            impacto["impacto_margem"]["memoria_critica"],
            resultado["necessidade_capital"]["memoria_critica"],
            resultado["necessidade_capital"]["opcoes_financiamento"]["memoria_critica"],
            resultado["necessidade_capital"]["impacto_resultado"]["memoria_critica"],
            resultado["impacto_ciclo_financeiro"]["memoria_critica"],
            resultado["projecao_temporal"]["memoria_critica"]
        ]
        if resultado["projecao_temporal"]["analise_elasticidade"]:
            memorias.append(resultado["projecao_temporal"]["analise_elasticidade"]["memoria_critica"])
        if st.session_state.resultado_mitigacao:
            mitigacao = st.session_state.resultado_mitigacao
            memorias.append(mitigacao["memoria_critica"])
            memorias.extend(r.memoria_critica for r in mitigacao["resultados_estrategias"].values()
                            if r.memoria_critica)
            memorias.append(mitigacao["efetividade_combinada"]["memoria_critica"])
            memorias.append(mitigacao["combinacao_otima"]["memoria_critica"])

        for memoria in memorias:
            with st.expander(memoria.titulo, expanded=False):
                for rotulo in memoria.rotulos:
                    st.markdown(f"**{rotulo}**")
                    for linha in memoria.por_rotulo(rotulo):
                        st.write(linha)

        if st.button("Exportar Memória de Cálculo", key="export_memoria"):
            texto = "\n\n".join(memoria.como_texto() for memoria in memorias)
            st.markdown(link_download_texto(texto, "memoria_calculo.txt"), unsafe_allow_html=True)

# Rodapé
st.markdown("---")
