"""
Testes do cronograma de implementação, parâmetros setoriais e persistência em JSON.
"""

import json

from config import ConfiguracaoSplitPayment


def test_cronograma_padrao_nao_decrescente(configuracao):
    anos = sorted(configuracao.cronograma_implementacao)
    percentuais = [configuracao.obter_percentual_implementacao(ano) for ano in anos]

    assert percentuais == sorted(percentuais)
    assert configuracao.obter_percentual_implementacao(2033) == 1.0
    assert configuracao.ano_final_cronograma == 2033


def test_ano_fora_do_cronograma_retorna_zero(configuracao):
    assert configuracao.obter_percentual_implementacao(2025) == 0.0
    assert configuracao.obter_percentual_implementacao(2034) == 0.0


def test_cronograma_setorial_com_fallback(configuracao):
    combustiveis = configuracao.obter_parametros_setoriais("combustiveis")

    assert configuracao.obter_percentual_implementacao(2026, combustiveis) == 0.20
    # 2030 não está no cronograma setorial
    assert configuracao.obter_percentual_implementacao(2030, combustiveis) == 0.70


def test_cronograma_setorial_com_valor_zero():
    config = ConfiguracaoSplitPayment()
    parametros = {"cronograma_proprio": True, "cronograma": {2026: 0.0}}

    assert config.obter_percentual_implementacao(2026, parametros) == 0.0


def test_cronograma_setorial_limitado_a_um():
    config = ConfiguracaoSplitPayment()
    parametros = {"cronograma_proprio": True, "cronograma": {2026: 1.5}}

    assert config.obter_percentual_implementacao(2026, parametros) == 1.0


def test_setor_sem_cronograma_proprio_usa_padrao(configuracao):
    padrao = configuracao.obter_parametros_setoriais("padrao")
    assert configuracao.obter_percentual_implementacao(2027, padrao) == 0.25


def test_setor_desconhecido(configuracao, caplog):
    assert configuracao.obter_parametros_setoriais("mineracao") is None
    assert "mineracao" in caplog.text
    assert configuracao.obter_parametros_setoriais(None) is None


def test_parametros_setoriais_sao_copia(configuracao):
    saude = configuracao.obter_parametros_setoriais("saude")
    saude["cronograma"][2026] = 0.9

    assert configuracao.setores_especiais["saude"]["cronograma"][2026] == 0.05


def test_obter_taxa_composta(configuracao):
    assert configuracao.obter_taxa("taxa_capital_giro") == 0.021
    assert abs(configuracao.obter_taxa("taxa_capital_giro+spread_bancario") - 0.026) < 1e-12


def test_salvar_e_carregar_configuracoes(tmp_path):
    arquivo = tmp_path / "config.json"
    config = ConfiguracaoSplitPayment()
    config.cronograma_implementacao[2026] = 0.15
    config.parametros_financeiros["taxa_capital_giro"] = 0.03

    assert config.salvar_configuracoes(str(arquivo))

    nova = ConfiguracaoSplitPayment()
    assert nova.carregar_configuracoes(str(arquivo))
    assert nova.cronograma_implementacao[2026] == 0.15
    assert all(isinstance(ano, int) for ano in nova.cronograma_implementacao)
    assert nova.setores_especiais["combustiveis"]["cronograma"][2029] == 0.80
    assert nova.parametros_financeiros["taxa_capital_giro"] == 0.03
    assert nova.parametros_financeiros["prazo_recolhimento"] == 25


def test_carregar_arquivo_inexistente(tmp_path):
    config = ConfiguracaoSplitPayment()
    assert not config.carregar_configuracoes(str(tmp_path / "nao_existe.json"))
    assert not config.carregar_configuracoes(None)


def test_carregar_json_invalido(tmp_path, caplog):
    arquivo = tmp_path / "config.json"
    arquivo.write_text("{ invalido", encoding="utf-8")

    config = ConfiguracaoSplitPayment()
    assert not config.carregar_configuracoes(str(arquivo))
    assert "Erro ao carregar" in caplog.text
    assert config.cronograma_implementacao[2026] == 0.10


def test_json_salvo_legivel(tmp_path):
    arquivo = tmp_path / "config.json"
    ConfiguracaoSplitPayment().salvar_configuracoes(str(arquivo))

    dados = json.loads(arquivo.read_text(encoding="utf-8"))
    assert dados["cronograma_implementacao"]["2033"] == 1.0


def test_carregar_secao_invalida_nao_altera_configuracao(tmp_path, caplog):
    arquivo = tmp_path / "config.json"
    arquivo.write_text(json.dumps({
        "cronograma_implementacao": {"2026": 0.5},
        "parametros_financeiros": {"taxa_capital_giro": 0.05},
        "setores_especiais": {"saude": {"cronograma_proprio": True, "cronograma": {"abc": 0.1}}}
    }), encoding="utf-8")

    config = ConfiguracaoSplitPayment()
    assert not config.carregar_configuracoes(str(arquivo))
    assert "Erro ao carregar" in caplog.text
    assert config.cronograma_implementacao[2026] == 0.10
    assert config.parametros_financeiros["taxa_capital_giro"] == 0.021
    assert config.setores_especiais["saude"]["cronograma"][2026] == 0.05
