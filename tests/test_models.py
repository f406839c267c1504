import os

import pytest
from pydantic import ValidationError

from nfe_dist.exceptions import NfeConfigError
from nfe_dist.models import (
    Ambiente,
    Certificado,
    ConfigDistribuicao,
    ConfigEvento,
    ConsultaUltNSU,
    EmpresaConfig,
    EventoLote,
    TipoEvento,
    UFCode,
)
from tests.conftest import CHAVE_VALIDA, CNPJ_TESTE, CPF_TESTE


class TestCertificado:
    def test_pfx(self):
        cert = Certificado(path="/tmp/cert.pfx", senha="123")
        assert cert.possui_pfx is True
        assert cert.possui_par is False

    def test_par_pem(self):
        cert = Certificado(cert="/tmp/c.pem", key="/tmp/k.pem")
        assert cert.possui_pfx is False
        assert cert.possui_par is True

    def test_pfx_path_sem_conteudo_retorna_path(self):
        cert = Certificado(path="/tmp/cert.pfx", senha="123")
        with cert.pfx_path() as caminho:
            assert caminho == "/tmp/cert.pfx"

    def test_pfx_path_com_conteudo_cria_e_remove_temporario(self):
        cert = Certificado(conteudo=b"pfx-bytes", senha="123")
        with cert.pfx_path() as caminho:
            assert caminho.endswith(".pfx")
            with open(caminho, "rb") as f:
                assert f.read() == b"pfx-bytes"
        assert not os.path.exists(caminho)

    def test_frozen(self):
        cert = Certificado(path="/tmp/cert.pfx", senha="123")
        with pytest.raises(ValidationError):
            cert.senha = "outra"


class TestConfigDistribuicao:
    def test_aceita_enums(self):
        config = ConfigDistribuicao(
            cnpj=CNPJ_TESTE,
            tp_amb=Ambiente.PRODUCAO,
            c_uf_autor=UFCode.PR,
            certificado=Certificado(path="/tmp/cert.pfx", senha="123"),
        )
        assert config.tp_amb == "1"
        assert config.c_uf_autor == "41"
        assert config.producao is True

    def test_homologacao(self, config_dist):
        assert config_dist.producao is False

    def test_frozen(self, config_dist):
        with pytest.raises(ValidationError):
            config_dist.tp_amb = "1"

    def test_invalida_nao_constroi(self):
        with pytest.raises(NfeConfigError, match="CNPJ ou CPF deve ser informado"):
            ConfigDistribuicao(
                tp_amb="2",
                c_uf_autor="41",
                certificado=Certificado(path="/tmp/cert.pfx", senha="123"),
            )

    def test_sem_certificado(self):
        with pytest.raises(NfeConfigError, match="Certificado obrigatorio"):
            ConfigDistribuicao(cnpj=CNPJ_TESTE, tp_amb="2", c_uf_autor="41")

    def test_opcoes_https_padrao_vazio(self, config_dist):
        assert config_dist.opcoes_https == {}


class TestConfigEvento:
    def test_cpf(self):
        config = ConfigEvento(
            cpf=CPF_TESTE,
            tp_amb=Ambiente.HOMOLOGACAO,
            certificado=Certificado(cert="/tmp/c.pem", key="/tmp/k.pem"),
        )
        assert config.cpf == CPF_TESTE
        assert config.tp_amb == "2"

    def test_ambiente_invalido(self):
        with pytest.raises(NfeConfigError, match="tpAmb"):
            ConfigEvento(
                cnpj=CNPJ_TESTE,
                tp_amb="3",
                certificado=Certificado(path="/tmp/cert.pfx", senha="123"),
            )


class TestEventoLote:
    def test_tipo_evento_enum_vira_int(self):
        item = EventoLote(ch_nfe=CHAVE_VALIDA, tp_evento=TipoEvento.CIENCIA_OPERACAO)
        assert item.tp_evento == 210210
        assert item.justificativa is None

    def test_tipo_evento_string(self):
        item = EventoLote(ch_nfe=CHAVE_VALIDA, tp_evento="210200")
        assert item.tp_evento == 210200

    def test_consulta_frozen(self):
        consulta = ConsultaUltNSU(ult_nsu="000000000000000")
        with pytest.raises(ValidationError):
            consulta.ult_nsu = "1"


class TestEmpresaConfig:
    def test_identificador_cnpj(self, empresa_sul):
        assert empresa_sul.identificador == CNPJ_TESTE

    def test_identificador_cpf(self, certificado):
        empresa = EmpresaConfig(nome="PF", cpf=CPF_TESTE, uf="35", homologacao=False, certificado=certificado)
        assert empresa.identificador == CPF_TESTE
        assert empresa.ambiente == Ambiente.PRODUCAO

    def test_config_distribuicao(self, empresa_sul):
        config = empresa_sul.config_distribuicao()
        assert isinstance(config, ConfigDistribuicao)
        assert config.cnpj == CNPJ_TESTE
        assert config.tp_amb == "2"
        assert config.c_uf_autor == "41"
        assert config.certificado == empresa_sul.certificado

    def test_config_evento(self, empresa_sul):
        config = empresa_sul.config_evento()
        assert isinstance(config, ConfigEvento)
        assert config.tp_amb == "2"

    def test_model_copy_troca_ambiente(self, empresa_sul):
        prod = empresa_sul.model_copy(update={"homologacao": False})
        assert prod.config_distribuicao().tp_amb == "1"
        assert empresa_sul.homologacao is True
