import base64
import gzip

import pytest

from nfe_dist.models import Certificado, ConfigDistribuicao, ConfigEvento, EmpresaConfig


CNPJ_TESTE = "12345678901234"
CPF_TESTE = "12345678901"
CHAVE_VALIDA = "52991299999999999999550010000000011000000010"
CHAVE_VALIDA_2 = "35240112345678901234550010000000021000000028"


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: testes que chamam a SEFAZ (requerem certificado e conexao real)"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--empresa",
        default=None,
        help="Nome da empresa destinataria nos testes E2E (secao no nfe-dist.conf.ini)",
    )


def gzip_b64(xml: str) -> str:
    """Compacta e codifica o XML como a SEFAZ entrega em docZip."""
    return base64.b64encode(gzip.compress(xml.encode("utf-8"))).decode("ascii")


@pytest.fixture
def certificado():
    return Certificado(path="/tmp/cert.pfx", senha="123456")


@pytest.fixture
def config_dist(certificado):
    return ConfigDistribuicao(
        cnpj=CNPJ_TESTE,
        tp_amb="2",
        c_uf_autor="41",
        certificado=certificado,
    )


@pytest.fixture
def config_dist_cpf(certificado):
    return ConfigDistribuicao(
        cpf=CPF_TESTE,
        tp_amb="2",
        c_uf_autor="41",
        certificado=certificado,
    )


@pytest.fixture
def config_evento(certificado):
    return ConfigEvento(cnpj=CNPJ_TESTE, tp_amb="2", certificado=certificado)


@pytest.fixture
def empresa_sul(certificado):
    return EmpresaConfig(
        nome="SUL",
        cnpj=CNPJ_TESTE,
        uf="41",
        homologacao=True,
        certificado=certificado,
    )
