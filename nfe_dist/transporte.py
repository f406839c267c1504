import logging
import os
import tempfile
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass

import requests
from pynfe.entidades.certificado import CertificadoA1

from .exceptions import NfeConfigError, NfeTransportError
from .models import Ambiente, Certificado
from .validacao import MSG_CERTIFICADO

TIMEOUT_SEGUNDOS = 30

URL_PRODUCAO = "https://www1.nfe.fazenda.gov.br"
URL_HOMOLOGACAO = "https://hom.nfe.fazenda.gov.br"

SERVICO_DISTRIBUICAO = "NFeDistribuicaoDFe"
SERVICO_EVENTO = "NFeRecepcaoEvento"

CAMINHOS = {
    SERVICO_DISTRIBUICAO: "/NFeDistribuicaoDFe/NFeDistribuicaoDFe.asmx",
    SERVICO_EVENTO: "/NFeRecepcaoEvento/NFeRecepcaoEvento.asmx",
}

HEADERS = {
    "Content-Type": "application/soap+xml; charset=utf-8",
    "SOAPAction": "",
}

OPCOES_PADRAO = {"verify": True}

# definidos pela requisicao; opcoes_https nao podem sobrescrever
_CAMPOS_FIXOS = frozenset({"method", "url", "data", "headers", "cert", "timeout"})


@dataclass(frozen=True, slots=True)
class RespostaSoap:
    texto: str
    status: int


def url_servico(servico: str, tp_amb: str) -> str:
    caminho = CAMINHOS.get(servico)
    if caminho is None:
        raise NfeTransportError(f"Endpoint desconhecido: {servico}")
    base = URL_PRODUCAO if tp_amb == Ambiente.PRODUCAO.value else URL_HOMOLOGACAO
    return base + caminho


@contextmanager
def _pem_temporario(conteudo: bytes):
    fd, tmp = tempfile.mkstemp(suffix=".pem")
    try:
        os.write(fd, conteudo)
        os.close(fd)
        yield tmp
    finally:
        os.unlink(tmp)


@contextmanager
def identidade_tls(certificado: Certificado):
    """Resolve o certificado em (cert_path, key_path) PEM para o requests.

    PKCS#12 com senha tem prioridade; senao exige o par cert/key. Arquivos
    temporarios sao removidos ao sair do contexto.
    """
    if certificado.possui_pfx:
        with certificado.pfx_path() as caminho:
            a1 = CertificadoA1(caminho)
            try:
                chave, cert = a1.separar_arquivo(certificado.senha, caminho=True)
            except Exception as e:
                raise NfeConfigError(f"Nao foi possivel ler o certificado A1: {e}") from e
            try:
                yield cert, chave
            finally:
                a1.excluir()
    elif certificado.possui_par:
        with ExitStack() as stack:
            arquivos = []
            for material in (certificado.cert, certificado.key):
                if isinstance(material, bytes):
                    material = stack.enter_context(_pem_temporario(material))
                arquivos.append(material)
            yield tuple(arquivos)
    else:
        raise NfeConfigError(MSG_CERTIFICADO)


def _opcoes(config) -> dict:
    opcoes = dict(OPCOES_PADRAO)
    for nome, valor in config.opcoes_https.items():
        if nome in _CAMPOS_FIXOS:
            logging.warning("Opcao HTTPS '%s' ignorada: definida pela requisicao SOAP", nome)
            continue
        opcoes[nome] = valor
    return opcoes


def enviar_soap(xml: str, config, servico: str) -> RespostaSoap:
    """Faz um unico POST SOAP e retorna o texto e o status HTTP da resposta.

    Status HTTP de erro nao levanta excecao: o cStat vem no corpo e e
    tratado pelo parser.
    """
    url = url_servico(servico, config.tp_amb)
    opcoes = _opcoes(config)

    with identidade_tls(config.certificado) as cert:
        logging.debug("POST %s (%d bytes)", url, len(xml))
        try:
            resp = requests.post(
                url,
                data=xml.encode("utf-8"),
                headers=dict(HEADERS),
                cert=cert,
                timeout=TIMEOUT_SEGUNDOS,
                **opcoes,
            )
        except (requests.RequestException, OSError) as e:
            # OSError: arquivo de cert/key ilegivel, levantado pelo adapter antes da conexao
            raise NfeTransportError(f"Erro na requisicao SOAP: {e}") from e

    return RespostaSoap(texto=resp.text, status=resp.status_code)
