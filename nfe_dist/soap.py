"""Montagem dos envelopes SOAP 1.2 dos servicos do Ambiente Nacional."""
from datetime import datetime

from pynfe.utils import etree

from .models import (
    ConfigDistribuicao,
    ConfigEvento,
    Consulta,
    ConsultaChave,
    ConsultaNSU,
    ConsultaUltNSU,
    EventoLote,
    TipoEvento,
    UFCode,
)
from .xml_utils import agora_brt, formatar_dh, to_xml_string

NS_SOAP12 = "http://www.w3.org/2003/05/soap-envelope"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"
NS_XSD = "http://www.w3.org/2001/XMLSchema"
NS_NFE = "http://www.portalfiscal.inf.br/nfe"
NS_WSDL_DISTRIBUICAO = "http://www.portalfiscal.inf.br/nfe/wsdl/NFeDistribuicaoDFe"
NS_WSDL_EVENTO = "http://www.portalfiscal.inf.br/nfe/wsdl/NFeRecepcaoEvento"

VERSAO_DISTRIBUICAO = "1.01"
VERSAO_EVENTO = "1.00"

DESCRICOES_EVENTO = {
    TipoEvento.CONFIRMACAO_OPERACAO: "Confirmacao da Operacao",
    TipoEvento.CIENCIA_OPERACAO: "Ciencia da Operacao",
    TipoEvento.DESCONHECIMENTO_OPERACAO: "Desconhecimento da Operacao",
    TipoEvento.OPERACAO_NAO_REALIZADA: "Operacao nao Realizada",
}
DESCRICAO_DESCONHECIDA = "Evento desconhecido"
DESCRICAO_JUSTIFICADA = DESCRICOES_EVENTO[TipoEvento.OPERACAO_NAO_REALIZADA]

# nSeqEvento fixo: so atende a primeira manifestacao de cada tipo por chave
N_SEQ_EVENTO = "1"


def descricao_evento(tp_evento: int) -> str:
    return DESCRICOES_EVENTO.get(tp_evento, DESCRICAO_DESCONHECIDA)


def _nfe(pai, tag: str, texto: str | None = None, **atributos):
    el = etree.SubElement(pai, f"{{{NS_NFE}}}{tag}", **atributos)
    if texto is not None:
        el.text = texto
    return el


def _envelope(ns_servico: str, operacao: str):
    """Retorna (Envelope, nfeDadosMsg)."""
    envelope = etree.Element(
        f"{{{NS_SOAP12}}}Envelope",
        nsmap={"xsi": NS_XSI, "xsd": NS_XSD, "soap12": NS_SOAP12},
    )
    body = etree.SubElement(envelope, f"{{{NS_SOAP12}}}Body")
    op = etree.SubElement(body, f"{{{ns_servico}}}{operacao}", nsmap={None: ns_servico})
    dados = etree.SubElement(op, f"{{{ns_servico}}}nfeDadosMsg")
    return envelope, dados


def _identificacao(pai, config) -> None:
    if config.cnpj:
        _nfe(pai, "CNPJ", config.cnpj)
    else:
        _nfe(pai, "CPF", config.cpf)


def montar_distribuicao(config: ConfigDistribuicao, consulta: Consulta) -> str:
    envelope, dados = _envelope(NS_WSDL_DISTRIBUICAO, "nfeDistDFeInteresse")
    dist = etree.SubElement(
        dados, f"{{{NS_NFE}}}distDFeInt", nsmap={None: NS_NFE}, versao=VERSAO_DISTRIBUICAO
    )
    _nfe(dist, "tpAmb", config.tp_amb)
    if config.c_uf_autor:
        _nfe(dist, "cUFAutor", config.c_uf_autor)
    _identificacao(dist, config)

    if isinstance(consulta, ConsultaUltNSU):
        _nfe(_nfe(dist, "distNSU"), "ultNSU", consulta.ult_nsu)
    elif isinstance(consulta, ConsultaNSU):
        _nfe(_nfe(dist, "consNSU"), "NSU", consulta.nsu)
    elif isinstance(consulta, ConsultaChave):
        _nfe(_nfe(dist, "consChNFe"), "chNFe", consulta.ch_nfe)
    else:
        raise TypeError(f"Tipo de consulta nao suportado: {type(consulta).__name__}")

    return to_xml_string(envelope)


def _evento(pai, config: ConfigEvento, item: EventoLote, dh_evento: str) -> None:
    evento = _nfe(pai, "evento", versao=VERSAO_EVENTO)
    inf = _nfe(evento, "infEvento", Id=f"ID{item.tp_evento}{item.ch_nfe}01")
    _nfe(inf, "cOrgao", UFCode.AN.value)
    _nfe(inf, "tpAmb", config.tp_amb)
    _identificacao(inf, config)
    _nfe(inf, "chNFe", item.ch_nfe)
    _nfe(inf, "dhEvento", dh_evento)
    _nfe(inf, "tpEvento", str(item.tp_evento))
    _nfe(inf, "nSeqEvento", N_SEQ_EVENTO)
    _nfe(inf, "verEvento", VERSAO_EVENTO)

    det = _nfe(inf, "detEvento", versao=VERSAO_EVENTO)
    if item.justificativa:
        _nfe(det, "descEvento", DESCRICAO_JUSTIFICADA)
        _nfe(det, "xJust", item.justificativa)
    else:
        _nfe(det, "descEvento", descricao_evento(item.tp_evento))


def montar_evento(
    config: ConfigEvento,
    id_lote: str,
    lote: list[EventoLote],
    agora: datetime | None = None,
) -> str:
    """Monta o envEvento com os eventos na ordem recebida.

    `agora` define o dhEvento de todos os eventos do lote; sem ele usa o
    relogio atual em BRT.
    """
    dh_evento = formatar_dh(agora if agora is not None else agora_brt())

    envelope, dados = _envelope(NS_WSDL_EVENTO, "nfeRecepcaoEvento")
    env = etree.SubElement(
        dados, f"{{{NS_NFE}}}envEvento", nsmap={None: NS_NFE}, versao=VERSAO_EVENTO
    )
    _nfe(env, "idLote", id_lote)
    for item in lote:
        _evento(env, config, item, dh_evento)

    return to_xml_string(envelope)
