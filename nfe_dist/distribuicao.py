"""Consultas ao NFeDistribuicaoDFe.

Regras do Ambiente Nacional que ficam a cargo do chamador:
- apos cStat=137 (nenhum documento) aguardar 1 hora antes de nova consulta
  por ultNSU; consultas antes disso retornam cStat=656 e bloqueiam o CNPJ;
- consultas por NSU ou chave sao limitadas a 20 por hora;
- cada resposta traz no maximo 50 documentos, disponiveis por 90 dias.
"""
import logging

from .exceptions import NfeConfigError, NfeTransportError
from .models import ConfigDistribuicao, Consulta, ConsultaChave, ConsultaNSU, ConsultaUltNSU
from .parser import interpretar_distribuicao
from .results import Falha, ResultadoDistribuicao, STATUS_DESCONHECIDO
from .soap import montar_distribuicao
from .transporte import SERVICO_DISTRIBUICAO, enviar_soap
from .validacao import validar_ch_nfe, validar_nsu, validar_ult_nsu


def formatar_nsu(nsu: int | str) -> str:
    """NSU inteiro vira string de 15 digitos; string e mantida."""
    return str(nsu).zfill(15) if isinstance(nsu, int) else nsu


def _consultar(config: ConfigDistribuicao, consulta: Consulta) -> ResultadoDistribuicao:
    xml_requisicao = montar_distribuicao(config, consulta)
    try:
        resposta = enviar_soap(xml_requisicao, config, SERVICO_DISTRIBUICAO)
    except (NfeTransportError, NfeConfigError) as e:
        logging.warning("Distribuicao DFe sem resposta: %s", e)
        return Falha(erro=str(e), status=STATUS_DESCONHECIDO, xml_requisicao=xml_requisicao)
    return interpretar_distribuicao(resposta.texto, xml_requisicao, resposta.status)


def consultar_ult_nsu(config: ConfigDistribuicao, ult_nsu: int | str) -> ResultadoDistribuicao:
    """Documentos a partir do ultimo NSU conhecido (use sempre o ultNSU retornado)."""
    ult_nsu = formatar_nsu(ult_nsu)
    validar_ult_nsu(ult_nsu)
    return _consultar(config, ConsultaUltNSU(ult_nsu=ult_nsu))


def consultar_nsu(config: ConfigDistribuicao, nsu: int | str) -> ResultadoDistribuicao:
    """Documento de um NSU especifico, para fechar lacunas na sequencia."""
    nsu = formatar_nsu(nsu)
    validar_nsu(nsu)
    return _consultar(config, ConsultaNSU(nsu=nsu))


def consultar_chave(config: ConfigDistribuicao, ch_nfe: str) -> ResultadoDistribuicao:
    validar_ch_nfe(ch_nfe)
    return _consultar(config, ConsultaChave(ch_nfe=ch_nfe))
