import logging
from datetime import datetime

from .exceptions import NfeConfigError, NfeTransportError
from .models import ConfigEvento, EventoLote, TipoEvento
from .parser import interpretar_evento
from .results import Falha, ResultadoEvento, STATUS_DESCONHECIDO
from .soap import montar_evento
from .transporte import SERVICO_EVENTO, enviar_soap
from .validacao import validar_ch_nfe, validar_id_lote, validar_justificativa


OPERACOES = {
    "ciencia": TipoEvento.CIENCIA_OPERACAO,
    "confirmacao": TipoEvento.CONFIRMACAO_OPERACAO,
    "desconhecimento": TipoEvento.DESCONHECIMENTO_OPERACAO,
    "nao_realizada": TipoEvento.OPERACAO_NAO_REALIZADA,
}


def enviar_eventos(
    config: ConfigEvento,
    id_lote: str,
    lote: list[EventoLote],
    agora: datetime | None = None,
) -> ResultadoEvento:
    """Envia um lote de manifestacoes do destinatario.

    O tamanho do lote nao e verificado aqui (a SEFAZ aceita no maximo 20). A ordem
    do lote e mantida; eventos da mesma chave em chamadas concorrentes ficam
    por conta do chamador.
    """
    validar_id_lote(id_lote)
    for item in lote:
        validar_ch_nfe(item.ch_nfe)
        validar_justificativa(item.justificativa)

    xml_requisicao = montar_evento(config, id_lote, lote, agora=agora)
    try:
        resposta = enviar_soap(xml_requisicao, config, SERVICO_EVENTO)
    except (NfeTransportError, NfeConfigError) as e:
        logging.warning("Lote %s sem resposta: %s", id_lote, e)
        return Falha(erro=str(e), status=STATUS_DESCONHECIDO, xml_requisicao=xml_requisicao)
    return interpretar_evento(resposta.texto, xml_requisicao, resposta.status)
