import logging
import traceback

from .exceptions import NfeParseError
from .results import (
    DadosDistribuicao,
    DadosEvento,
    DocZip,
    Falha,
    InfEvento,
    RespostaDistribuicao,
    RespostaEvento,
    ResultadoDistribuicao,
    ResultadoEvento,
)
from .xml_utils import (
    buscar,
    descompactar_gzip,
    filhos,
    safe_fromstring,
    texto_filho,
    xml_para_dict,
)


def _raiz(xml_resposta: str, nome: str):
    """Localiza o elemento de retorno, dentro ou fora do envelope SOAP."""
    if not xml_resposta or not xml_resposta.strip():
        raise NfeParseError("Resposta XML vazia")
    documento = safe_fromstring(xml_resposta)
    raiz = buscar(documento, nome)
    if raiz is None:
        raise NfeParseError(f"Resposta XML invalida: elemento {nome} nao encontrado")
    return raiz


def _decodificar_doc(doc) -> DocZip:
    nsu = doc.get("NSU", "")
    schema = doc.get("schema", "")
    conteudo = doc.text or ""
    try:
        xml = descompactar_gzip(conteudo)
        json = xml_para_dict(safe_fromstring(xml))
    except Exception:
        logging.warning(
            "NSU %s: erro ao decodificar docZip\n%s", nsu, traceback.format_exc()
        )
        return DocZip(nsu=nsu, schema=schema, xml=conteudo, json={})
    return DocZip(nsu=nsu, schema=schema, xml=xml, json=json)


def _processar_docs(ret) -> list[DocZip] | None:
    lotes = filhos(ret, "loteDistDFeInt")
    if not lotes:
        return None
    return [_decodificar_doc(doc) for doc in filhos(lotes[0], "docZip")]


def interpretar_distribuicao(
    xml_resposta: str, xml_requisicao: str, status: int
) -> ResultadoDistribuicao:
    """Converte a resposta do NFeDistribuicaoDFe. Nunca levanta excecao."""
    try:
        ret = _raiz(xml_resposta, "retDistDFeInt")
        dados = DadosDistribuicao(
            tp_amb=texto_filho(ret, "tpAmb"),
            ver_aplic=texto_filho(ret, "verAplic"),
            c_stat=texto_filho(ret, "cStat"),
            x_motivo=texto_filho(ret, "xMotivo"),
            dh_resp=texto_filho(ret, "dhResp"),
            ult_nsu=texto_filho(ret, "ultNSU"),
            max_nsu=texto_filho(ret, "maxNSU"),
            doc_zip=_processar_docs(ret),
        )
    except Exception as e:
        logging.warning("Falha ao interpretar retDistDFeInt (HTTP %s): %s", status, e)
        return Falha(
            erro=str(e) or "Erro ao processar resposta",
            status=status,
            xml_requisicao=xml_requisicao,
            xml_resposta=xml_resposta,
        )

    return RespostaDistribuicao(
        dados=dados,
        xml_requisicao=xml_requisicao,
        xml_resposta=xml_resposta,
        status=status,
    )


def _inf_evento(ret_evento) -> InfEvento:
    # campos ficam em retEvento/infEvento; aceita tambem direto sob retEvento
    inf = filhos(ret_evento, "infEvento")
    el = inf[0] if inf else ret_evento
    return InfEvento(
        tp_amb=texto_filho(el, "tpAmb"),
        ver_aplic=texto_filho(el, "verAplic"),
        c_orgao=texto_filho(el, "cOrgao"),
        c_stat=texto_filho(el, "cStat"),
        x_motivo=texto_filho(el, "xMotivo"),
        ch_nfe=texto_filho(el, "chNFe"),
        tp_evento=texto_filho(el, "tpEvento"),
        x_evento=texto_filho(el, "xEvento"),
        n_seq_evento=texto_filho(el, "nSeqEvento"),
        cnpj_dest=texto_filho(el, "CNPJDest"),
        dh_reg_evento=texto_filho(el, "dhRegEvento"),
        n_prot=texto_filho(el, "nProt"),
    )


def interpretar_evento(
    xml_resposta: str, xml_requisicao: str, status: int
) -> ResultadoEvento:
    """Converte a resposta do NFeRecepcaoEvento. Nunca levanta excecao."""
    try:
        ret = _raiz(xml_resposta, "retEnvEvento")
        dados = DadosEvento(
            id_lote=texto_filho(ret, "idLote"),
            tp_amb=texto_filho(ret, "tpAmb"),
            ver_aplic=texto_filho(ret, "verAplic"),
            c_orgao=texto_filho(ret, "cOrgao"),
            c_stat=texto_filho(ret, "cStat"),
            x_motivo=texto_filho(ret, "xMotivo"),
            inf_evento=[_inf_evento(r) for r in filhos(ret, "retEvento")],
        )
    except Exception as e:
        logging.warning("Falha ao interpretar retEnvEvento (HTTP %s): %s", status, e)
        return Falha(
            erro=str(e) or "Erro ao processar resposta",
            status=status,
            xml_requisicao=xml_requisicao,
            xml_resposta=xml_resposta,
        )

    return RespostaEvento(
        dados=dados,
        xml_requisicao=xml_requisicao,
        xml_resposta=xml_resposta,
        status=status,
    )
