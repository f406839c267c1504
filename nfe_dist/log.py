import logging
import os
import time

from .xml_utils import agora_brt

LOG_DIR = os.environ.get("NFE_DIST_LOG_DIR", "log")
LOG_RETENCAO_DIAS = 7


def _limpar_logs_antigos() -> None:
    limite = time.time() - LOG_RETENCAO_DIAS * 86400
    with os.scandir(LOG_DIR) as entradas:
        for entrada in entradas:
            if not entrada.is_file() or entrada.stat().st_mtime >= limite:
                continue
            try:
                os.remove(entrada.path)
            except OSError as e:
                logging.warning("Nao foi possivel remover log %s: %s", entrada.path, e)


def _gravar(caminho: str, xml: str) -> str:
    with open(caminho, "w", encoding="utf-8") as f:
        f.write(xml)
    return caminho


def salvar_resposta_sefaz(resultado, operacao: str, identificador: str = "") -> list[str]:
    """Grava o par requisicao/resposta de um Resposta* ou Falha em LOG_DIR.

    Arquivos: {operacao}[-{identificador}]-{AAAAMMDD-hhmmss}-req.xml e -resp.xml.
    XML ausente (ex.: Falha antes de haver requisicao ou resposta) nao gera
    arquivo. Retorna os caminhos gravados.
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    _limpar_logs_antigos()
    sufixo = f"-{identificador}" if identificador else ""
    base = f"{LOG_DIR}/{operacao}{sufixo}-{agora_brt():%Y%m%d-%H%M%S}"

    gravados = []
    for xml, parte in ((resultado.xml_requisicao, "req"), (resultado.xml_resposta, "resp")):
        if xml:
            gravados.append(_gravar(f"{base}-{parte}.xml", xml))
    return gravados
