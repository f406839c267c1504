"""Estado local da distribuicao DF-e, por destinatario e ambiente.

Formato do arquivo:
    {"distribuicao": {"<cnpj>:<tpAmb>": {"ult_nsu": "000000000000123",
                                         "max_nsu": "...", "c_stat": "138",
                                         "dh_resp": "..."}}}
"""
import fcntl
import json
from contextlib import contextmanager

from .results import DadosDistribuicao

NSU_INICIAL = "0" * 15

# cStat que trazem ultNSU confiavel para a proxima consulta
STATUS_COM_NSU = ("137", "138")


@contextmanager
def _travado(state_file: str, modo: str, trava: int):
    with open(state_file, modo) as f:
        fcntl.flock(f, trava)
        try:
            yield f
        finally:
            fcntl.flock(f, fcntl.LOCK_UN)


def carregar_estado(state_file: str) -> dict:
    try:
        with _travado(state_file, "r", fcntl.LOCK_SH) as f:
            conteudo = f.read()
    except FileNotFoundError:
        return {}
    return json.loads(conteudo) if conteudo.strip() else {}


def salvar_estado(state_file: str, estado: dict) -> None:
    # "a+" para travar antes de truncar; "w" truncaria sem a trava
    with _travado(state_file, "a+", fcntl.LOCK_EX) as f:
        f.seek(0)
        f.truncate()
        json.dump(estado, f, indent=2, ensure_ascii=False)
        f.write("\n")


def _chave(identificador: str, tp_amb: str) -> str:
    return f"{identificador}:{tp_amb}"


def _registro(estado: dict, identificador: str, tp_amb: str) -> dict:
    return estado.get("distribuicao", {}).get(_chave(identificador, tp_amb), {})


def get_ultimo_nsu(estado: dict, identificador: str, tp_amb: str) -> str:
    """ultNSU (15 digitos) para a proxima consultar_ult_nsu."""
    return _registro(estado, identificador, tp_amb).get("ult_nsu", NSU_INICIAL)


def registrar_distribuicao(
    estado: dict, identificador: str, tp_amb: str, dados: DadosDistribuicao
) -> bool:
    """Guarda ultNSU/maxNSU da resposta. Retorna False se o cStat nao avanca o NSU."""
    if dados.c_stat not in STATUS_COM_NSU or not dados.ult_nsu:
        return False
    estado.setdefault("distribuicao", {})[_chave(identificador, tp_amb)] = {
        "ult_nsu": dados.ult_nsu,
        "max_nsu": dados.max_nsu,
        "c_stat": dados.c_stat,
        "dh_resp": dados.dh_resp,
    }
    return True


def sincronizado(estado: dict, identificador: str, tp_amb: str) -> bool:
    """True quando ultNSU alcancou maxNSU: nao ha documentos pendentes."""
    registro = _registro(estado, identificador, tp_amb)
    return bool(registro) and registro.get("ult_nsu") == registro.get("max_nsu")
