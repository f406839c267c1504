import re
from dataclasses import dataclass
from enum import Enum

from .exceptions import NfeConfigError, NfeValidationError


AMBIENTES_VALIDOS = ("1", "2")


class CodigoErro(str, Enum):
    UF_AUTOR_AUSENTE = "uf_autor_ausente"
    IDENTIFICACAO_AUSENTE = "identificacao_ausente"
    IDENTIFICACAO_DUPLICADA = "identificacao_duplicada"
    AMBIENTE_INVALIDO = "ambiente_invalido"
    CERTIFICADO_AUSENTE = "certificado_ausente"
    CNPJ_INVALIDO = "cnpj_invalido"
    CPF_INVALIDO = "cpf_invalido"


@dataclass(frozen=True, slots=True)
class ErroConfig:
    codigo: CodigoErro
    mensagem: str


MSG_CERTIFICADO = (
    "Certificado obrigatorio: informe o PFX com senha ou os arquivos cert e key"
)


def _digitos(valor: str, n: int) -> bool:
    return re.fullmatch(rf"[0-9]{{{n}}}", valor) is not None


def _verificar_comum(config) -> ErroConfig | None:
    if not config.cnpj and not config.cpf:
        return ErroConfig(CodigoErro.IDENTIFICACAO_AUSENTE, "CNPJ ou CPF deve ser informado")
    if config.cnpj and config.cpf:
        return ErroConfig(
            CodigoErro.IDENTIFICACAO_DUPLICADA, "Informe CNPJ ou CPF, nao ambos"
        )
    if config.tp_amb not in AMBIENTES_VALIDOS:
        return ErroConfig(
            CodigoErro.AMBIENTE_INVALIDO,
            'tpAmb deve ser "1" (Producao) ou "2" (Homologacao)',
        )
    cert = config.certificado
    if cert is None or not (cert.possui_pfx or cert.possui_par):
        return ErroConfig(CodigoErro.CERTIFICADO_AUSENTE, MSG_CERTIFICADO)
    if config.cnpj and not _digitos(config.cnpj, 14):
        return ErroConfig(CodigoErro.CNPJ_INVALIDO, "CNPJ deve ter 14 digitos numericos")
    if config.cpf and not _digitos(config.cpf, 11):
        return ErroConfig(CodigoErro.CPF_INVALIDO, "CPF deve ter 11 digitos numericos")
    return None


def verificar_config_distribuicao(config) -> ErroConfig | None:
    """Retorna o primeiro erro da configuracao de distribuicao, ou None."""
    if not config.c_uf_autor:
        return ErroConfig(CodigoErro.UF_AUTOR_AUSENTE, "cUFAutor e obrigatorio")
    return _verificar_comum(config)


def verificar_config_evento(config) -> ErroConfig | None:
    """Retorna o primeiro erro da configuracao de recepcao de evento, ou None."""
    return _verificar_comum(config)


def _levantar(erro: ErroConfig | None) -> None:
    if erro is not None:
        raise NfeConfigError(erro.mensagem, erro)


def validar_config_distribuicao(config) -> None:
    _levantar(verificar_config_distribuicao(config))


def validar_config_evento(config) -> None:
    _levantar(verificar_config_evento(config))


def validar_ult_nsu(ult_nsu: str) -> None:
    if not ult_nsu or not _digitos(ult_nsu, 15):
        raise NfeValidationError(
            f"ultNSU deve ter 15 digitos numericos, recebeu: '{ult_nsu}'"
        )


def validar_nsu(nsu: str) -> None:
    if not nsu or not _digitos(nsu, 15):
        raise NfeValidationError(f"NSU deve ter 15 digitos numericos, recebeu: '{nsu}'")


def validar_ch_nfe(ch_nfe: str) -> None:
    if not ch_nfe or not _digitos(ch_nfe, 44):
        raise NfeValidationError(
            f"Chave de acesso deve ter 44 digitos numericos, recebeu: '{ch_nfe}'"
        )


def validar_id_lote(id_lote: str) -> None:
    if not id_lote or re.fullmatch(r"[0-9]{1,15}", id_lote) is None:
        raise NfeValidationError(
            f"idLote deve ter de 1 a 15 digitos numericos, recebeu: '{id_lote}'"
        )


# caracteres fora do conjunto Char do XML 1.0 (controles, NUL, surrogates)
_FORA_XML = re.compile("[^\t\n\r\x20-\U0000d7ff\U0000e000-\U0000fffd\U00010000-\U0010ffff]")


def validar_justificativa(justificativa: str | None) -> None:
    if justificativa and _FORA_XML.search(justificativa):
        raise NfeValidationError(
            f"Justificativa contem caracteres invalidos para XML: {justificativa!r}"
        )
