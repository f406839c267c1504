import configparser

from .exceptions import NfeConfigError
from .models import Certificado, EmpresaConfig, UFCode


CAMPOS_OBRIGATORIOS = ("uf", "homologacao")


def _parse_homologacao(valor: str) -> bool:
    return valor.lower() in ("true", "1", "sim")


def _parse_uf(nome: str, valor: str) -> str:
    """Aceita o codigo IBGE ("35") ou a sigla ("sp")."""
    if valor.isdigit():
        return valor
    try:
        return UFCode[valor.upper()].value
    except KeyError:
        raise NfeConfigError(f"UF '{valor}' invalida na secao [{nome}]") from None


def _parse_secao(nome: str, secao: configparser.SectionProxy) -> EmpresaConfig:
    faltando = [c for c in CAMPOS_OBRIGATORIOS if not secao.get(c)]
    if not secao.get("cnpj") and not secao.get("cpf"):
        faltando.append("cnpj ou cpf")
    if faltando:
        raise NfeConfigError(
            f"Campos obrigatorios faltando na secao [{nome}]: {', '.join(faltando)}"
        )

    certificado = Certificado(
        path=secao.get("path") or None,
        senha=secao.get("senha") or None,
        cert=secao.get("cert") or None,
        key=secao.get("key") or None,
    )

    return EmpresaConfig(
        nome=nome,
        cnpj=secao.get("cnpj") or None,
        cpf=secao.get("cpf") or None,
        uf=_parse_uf(nome, secao["uf"]),
        homologacao=_parse_homologacao(secao["homologacao"]),
        certificado=certificado,
    )


def carregar_empresas(config_file: str) -> dict[str, EmpresaConfig]:
    config = configparser.ConfigParser(inline_comment_prefixes=("#", ";"))
    config.read(config_file)
    secoes = config.sections()
    if not secoes:
        raise NfeConfigError(f"Nenhuma empresa configurada em {config_file}")

    empresas = {}
    for nome in secoes:
        empresas[nome] = _parse_secao(nome, config[nome])
    return empresas
