import base64
import gzip
from datetime import datetime, timedelta, timezone

from pynfe.utils import etree

_BRT = timezone(timedelta(hours=-3))


def agora_brt() -> datetime:
    """Retorna o datetime atual no fuso BRT (UTC-3), com tzinfo preservado."""
    return datetime.now(_BRT)


def formatar_dh(dt: datetime) -> str:
    """Formata data/hora no padrao SEFAZ AAAA-MM-DDThh:mm:ssTZD.

    Datetime sem tzinfo e considerado BRT.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_BRT)
    return dt.isoformat(timespec="seconds")


# Seguro contra ataques XXE: sem resolucao de entidades externas ou DTD
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False)


def safe_fromstring(data: bytes | str):
    """Parse XML usando parser seguro (sem XXE). Texto e codificado em UTF-8."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return etree.fromstring(data, parser=_PARSER)


def to_xml_string(element) -> str:
    """Serializa elemento lxml para string com declaração XML, sem indentacao."""
    return '<?xml version="1.0" encoding="utf-8"?>' + etree.tostring(
        element, encoding="unicode"
    )


def nome_local(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def buscar(elemento, nome: str):
    """Primeiro descendente (ou o proprio elemento) com o nome local informado."""
    achados = elemento.xpath("descendant-or-self::*[local-name()=$nome]", nome=nome)
    return achados[0] if achados else None


def filhos(elemento, nome: str) -> list:
    return elemento.xpath("*[local-name()=$nome]", nome=nome)


def texto_filho(elemento, nome: str) -> str:
    """Texto do primeiro filho direto com o nome local informado; "" se ausente."""
    achados = filhos(elemento, nome)
    if not achados:
        return ""
    return achados[0].text or ""


def descompactar_gzip(conteudo: str) -> str:
    """Decodifica base64 e descompacta gzip, retornando o XML em texto."""
    return gzip.decompress(base64.b64decode(conteudo)).decode("utf-8")


def _nome_tag(elemento) -> str:
    local = nome_local(elemento.tag)
    return f"{elemento.prefix}:{local}" if elemento.prefix else local


def _nome_atributo(elemento, nome: str) -> str:
    if "}" not in nome:
        return nome
    uri, local = nome[1:].split("}", 1)
    for prefixo, ns in elemento.nsmap.items():
        if ns == uri and prefixo:
            return f"{prefixo}:{local}"
    return local


def _declaracoes_ns(elemento) -> dict:
    pai = elemento.getparent()
    herdadas = pai.nsmap if pai is not None else {}
    return {p: ns for p, ns in elemento.nsmap.items() if herdadas.get(p) != ns}


def xml_para_dict(elemento):
    """Converte um elemento lxml em estrutura generica de dicts/listas/strings.

    - atributos (e declaracoes xmlns do proprio elemento) viram chaves "@nome";
    - filhos ficam sob o nome da tag; a segunda ocorrencia entre irmaos
      promove o valor para lista;
    - elemento sem filhos e com texto nao vazio vira a propria string.
      Nesse caso os atributos sao descartados (comportamento mantido por
      compatibilidade, ex.: <vNF moeda="BRL">10.00</vNF> -> "10.00").
    """
    elementos = [f for f in elemento if isinstance(f.tag, str)]
    texto = (elemento.text or "").strip()
    if not elementos and texto:
        return texto

    no = {}
    for prefixo, ns in _declaracoes_ns(elemento).items():
        no["@xmlns" if prefixo is None else f"@xmlns:{prefixo}"] = ns
    for nome, valor in elemento.attrib.items():
        no[f"@{_nome_atributo(elemento, nome)}"] = valor

    for filho in elementos:
        nome = _nome_tag(filho)
        valor = xml_para_dict(filho)
        if nome not in no:
            no[nome] = valor
        elif isinstance(no[nome], list):
            no[nome].append(valor)
        else:
            no[nome] = [no[nome], valor]
    return no
