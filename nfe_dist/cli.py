import argparse
import logging
import os
import sys

from .config import carregar_empresas
from .distribuicao import consultar_chave, consultar_nsu, consultar_ult_nsu
from .exceptions import NfeConfigError, NfeValidationError
from .log import salvar_resposta_sefaz
from .models import EventoLote
from .recepcao_evento import OPERACOES, enviar_eventos
from .results import Falha
from .state import (
    carregar_estado,
    get_ultimo_nsu,
    registrar_distribuicao,
    salvar_estado,
    sincronizado,
)

CONFIG_FILE = os.environ.get("NFE_DIST_CONFIG", "nfe-dist.conf.ini")
STATE_FILE = os.environ.get("NFE_DIST_STATE", ".state.json")
DOWNLOADS_DIR = "downloads"


# ---------------------------------------------------------------------------
# Helpers de contexto e I/O
# ---------------------------------------------------------------------------

def _carregar(args):
    empresas = carregar_empresas(CONFIG_FILE)
    nome = args.empresa
    if nome not in empresas:
        print(f"Erro: empresa '{nome}' nao encontrada.")
        print(f"Empresas disponiveis: {', '.join(empresas.keys())}")
        sys.exit(1)
    empresa = empresas[nome]
    if args.producao:
        empresa = empresa.model_copy(update={"homologacao": False})
    elif args.homologacao:
        empresa = empresa.model_copy(update={"homologacao": True})
    return empresa


def _cabecalho(empresa) -> None:
    print(f"Empresa: {empresa.nome} ({empresa.identificador})")
    print(f"Ambiente: {'Homologacao' if empresa.homologacao else 'Producao'}")


def _salvar_xml(identificador: str, nome: str, xml: str) -> str:
    """Cria downloads/{identificador}/ e salva XML. Retorna o caminho do arquivo."""
    pasta = f"{DOWNLOADS_DIR}/{identificador}"
    os.makedirs(pasta, exist_ok=True)
    caminho = f"{pasta}/{nome}"
    with open(caminho, "w") as f:
        f.write(xml)
    return caminho


def _imprimir_falha(resultado: Falha) -> None:
    print(f"  ERRO (HTTP {resultado.status}): {resultado.erro}")


def _exibir_distribuicao(empresa, resultado, operacao: str, ref: str):
    """Imprime e persiste o resultado; retorna os dados ou None em caso de falha."""
    salvar_resposta_sefaz(resultado, operacao, ref)
    if isinstance(resultado, Falha):
        _imprimir_falha(resultado)
        return None

    dados = resultado.dados
    print(f"  cStat={dados.c_stat}  {dados.x_motivo}")
    print(f"  ultNSU={dados.ult_nsu}  maxNSU={dados.max_nsu}")
    for doc in dados.doc_zip or []:
        if not doc.nsu.isdigit():
            print(f"  NSU invalido na resposta ({doc.nsu!r}), documento ignorado")
            continue
        if not doc.json:
            print(f"  NSU {doc.nsu} ({doc.schema}) - ERRO ao decodificar documento")
            continue
        arquivo = _salvar_xml(empresa.identificador, f"{doc.nsu}.xml", doc.xml)
        print(f"  NSU {doc.nsu} ({doc.schema}) - {arquivo}")
    return dados


# ---------------------------------------------------------------------------
# Comandos
# ---------------------------------------------------------------------------

def cmd_ult_nsu(args):
    empresa = _carregar(args)
    config = empresa.config_distribuicao()
    estado = carregar_estado(STATE_FILE)
    nsu = args.nsu if args.nsu is not None else get_ultimo_nsu(estado, empresa.identificador, config.tp_amb)

    _cabecalho(empresa)
    print(f"Consultando distribuicao a partir do NSU {nsu}...")
    print()

    resultado = consultar_ult_nsu(config, nsu)
    dados = _exibir_distribuicao(empresa, resultado, "distribuicao", empresa.identificador)
    if dados is None:
        return
    if registrar_distribuicao(estado, empresa.identificador, config.tp_amb, dados):
        salvar_estado(STATE_FILE, estado)
    if dados.c_stat == "137" or sincronizado(estado, empresa.identificador, config.tp_amb):
        print("  Sem documentos pendentes: aguarde 1 hora antes de nova consulta (cStat=656).")


def cmd_nsu(args):
    empresa = _carregar(args)
    config = empresa.config_distribuicao()

    _cabecalho(empresa)
    print(f"Consultando NSU {args.nsu}...")
    print()

    resultado = consultar_nsu(config, args.nsu)
    _exibir_distribuicao(empresa, resultado, "distribuicao-nsu", args.nsu)


def cmd_chave(args):
    empresa = _carregar(args)
    config = empresa.config_distribuicao()

    _cabecalho(empresa)
    print(f"Consultando chave {args.chave}...")
    print()

    resultado = consultar_chave(config, args.chave)
    _exibir_distribuicao(empresa, resultado, "distribuicao-chave", args.chave)


def cmd_manifestar(args):
    empresa = _carregar(args)
    config = empresa.config_evento()

    if args.operacao == "nao_realizada" and len(args.justificativa) < 15:
        raise NfeValidationError(
            f"[{empresa.nome}] Operacao 'nao_realizada' exige justificativa "
            f"com minimo 15 caracteres (recebeu {len(args.justificativa)})."
        )

    tp_evento = OPERACOES[args.operacao]
    justificativa = args.justificativa if args.operacao == "nao_realizada" else None
    lote = [
        EventoLote(ch_nfe=chave, tp_evento=tp_evento, justificativa=justificativa)
        for chave in args.chaves
    ]

    _cabecalho(empresa)
    print(f"Operacao: {args.operacao}")
    print(f"Lote: {args.lote} ({len(lote)} evento(s))")
    print()

    resultado = enviar_eventos(config, args.lote, lote)
    salvar_resposta_sefaz(resultado, "manifestacao", f"{empresa.identificador}-{args.operacao}")
    if isinstance(resultado, Falha):
        _imprimir_falha(resultado)
        return

    dados = resultado.dados
    print(f"  Lote cStat={dados.c_stat}  {dados.x_motivo}")
    for inf in dados.inf_evento:
        print(f"  {inf.ch_nfe}  cStat={inf.c_stat}  {inf.x_motivo}")
        if inf.n_prot:
            print(f"    Protocolo: {inf.n_prot}")


# ---------------------------------------------------------------------------
# Entrada
# ---------------------------------------------------------------------------

def _criar_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nfe-dist",
        description="Distribuicao DF-e e manifestacao do destinatario no Ambiente Nacional.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Exemplos:\n"
            "  nfe-dist ult-nsu     EMPRESA\n"
            "  nfe-dist ult-nsu     EMPRESA --nsu 0\n"
            "  nfe-dist nsu         EMPRESA 000000000000042\n"
            "  nfe-dist chave       EMPRESA CHAVE\n"
            "  nfe-dist manifestar  EMPRESA ciencia CHAVE [CHAVE ...]\n"
        ),
    )
    amb = parser.add_mutually_exclusive_group()
    amb.add_argument("--producao", action="store_true", help="Forcar ambiente de producao")
    amb.add_argument("--homologacao", action="store_true", help="Forcar ambiente de homologacao")
    parser.add_argument("-v", "--verbose", action="store_true", help="Exibe mensagens de depuracao")
    sub = parser.add_subparsers(dest="comando", required=True, metavar="<comando>")

    p_ult = sub.add_parser(
        "ult-nsu",
        help="Documentos a partir do ultimo NSU salvo",
        description="Consulta a distribuicao DF-e a partir do ultimo NSU salvo (ou --nsu).",
    )
    p_ult.add_argument("empresa", help="Nome da empresa (secao no nfe-dist.conf.ini)")
    p_ult.add_argument("--nsu", type=int, default=None, help="NSU inicial (padrao: ultimo NSU salvo)")
    p_ult.set_defaults(func=cmd_ult_nsu)

    p_nsu = sub.add_parser("nsu", help="Documento de um NSU especifico")
    p_nsu.add_argument("empresa", help="Nome da empresa (secao no nfe-dist.conf.ini)")
    p_nsu.add_argument("nsu", help="NSU com 15 digitos")
    p_nsu.set_defaults(func=cmd_nsu)

    p_chave = sub.add_parser("chave", help="Documento pela chave de acesso")
    p_chave.add_argument("empresa", help="Nome da empresa (secao no nfe-dist.conf.ini)")
    p_chave.add_argument("chave", help="Chave de acesso com 44 digitos")
    p_chave.set_defaults(func=cmd_chave)

    p_man = sub.add_parser(
        "manifestar",
        help="Envia manifestacao do destinatario",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Operacoes disponiveis:\n"
            "  ciencia          Ciencia da operacao\n"
            "  confirmacao      Confirmacao da operacao\n"
            "  desconhecimento  Desconhecimento da operacao\n"
            "  nao_realizada    Operacao nao realizada (requer --justificativa)\n"
        ),
    )
    p_man.add_argument("empresa", help="Nome da empresa (secao no nfe-dist.conf.ini)")
    p_man.add_argument("operacao", choices=list(OPERACOES), help="Tipo de manifestacao")
    p_man.add_argument("chaves", nargs="+", help="Chaves de acesso com 44 digitos (maximo 20)")
    p_man.add_argument("--justificativa", default="", help="Justificativa (minimo 15 caracteres)")
    p_man.add_argument("--lote", default="1", help="Identificador numerico do lote (padrao: 1)")
    p_man.set_defaults(func=cmd_manifestar)

    return parser


def cli(argv=None):
    parser = _criar_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )

    try:
        args.func(args)
    except NfeConfigError as e:
        print(f"Erro de configuracao: {e}")
        print()
        print(f"Confira o arquivo {CONFIG_FILE}. Exemplo:")
        print()
        print("[MINHAEMPRESA]")
        print("path = certs/certificado.pfx   # certificado A1 (.pfx)")
        print("senha = senha_do_certificado   # senha do certificado")
        print("uf = sp                        # UF autora (sigla ou codigo IBGE)")
        print("homologacao = true             # true = testes, false = producao")
        print("cnpj = 00000000000191          # ou cpf = 00000000000")
        sys.exit(1)
    except NfeValidationError as e:
        print(f"Erro de validacao: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
