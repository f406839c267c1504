from dataclasses import dataclass

# status usado quando a falha ocorreu antes de haver resposta HTTP
STATUS_DESCONHECIDO = 500


@dataclass(frozen=True, slots=True)
class DocZip:
    nsu: str
    schema: str
    xml: str  # XML descompactado; em caso de falha, o conteudo original em base64
    json: dict | str  # forma generica de xml_utils.xml_para_dict; {} em caso de falha


@dataclass(frozen=True, slots=True)
class DadosDistribuicao:
    tp_amb: str
    ver_aplic: str
    c_stat: str
    x_motivo: str
    dh_resp: str
    ult_nsu: str
    max_nsu: str
    doc_zip: list | None = None  # list[DocZip]; None = resposta sem loteDistDFeInt


@dataclass(frozen=True, slots=True)
class InfEvento:
    tp_amb: str
    ver_aplic: str
    c_orgao: str
    c_stat: str
    x_motivo: str
    ch_nfe: str
    tp_evento: str
    x_evento: str
    n_seq_evento: str
    cnpj_dest: str
    dh_reg_evento: str
    n_prot: str


@dataclass(frozen=True, slots=True)
class DadosEvento:
    id_lote: str
    tp_amb: str
    ver_aplic: str
    c_orgao: str
    c_stat: str
    x_motivo: str
    inf_evento: list  # list[InfEvento], sempre lista


@dataclass(frozen=True, slots=True)
class RespostaDistribuicao:
    dados: DadosDistribuicao
    xml_requisicao: str
    xml_resposta: str
    status: int

    @property
    def sucesso(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class RespostaEvento:
    dados: DadosEvento
    xml_requisicao: str
    xml_resposta: str
    status: int

    @property
    def sucesso(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Falha:
    erro: str
    status: int = STATUS_DESCONHECIDO
    xml_requisicao: str | None = None
    xml_resposta: str | None = None

    @property
    def sucesso(self) -> bool:
        return False


ResultadoDistribuicao = RespostaDistribuicao | Falha
ResultadoEvento = RespostaEvento | Falha
