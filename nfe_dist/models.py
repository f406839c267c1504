import os
import tempfile
from contextlib import contextmanager
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .validacao import validar_config_distribuicao, validar_config_evento


class Ambiente(str, Enum):
    PRODUCAO = "1"
    HOMOLOGACAO = "2"


class UFCode(str, Enum):
    RO = "11"
    AC = "12"
    AM = "13"
    RR = "14"
    PA = "15"
    AP = "16"
    TO = "17"
    MA = "21"
    PI = "22"
    CE = "23"
    RN = "24"
    PB = "25"
    PE = "26"
    AL = "27"
    SE = "28"
    BA = "29"
    MG = "31"
    ES = "32"
    RJ = "33"
    SP = "35"
    PR = "41"
    SC = "42"
    RS = "43"
    MS = "50"
    MT = "51"
    GO = "52"
    DF = "53"
    AN = "91"  # Ambiente Nacional, orgao receptor dos eventos de manifestacao


class TipoEvento(IntEnum):
    CONFIRMACAO_OPERACAO = 210200
    CIENCIA_OPERACAO = 210210
    DESCONHECIMENTO_OPERACAO = 210220
    OPERACAO_NAO_REALIZADA = 210240


def _valor_enum(v):
    return v.value if isinstance(v, Enum) else v


class Certificado(BaseModel):
    """Material do certificado A1.

    Aceita o PKCS#12 (`path` ou `conteudo` em memoria, sempre com `senha`)
    ou o par PEM `cert`/`key`, cada um como caminho (str) ou conteudo (bytes).
    """

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    conteudo: bytes | None = None
    senha: str | None = None
    cert: str | bytes | None = None
    key: str | bytes | None = None

    @property
    def possui_pfx(self) -> bool:
        return bool((self.path or self.conteudo) and self.senha)

    @property
    def possui_par(self) -> bool:
        return bool(self.cert and self.key)

    @contextmanager
    def pfx_path(self):
        """Caminho do PKCS#12 em disco.

        Com `conteudo` em memoria, grava um .pfx temporario que e apagado na saida.
        """
        if self.conteudo is not None:
            fd, tmp = tempfile.mkstemp(suffix=".pfx")
            try:
                os.write(fd, self.conteudo)
                os.close(fd)
                yield tmp
            finally:
                os.unlink(tmp)
        else:
            yield self.path


class _ConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    cnpj: str | None = None
    cpf: str | None = None
    tp_amb: str = ""
    certificado: Certificado = Field(default_factory=Certificado)
    # repassadas ao requests.post por cima de {"verify": True}
    opcoes_https: dict = Field(default_factory=dict)

    @field_validator("tp_amb", mode="before")
    @classmethod
    def _normalizar_ambiente(cls, v):
        return _valor_enum(v)

    @property
    def producao(self) -> bool:
        return self.tp_amb == Ambiente.PRODUCAO.value


class ConfigDistribuicao(_ConfigBase):
    """Configuracao imutavel do servico NFeDistribuicaoDFe.

    A validacao roda na construcao: uma instancia existente e sempre valida.
    """

    c_uf_autor: str = ""

    @field_validator("c_uf_autor", mode="before")
    @classmethod
    def _normalizar_uf(cls, v):
        return _valor_enum(v)

    @model_validator(mode="after")
    def _validar(self):
        validar_config_distribuicao(self)
        return self


class ConfigEvento(_ConfigBase):
    """Configuracao imutavel do servico NFeRecepcaoEvento."""

    @model_validator(mode="after")
    def _validar(self):
        validar_config_evento(self)
        return self


class EventoLote(BaseModel):
    model_config = ConfigDict(frozen=True)

    ch_nfe: str
    tp_evento: int
    justificativa: str | None = None

    @field_validator("tp_evento", mode="before")
    @classmethod
    def _normalizar_tipo(cls, v):
        return int(_valor_enum(v))


class ConsultaUltNSU(BaseModel):
    model_config = ConfigDict(frozen=True)

    ult_nsu: str


class ConsultaNSU(BaseModel):
    model_config = ConfigDict(frozen=True)

    nsu: str


class ConsultaChave(BaseModel):
    model_config = ConfigDict(frozen=True)

    ch_nfe: str


Consulta = ConsultaUltNSU | ConsultaNSU | ConsultaChave


class EmpresaConfig(BaseModel):
    """Secao do arquivo INI; gera as configuracoes validadas de cada servico."""

    nome: str
    cnpj: str | None = None
    cpf: str | None = None
    uf: str
    homologacao: bool
    certificado: Certificado

    @property
    def identificador(self) -> str:
        return self.cnpj or self.cpf or ""

    @property
    def ambiente(self) -> Ambiente:
        return Ambiente.HOMOLOGACAO if self.homologacao else Ambiente.PRODUCAO

    def config_distribuicao(self) -> ConfigDistribuicao:
        return ConfigDistribuicao(
            cnpj=self.cnpj,
            cpf=self.cpf,
            tp_amb=self.ambiente,
            c_uf_autor=self.uf,
            certificado=self.certificado,
        )

    def config_evento(self) -> ConfigEvento:
        return ConfigEvento(
            cnpj=self.cnpj,
            cpf=self.cpf,
            tp_amb=self.ambiente,
            certificado=self.certificado,
        )
