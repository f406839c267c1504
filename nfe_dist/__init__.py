from .models import (
    Ambiente,
    UFCode,
    TipoEvento,
    Certificado,
    ConfigDistribuicao,
    ConfigEvento,
    EventoLote,
    ConsultaUltNSU,
    ConsultaNSU,
    ConsultaChave,
    EmpresaConfig,
)
from .config import carregar_empresas
from .distribuicao import consultar_ult_nsu, consultar_nsu, consultar_chave
from .recepcao_evento import enviar_eventos
from .results import (
    DocZip,
    DadosDistribuicao,
    DadosEvento,
    InfEvento,
    RespostaDistribuicao,
    RespostaEvento,
    Falha,
)
from .exceptions import NfeConfigError, NfeValidationError, NfeTransportError

__all__ = [
    "Ambiente",
    "UFCode",
    "TipoEvento",
    "Certificado",
    "ConfigDistribuicao",
    "ConfigEvento",
    "EventoLote",
    "ConsultaUltNSU",
    "ConsultaNSU",
    "ConsultaChave",
    "EmpresaConfig",
    "carregar_empresas",
    "consultar_ult_nsu",
    "consultar_nsu",
    "consultar_chave",
    "enviar_eventos",
    "DocZip",
    "DadosDistribuicao",
    "DadosEvento",
    "InfEvento",
    "RespostaDistribuicao",
    "RespostaEvento",
    "Falha",
    "NfeConfigError",
    "NfeValidationError",
    "NfeTransportError",
]
