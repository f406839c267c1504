class NfeConfigError(Exception):
    """Configuracao invalida: identificacao, ambiente ou certificado.

    `erro` traz o ErroConfig produzido pela validacao, quando houver.
    """

    def __init__(self, mensagem: str, erro=None):
        super().__init__(mensagem)
        self.erro = erro


class NfeValidationError(Exception):
    """Parametro de chamada invalido (NSU, chave de acesso)."""


class NfeTransportError(Exception):
    """Falha de rede, timeout, certificado ilegivel na conexao ou endpoint desconhecido."""


class NfeParseError(Exception):
    """Resposta da SEFAZ sem o elemento raiz esperado ou XML malformado."""
