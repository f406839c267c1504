import pytest

from nfe_dist.config import carregar_empresas
from nfe_dist.exceptions import NfeConfigError


def _escrever(tmp_path, conteudo: str) -> str:
    f = tmp_path / "nfe-dist.conf.ini"
    f.write_text(conteudo)
    return str(f)


class TestCarregarEmpresas:
    def test_empresa_com_pfx(self, tmp_path):
        path = _escrever(tmp_path, (
            "[SUL]\n"
            "path = certs/sul.pfx\n"
            "senha = 123456   # senha do certificado\n"
            "uf = pr\n"
            "homologacao = true\n"
            "cnpj = 12345678901234\n"
        ))
        empresas = carregar_empresas(path)
        sul = empresas["SUL"]
        assert sul.nome == "SUL"
        assert sul.cnpj == "12345678901234"
        assert sul.cpf is None
        assert sul.uf == "41"
        assert sul.homologacao is True
        assert sul.certificado.path == "certs/sul.pfx"
        assert sul.certificado.senha == "123456"

    def test_empresa_com_par_pem_e_cpf(self, tmp_path):
        path = _escrever(tmp_path, (
            "[PF]\n"
            "cert = certs/pf.pem\n"
            "key = certs/pf.key\n"
            "uf = 35\n"
            "homologacao = false\n"
            "cpf = 12345678901\n"
        ))
        pf = carregar_empresas(path)["PF"]
        assert pf.cpf == "12345678901"
        assert pf.uf == "35"
        assert pf.homologacao is False
        assert pf.certificado.possui_par is True
        assert pf.config_distribuicao().tp_amb == "1"

    def test_varias_empresas(self, tmp_path):
        path = _escrever(tmp_path, (
            "[A]\nuf = sp\nhomologacao = sim\ncnpj = 11111111111111\npath = a.pfx\nsenha = x\n"
            "[B]\nuf = rs\nhomologacao = 0\ncnpj = 22222222222222\npath = b.pfx\nsenha = y\n"
        ))
        empresas = carregar_empresas(path)
        assert list(empresas) == ["A", "B"]
        assert empresas["A"].homologacao is True
        assert empresas["B"].homologacao is False
        assert empresas["B"].uf == "43"

    def test_arquivo_inexistente(self, tmp_path):
        with pytest.raises(NfeConfigError, match="Nenhuma empresa configurada"):
            carregar_empresas(str(tmp_path / "nao_existe.ini"))

    def test_campos_faltando(self, tmp_path):
        path = _escrever(tmp_path, "[SUL]\npath = x.pfx\nsenha = 1\n")
        with pytest.raises(NfeConfigError) as exc:
            carregar_empresas(path)
        msg = str(exc.value)
        assert "[SUL]" in msg
        assert "uf" in msg
        assert "homologacao" in msg
        assert "cnpj ou cpf" in msg

    def test_uf_invalida(self, tmp_path):
        path = _escrever(tmp_path, "[SUL]\nuf = xx\nhomologacao = true\ncnpj = 12345678901234\n")
        with pytest.raises(NfeConfigError, match="UF 'xx' invalida"):
            carregar_empresas(path)
