import os
import subprocess
import sys

import pytest


@pytest.fixture(scope="session")
def empresa(request):
    val = request.config.getoption("--empresa")
    if val is None:
        pytest.skip("--empresa nao fornecido")
    return val


@pytest.fixture
def run_nfe():
    """Executa o CLI nfe-dist sempre em homologacao."""
    def _run(*args, timeout=60) -> subprocess.CompletedProcess:
        cmd = [sys.executable, "-m", "nfe_dist.cli", "--homologacao"] + list(args)
        return subprocess.run(cmd, capture_output=True, text=True, cwd=os.getcwd(), timeout=timeout)
    return _run
