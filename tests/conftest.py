# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from cidades_import.logging.init import reset_logging
from cidades_import.models.reference import ReferenceCity


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
tables:
  cidades: cidades
  vereadores: vereadores
csv:
  encoding: utf-8-sig
  max_reported_errors: 5
  collapse_whitespace: false
  preview_rows: 10
page_size: 500
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def reference_cities() -> list[ReferenceCity]:
    return [
        ReferenceCity(id="4100103", name="Abatiá", prefeito="João Silva"),
        ReferenceCity(id="4100202", name="Adrianópolis", prefeito="Maria Santos"),
        ReferenceCity(id="4125506", name="São José dos Pinhais", prefeito=None),
    ]


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def mock_mode(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
