from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import pytest

from cidades_import.cli import main as cli_main
from cidades_import.logging.init import reset_logging

"""Exit code contract: 0 all rows imported, 2 partial, 1 fatal."""


def _csv(workdir: Path, name: str, text: str) -> Path:
    p = workdir / "data" / name
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


def test_exit_code_fatal_without_config(temp_workdir: Path, mock_mode, capsys):
    f = _csv(temp_workdir, "c.csv", "nome\nAbatiá\n")
    code = cli_main(["preview", "cidades", str(f)])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_success(temp_workdir: Path, write_config, mock_mode, capsys):
    f = _csv(temp_workdir, "c.csv", "id;nome\n4100103;Abatiá\n4100202;Adrianópolis\n")
    code = cli_main(["preview", "cidades", str(f)])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY flow=cidades file=c.csv rows=2 rejected=0 matched=2 unmatched=0 written=0" in out


def test_exit_code_partial_on_rejected_rows(temp_workdir: Path, write_config, mock_mode, capsys):
    f = _csv(temp_workdir, "c.csv", "nome;partido\nJoão Silva;PSD\n;MDB\n")
    code = cli_main(["preview", "cidades", str(f)])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN Linha 3: Nome não encontrado" in out
    assert "rejected=1" in out


def test_exit_code_partial_on_unmatched(temp_workdir: Path, write_config, mock_mode, capsys):
    f = _csv(temp_workdir, "v.csv", "prefeito;votos_validos\nJoão Silva;4.200\n")
    code = cli_main(["preview", "votos_validos", str(f)])
    out = capsys.readouterr().out
    assert code == 2
    assert "não encontrados (1): João Silva" in out


def test_exit_code_fatal_on_rejected_file(temp_workdir: Path, write_config, mock_mode, capsys):
    f = _csv(temp_workdir, "c.csv", "partido\nPSD\n")
    code = cli_main(["preview", "cidades", str(f)])
    out = capsys.readouterr().out
    assert code == 1
    assert 'ERROR O CSV precisa ter uma coluna "name", "nome" ou "cidade"' in out
    assert out.count("O CSV precisa ter uma coluna") == 1


def test_exit_code_fatal_on_missing_file(temp_workdir: Path, write_config, mock_mode, capsys):
    code = cli_main(["preview", "cidades", str(temp_workdir / "data" / "nope.csv")])
    assert code == 1
    assert "file not found" in capsys.readouterr().out


def test_exit_code_fatal_on_wrong_suffix(temp_workdir: Path, write_config, mock_mode, capsys):
    f = temp_workdir / "data" / "c.xlsx"
    f.write_bytes(b"")
    assert cli_main(["preview", "cidades", str(f)]) == 1
    assert "not a .csv file" in capsys.readouterr().out


def test_exit_code_fatal_on_write_in_mock_mode(temp_workdir: Path, write_config, mock_mode, capsys):
    f = _csv(temp_workdir, "c.csv", "id;nome\n4100103;Abatiá\n")
    code = cli_main(["import", "cidades", str(f), "--yes"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR Erro ao importar dados: no database connection (mock mode)" in out
    assert "written=0" in out


def test_exit_code_partial_when_declined(temp_workdir: Path, write_config, mock_mode, monkeypatch, capsys):
    f = _csv(temp_workdir, "c.csv", "id;nome\n4100103;Abatiá\n")
    monkeypatch.setattr("builtins.input", lambda prompt="": "n")
    code = cli_main(["import", "cidades", str(f)])
    assert code == 2
    assert "INFO import cancelled" in capsys.readouterr().out


def test_exit_code_success_on_live_import(temp_workdir: Path, write_config, monkeypatch, capsys):
    import cidades_import.cli.app as app
    import cidades_import.db.batch_write as bw

    class FakeCursor:
        def __init__(self):
            self.statements: list[str] = []

        def execute(self, sql):
            self.statements.append(sql)

        def fetchall(self):
            return [("4100103", "Abatiá", "João Silva")]

    cursor = FakeCursor()

    @contextmanager
    def fake_cursor(cfg, logger):
        yield cursor

    monkeypatch.setattr(app, "_cursor", fake_cursor)
    monkeypatch.setattr(bw, "execute_values", lambda cur, sql, rows, template=None, page_size=1000: None)

    f = _csv(temp_workdir, "v.csv", "prefeito;votos_validos\nJoão Silva;4.200\n")
    code = cli_main(["import", "votos_validos", str(f), "--yes"])
    out = capsys.readouterr().out
    assert code == 0
    assert cursor.statements[-2:] == ["BEGIN", "COMMIT"]
    assert "INFO mode=live payload cidades_upsert=0 cidades_update=1 vereadores=0" in out
    assert "written=1" in out
