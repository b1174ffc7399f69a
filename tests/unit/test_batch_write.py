from __future__ import annotations

import pytest

from cidades_import.db.batch_write import (
    BatchMetrics,
    BatchWriteError,
    WriteResult,
    batch_insert,
    batch_update,
    batch_upsert,
    group_by_columns,
    write_payload,
)
from cidades_import.models.config_models import TableConfig
from cidades_import.models.import_payload import ImportPayload


class DummyCursor:
    def __init__(self) -> None:
        self.statements: list[str] = []
        self.batches: list[tuple[str, list]] = []

    def execute(self, sql):
        self.statements.append(sql)


# execute_values is replaced inside the module so the SQL can be inspected
# without a live connection

@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import cidades_import.db.batch_write as bw

    def fake_execute_values(cursor, sql, rows, template=None, page_size=1000):
        cursor.batches.append((sql, rows))

    monkeypatch.setattr(bw, "execute_values", fake_execute_values)
    return fake_execute_values


@pytest.fixture(autouse=True)
def no_tty(monkeypatch):
    monkeypatch.setattr("cidades_import.services.progress.is_tty_enabled", lambda: False)


def test_group_by_columns_key_first_and_order_preserved():
    groups = group_by_columns(
        [{"name": "A", "id": "1"}, {"id": "2", "eleitores": 5}, {"id": "3", "name": "C"}],
        key="id",
    )
    assert groups == [
        (["id", "name"], [["1", "A"], ["3", "C"]]),
        (["id", "eleitores"], [["2", 5]]),
    ]


def test_batch_insert_sql():
    cur = DummyCursor()
    n = batch_insert(cur, "vereadores", ["cidade_id", "nome"], [["1", "Ana"], ["1", "Beto"]])
    assert n == 2
    sql, rows = cur.batches[0]
    assert sql == 'INSERT INTO vereadores ("cidade_id","nome") VALUES %s'
    assert rows == [["1", "Ana"], ["1", "Beto"]]


def test_batch_insert_empty_rows():
    cur = DummyCursor()
    assert batch_insert(cur, "vereadores", ["nome"], []) == 0
    assert cur.batches == []


def test_batch_upsert_sql():
    cur = DummyCursor()
    batch_upsert(cur, "cidades", "id", ["id", "name"], [["1", "A"]])
    assert cur.batches[0][0] == (
        'INSERT INTO cidades ("id","name") VALUES %s '
        'ON CONFLICT ("id") DO UPDATE SET "name" = EXCLUDED."name"'
    )


def test_batch_upsert_key_only_does_nothing_on_conflict():
    cur = DummyCursor()
    batch_upsert(cur, "cidades", "id", ["id"], [["1"]])
    assert cur.batches[0][0].endswith('ON CONFLICT ("id") DO NOTHING')


def test_batch_update_sql():
    cur = DummyCursor()
    n = batch_update(cur, "cidades", "id", ["id", "votos_validos"], [["1", 4200]])
    assert n == 1
    assert cur.batches[0][0] == (
        'UPDATE cidades AS t SET "votos_validos" = v."votos_validos" '
        'FROM (VALUES %s) AS v ("id","votos_validos") '
        'WHERE t."id" = v."id"'
    )


def test_batch_update_requires_key_first():
    with pytest.raises(BatchWriteError):
        batch_update(DummyCursor(), "cidades", "id", ["votos_validos", "id"], [[1, "1"]])


def test_batch_update_without_columns_is_noop():
    cur = DummyCursor()
    assert batch_update(cur, "cidades", "id", ["id"], [["1"]]) == 0
    assert cur.batches == []


def test_metrics_callback():
    captured: list[BatchMetrics] = []
    batch_insert(DummyCursor(), "vereadores", ["nome"], [["A"], ["B"]], metrics_callback=captured.append)
    assert len(captured) == 1
    assert captured[0].table == "vereadores"
    assert captured[0].batch_size == 2
    assert captured[0].elapsed_seconds >= 0


def test_write_payload_commits_in_one_transaction():
    cur = DummyCursor()
    payload = ImportPayload(
        city_updates=[{"id": "1", "prefeito": "João", "total_votos": 5000}],
        vereadores=[{"cidade_id": "1", "nome": "Ana", "partido": "PL"}, {"cidade_id": "1", "nome": "Beto"}],
    )
    result = write_payload(cur, payload, TableConfig(cidades="cid", vereadores="ver"))
    assert cur.statements == ["BEGIN", "COMMIT"]
    assert result == WriteResult(upserted_cities=0, updated_cities=1, inserted_vereadores=2)
    assert result.total_rows == 3
    tables = [sql.split()[1] if sql.startswith("UPDATE") else sql.split()[2] for sql, _ in cur.batches]
    assert tables == ["cid", "ver", "ver"]


def test_write_payload_rolls_back_on_failure(monkeypatch):
    import cidades_import.db.batch_write as bw

    def failing(cursor, sql, rows, template=None, page_size=1000):
        raise RuntimeError("duplicate key")

    monkeypatch.setattr(bw, "execute_values", failing)
    cur = DummyCursor()
    with pytest.raises(BatchWriteError, match="cidades: duplicate key"):
        write_payload(cur, ImportPayload(city_upserts=[{"id": "1", "name": "A"}]))
    assert cur.statements == ["BEGIN", "ROLLBACK"]


def test_write_payload_empty():
    cur = DummyCursor()
    result = write_payload(cur, ImportPayload())
    assert result.total_rows == 0
    assert cur.statements == ["BEGIN", "COMMIT"]
