from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from ..models.config_models import TableConfig
from ..models.import_payload import ImportPayload
from ..services.progress import WriteProgress

"""Bulk write of confirmed import payloads.

All statements go through psycopg2.extras.execute_values. Payload records are
partial (only the fields present in the file), so rows are grouped by their
column set and each group gets its own statement.

- cidades upsert: INSERT ... ON CONFLICT (id) DO UPDATE SET col = EXCLUDED.col
- cidades update: UPDATE ... FROM (VALUES ...) keyed by id, existing rows only
- vereadores: plain INSERT

write_payload runs the whole payload in one transaction: it either commits
everything or rolls back and raises BatchWriteError.
"""

logger = logging.getLogger(__name__)


class BatchWriteError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single execute_values call."""
    table: str
    batch_size: int
    elapsed_seconds: float


@dataclass(frozen=True)
class WriteResult:
    upserted_cities: int = 0
    updated_cities: int = 0
    inserted_vereadores: int = 0

    @property
    def total_rows(self) -> int:
        return self.upserted_cities + self.updated_cities + self.inserted_vereadores


MetricsCallback = Callable[[BatchMetrics], None]


def _quote(name: str) -> str:
    return f'"{name}"'


def group_by_columns(records: Iterable[dict[str, Any]], key: str | None = None) -> list[tuple[list[str], list[list[Any]]]]:
    """Group partial records by column set, preserving first-seen order.

    The key column (when given) is always first in each group's column list.
    """
    groups: dict[tuple[str, ...], list[list[Any]]] = {}
    for record in records:
        cols = sorted(c for c in record if c != key)
        if key is not None:
            cols.insert(0, key)
        signature = tuple(cols)
        groups.setdefault(signature, []).append([record.get(c) for c in signature])
    return [(list(sig), rows) for sig, rows in groups.items()]


def _execute(
    cursor: Any,
    sql: str,
    rows: list[list[Any]],
    table: str,
    page_size: int,
    metrics_callback: MetricsCallback | None,
    template: str | None = None,
) -> None:
    start = time.perf_counter()
    try:
        execute_values(cursor, sql, rows, template=template, page_size=page_size)
    except Exception as e:
        raise BatchWriteError(f"{table}: {e}") from e
    finally:
        if metrics_callback is not None:
            metrics_callback(BatchMetrics(table, len(rows), time.perf_counter() - start))


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: MetricsCallback | None = None,
) -> int:
    """Plain batched INSERT. Returns the number of rows sent."""
    rows_list = [list(r) for r in rows]
    if not rows_list:
        return 0
    cols_sql = ",".join(_quote(c) for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    _execute(cursor, sql, rows_list, table, page_size, metrics_callback)
    return len(rows_list)


def batch_upsert(
    cursor: Any,
    table: str,
    key: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: MetricsCallback | None = None,
) -> int:
    """INSERT ... ON CONFLICT (key) DO UPDATE for the non-key columns."""
    rows_list = [list(r) for r in rows]
    if not rows_list:
        return 0
    cols_sql = ",".join(_quote(c) for c in columns)
    updates = [c for c in columns if c != key]
    if updates:
        set_sql = ",".join(f"{_quote(c)} = EXCLUDED.{_quote(c)}" for c in updates)
        conflict = f"ON CONFLICT ({_quote(key)}) DO UPDATE SET {set_sql}"
    else:
        conflict = f"ON CONFLICT ({_quote(key)}) DO NOTHING"
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s {conflict}"
    _execute(cursor, sql, rows_list, table, page_size, metrics_callback)
    return len(rows_list)


def batch_update(
    cursor: Any,
    table: str,
    key: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: MetricsCallback | None = None,
) -> int:
    """UPDATE existing rows from a VALUES list; ``columns[0]`` must be ``key``."""
    rows_list = [list(r) for r in rows]
    if not rows_list:
        return 0
    if not columns or columns[0] != key:
        raise BatchWriteError(f"{table}: update columns must start with key '{key}'")
    updates = list(columns[1:])
    if not updates:
        return 0
    alias_cols = ",".join(_quote(c) for c in columns)
    set_sql = ",".join(f"{_quote(c)} = v.{_quote(c)}" for c in updates)
    sql = (
        f"UPDATE {table} AS t SET {set_sql} "
        f"FROM (VALUES %s) AS v ({alias_cols}) "
        f"WHERE t.{_quote(key)} = v.{_quote(key)}"
    )
    _execute(cursor, sql, rows_list, table, page_size, metrics_callback)
    return len(rows_list)


def write_payload(
    cursor: Any,
    payload: ImportPayload,
    tables: TableConfig | None = None,
    page_size: int = 1000,
    metrics_callback: MetricsCallback | None = None,
) -> WriteResult:
    """Write a confirmed payload in one transaction.

    Raises:
        BatchWriteError: any statement failed; the transaction was rolled back
    """
    tables = tables or TableConfig()
    upserted = updated = inserted = 0

    try:
        cursor.execute("BEGIN")
    except Exception as e:
        raise BatchWriteError(f"failed to begin transaction: {e}") from e

    try:
        with WriteProgress(payload.total_rows) as progress:
            for columns, rows in group_by_columns(payload.city_upserts, key="id"):
                progress.start_batch(tables.cidades)
                upserted += batch_upsert(
                    cursor, tables.cidades, "id", columns, rows, page_size, metrics_callback
                )
                progress.advance(len(rows))
            for columns, rows in group_by_columns(payload.city_updates, key="id"):
                progress.start_batch(tables.cidades)
                updated += batch_update(
                    cursor, tables.cidades, "id", columns, rows, page_size, metrics_callback
                )
                progress.advance(len(rows))
            for columns, rows in group_by_columns(payload.vereadores):
                progress.start_batch(tables.vereadores)
                inserted += batch_insert(
                    cursor, tables.vereadores, columns, rows, page_size, metrics_callback
                )
                progress.advance(len(rows))
        cursor.execute("COMMIT")
    except Exception as e:
        try:
            cursor.execute("ROLLBACK")
        except Exception:
            logger.debug("rollback failed", exc_info=True)
        if isinstance(e, BatchWriteError):
            raise
        raise BatchWriteError(str(e)) from e

    logger.debug(
        "write committed upserted=%d updated=%d vereadores=%d", upserted, updated, inserted
    )
    return WriteResult(
        upserted_cities=upserted,
        updated_cities=updated,
        inserted_vereadores=inserted,
    )
