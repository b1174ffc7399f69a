from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..models.config_models import DatabaseConfig


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the libpq DSN.

    Resolution order:
        1. DATABASE_URL / PGDSN environment variables (``.env`` is loaded with
           override before this runs, so it wins over the shell)
        2. ``database.dsn`` from config/import.yml
        3. discrete PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, each
           falling back to the matching config key and then a default
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_connection(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a cursor on an autocommit connection.

    Transaction boundaries are explicit: write_payload issues BEGIN/COMMIT.
    """
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        try:
            cur.close()
        finally:
            conn.close()
