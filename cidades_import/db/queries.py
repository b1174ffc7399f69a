from __future__ import annotations

from typing import Any

from ..models.reference import ReferenceCity


def fetch_reference_cities(cursor: Any, table: str = "cidades") -> list[ReferenceCity]:
    """Registered cities used to build the name/mayor match indexes."""
    cursor.execute(f'SELECT "id", "name", "prefeito" FROM {table}')
    return [
        ReferenceCity(id=str(row[0]), name=row[1] or "", prefeito=row[2])
        for row in cursor.fetchall()
    ]


def fetch_city_statuses(cursor: Any, table: str = "cidades") -> list[dict[str, Any]]:
    """``id`` and ``status_prefeito`` of every city, for map colouring."""
    cursor.execute(f'SELECT "id", "status_prefeito" FROM {table}')
    return [{"id": str(row[0]), "status_prefeito": row[1]} for row in cursor.fetchall()]
