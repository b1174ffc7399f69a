from __future__ import annotations

from typing import Any

from ..models.config_models import FlowConfig, WriteStrategy
from ..models.import_payload import ImportPayload
from ..models.import_summary import ImportSummary

"""Build the bulk-write payload from the matched subset of an import."""

# Columns of ``cidades`` a combined election result row may update.
ELECTION_CITY_FIELDS = ("prefeito", "partido", "vice_prefeito", "partido_vice", "total_votos")


def _vereador_row(cidade_id: str, values: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {"cidade_id": cidade_id, "nome": values["nome"]}
    for optional in ("partido", "posicao"):
        if values.get(optional):
            row[optional] = values[optional]
    return row


def _merge_by_id(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """One record per ``id``: fields merged, later rows win, first-seen order kept."""
    merged: dict[Any, dict[str, Any]] = {}
    for record in records:
        merged.setdefault(record["id"], {}).update(record)
    return list(merged.values())


def build_payload(flow: FlowConfig, summary: ImportSummary) -> ImportPayload:
    """Translate matched results into partial records per target table.

    Unmatched results are never written. Rows resolving to the same city are
    merged into one upsert/update, so a statement never touches a row twice.
    """
    upserts: list[dict[str, Any]] = []
    updates: list[dict[str, Any]] = []
    vereadores: list[dict[str, Any]] = []

    for result in summary.matched_results():
        values = result.record.values
        city_id = result.resolved_id

        if flow.write_strategy is WriteStrategy.UPSERT_CITIES:
            upserts.append(dict(values))

        elif flow.write_strategy is WriteStrategy.INSERT_VEREADORES:
            vereadores.append(_vereador_row(city_id, values))

        elif flow.write_strategy is WriteStrategy.UPDATE_CITIES:
            update = {"id": city_id}
            for name in ELECTION_CITY_FIELDS + ("votos_validos",):
                if name in values and (name != "total_votos" or values[name]):
                    update[name] = values[name]
            if len(update) > 1:
                updates.append(update)
            for vereador in values.get("vereadores", []):
                vereadores.append(_vereador_row(city_id, vereador))

    return ImportPayload(
        city_upserts=_merge_by_id(upserts),
        city_updates=_merge_by_id(updates),
        vereadores=vereadores,
    )
