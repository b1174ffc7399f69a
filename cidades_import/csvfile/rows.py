from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Any

from ..models.candidate_record import CandidateRecord, RowRejection
from ..models.config_models import FlowConfig
from .headers import HeaderMap
from .reader import RawRecord
from .values import clean_cell, coerce_int


def new_record_id() -> str:
    return str(uuid.uuid4())


def transform_row(
    header_map: HeaderMap,
    record: RawRecord,
    flow: FlowConfig,
    *,
    id_factory: Callable[[], str] = new_record_id,
) -> CandidateRecord | RowRejection:
    """Turn one raw data row into a CandidateRecord, or reject it.

    Per cell: canonical field looked up by position, value cleaned, empty values
    skipped; numeric fields keep digits only and are omitted when nothing is
    left; flow value parsers (posicao, vereadores list) apply to their field.
    A row missing any of ``flow.required_fields`` is rejected with its source
    line number. Flows with ``autogenerate_id`` get a UUID4 id when the id
    column is absent or empty.
    """
    values: dict[str, Any] = {}
    for position, cell in enumerate(record.cells):
        canonical = header_map.field_at(position)
        if canonical is None:
            continue
        value = clean_cell(cell)
        if not value:
            continue
        if canonical in flow.numeric_fields:
            number = coerce_int(value)
            if number is None:
                continue
            values[canonical] = number
        elif canonical in flow.value_parsers:
            values[canonical] = flow.value_parsers[canonical](value)
        else:
            values[canonical] = value

    if flow.autogenerate_id and flow.identity_field and not values.get(flow.identity_field):
        values[flow.identity_field] = id_factory()

    if any(f not in values for f in flow.required_fields):
        return RowRejection(record.line_number, flow.rejection_message)
    return CandidateRecord(row_number=record.line_number, values=values)
