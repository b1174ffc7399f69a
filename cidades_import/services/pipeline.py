from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..csvfile.headers import HeaderMap, build_header_map, validate_header_map
from ..csvfile.reader import ImportRejected, decode_bytes, parse_text
from ..csvfile.rows import new_record_id, transform_row
from ..models.candidate_record import CandidateRecord, RowRejection
from ..models.config_models import FlowConfig
from .summary import collapse_errors

"""Parse stage of an import: bytes -> candidate records + row rejections.

File-level problems (undecodable or empty file, missing required column, no
valid row at all) abort with ImportRejected. Row-level problems never abort:
the row is left out and reported with its line number.
"""

logger = logging.getLogger(__name__)

NO_VALID_DATA = "Nenhum dado válido encontrado no CSV"


@dataclass(frozen=True)
class ParseResult:
    flow: FlowConfig
    delimiter: str
    header_map: HeaderMap
    candidates: list[CandidateRecord]
    rejections: list[RowRejection] = field(default_factory=list)

    def error_messages(self, limit: int = 5) -> list[str]:
        return collapse_errors([str(r) for r in self.rejections], limit)


def parse_import(
    data: bytes | str,
    flow: FlowConfig,
    *,
    encoding: str = "utf-8-sig",
    id_factory: Callable[[], str] = new_record_id,
) -> ParseResult:
    """Run sniffer, splitter, header mapper and row transformer over a file.

    Args:
        data: whole file content (bytes are decoded with ``encoding``)
        flow: import flow configuration
        id_factory: id generator for flows with auto-generated ids

    Raises:
        ImportRejected: file-level rejection (single user-facing message)
    """
    text = decode_bytes(data, encoding) if isinstance(data, bytes) else data
    parsed = parse_text(text)
    header_map = build_header_map(
        parsed.header, flow.synonyms, flow.skipped_fields, flow.header_fragments
    )
    validate_header_map(header_map, flow.acceptance_fields)
    logger.debug(
        "flow=%s delimiter=%r header=%s mapped=%s",
        flow.name,
        parsed.delimiter,
        parsed.header,
        list(header_map.fields),
    )

    candidates: list[CandidateRecord] = []
    rejections: list[RowRejection] = []
    for record in parsed.records:
        if record.is_blank():
            continue
        outcome = transform_row(header_map, record, flow, id_factory=id_factory)
        if isinstance(outcome, RowRejection):
            rejections.append(outcome)
        else:
            candidates.append(outcome)

    if not candidates:
        raise ImportRejected(NO_VALID_DATA, details=[str(r) for r in rejections])

    return ParseResult(
        flow=flow,
        delimiter=parsed.delimiter,
        header_map=header_map,
        candidates=candidates,
        rejections=rejections,
    )
