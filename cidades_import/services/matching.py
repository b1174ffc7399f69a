from __future__ import annotations

from collections.abc import Iterable

from ..csvfile.normalize import normalize_name
from ..models.candidate_record import CandidateRecord
from ..models.config_models import FlowConfig
from ..models.import_summary import ImportSummary, MatchResult
from ..models.reference import ReferenceCity

"""Match reporter.

Resolves each candidate to a registered city id. Flows with a match key look the
normalized key up in an index of normalized reference names; the other flows
carry the id themselves (``id`` for city records, ``cidade_id`` for council
members). Pure aggregation, nothing is written here.
"""


def build_reference_index(
    pairs: Iterable[tuple[str | None, str]],
    *,
    collapse_whitespace: bool = False,
) -> dict[str, str]:
    """Index ``(name, id)`` pairs by normalized name.

    Empty names are skipped; a later duplicate name overwrites an earlier one.
    """
    index: dict[str, str] = {}
    for name, ident in pairs:
        if not name:
            continue
        key = normalize_name(name, collapse_whitespace=collapse_whitespace)
        if key:
            index[key] = ident
    return index


def reference_index_for(
    flow: FlowConfig,
    cities: Iterable[ReferenceCity],
    *,
    collapse_whitespace: bool = False,
) -> dict[str, str]:
    """Index of the ReferenceCity attribute the flow matches against."""
    if flow.reference_attribute is None:
        return {}
    attribute = flow.reference_attribute
    return build_reference_index(
        ((getattr(c, attribute), c.id) for c in cities),
        collapse_whitespace=collapse_whitespace,
    )


def _display(record: CandidateRecord, flow: FlowConfig) -> str:
    value = record.get(flow.display_field)
    return "" if value is None else str(value)


def match_records(
    flow: FlowConfig,
    candidates: Iterable[CandidateRecord],
    index: dict[str, str] | None = None,
    *,
    existing_ids: Iterable[str] = (),
    collapse_whitespace: bool = False,
) -> ImportSummary:
    """Resolve candidates and aggregate matched/unmatched counts.

    Args:
        flow: import flow configuration
        candidates: parsed records
        index: normalized name -> city id (flows with a match key)
        existing_ids: registered city ids; counts matched records that update
            an existing city instead of creating one
    """
    index = index or {}
    existing = set(existing_ids)
    results: list[MatchResult] = []
    unmatched_names: list[str] = []
    for record in candidates:
        if flow.match_key is not None:
            key_value = record.get(flow.match_key)
            resolved = None
            if key_value is not None:
                resolved = index.get(
                    normalize_name(str(key_value), collapse_whitespace=collapse_whitespace)
                )
        else:
            ident = record.get(flow.identity_field) if flow.identity_field else None
            resolved = None if ident is None else str(ident)

        display = _display(record, flow)
        results.append(MatchResult(record=record, resolved_id=resolved, display_name=display))
        if resolved is None:
            unmatched_names.append(display)

    matched_ids = [r.resolved_id for r in results if r.resolved_id is not None]
    return ImportSummary(
        total=len(results),
        matched=len(matched_ids),
        unmatched=len(unmatched_names),
        unmatched_names=unmatched_names,
        results=results,
        existing=sum(1 for i in matched_ids if i in existing),
        distinct_ids=len(set(matched_ids)),
    )
