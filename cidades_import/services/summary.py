from __future__ import annotations

from typing import Any

import pandas as pd

from ..models.config_models import FlowConfig
from ..models.import_summary import ImportSummary

"""Summary line and preview rendering for the import CLI.

SUMMARY line format:
SUMMARY flow={flow} file={name} rows={total} rejected={n} matched={n}
unmatched={n} written={n}
"""


def collapse_errors(messages: list[str], limit: int = 5) -> list[str]:
    """Keep the first ``limit`` messages and fold the rest into a count.

    >>> collapse_errors(["a", "b", "c"], limit=2)
    ['a', 'b', '... e mais 1 erros']
    """
    if len(messages) <= limit:
        return list(messages)
    return messages[:limit] + [f"... e mais {len(messages) - limit} erros"]


def render_summary_line(
    flow_name: str,
    file_name: str,
    summary: ImportSummary | None,
    rejected: int,
    written: int,
) -> str:
    total = summary.total if summary is not None else 0
    matched = summary.matched if summary is not None else 0
    unmatched = summary.unmatched if summary is not None else 0
    return (
        f"SUMMARY flow={flow_name} "
        f"file={file_name} "
        f"rows={total + rejected} "
        f"rejected={rejected} "
        f"matched={matched} "
        f"unmatched={unmatched} "
        f"written={written}"
    )


def _cell(value: Any) -> Any:
    if isinstance(value, list):
        return ", ".join(
            f"{v.get('nome', '')}/{v.get('partido', '')}" if isinstance(v, dict) else str(v)
            for v in value
        )
    return value


def preview_frame(flow: FlowConfig, summary: ImportSummary, limit: int = 10) -> pd.DataFrame:
    """First ``limit`` matched/unmatched rows as a DataFrame (vocabulary column order)."""
    rows = []
    for result in summary.results[:limit]:
        row: dict[str, Any] = {"linha": result.record.row_number}
        for name in flow.vocabulary:
            row[name] = _cell(result.record.get(name, ""))
        if flow.match_key is not None:
            row["status"] = "OK" if result.matched else "não encontrado"
        rows.append(row)
    columns = ["linha", *flow.vocabulary] + (["status"] if flow.match_key is not None else [])
    frame = pd.DataFrame(rows, columns=columns)
    # Drop vocabulary columns nothing in the preview uses
    empty = [c for c in flow.vocabulary if (frame[c] == "").all()]
    return frame.drop(columns=empty)


def render_preview(flow: FlowConfig, summary: ImportSummary, limit: int = 10) -> str:
    frame = preview_frame(flow, summary, limit)
    if frame.empty:
        return "(sem linhas)"
    text = frame.to_string(index=False)
    if summary.total > limit:
        text += f"\n... e mais {summary.total - limit} linhas"
    return text
