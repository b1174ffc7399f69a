from __future__ import annotations

from dataclasses import dataclass, field

from .candidate_record import CandidateRecord

"""Match and summary models for the municipality CSV import tool.

MatchResult pairs a CandidateRecord with the city id it resolved to (if any);
ImportSummary aggregates them for the preview/confirmation step. Both are
read-only once built and discarded when the import dialog is reset.
"""


@dataclass(frozen=True)
class MatchResult:
    """A candidate record and its resolved external identifier."""
    record: CandidateRecord
    resolved_id: str | None = None
    display_name: str = ""  # literal (non-normalized) match-key value

    @property
    def matched(self) -> bool:
        return self.resolved_id is not None


@dataclass(frozen=True)
class ImportSummary:
    """Aggregated match counts for the preview step.

    ``existing`` counts matched records whose resolved id is already registered
    (updates rather than inserts for the city-record flow); ``distinct_ids`` is
    the number of different ids the matched records point at.
    """
    total: int
    matched: int
    unmatched: int
    unmatched_names: list[str] = field(default_factory=list)
    results: list[MatchResult] = field(default_factory=list)
    existing: int = 0
    distinct_ids: int = 0

    @property
    def new(self) -> int:
        return self.matched - self.existing

    def matched_results(self) -> list[MatchResult]:
        return [r for r in self.results if r.matched]
