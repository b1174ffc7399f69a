"""Domain models for the municipality CSV import tool.

Configuration dataclasses, parsed row models, match/summary aggregates and the
import dialog state enum.
"""

from .candidate_record import CandidateRecord, RowRejection
from .config_models import (
    CsvConfig,
    DatabaseConfig,
    FlowConfig,
    ImportConfig,
    TableConfig,
    WriteStrategy,
)
from .import_payload import ImportPayload
from .import_step import ImportStep
from .import_summary import ImportSummary, MatchResult
from .reference import ReferenceCity

__all__ = [
    # Configuration models
    "CsvConfig",
    "DatabaseConfig",
    "FlowConfig",
    "ImportConfig",
    "TableConfig",
    "WriteStrategy",
    # Processing models
    "CandidateRecord",
    "RowRejection",
    "MatchResult",
    "ImportSummary",
    "ImportPayload",
    "ImportStep",
    "ReferenceCity",
]
