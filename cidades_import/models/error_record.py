from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

This module defines the ErrorRecord dataclass used for structured error logging
of CSV imports. It supports row=-1 as a sentinel value for file-level errors
where no specific line applies (rejected files and failed bulk writes).
"""

__all__ = [
    "ErrorRecord",
]

FILE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: CSV filename being imported
        flow: Import flow name (cidades, vereadores, parana, votos_validos)
        row: Source line number (1-based). Use -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: User-facing message or database error text
    """
    timestamp: str  # ISO8601 UTC
    file: str
    flow: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, flow: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            flow=flow,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
