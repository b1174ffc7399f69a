from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""CandidateRecord model for the municipality CSV import tool.

A CandidateRecord represents a single data row after header mapping and value
coercion: parsed and validated, not yet committed. ``row_number`` is the 1-based
physical line in the source file (header = line 1, first data row = line 2).
"""

__all__ = [
    "CandidateRecord",
    "RowRejection",
]


@dataclass(frozen=True)
class CandidateRecord:
    """Logical representation of a single accepted data row."""
    row_number: int  # source line (1-based, header = 1)
    values: dict[str, Any]  # canonical field -> str | int | list

    def get(self, field: str, default: Any = None) -> Any:
        return self.values.get(field, default)


@dataclass(frozen=True)
class RowRejection:
    """A data row excluded from the candidate set."""
    row_number: int
    message: str

    def __str__(self) -> str:
        return f"Linha {self.row_number}: {self.message}"
