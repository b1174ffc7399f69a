from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ImportPayload:
    """Partial records handed to the bulk write.

    Only the fields present in each dict are written.
    """
    city_upserts: list[dict[str, Any]] = field(default_factory=list)  # keyed by id
    city_updates: list[dict[str, Any]] = field(default_factory=list)  # keyed by id, must exist
    vereadores: list[dict[str, Any]] = field(default_factory=list)  # plain insert

    @property
    def total_rows(self) -> int:
        return len(self.city_upserts) + len(self.city_updates) + len(self.vereadores)

    def is_empty(self) -> bool:
        return self.total_rows == 0
