from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceCity:
    """A registered city as seen by the matchers (``id, name, prefeito``)."""
    id: str
    name: str
    prefeito: str | None = None
