from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .reader import ImportRejected

"""Header row -> canonical field mapping.

Collision policy: the first header cell mapping to a canonical field owns it;
later cells resolving to the same field are ignored, so the resulting map is
deterministic for any header order.
"""


class MissingColumnsError(ImportRejected):
    """Raised when a column required for file acceptance has no header."""


@dataclass(frozen=True)
class HeaderMap:
    fields: tuple[str | None, ...]  # position -> canonical field (None = ignored)

    def field_at(self, position: int) -> str | None:
        if 0 <= position < len(self.fields):
            return self.fields[position]
        return None

    @property
    def mapped_fields(self) -> frozenset[str]:
        return frozenset(f for f in self.fields if f is not None)

    def missing(self, required: Iterable[str]) -> list[str]:
        mapped = self.mapped_fields
        return [f for f in required if f not in mapped]


def _lookup(label: str, synonyms: Mapping[str, str], fragments: Sequence[tuple[str, str]]) -> str | None:
    canonical = synonyms.get(label)
    if canonical is not None:
        return canonical
    for fragment, field in fragments:
        if fragment in label:
            return field
    return None


def build_header_map(
    headers: Iterable[str],
    synonyms: Mapping[str, str],
    skipped: Iterable[str] = (),
    fragments: Sequence[tuple[str, str]] = (),
) -> HeaderMap:
    """Map normalized header labels to canonical fields (first occurrence wins).

    Args:
        headers: header cells, already lowercased and accent/quote/whitespace stripped
        synonyms: flow synonym table (exact labels)
        skipped: canonical fields recognised but never imported (timestamps)
        fragments: ``(substring, field)`` fallbacks for labels not in ``synonyms``
    """
    skip = set(skipped)
    taken: set[str] = set()
    fields: list[str | None] = []
    for label in headers:
        canonical = _lookup(label, synonyms, fragments)
        if canonical is None or canonical in skip or canonical in taken:
            fields.append(None)
            continue
        taken.add(canonical)
        fields.append(canonical)
    return HeaderMap(tuple(fields))


def validate_header_map(header_map: HeaderMap, acceptance_fields: Mapping[str, str]) -> None:
    """Reject the file when a column required for acceptance is absent.

    Raises:
        MissingColumnsError: with the message of the first missing field
    """
    for canonical in header_map.missing(acceptance_fields):
        raise MissingColumnsError(acceptance_fields[canonical])
