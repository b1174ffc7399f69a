from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Config dataclasses for the municipality CSV import tool.

Two families live here:
- runtime configuration loaded from ``config/import.yml`` (database, tables, csv)
- per-flow import configuration (synonym table, required fields, numeric fields,
  match key, write strategy) declared as constants in ``cidades_import.config.flows``

Both are frozen; a flow configuration is built once at import time and never
mutated afterwards.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class TableConfig:
    """Target table names for the bulk write."""
    cidades: str = "cidades"
    vereadores: str = "vereadores"


@dataclass(frozen=True)
class CsvConfig:
    """Input decoding and reporting options."""
    encoding: str = "utf-8-sig"  # also accepts files without BOM
    max_reported_errors: int = 5  # row messages shown before "... e mais N erros"
    collapse_whitespace: bool = False  # name matching: collapse internal runs of spaces
    preview_rows: int = 10


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import process."""
    database: DatabaseConfig
    tables: TableConfig = field(default_factory=TableConfig)
    csv: CsvConfig = field(default_factory=CsvConfig)
    page_size: int = 1000  # execute_values page size
    logs_directory: str = "./logs"


class WriteStrategy(Enum):
    """How the confirmed records of a flow reach the database.

    - UPSERT_CITIES: insert-or-update ``cidades`` keyed by ``id``
    - INSERT_VEREADORES: plain insert into ``vereadores``
    - UPDATE_CITIES: update already registered ``cidades`` (plus council member
      inserts when the flow carries a ``vereadores`` list)
    """
    UPSERT_CITIES = "upsert_cities"
    INSERT_VEREADORES = "insert_vereadores"
    UPDATE_CITIES = "update_cities"


@dataclass(frozen=True)
class FlowConfig:
    """Configuration of one CSV import flow.

    ``synonyms`` maps a normalized header label (lowercase, unquoted, trimmed)
    to a canonical field. ``acceptance_fields`` maps each canonical field that
    must have a header column to the message shown when it does not.
    """
    name: str
    label: str
    synonyms: Mapping[str, str]
    acceptance_fields: Mapping[str, str]
    required_fields: frozenset[str]
    rejection_message: str
    write_strategy: WriteStrategy
    numeric_fields: frozenset[str] = frozenset()
    skipped_fields: frozenset[str] = frozenset()  # recognised headers never imported
    # (substring, canonical) tried in order for labels missing from ``synonyms``
    header_fragments: tuple[tuple[str, str], ...] = ()
    value_parsers: Mapping[str, Callable[[str], Any]] = field(default_factory=dict)
    match_key: str | None = None  # field looked up by normalized name
    reference_attribute: str | None = None  # ReferenceCity attribute indexed for match_key
    identity_field: str | None = None  # resolved id for flows without match_key
    autogenerate_id: bool = False

    @property
    def vocabulary(self) -> tuple[str, ...]:
        """Canonical fields of the flow, in first-synonym order."""
        seen: dict[str, None] = {}
        for canonical in self.synonyms.values():
            if canonical not in self.skipped_fields:
                seen.setdefault(canonical, None)
        return tuple(seen)

    @property
    def display_field(self) -> str:
        """Field whose literal value identifies a record in reports."""
        if self.match_key is not None:
            return self.match_key
        if "name" in self.vocabulary:
            return "name"
        return "nome"
