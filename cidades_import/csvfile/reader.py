from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

"""Delimited text reader.

The whole file is decoded in memory, split into physical lines, and each line is
split with a quote-aware scanner. The separator is sniffed from the first
non-blank line only.

Line numbers are physical (1-based) so row messages point at the line an editor
shows, blank lines included.
"""

__all__ = [
    "ImportRejected",
    "EmptyFileError",
    "RawRecord",
    "ParsedFile",
    "decode_bytes",
    "sniff_delimiter",
    "split_line",
    "normalize_header_cell",
    "parse_text",
]

BOM = "\ufeff"
DEFAULT_DELIMITER = ","
# Checked in this order; the first one present in the header line wins.
DELIMITER_PRIORITY = (";", ",", "\t")

_LINE_BREAK = re.compile(r"\r?\n")
_HEADER_QUOTES = re.compile(r"['\"]")


class ImportRejected(Exception):
    """File-level rejection: the import is aborted before any row is kept.

    ``details`` carries row-level messages gathered before the rejection, if any.
    """

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details or [])


class EmptyFileError(ImportRejected):
    """Raised when the file has no non-blank line (no header row)."""

    def __init__(self, message: str = "Arquivo CSV vazio ou inválido") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class RawRecord:
    line_number: int
    cells: list[str]

    def is_blank(self) -> bool:
        return all(not c.strip() for c in self.cells)


@dataclass(frozen=True)
class ParsedFile:
    delimiter: str
    header: list[str]  # normalized header labels
    records: list[RawRecord]  # data rows, blank lines dropped


def decode_bytes(data: bytes, encoding: str = "utf-8-sig") -> str:
    """Decode uploaded bytes, dropping a leading BOM whatever the codec."""
    try:
        text = data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise ImportRejected(f"Erro ao processar arquivo CSV: {e}") from e
    return text[1:] if text.startswith(BOM) else text


def sniff_delimiter(first_line: str) -> str:
    """Pick the field separator from the header line (``;`` > ``,`` > tab)."""
    for candidate in DELIMITER_PRIORITY:
        if candidate in first_line:
            return candidate
    return DEFAULT_DELIMITER


def _close_field(buffer: list[str]) -> str:
    return "".join(buffer).strip()


def split_line(line: str, separator: str) -> list[str]:
    """Split one line into fields, ignoring separators inside double quotes.

    Every ``"`` toggles the quoted state and is not copied into the field.
    Unbalanced quotes never raise; the remainder of the line simply stays in
    the last field.

    >>> split_line('"a,b",c', ",")
    ['a,b', 'c']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            fields.append(_close_field(current))
            current = []
        else:
            current.append(char)
    fields.append(_close_field(current))
    return fields


def normalize_header_cell(cell: str) -> str:
    """Lowercase, accents and quotes removed, trimmed: ``"Município"`` -> ``municipio``."""
    decomposed = unicodedata.normalize("NFD", cell.replace(BOM, "").lower())
    plain = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _HEADER_QUOTES.sub("", plain).strip()


def parse_text(text: str) -> ParsedFile:
    """Split decoded text into a normalized header and raw data records.

    Raises:
        EmptyFileError: no non-blank line in the input
    """
    lines = [
        (number, line)
        for number, line in enumerate(_LINE_BREAK.split(text), start=1)
        if line.strip()
    ]
    if not lines:
        raise EmptyFileError()

    _, header_line = lines[0]
    delimiter = sniff_delimiter(header_line)
    header = [normalize_header_cell(c) for c in split_line(header_line, delimiter)]
    records = [RawRecord(number, split_line(line, delimiter)) for number, line in lines[1:]]
    return ParsedFile(delimiter=delimiter, header=header, records=records)
