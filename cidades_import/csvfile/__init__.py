"""Delimited text parsing: sniffing, quote-aware splitting, header mapping,
name normalization and row coercion."""

from .headers import HeaderMap, MissingColumnsError, build_header_map, validate_header_map
from .normalize import normalize_name
from .reader import (
    EmptyFileError,
    ImportRejected,
    ParsedFile,
    RawRecord,
    decode_bytes,
    parse_text,
    sniff_delimiter,
    split_line,
)
from .rows import transform_row

__all__ = [
    "EmptyFileError",
    "HeaderMap",
    "ImportRejected",
    "MissingColumnsError",
    "ParsedFile",
    "RawRecord",
    "build_header_map",
    "decode_bytes",
    "normalize_name",
    "parse_text",
    "sniff_delimiter",
    "split_line",
    "transform_row",
    "validate_header_map",
]
