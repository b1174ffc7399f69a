from __future__ import annotations

import pytest

from cidades_import.csvfile.normalize import normalize_name


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Abatiá", "abatia"),
        ("  São José dos Pinhais ", "sao jose dos pinhais"),
        ("D'Oeste", "doeste"),
        ("Pérola d'Oeste", "perola doeste"),
        ("Mato-Grosso", "matogrosso"),
        ("Ç123", "c123"),
        ("", ""),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


@pytest.mark.parametrize("raw", ["Abatiá", "  João  Silva ", "ÁÉÍÓÚ ãõ", "x-y_z", "São\tJosé"])
def test_idempotent(raw):
    once = normalize_name(raw)
    assert normalize_name(once) == once
    collapsed = normalize_name(raw, collapse_whitespace=True)
    assert normalize_name(collapsed, collapse_whitespace=True) == collapsed


@pytest.mark.parametrize("raw", ["curitiba", "ponta grossa", "cidade 2"])
def test_plain_lowercase_ascii_is_unchanged(raw):
    assert normalize_name(raw) == raw


def test_internal_whitespace_is_kept_by_default():
    assert normalize_name("João  Silva") == "joao  silva"


def test_collapse_whitespace():
    assert normalize_name("João  Silva", collapse_whitespace=True) == "joao silva"
    assert normalize_name("a \t b", collapse_whitespace=True) == "a b"
