from __future__ import annotations

import re
import unicodedata

"""Cell value coercion helpers shared by the row transformer and flow tables."""

_EDGE_QUOTE = re.compile(r"^[\"']|[\"']$")
_NON_DIGIT = re.compile(r"[^0-9]")

POSICOES = ("aliado", "neutro", "oposicao")


def clean_cell(raw: str | None) -> str:
    """Strip one leading/trailing quote and surrounding whitespace."""
    if not raw:
        return ""
    return _EDGE_QUOTE.sub("", raw).strip()


def coerce_int(value: str) -> int | None:
    """Digits-only integer: ``"5.000"`` -> 5000, ``"abc"`` -> None."""
    digits = _NON_DIGIT.sub("", value)
    if not digits:
        return None
    return int(digits, 10)


def normalize_posicao(value: str) -> str:
    """Council member alignment; anything unrecognised is ``neutro``."""
    decomposed = unicodedata.normalize("NFD", value.lower())
    plain = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip()
    if plain in ("aliado", "oposicao"):
        return plain
    return "neutro"


def parse_vereadores(value: str) -> list[dict[str, str]]:
    """Parse ``"NOME/PARTIDO, NOME2/PARTIDO2"`` into council member dicts.

    Entries without a name are dropped; a missing party yields ``""``.
    """
    if not value or not value.strip():
        return []
    vereadores = []
    for entry in value.split(","):
        parts = entry.strip().split("/")
        nome = parts[0].strip()
        partido = parts[1].strip() if len(parts) > 1 else ""
        if nome:
            vereadores.append({"nome": nome, "partido": partido})
    return vereadores
