from __future__ import annotations

import re
import unicodedata

_NOT_ALNUM_OR_SPACE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_name(value: str, *, collapse_whitespace: bool = False) -> str:
    """Canonical form of a proper name for matching.

    lowercase, NFD with combining marks removed, anything outside
    ``[a-z0-9\\s]`` dropped, then trimmed. Internal runs of whitespace are kept
    as-is unless ``collapse_whitespace`` is set, so ``"João  Silva"`` and
    ``"joao silva"`` differ by default.

    >>> normalize_name("  São José dos Pinhais ")
    'sao jose dos pinhais'
    """
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _NOT_ALNUM_OR_SPACE.sub("", stripped)
    if collapse_whitespace:
        cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned.strip()
