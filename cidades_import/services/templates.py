from __future__ import annotations

from pathlib import Path

from ..models.config_models import FlowConfig

"""Downloadable CSV templates: UTF-8 BOM, ``;`` separator, canonical headers
and example rows for each import flow."""

TEMPLATE_SEPARATOR = ";"

TEMPLATES: dict[str, tuple[list[str], list[list[str]]]] = {
    "cidades": (
        [
            "id", "name", "mesorregiao", "prefeito", "partido", "vice_prefeito",
            "partido_vice", "eleitores", "votos_validos", "total_votos",
            "status_prefeito", "status_vice", "apoio", "nao_apoio",
        ],
        [
            [
                "4100103", "Abatiá", "Norte Pioneiro Paranaense", "João Silva", "PARTIDO",
                "Maria Santos", "PARTIDO2", "5000", "4200", "3500", "Eleito", "Eleito", "1", "0",
            ],
        ],
    ),
    "vereadores": (
        ["cidade_id", "nome", "partido", "posicao"],
        [
            ["4100103", "João Silva", "PSD", "aliado"],
            ["4100103", "Maria Santos", "MDB", "neutro"],
            ["4100202", "Pedro Oliveira", "PP", "oposicao"],
        ],
    ),
    "parana": (
        [
            "cidade", "prefeito", "partido", "vice_prefeito", "partido_vice",
            "total_votos", "votos_prefeito", "vereadores",
        ],
        [
            [
                "Abatiá", "João Silva", "PSD", "Maria Santos", "MDB", "5.000", "3.500",
                "Pedro Oliveira/PP, Ana Souza/PL",
            ],
        ],
    ),
    "votos_validos": (
        ["prefeito", "votos_validos"],
        [["João Silva", "4.200"]],
    ),
}


def template_file_name(flow: FlowConfig) -> str:
    return f"modelo_{flow.name}.csv"


def render_template(flow: FlowConfig) -> bytes:
    headers, rows = TEMPLATES[flow.name]
    lines = [TEMPLATE_SEPARATOR.join(headers)]
    lines.extend(TEMPLATE_SEPARATOR.join(r) for r in rows)
    return ("\ufeff" + "\n".join(lines)).encode("utf-8")


def write_template(flow: FlowConfig, destination: Path) -> Path:
    """Write the flow template; ``destination`` may be a directory."""
    if destination.is_dir():
        destination = destination / template_file_name(flow)
    destination.write_bytes(render_template(flow))
    return destination
