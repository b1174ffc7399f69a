from __future__ import annotations

from types import MappingProxyType

from ..csvfile.values import normalize_posicao, parse_vereadores
from ..models.config_models import FlowConfig, WriteStrategy

"""Import flow definitions.

One FlowConfig per upload dialog of the back-office. Synonym keys are header
labels after normalization (lowercase, accents and quotes removed, trimmed).
"""

__all__ = [
    "CIDADES",
    "VEREADORES",
    "PARANA",
    "VOTOS_VALIDOS",
    "FLOWS",
    "UnknownFlowError",
    "get_flow",
]


class UnknownFlowError(KeyError):
    pass


CIDADES = FlowConfig(
    name="cidades",
    label="Cidades",
    synonyms=MappingProxyType({
        # id
        "id": "id",
        "codigo": "id",
        "cod_ibge": "id",
        # nome
        "name": "name",
        "nome": "name",
        "cidade": "name",
        "municipio": "name",
        # mesorregião
        "mesorregiao": "mesorregiao",
        "regiao": "mesorregiao",
        "eleitores": "eleitores",
        "num_eleitores": "eleitores",
        "prefeito": "prefeito",
        "nome_prefeito": "prefeito",
        "partido": "partido",
        "partido_prefeito": "partido",
        "status_prefeito": "status_prefeito",
        "total_votos": "total_votos",
        "votos": "total_votos",
        "votos_validos": "votos_validos",
        "vice_prefeito": "vice_prefeito",
        "vice": "vice_prefeito",
        "partido_vice": "partido_vice",
        "status_vice": "status_vice",
        "apoio": "apoio",
        "nao_apoio": "nao_apoio",
        # managed by the database
        "created_at": "created_at",
        "updated_at": "updated_at",
    }),
    acceptance_fields=MappingProxyType({
        "name": 'O CSV precisa ter uma coluna "name", "nome" ou "cidade"',
    }),
    required_fields=frozenset({"name"}),
    rejection_message="Nome não encontrado",
    write_strategy=WriteStrategy.UPSERT_CITIES,
    numeric_fields=frozenset({"eleitores", "total_votos", "votos_validos", "apoio", "nao_apoio"}),
    skipped_fields=frozenset({"created_at", "updated_at"}),
    identity_field="id",
    autogenerate_id=True,
)

VEREADORES = FlowConfig(
    name="vereadores",
    label="Vereadores",
    synonyms=MappingProxyType({
        "cidade_id": "cidade_id",
        "id_cidade": "cidade_id",
        "cod_cidade": "cidade_id",
        "codigo_cidade": "cidade_id",
        "municipio_id": "cidade_id",
        "cod_municipio": "cidade_id",
        "codigo_municipio": "cidade_id",
        "nome": "nome",
        "name": "nome",
        "vereador": "nome",
        "nome_vereador": "nome",
        "partido": "partido",
        "sigla_partido": "partido",
        "sigla": "partido",
        "posicao": "posicao",
        "status": "posicao",
        "alinhamento": "posicao",
    }),
    acceptance_fields=MappingProxyType({
        "cidade_id": "O CSV precisa ter uma coluna para o ID da cidade (cidade_id, id_cidade, etc.)",
        "nome": "O CSV precisa ter uma coluna para o nome do vereador (nome, vereador, etc.)",
    }),
    required_fields=frozenset({"cidade_id", "nome"}),
    rejection_message="dados incompletos (cidade_id ou nome faltando)",
    write_strategy=WriteStrategy.INSERT_VEREADORES,
    value_parsers=MappingProxyType({"posicao": normalize_posicao}),
    identity_field="cidade_id",
)

# Combined election result export: mayor, vice, vote totals and the elected
# council members of each municipality in one row.
PARANA = FlowConfig(
    name="parana",
    label="Resultado eleitoral (prefeitos, vices, votos e vereadores)",
    synonyms=MappingProxyType({
        "cidade": "cidade_nome",
        "nome_cidade": "cidade_nome",
        "cidade_nome": "cidade_nome",
        "municipio": "cidade_nome",
        "prefeito": "prefeito",
        "nome_prefeito": "prefeito",
        "prefeito_eleito": "prefeito",
        "partido": "partido",
        "partido_prefeito": "partido",
        "vice": "vice_prefeito",
        "vice_prefeito": "vice_prefeito",
        "vice-prefeito": "vice_prefeito",
        "nome_vice": "vice_prefeito",
        "partido_vice": "partido_vice",
        "total_votos": "total_votos",
        "votos_total": "total_votos",
        "numero_votos": "total_votos",
        "votos_prefeito": "votos_prefeito",
        "votos_eleito": "votos_prefeito",
        "vereadores": "vereadores",
        "vereadores_eleitos": "vereadores",
    }),
    acceptance_fields=MappingProxyType({
        "cidade_nome": "O CSV precisa ter uma coluna para o nome da cidade (cidade, municipio, etc.)",
    }),
    required_fields=frozenset({"cidade_nome"}),
    rejection_message="nome da cidade faltando",
    write_strategy=WriteStrategy.UPDATE_CITIES,
    numeric_fields=frozenset({"total_votos", "votos_prefeito"}),
    value_parsers=MappingProxyType({"vereadores": parse_vereadores}),
    match_key="cidade_nome",
    reference_attribute="name",
)

VOTOS_VALIDOS = FlowConfig(
    name="votos_validos",
    label="Votos válidos (match pelo nome do prefeito)",
    synonyms=MappingProxyType({
        "prefeito": "nome_prefeito",
        "nome_prefeito": "nome_prefeito",
        "nome": "nome_prefeito",
        "candidato": "nome_prefeito",
        "votos_validos": "votos_validos",
        "votos validos": "votos_validos",
        "validos": "votos_validos",
        "votos": "votos_validos",
        "cidade": "cidade_nome",
        "municipio": "cidade_nome",
    }),
    acceptance_fields=MappingProxyType({
        "nome_prefeito": "O CSV precisa ter uma coluna para o nome do prefeito (prefeito, nome_prefeito, etc.)",
    }),
    required_fields=frozenset({"nome_prefeito"}),
    rejection_message="nome do prefeito faltando",
    write_strategy=WriteStrategy.UPDATE_CITIES,
    header_fragments=(
        ("cidade", "cidade_nome"),
        ("municipio", "cidade_nome"),
        ("prefeito", "nome_prefeito"),
        ("nome", "nome_prefeito"),
        ("votos", "votos_validos"),
        ("validos", "votos_validos"),
    ),
    numeric_fields=frozenset({"votos_validos"}),
    match_key="nome_prefeito",
    reference_attribute="prefeito",
)

FLOWS: MappingProxyType[str, FlowConfig] = MappingProxyType({
    flow.name: flow for flow in (CIDADES, VEREADORES, PARANA, VOTOS_VALIDOS)
})


def get_flow(name: str) -> FlowConfig:
    try:
        return FLOWS[name]
    except KeyError:
        raise UnknownFlowError(f"unknown import flow: {name} (expected one of {sorted(FLOWS)})") from None
