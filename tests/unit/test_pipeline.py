from __future__ import annotations

import pytest

from cidades_import.config.flows import CIDADES, VEREADORES, VOTOS_VALIDOS
from cidades_import.csvfile.headers import MissingColumnsError
from cidades_import.csvfile.reader import EmptyFileError, ImportRejected
from cidades_import.services.pipeline import NO_VALID_DATA, parse_import


def test_nome_partido_end_to_end():
    data = "nome;partido\nJoão Silva;PSD\n;MDB".encode("utf-8")
    result = parse_import(data, CIDADES, id_factory=lambda: "new-id")

    assert result.delimiter == ";"
    assert len(result.candidates) == 1
    assert result.candidates[0].values == {"name": "João Silva", "partido": "PSD", "id": "new-id"}
    assert result.candidates[0].row_number == 2
    assert [str(r) for r in result.rejections] == ["Linha 3: Nome não encontrado"]


def test_bom_and_comma_separator():
    data = "\ufeffid,name,eleitores\n4100103,Abatiá,\"5.000\"\n".encode("utf-8")
    result = parse_import(data, CIDADES)
    assert result.candidates[0].values == {"id": "4100103", "name": "Abatiá", "eleitores": 5000}


def test_text_input_is_accepted():
    result = parse_import("prefeito;votos\nJoão Silva;4.200", VOTOS_VALIDOS)
    assert result.candidates[0].values == {"nome_prefeito": "João Silva", "votos_validos": 4200}


def test_blank_rows_are_skipped_silently():
    result = parse_import("nome\nA\n,\n\nB", CIDADES)
    assert [c.row_number for c in result.candidates] == [2, 5]
    assert result.rejections == []


def test_empty_file():
    with pytest.raises(EmptyFileError):
        parse_import(b"", CIDADES)


def test_missing_required_column():
    with pytest.raises(MissingColumnsError):
        parse_import("cidade_id;partido\n1;PSD", VEREADORES)


def test_no_valid_rows():
    with pytest.raises(ImportRejected) as exc:
        parse_import("cidade_id;nome\n;João\n2;", VEREADORES)
    assert exc.value.message == NO_VALID_DATA
    assert exc.value.details == [
        "Linha 2: dados incompletos (cidade_id ou nome faltando)",
        "Linha 3: dados incompletos (cidade_id ou nome faltando)",
    ]


def test_error_messages_are_collapsed():
    lines = ["nome;partido", "A;X"] + [";P"] * 7
    result = parse_import("\n".join(lines), CIDADES)
    messages = result.error_messages(limit=5)
    assert len(messages) == 6
    assert messages[0] == "Linha 3: Nome não encontrado"
    assert messages[-1] == "... e mais 2 erros"


def test_accented_descriptive_headers():
    data = "Nome do Prefeito;Votos Válidos\nJoão Silva;4.200\n".encode("utf-8")
    result = parse_import(data, VOTOS_VALIDOS)
    assert result.candidates[0].values == {"nome_prefeito": "João Silva", "votos_validos": 4200}


def test_accented_city_header():
    result = parse_import("Município;Região\nAbatiá;Norte", CIDADES, id_factory=lambda: "x")
    assert result.candidates[0].values == {"name": "Abatiá", "mesorregiao": "Norte", "id": "x"}
