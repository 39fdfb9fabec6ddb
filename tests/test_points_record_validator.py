from __future__ import annotations

import pytest

from app.domain.errors import MissingRequiredColumnsError, NoValidRecordsError
from app.domain.points_import import ImportRecord
from app.validators.points_record_validator import PointsRecordValidator, parse_points


@pytest.fixture()
def validator() -> PointsRecordValidator:
    return PointsRecordValidator()


class TestResolveColumns:
    def test_resolves_canonical_headers(self, validator: PointsRecordValidator) -> None:
        layout = validator.resolve_columns(["CPF", "Nome", "Email", "Pontos"])

        assert layout.document_index == 0
        assert layout.name_index == 1
        assert layout.email_index == 2
        assert layout.points_index == 3

    def test_resolves_synonyms_by_substring(self, validator: PointsRecordValidator) -> None:
        layout = validator.resolve_columns(["Valor do crédito", "E-mail", "Nome completo", "Documento"])

        assert layout.points_index == 0
        assert layout.email_index == 1
        assert layout.name_index == 2
        assert layout.document_index == 3

    def test_optional_columns_may_be_absent(self, validator: PointsRecordValidator) -> None:
        layout = validator.resolve_columns(["cpf", "total de pontos"])

        assert layout.name_index is None
        assert layout.email_index is None

    def test_missing_points_column_is_rejected(self, validator: PointsRecordValidator) -> None:
        with pytest.raises(MissingRequiredColumnsError) as exc_info:
            validator.resolve_columns(["CPF", "Nome"])

        assert str(exc_info.value) == "Planilha deve conter pelo menos as colunas CPF e Pontos"
        assert exc_info.value.headers == ("cpf", "nome")

    def test_custom_synonyms_replace_defaults(self) -> None:
        validator = PointsRecordValidator(document_synonyms=("identificador",), points_synonyms=("saldo",))

        layout = validator.resolve_columns(["Saldo", "Identificador"])
        assert (layout.document_index, layout.points_index) == (1, 0)

        with pytest.raises(MissingRequiredColumnsError):
            validator.resolve_columns(["CPF", "Pontos"])


class TestValidate:
    def test_builds_records_with_grid_row_numbers(self, validator: PointsRecordValidator) -> None:
        grid = [
            ["CPF", "Nome", "Email", "Pontos"],
            ["123.456.789-01", "João Silva", "joao@email.com", "100"],
            ["98765432100", "", "", "50"],
        ]

        outcome = validator.validate(grid)

        assert outcome.records == [
            ImportRecord(
                document_id="12345678901",
                points=100,
                row_number=2,
                full_name="João Silva",
                email="joao@email.com",
            ),
            ImportRecord(document_id="98765432100", points=50, row_number=3),
        ]
        assert outcome.skipped_rows == []

    def test_drops_bad_documents_and_non_positive_points(self, validator: PointsRecordValidator) -> None:
        grid = [
            ["documento", "nome completo", "e-mail", "valor"],
            ["1234567890", "Curto", "", "10"],
            ["12345678901", "Sem pontos", "", "abc"],
            ["12345678902", "Negativo", "", "-5"],
            ["", "", "", ""],
            ["12345678903", "Ok", "ok@x.com", "7"],
        ]

        outcome = validator.validate(grid)

        assert [record.document_id for record in outcome.records] == ["12345678903"]
        assert outcome.records[0].row_number == 6
        assert [(skipped.row, skipped.cpf) for skipped in outcome.skipped_rows] == [
            (2, "1234567890"),
            (3, "12345678901"),
            (4, "12345678902"),
        ]
        assert outcome.skipped_rows[0].reason == "CPF deve conter 11 dígitos"
        assert outcome.skipped_rows[1].reason == "Pontos deve ser um número maior que zero"

    def test_source_line_numbers_override_grid_positions(self, validator: PointsRecordValidator) -> None:
        grid = [["CPF", "Pontos"], ["123", "10"], ["12345678901", "7"]]

        outcome = validator.validate(grid, line_numbers=[1, 4, 6])

        assert outcome.skipped_rows[0].row == 4
        assert outcome.records[0].row_number == 6

    def test_numeric_workbook_cells_are_accepted(self, validator: PointsRecordValidator) -> None:
        outcome = validator.validate([["CPF", "Pontos"], [12345678901, 30]])

        assert outcome.records[0].document_id == "12345678901"
        assert outcome.records[0].points == 30

    def test_short_rows_do_not_fail(self, validator: PointsRecordValidator) -> None:
        outcome = validator.validate([["Nome", "CPF", "Pontos"], ["Ana", "12345678901", "5"], ["Bia"]])

        assert len(outcome.records) == 1
        assert outcome.skipped_rows[0].row == 3
        assert outcome.skipped_rows[0].cpf is None

    def test_no_surviving_rows_raises(self, validator: PointsRecordValidator) -> None:
        with pytest.raises(NoValidRecordsError, match="Nenhum registro válido"):
            validator.validate([["CPF", "Pontos"], ["123", "10"], ["12345678901", "0"]])

    def test_header_only_raises(self, validator: PointsRecordValidator) -> None:
        with pytest.raises(NoValidRecordsError):
            validator.validate([["CPF", "Pontos"]])


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("100", 100),
        (" 42 ", 42),
        ("12abc", 12),
        ("99.9", 99),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (True, 0),
        (7, 7),
        (7.8, 7),
        (float("nan"), 0),
        ("-3", -3),
    ],
)
def test_parse_points(value: object, expected: int) -> None:
    assert parse_points(value) == expected
