"""
app/validators/points_record_validator.py

Header sniffing and row filtering for points spreadsheets.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from app.config import (
    DEFAULT_DOCUMENT_SYNONYMS,
    DEFAULT_EMAIL_SYNONYMS,
    DEFAULT_NAME_SYNONYMS,
    DEFAULT_POINTS_SYNONYMS,
)
from app.domain.errors import MissingRequiredColumnsError, NoValidRecordsError
from app.domain.points_import import ColumnLayout, ImportRecord, SkippedRow, ValidationOutcome
from app.validators.document import CPF_LENGTH, digits_only

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


class PointsRecordValidator:
    """
    Maps the header row to semantic columns and converts data rows into
    ImportRecord objects.

    Columns are located by substring match against synonym lists, so
    ``"Pontos"``, ``"valor do crédito"`` and ``"Total de pontos"`` all resolve
    to the points column. Rows with a CPF that is not 11 digits long or with
    non-positive points are dropped and reported as skipped, never as errors.
    """

    def __init__(
        self,
        *,
        document_synonyms: Sequence[str] = DEFAULT_DOCUMENT_SYNONYMS,
        points_synonyms: Sequence[str] = DEFAULT_POINTS_SYNONYMS,
        name_synonyms: Sequence[str] = DEFAULT_NAME_SYNONYMS,
        email_synonyms: Sequence[str] = DEFAULT_EMAIL_SYNONYMS,
    ) -> None:
        self._document_synonyms = tuple(s.lower() for s in document_synonyms)
        self._points_synonyms = tuple(s.lower() for s in points_synonyms)
        self._name_synonyms = tuple(s.lower() for s in name_synonyms)
        self._email_synonyms = tuple(s.lower() for s in email_synonyms)

    def resolve_columns(self, header_row: Sequence[Any]) -> ColumnLayout:
        """
        Locate the document, points, name and email columns.

        Raises MissingRequiredColumnsError when the document or points
        column cannot be found.
        """

        headers = ["" if value is None else str(value).strip().lower() for value in header_row]
        document_index = self._find_column(headers, self._document_synonyms)
        points_index = self._find_column(headers, self._points_synonyms)

        if document_index is None or points_index is None:
            logger.warning("Required columns not found; headers=%s", headers)
            raise MissingRequiredColumnsError(headers=headers)

        return ColumnLayout(
            document_index=document_index,
            points_index=points_index,
            name_index=self._find_column(headers, self._name_synonyms),
            email_index=self._find_column(headers, self._email_synonyms),
        )

    def validate(
        self,
        grid: Sequence[Sequence[Any]],
        *,
        line_numbers: Sequence[int] | None = None,
    ) -> ValidationOutcome:
        """
        Convert data rows into records and skipped rows.

        line_numbers gives the source line of each grid row; without it the
        grid position (1-based) is reported.
        """

        if not grid:
            raise NoValidRecordsError("Planilha está vazia ou não foi possível ler os dados")

        layout = self.resolve_columns(grid[0])
        records: list[ImportRecord] = []
        skipped: list[SkippedRow] = []

        for index in range(1, len(grid)):
            row = grid[index]
            row_number = line_numbers[index] if line_numbers is not None else index + 1
            if self._is_empty_row(row):
                continue

            document_id = digits_only(self._cell(row, layout.document_index))
            points = parse_points(self._cell(row, layout.points_index))

            if len(document_id) != CPF_LENGTH:
                skipped.append(
                    SkippedRow(
                        row=row_number,
                        cpf=document_id or None,
                        reason=f"CPF deve conter {CPF_LENGTH} dígitos",
                    )
                )
                continue
            if points <= 0:
                skipped.append(
                    SkippedRow(
                        row=row_number,
                        cpf=document_id,
                        reason="Pontos deve ser um número maior que zero",
                    )
                )
                continue

            records.append(
                ImportRecord(
                    document_id=document_id,
                    points=points,
                    row_number=row_number,
                    full_name=self._optional_text(row, layout.name_index),
                    email=self._optional_text(row, layout.email_index),
                )
            )

        logger.info(
            "Validation finished: %d valid record(s) out of %d data row(s), %d skipped",
            len(records),
            len(grid) - 1,
            len(skipped),
        )
        if skipped:
            logger.warning(
                "Dropped %d row(s) during validation: rows=%s",
                len(skipped),
                [row.row for row in skipped],
            )

        if not records:
            raise NoValidRecordsError("Nenhum registro válido encontrado na planilha")

        return ValidationOutcome(records=records, skipped_rows=skipped)

    @staticmethod
    def _find_column(headers: Sequence[str], synonyms: Sequence[str]) -> int | None:
        for index, header in enumerate(headers):
            if any(synonym in header for synonym in synonyms):
                return index
        return None

    @staticmethod
    def _cell(row: Sequence[Any], index: int | None) -> Any:
        if index is None or index >= len(row):
            return None
        return row[index]

    def _optional_text(self, row: Sequence[Any], index: int | None) -> str | None:
        value = self._cell(row, index)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def _is_empty_row(row: Sequence[Any] | None) -> bool:
        if not row:
            return True
        return all(value is None or str(value).strip() == "" for value in row)


def parse_points(value: Any) -> int:
    """
    Parse the leading integer of a cell; anything unparseable counts as 0.

    ``"100"`` -> 100, ``"12abc"`` -> 12, ``"99.9"`` -> 99, ``"abc"`` -> 0.
    """

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INTEGER.match(str(value))
    if match is None:
        return 0
    return int(match.group(1))
