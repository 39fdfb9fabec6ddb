"""
app/domain/points_import.py

Domain models used by the spreadsheet points import flow.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

SPREADSHEET_IMPORT_DESCRIPTION = "Importação de planilha"


@dataclass(frozen=True)
class ImportRecord:
    """
    One validated spreadsheet row ready to be credited.

    document_id holds exactly 11 digits; row_number is the 1-based row of
    the parsed grid the record came from (the header is row 1).
    """

    document_id: str
    points: int
    row_number: int
    full_name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class ColumnLayout:
    """
    Header positions resolved from the first spreadsheet row.
    """

    document_index: int
    points_index: int
    name_index: int | None = None
    email_index: int | None = None


@dataclass(frozen=True)
class SkippedRow:
    """
    A data row dropped by validation before processing.
    """

    row: int
    reason: str
    cpf: str | None = None


@dataclass(frozen=True)
class ValidationOutcome:
    records: list[ImportRecord]
    skipped_rows: list[SkippedRow] = field(default_factory=list)


@dataclass(frozen=True)
class RowImportError:
    """
    One record that failed while being credited.
    """

    row: int
    cpf: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "cpf": self.cpf, "error": self.error}


@dataclass(frozen=True)
class PointsImportResult:
    """
    Outcome of running the batch processor over all records.
    """

    success: bool
    total_records: int
    success_records: int
    error_records: int
    errors: list[RowImportError] = field(default_factory=list)


@dataclass(frozen=True)
class PointsImportSummary:
    """
    End-of-run summary returned to the HTTP layer and CLI.
    """

    import_id: uuid.UUID
    status: str
    result: PointsImportResult
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Importação concluída: {self.result.success_records} registros processados "
            f"com sucesso, {self.result.error_records} erros."
        )
