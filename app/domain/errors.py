"""
app/domain/errors.py

Exception taxonomy for the points import pipeline.

Input errors abort the job before any ledger row exists. Row-level errors
never escape the batch processor. Processing errors are raised after the
ledger has been finalized as ERROR.
"""

from __future__ import annotations

import uuid

from app.domain.points_import import PointsImportResult


class PointsImportInputError(ValueError):
    """
    Base class for problems with the uploaded file itself.
    """


class FileTooLargeError(PointsImportInputError):
    def __init__(self, *, size_bytes: int, max_bytes: int) -> None:
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(f"Arquivo muito grande. Tamanho máximo: {max_mb:g}MB")
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class UnsupportedFormatError(PointsImportInputError):
    """
    Raised when the payload is neither CSV nor a readable workbook.
    """


class EmptyInputError(PointsImportInputError):
    """
    Raised when parsing yields no rows at all.
    """


class MissingRequiredColumnsError(PointsImportInputError):
    def __init__(self, *, headers: list[str]) -> None:
        super().__init__("Planilha deve conter pelo menos as colunas CPF e Pontos")
        self.headers = tuple(headers)


class NoValidRecordsError(PointsImportInputError):
    """
    Raised when no data row survives validation.
    """


class TooManyRecordsError(PointsImportInputError):
    def __init__(self, *, record_count: int, max_records: int) -> None:
        super().__init__(
            f"Planilha muito grande. Máximo de {max_records} registros por importação."
        )
        self.record_count = record_count
        self.max_records = max_records


class DuplicateImportError(PointsImportInputError):
    def __init__(self, *, previous_import_id: uuid.UUID) -> None:
        super().__init__(
            f"Esta planilha já foi importada para esta organização (importação {previous_import_id})."
        )
        self.previous_import_id = previous_import_id


class InvalidDocumentError(ValueError):
    """
    Raised per record when the CPF fails the validity rule.
    """


class BatchProcessingAborted(RuntimeError):
    """
    Raised by the batch processor when a failure escapes the per-record guard.

    partial_result reflects every batch committed before the failure.
    """

    def __init__(self, message: str, *, partial_result: PointsImportResult) -> None:
        super().__init__(message)
        self.partial_result = partial_result


class PointsImportProcessingError(RuntimeError):
    """
    Raised by the service after a job was aborted and marked ERROR.
    """

    def __init__(self, message: str, *, import_id: uuid.UUID) -> None:
        super().__init__(message)
        self.import_id = import_id
