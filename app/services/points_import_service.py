"""
app/services/points_import_service.py

Service layer for spreadsheet points imports.

Workflow for one upload:

    1. SpreadsheetParser      bytes -> grid of rows + source line numbers
    2. PointsRecordValidator  grid  -> ImportRecord list (+ skipped rows)
    3. Ledger create          PointsImport row in PROCESSING, committed
    4. PointsBatchProcessor   batches of records, one transaction per batch
    5. Ledger finalize        COMPLETED / PARTIAL, or ERROR when step 4 aborts

Input errors (steps 1-2, ceilings, duplicate guard) are raised before any
ledger row is written. Once the ledger row exists it is always finalized.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from collections.abc import Callable
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import PointsImportSettings, get_points_import_settings
from app.domain.errors import (
    BatchProcessingAborted,
    DuplicateImportError,
    PointsImportProcessingError,
    TooManyRecordsError,
)
from app.domain.points_import import PointsImportResult, PointsImportSummary
from app.parsers.spreadsheet_parser import SpreadsheetParser
from app.repositories.points_history_repository import PointsHistoryRepository
from app.repositories.points_import_repository import PointsImportRepository
from app.services.points_batch_processor import PointsBatchProcessor
from app.validators.points_record_validator import PointsRecordValidator
from db.models.points_history import PointsHistory
from db.models.points_import import PointsImport

logger = logging.getLogger(__name__)

TEMPLATE_FILE_NAME = "template-importacao-pontos.csv"
TEMPLATE_CSV = (
    "CPF,Nome,Email,Pontos\n"
    "12345678901,João Silva,joao@email.com,100\n"
    "98765432100,Maria Santos,maria@email.com,50\n"
)


class PointsImportService:
    """
    Coordinates parsing, validation, the import ledger and batch crediting.
    """

    def __init__(
        self,
        *,
        settings: PointsImportSettings | None = None,
        parser: SpreadsheetParser | None = None,
        validator: PointsRecordValidator | None = None,
        password_hasher: Callable[[str], str] | None = None,
    ) -> None:
        self._settings = settings or PointsImportSettings()
        self._parser = parser or SpreadsheetParser(
            max_file_size_bytes=self._settings.max_file_size_bytes,
        )
        self._validator = validator or PointsRecordValidator(
            document_synonyms=self._settings.document_synonyms,
            points_synonyms=self._settings.points_synonyms,
            name_synonyms=self._settings.name_synonyms,
            email_synonyms=self._settings.email_synonyms,
        )
        self._password_hasher = password_hasher

    @property
    def settings(self) -> PointsImportSettings:
        return self._settings

    def import_spreadsheet(
        self,
        *,
        db: Session,
        content: bytes,
        file_name: str,
        organization_id: uuid.UUID,
        imported_by: uuid.UUID,
        content_type: str | None = None,
    ) -> PointsImportSummary:
        """
        Run one spreadsheet import to completion.

        Args:
            db:              Active SQLAlchemy session (caller owns lifecycle).
                             The service commits the ledger row and each batch.
            content:         Raw uploaded bytes.
            file_name:       Original file name, used for format detection.
            organization_id: Tenant that owns the import and any new accounts.
            imported_by:     Id of the administrator running the import.
            content_type:    Declared MIME type, if any.

        Raises:
            PointsImportInputError:      the file was rejected; no ledger row exists.
            PointsImportProcessingError: processing aborted; the ledger row is ERROR.
        """

        sheet = self._parser.parse_sheet(content, file_name=file_name, content_type=content_type)
        outcome = self._validator.validate(sheet.rows, line_numbers=sheet.line_numbers)
        records = outcome.records

        if len(records) > self._settings.max_records:
            raise TooManyRecordsError(
                record_count=len(records),
                max_records=self._settings.max_records,
            )

        ledger = PointsImportRepository(db)
        checksum = hashlib.sha256(content).hexdigest()
        if self._settings.reject_duplicate_uploads:
            previous = ledger.find_finished_by_checksum(
                organization_id=organization_id,
                file_checksum=checksum,
            )
            if previous is not None:
                raise DuplicateImportError(previous_import_id=previous.id)

        job = ledger.create_job(
            file_name=file_name,
            organization_id=organization_id,
            total_records=len(records),
            imported_by=imported_by,
            file_checksum=checksum,
        )
        db.commit()
        job_id = job.id
        logger.info(
            "Points import %s created file=%r organization=%s records=%d skipped=%d",
            job_id,
            file_name,
            organization_id,
            len(records),
            len(outcome.skipped_rows),
        )

        processor = PointsBatchProcessor(
            db,
            batch_size=self._settings.batch_size,
            verify_check_digits=self._settings.verify_check_digits,
            log_row_errors=self._settings.log_row_errors,
            password_hasher=self._password_hasher,
        )
        try:
            result = processor.process(
                records,
                organization_id=organization_id,
                import_job_id=job_id,
            )
        except Exception as exc:
            partial = exc.partial_result if isinstance(exc, BatchProcessingAborted) else None
            logger.exception("Points import %s aborted", job_id)
            self._fail_job(db=db, ledger=ledger, job_id=job_id, exc=exc, partial=partial)
            raise PointsImportProcessingError(
                f"Erro ao processar planilha: {exc}",
                import_id=job_id,
            ) from exc

        finalized = ledger.finalize_job(
            job_id=job_id,
            success_count=result.success_records,
            error_count=result.error_records,
            error_details=[error.to_dict() for error in result.errors],
        )
        db.commit()
        status = finalized.status if finalized is not None else ""
        logger.info(
            "Points import %s finished status=%s success=%d errors=%d",
            job_id,
            status,
            result.success_records,
            result.error_records,
        )

        return PointsImportSummary(
            import_id=job_id,
            status=status,
            result=result,
            skipped_rows=outcome.skipped_rows,
        )

    def list_imports(
        self,
        *,
        db: Session,
        organization_id: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[PointsImport]:
        return PointsImportRepository(db).list_jobs(organization_id=organization_id, limit=limit)

    def get_import(
        self,
        *,
        db: Session,
        import_id: uuid.UUID,
    ) -> tuple[PointsImport, list[PointsHistory]] | None:
        job = PointsImportRepository(db).get_job(import_id)
        if job is None:
            return None
        return job, PointsHistoryRepository(db).list_for_import(import_id)

    def _fail_job(
        self,
        *,
        db: Session,
        ledger: PointsImportRepository,
        job_id: uuid.UUID,
        exc: Exception,
        partial: PointsImportResult | None,
    ) -> None:
        try:
            db.rollback()
            ledger.mark_failed(
                job_id=job_id,
                error_message=str(exc),
                success_count=partial.success_records if partial else 0,
                error_count=partial.error_records if partial else 0,
                error_details=[error.to_dict() for error in partial.errors] if partial else (),
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Could not mark points import %s as ERROR", job_id)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_points_import_service() -> PointsImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    return PointsImportService(settings=get_points_import_settings())
