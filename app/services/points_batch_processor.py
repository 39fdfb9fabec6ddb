"""
app/services/points_batch_processor.py

Applies validated import records to accounts in fixed-size batches.

Transaction contract:
  - Each batch is one database transaction, committed when the batch ends.
  - Each record runs inside a SAVEPOINT. A failing record rolls back only its
    own writes (account upsert + history entry) and is reported as a row
    error; the rest of the batch still commits.
  - Anything that is not a per-record failure (a dropped connection, a
    failing COMMIT) aborts the run with BatchProcessingAborted carrying the
    counts of the batches already committed.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from app.domain.errors import BatchProcessingAborted, InvalidDocumentError
from app.domain.points_import import ImportRecord, PointsImportResult, RowImportError
from app.repositories.account_repository import AccountRepository
from app.repositories.points_history_repository import PointsHistoryRepository
from app.validators.document import format_cpf, is_valid_cpf

logger = logging.getLogger(__name__)

TEMPORARY_PASSWORD_LENGTH = 6


def temporary_password(document_id: str) -> str:
    """
    First-access password for accounts created by an import: the last six
    digits of the CPF.
    """

    return document_id[-TEMPORARY_PASSWORD_LENGTH:]


class PointsBatchProcessor:
    """
    Upserts accounts, credits points and writes the audit trail.
    """

    def __init__(
        self,
        session: Session,
        *,
        batch_size: int = 10,
        verify_check_digits: bool = False,
        log_row_errors: bool = True,
        password_hasher: Callable[[str], str] | None = None,
    ) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)
        self._verify_check_digits = verify_check_digits
        self._log_row_errors = log_row_errors
        self._password_hasher = password_hasher or generate_password_hash
        self._accounts = AccountRepository(session)
        self._history = PointsHistoryRepository(session)

    def process(
        self,
        records: Sequence[ImportRecord],
        *,
        organization_id: uuid.UUID,
        import_job_id: uuid.UUID,
    ) -> PointsImportResult:
        batches = [
            records[start : start + self._batch_size]
            for start in range(0, len(records), self._batch_size)
        ]
        errors: list[RowImportError] = []
        success_count = 0

        logger.info(
            "Processing %d record(s) for organization=%s in %d batch(es) of %d",
            len(records),
            organization_id,
            len(batches),
            self._batch_size,
        )

        for batch_number, batch in enumerate(batches, start=1):
            try:
                batch_success, batch_errors = self._process_batch(
                    batch,
                    organization_id=organization_id,
                    import_job_id=import_job_id,
                )
                self._session.commit()
            except Exception as exc:
                self._session.rollback()
                raise BatchProcessingAborted(
                    f"Batch {batch_number}/{len(batches)} aborted: {exc}",
                    partial_result=_build_result(len(records), success_count, errors),
                ) from exc

            success_count += batch_success
            errors.extend(batch_errors)
            logger.info(
                "Batch %d/%d committed: %d succeeded, %d failed",
                batch_number,
                len(batches),
                batch_success,
                len(batch_errors),
            )

        result = _build_result(len(records), success_count, errors)
        logger.info(
            "Processing finished: %d succeeded, %d failed",
            result.success_records,
            result.error_records,
        )
        return result

    def _process_batch(
        self,
        batch: Sequence[ImportRecord],
        *,
        organization_id: uuid.UUID,
        import_job_id: uuid.UUID,
    ) -> tuple[int, list[RowImportError]]:
        success_count = 0
        errors: list[RowImportError] = []

        for record in batch:
            try:
                with self._session.begin_nested():
                    self.apply_record(
                        record,
                        organization_id=organization_id,
                        import_job_id=import_job_id,
                    )
            except DBAPIError as exc:
                if exc.connection_invalidated:
                    raise
                errors.append(self._row_error(record, str(exc.orig or exc)))
                continue
            except Exception as exc:  # noqa: BLE001
                errors.append(self._row_error(record, str(exc)))
                continue
            success_count += 1

        return success_count, errors

    def apply_record(
        self,
        record: ImportRecord,
        *,
        organization_id: uuid.UUID,
        import_job_id: uuid.UUID,
    ) -> None:
        """
        Credit one record: validate the CPF, create or update the account,
        then append the history entry.
        """

        if not is_valid_cpf(record.document_id, verify_check_digits=self._verify_check_digits):
            raise InvalidDocumentError("CPF inválido")

        cpf = format_cpf(record.document_id)
        account = self._accounts.get_by_cpf(cpf)
        if account is not None:
            self._accounts.credit(
                account,
                points=record.points,
                full_name=record.full_name,
                email=record.email,
            )
        else:
            account = self._accounts.create_client(
                cpf=cpf,
                points=record.points,
                organization_id=organization_id,
                password_hash=self._password_hasher(temporary_password(record.document_id)),
                full_name=record.full_name or f"Usuário {cpf}",
                email=record.email,
            )

        self._history.record(
            account_id=account.id,
            points_added=record.points,
            import_job_id=import_job_id,
        )

    def _row_error(self, record: ImportRecord, message: str) -> RowImportError:
        if self._log_row_errors:
            logger.warning(
                "Points import row error row=%s cpf=%s message=%s",
                record.row_number,
                record.document_id,
                message,
            )
        return RowImportError(row=record.row_number, cpf=record.document_id, error=message)


def _build_result(
    total_records: int,
    success_count: int,
    errors: Sequence[RowImportError],
) -> PointsImportResult:
    return PointsImportResult(
        success=len(errors) == 0,
        total_records=total_records,
        success_records=success_count,
        error_records=len(errors),
        errors=list(errors),
    )
