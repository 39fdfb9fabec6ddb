"""
Repository for the points import job ledger.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.points_import import PointsImport, PointsImportStatus

_FINISHED_STATUSES = (PointsImportStatus.COMPLETED, PointsImportStatus.PARTIAL)


class PointsImportRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(
        self,
        *,
        file_name: str,
        organization_id: uuid.UUID,
        total_records: int,
        imported_by: uuid.UUID,
        file_checksum: str | None = None,
    ) -> PointsImport:
        job = PointsImport(
            file_name=file_name,
            organization_id=organization_id,
            total_records=total_records,
            imported_by=imported_by,
            file_checksum=file_checksum,
            status=PointsImportStatus.PROCESSING,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> PointsImport | None:
        return self._session.get(PointsImport, job_id)

    def list_jobs(
        self,
        *,
        organization_id: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[PointsImport]:
        stmt: Select[tuple[PointsImport]] = select(PointsImport)

        if organization_id is not None:
            stmt = stmt.where(PointsImport.organization_id == organization_id)

        stmt = stmt.order_by(PointsImport.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def find_finished_by_checksum(
        self,
        *,
        organization_id: uuid.UUID,
        file_checksum: str,
    ) -> PointsImport | None:
        stmt = (
            select(PointsImport)
            .where(PointsImport.organization_id == organization_id)
            .where(PointsImport.file_checksum == file_checksum)
            .where(PointsImport.status.in_(_FINISHED_STATUSES))
            .order_by(PointsImport.created_at.desc())
        )
        return self._session.scalars(stmt).first()

    def finalize_job(
        self,
        *,
        job_id: uuid.UUID,
        success_count: int,
        error_count: int,
        error_details: Sequence[dict[str, Any]] = (),
    ) -> PointsImport | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = PointsImportStatus.PARTIAL if error_count > 0 else PointsImportStatus.COMPLETED
        job.success_records = success_count
        job.error_records = error_count
        job.error_details = list(error_details) or None
        job.error_message = None
        job.completed_at = datetime.now(timezone.utc)
        return job

    def mark_failed(
        self,
        *,
        job_id: uuid.UUID,
        error_message: str,
        success_count: int = 0,
        error_count: int = 0,
        error_details: Sequence[dict[str, Any]] = (),
    ) -> PointsImport | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = PointsImportStatus.ERROR
        job.success_records = success_count
        job.error_records = error_count
        job.error_details = list(error_details) or None
        job.error_message = error_message
        job.completed_at = datetime.now(timezone.utc)
        return job
