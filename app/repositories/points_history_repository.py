"""
app/repositories/points_history_repository.py

Append-only writer for the points audit trail.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.points_import import SPREADSHEET_IMPORT_DESCRIPTION
from db.models.points_history import PointsHistory


class PointsHistoryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def record(
        self,
        *,
        account_id: uuid.UUID,
        points_added: int,
        import_job_id: uuid.UUID | None,
        source_description: str = SPREADSHEET_IMPORT_DESCRIPTION,
    ) -> PointsHistory:
        entry = PointsHistory(
            account_id=account_id,
            points_added=points_added,
            source_description=source_description,
            points_import_id=import_job_id,
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_for_import(self, import_job_id: uuid.UUID) -> list[PointsHistory]:
        stmt = (
            select(PointsHistory)
            .where(PointsHistory.points_import_id == import_job_id)
            .order_by(PointsHistory.created_at, PointsHistory.id)
        )
        return list(self._session.scalars(stmt).all())
