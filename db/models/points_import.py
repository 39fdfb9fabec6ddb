"""
db/models/points_import.py

Import job ledger: one row per spreadsheet upload.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, PortableJSON, TimestampMixin

if TYPE_CHECKING:
    from db.models.organization import Organization
    from db.models.points_history import PointsHistory


class PointsImportStatus:
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    PARTIAL = "PARTIAL"
    ERROR = "ERROR"


class PointsImport(Base, TimestampMixin):
    __tablename__ = "points_imports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    total_records: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    success_records: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    error_records: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=PointsImportStatus.PROCESSING,
        comment="PROCESSING, COMPLETED, PARTIAL, ERROR",
    )
    error_details: Mapped[list[dict[str, Any]] | None] = mapped_column(
        PortableJSON,
        nullable=True,
        comment="Row-level errors: [{row, cpf, error}]",
    )
    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Job-level failure that aborted processing",
    )
    imported_by: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
    )
    file_checksum: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="sha256 of the uploaded bytes",
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    organization: Mapped[Organization] = relationship(
        "Organization",
        back_populates="points_imports",
    )
    history: Mapped[list[PointsHistory]] = relationship(
        "PointsHistory",
        back_populates="points_import",
        order_by="PointsHistory.created_at",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_points_imports_organization_id", "organization_id"),
        Index("ix_points_imports_status", "status"),
        Index("ix_points_imports_created_at", "created_at"),
        Index("ix_points_imports_org_checksum", "organization_id", "file_checksum"),
    )
