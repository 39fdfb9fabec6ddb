"""
db/models/points_history.py

Append-only audit trail of balance changes.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.account import Account
    from db.models.points_import import PointsImport


class PointsHistory(Base):
    """
    One credited delta on one account.

    Rows are never updated; points_import_id is null for credits that did
    not come from a spreadsheet upload.
    """

    __tablename__ = "points_history"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    points_added: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    source_description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    points_import_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("points_imports.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    account: Mapped[Account] = relationship(
        "Account",
        back_populates="points_history",
    )
    points_import: Mapped[PointsImport | None] = relationship(
        "PointsImport",
        back_populates="history",
    )

    __table_args__ = (
        Index("ix_points_history_account_id", "account_id"),
        Index("ix_points_history_points_import_id", "points_import_id"),
    )
