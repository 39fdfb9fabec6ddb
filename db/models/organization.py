"""
db/models/organization.py

Organization model: one tenant ("lojista") of the platform.
Accounts and points imports are always scoped to an organization.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.account import Account
    from db.models.points_import import PointsImport


class Organization(Base, TimestampMixin):
    """
    A white-label tenant.

    slug identifies the tenant in customer-facing URLs; cnpj is the company
    registration number and is unique across the platform.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    cnpj: Mapped[str] = mapped_column(
        String(18),
        nullable=False,
        unique=True,
    )

    slug: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-disable a tenant without deletion",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    accounts: Mapped[list["Account"]] = relationship(
        "Account",
        back_populates="organization",
        passive_deletes=True,
    )

    points_imports: Mapped[list["PointsImport"]] = relationship(
        "PointsImport",
        back_populates="organization",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_organizations_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} slug={self.slug!r}>"
