"""
db/models/account.py

Account model: an end customer (or administrator) holding a points balance.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.organization import Organization
    from db.models.points_history import PointsHistory


class AccountRole:
    ADMIN_MASTER = "ADMIN_MASTER"
    CLIENT = "CLIENTE"


class Account(Base, TimestampMixin):
    """
    One user of the platform.

    cpf is stored punctuated (``000.000.000-00``) and is the natural key used
    by spreadsheet imports to decide between crediting and creating.
    first_access stays True until the user replaces the temporary password
    issued at creation.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    cpf: Mapped[str] = mapped_column(
        String(14),
        nullable=False,
        unique=True,
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AccountRole.CLIENT,
    )

    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        comment="Null for platform administrators",
    )

    points: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    first_access: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    organization: Mapped["Organization | None"] = relationship(
        "Organization",
        back_populates="accounts",
    )

    points_history: Mapped[list["PointsHistory"]] = relationship(
        "PointsHistory",
        back_populates="account",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
        Index("ix_users_organization_id", "organization_id"),
        Index("ix_users_email", "email"),
        Index("ix_users_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} cpf={self.cpf!r} points={self.points}>"
