"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.account import Account, AccountRole
from db.models.organization import Organization
from db.models.points_history import PointsHistory
from db.models.points_import import PointsImport, PointsImportStatus

__all__ = [
    "Account",
    "AccountRole",
    "Organization",
    "PointsHistory",
    "PointsImport",
    "PointsImportStatus",
]
