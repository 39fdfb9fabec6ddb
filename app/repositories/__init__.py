"""
app/repositories package marker.
"""

from app.repositories.account_repository import AccountRepository
from app.repositories.points_history_repository import PointsHistoryRepository
from app.repositories.points_import_repository import PointsImportRepository

__all__ = [
    "AccountRepository",
    "PointsHistoryRepository",
    "PointsImportRepository",
]
