"""
app/services package marker.
"""

from app.services.points_batch_processor import PointsBatchProcessor
from app.services.points_import_service import (
    PointsImportService,
    get_points_import_service,
)

__all__ = [
    "PointsBatchProcessor",
    "PointsImportService",
    "get_points_import_service",
]
