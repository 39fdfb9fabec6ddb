"""
app/schemas package marker.
"""

from app.schemas.points_import import (
    PointsHistoryEntryResponse,
    PointsImportDetailResponse,
    PointsImportJobResponse,
    PointsImportListResponse,
    PointsImportResponse,
    PointsImportResultResponse,
    PointsImportRowErrorResponse,
    SkippedRowResponse,
)

__all__ = [
    "PointsHistoryEntryResponse",
    "PointsImportDetailResponse",
    "PointsImportJobResponse",
    "PointsImportListResponse",
    "PointsImportResponse",
    "PointsImportResultResponse",
    "PointsImportRowErrorResponse",
    "SkippedRowResponse",
]
