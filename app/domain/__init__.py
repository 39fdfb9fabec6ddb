"""
app/domain package marker.
"""

from app.domain.points_import import (
    ColumnLayout,
    ImportRecord,
    PointsImportResult,
    PointsImportSummary,
    RowImportError,
    SkippedRow,
    ValidationOutcome,
)

__all__ = [
    "ColumnLayout",
    "ImportRecord",
    "PointsImportResult",
    "PointsImportSummary",
    "RowImportError",
    "SkippedRow",
    "ValidationOutcome",
]
