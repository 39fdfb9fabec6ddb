"""
app/validators package marker.
"""

from app.validators.document import digits_only, format_cpf, is_valid_cpf
from app.validators.points_record_validator import PointsRecordValidator, parse_points

__all__ = [
    "PointsRecordValidator",
    "digits_only",
    "format_cpf",
    "is_valid_cpf",
    "parse_points",
]
