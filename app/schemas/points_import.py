"""
app/schemas/points_import.py

Response schemas for points import endpoints.

Field names are published in camelCase (``totalRecords``, ``cpf``...) to
match the admin console contract.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PointsImportRowErrorResponse(_CamelModel):
    """
    One record that failed while being credited.
    """

    row: int = Field(..., ge=1)
    cpf: str
    error: str


class SkippedRowResponse(_CamelModel):
    """
    One data row dropped by validation.
    """

    row: int = Field(..., ge=1)
    reason: str
    cpf: str | None = None


class PointsImportResultResponse(_CamelModel):
    success: bool
    total_records: int = Field(..., ge=0)
    success_records: int = Field(..., ge=0)
    error_records: int = Field(..., ge=0)
    errors: list[PointsImportRowErrorResponse] = Field(default_factory=list)
    import_id: UUID | None = None
    status: str | None = None
    skipped_rows: list[SkippedRowResponse] = Field(default_factory=list)


class PointsImportResponse(_CamelModel):
    success: bool
    result: PointsImportResultResponse
    message: str


class PointsImportJobResponse(_CamelModel):
    id: UUID
    file_name: str
    organization_id: UUID
    total_records: int
    success_records: int
    error_records: int
    status: str
    error_details: list[dict[str, Any]] | None = None
    error_message: str | None = None
    imported_by: UUID
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class PointsImportListResponse(_CamelModel):
    imports: list[PointsImportJobResponse] = Field(default_factory=list)


class PointsHistoryEntryResponse(_CamelModel):
    id: UUID
    account_id: UUID
    points_added: int
    source_description: str
    created_at: datetime


class PointsImportDetailResponse(PointsImportJobResponse):
    history: list[PointsHistoryEntryResponse] = Field(default_factory=list)
