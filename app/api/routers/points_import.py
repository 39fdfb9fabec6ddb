"""
app/api/routers/points_import.py

Admin endpoints for spreadsheet points imports.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_admin_actor, get_organization, get_spreadsheet_upload
from app.domain.errors import DuplicateImportError, PointsImportInputError, PointsImportProcessingError
from app.domain.points_import import PointsImportSummary
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
from app.services.points_import_service import (
    TEMPLATE_CSV,
    TEMPLATE_FILE_NAME,
    PointsImportService,
    get_points_import_service,
)
from db.models.account import Account
from db.models.organization import Organization
from db.session import get_db

router = APIRouter(prefix="/admin", tags=["points-import"])


@router.post(
    "/organizations/{organization_id}/import-points",
    response_model=PointsImportResponse,
)
def import_points(
    actor: Account = Depends(get_admin_actor),
    organization: Organization = Depends(get_organization),
    file: UploadFile = Depends(get_spreadsheet_upload),
    db: Session = Depends(get_db),
    import_service: PointsImportService = Depends(get_points_import_service),
) -> PointsImportResponse:
    """
    Credit points from one uploaded CSV/XLSX spreadsheet to an organization.
    """

    try:
        # One byte past the ceiling is enough for the parser to reject it.
        content = file.file.read(import_service.settings.max_file_size_bytes + 1)
        summary = import_service.import_spreadsheet(
            db=db,
            content=content,
            file_name=file.filename or "upload",
            content_type=file.content_type,
            organization_id=organization.id,
            imported_by=actor.id,
        )
    except DuplicateImportError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except PointsImportInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except PointsImportProcessingError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erro ao processar importação {exc.import_id}.",
        ) from exc
    finally:
        file.file.close()

    return PointsImportResponse(
        success=True,
        result=_to_result_response(summary),
        message=summary.message,
    )


@router.get(
    "/organizations/{organization_id}/points-imports",
    response_model=PointsImportListResponse,
)
def list_organization_imports(
    limit: int = Query(default=100, ge=1, le=500, description="Max imports returned"),
    _actor: Account = Depends(get_admin_actor),
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db),
    import_service: PointsImportService = Depends(get_points_import_service),
) -> PointsImportListResponse:
    jobs = import_service.list_imports(db=db, organization_id=organization.id, limit=limit)
    return PointsImportListResponse(
        imports=[PointsImportJobResponse.model_validate(job) for job in jobs],
    )


@router.get("/points-imports", response_model=PointsImportListResponse)
def list_imports(
    limit: int = Query(default=100, ge=1, le=500, description="Max imports returned"),
    _actor: Account = Depends(get_admin_actor),
    db: Session = Depends(get_db),
    import_service: PointsImportService = Depends(get_points_import_service),
) -> PointsImportListResponse:
    jobs = import_service.list_imports(db=db, limit=limit)
    return PointsImportListResponse(
        imports=[PointsImportJobResponse.model_validate(job) for job in jobs],
    )


@router.get("/points-imports/template")
def download_template() -> Response:
    """
    CSV template documenting the expected columns.
    """

    return Response(
        content=TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILE_NAME}"'},
    )


@router.get("/points-imports/{import_id}", response_model=PointsImportDetailResponse)
def get_import(
    import_id: UUID,
    _actor: Account = Depends(get_admin_actor),
    db: Session = Depends(get_db),
    import_service: PointsImportService = Depends(get_points_import_service),
) -> PointsImportDetailResponse:
    found = import_service.get_import(db=db, import_id=import_id)
    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Importação não encontrada: {import_id}",
        )

    job, history = found
    job_response = PointsImportJobResponse.model_validate(job)
    return PointsImportDetailResponse(
        **job_response.model_dump(),
        history=[PointsHistoryEntryResponse.model_validate(entry) for entry in history],
    )


def _to_result_response(summary: PointsImportSummary) -> PointsImportResultResponse:
    result = summary.result
    return PointsImportResultResponse(
        success=result.success,
        total_records=result.total_records,
        success_records=result.success_records,
        error_records=result.error_records,
        errors=[
            PointsImportRowErrorResponse(row=error.row, cpf=error.cpf, error=error.error)
            for error in result.errors
        ],
        import_id=summary.import_id,
        status=summary.status,
        skipped_rows=[
            SkippedRowResponse(row=skipped.row, cpf=skipped.cpf, reason=skipped.reason)
            for skipped in summary.skipped_rows
        ],
    )
