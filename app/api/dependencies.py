"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends, File, Header, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from db.models.account import Account, AccountRole
from db.models.organization import Organization
from db.session import get_db

SPREADSHEET_CONTENT_TYPES = {
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

SPREADSHEET_EXTENSIONS = (".csv", ".xls", ".xlsx")


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is CSV or Excel by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").split(";", 1)[0].strip().lower()

    is_spreadsheet_filename = filename.endswith(SPREADSHEET_EXTENSIONS)
    is_spreadsheet_content_type = content_type in SPREADSHEET_CONTENT_TYPES

    if not is_spreadsheet_filename and not is_spreadsheet_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tipo de arquivo não suportado. Use CSV ou Excel.",
        )

    return file


def get_admin_actor(
    x_actor_id: UUID | None = Header(default=None, description="Id of the acting administrator"),
    db: Session = Depends(get_db),
) -> Account:
    """
    Resolve the acting administrator forwarded by the session layer.
    """

    if x_actor_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sessão não encontrada",
        )

    actor = db.get(Account, x_actor_id)
    if actor is None or not actor.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sessão não encontrada",
        )
    if actor.role != AccountRole.ADMIN_MASTER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Acesso negado. Role necessário: {AccountRole.ADMIN_MASTER}, Role atual: {actor.role}",
        )
    return actor


def get_organization(
    organization_id: UUID,
    db: Session = Depends(get_db),
) -> Organization:
    organization = db.get(Organization, organization_id)
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organização não encontrada",
        )
    return organization
