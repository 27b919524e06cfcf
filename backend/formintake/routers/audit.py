"""Audit trail router."""

from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from formintake.database import get_db
from formintake.schemas.audit import AuditEntryResponse, AuditLogResponse
from formintake.schemas.user import CurrentUser
from formintake.services.audit import AuditService
from formintake.services.auth import require_staff

router = APIRouter()

ENTITY_TYPES = {
    "submission": "FormSubmission",
    "template": "FormTemplate",
}


@router.get("/users/{user_id}", response_model=List[AuditEntryResponse])
async def get_user_activity(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Most recent actions performed by one user."""
    return AuditService.get_user_activity(db, user_id, limit)


@router.get("/{entity}/{entity_id}", response_model=AuditLogResponse)
async def get_entity_audit_log(
    entity: str,
    entity_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Get the audit log of a submission or template with optional filters."""
    entity_type = ENTITY_TYPES.get(entity)
    if not entity_type:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown audit entity: {entity}"
        )

    result = AuditService.get_entity_log(
        db, entity_type, entity_id, page, page_size, action, user_id, from_date, to_date
    )
    return AuditLogResponse(
        items=[AuditEntryResponse.model_validate(e) for e in result["items"]],
        total=result["total"],
        page=result["page"],
        page_size=result["page_size"],
        total_pages=result["total_pages"],
    )
