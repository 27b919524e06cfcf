"""Notification inbox router."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formintake.database import get_db
from formintake.schemas.notification import (
    NotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
)
from formintake.schemas.user import CurrentUser
from formintake.services.auth import get_current_user
from formintake.services.notification import NotificationService

router = APIRouter()


@router.get("/unread", response_model=List[NotificationResponse])
async def unread_notifications(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """The caller's unread notifications, newest first."""
    return NotificationService.get_user_notifications(db, current_user.user_id, unread_only=True)


@router.get("/recent", response_model=List[NotificationResponse])
async def recent_notifications(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """The caller's most recent notifications, read or not."""
    return NotificationService.get_user_notifications(db, current_user.user_id, limit=limit)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Mark one notification as read."""
    return NotificationService.mark_as_read(db, notification_id, current_user.user_id)


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Mark every unread notification as read."""
    updated = NotificationService.mark_all_as_read(db, current_user.user_id)
    return MarkAllReadResponse(updated=updated)


@router.get("/count", response_model=UnreadCountResponse)
async def unread_count(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Number of unread notifications."""
    return UnreadCountResponse(count=NotificationService.get_unread_count(db, current_user.user_id))
