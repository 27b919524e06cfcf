"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from formintake.models.notification import NotificationType, NotificationStatus


class NotificationResponse(BaseModel):
    """Schema for notification responses."""
    id: int
    recipient_id: str
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus
    form_submission_id: Optional[int]
    form_template_id: Optional[int]
    action_url: Optional[str]
    created_at: datetime
    read_at: Optional[datetime]

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
