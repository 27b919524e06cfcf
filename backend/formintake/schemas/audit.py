"""Audit trail Pydantic schemas."""

from datetime import datetime
from typing import Optional, Any, List

from pydantic import BaseModel


class AuditEntryResponse(BaseModel):
    """Schema for audit log entries."""
    id: int
    user_id: str
    action: str
    entity_type: str
    entity_id: Optional[int]
    details: Optional[str]
    old_values: Optional[Any]
    new_values: Optional[Any]
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogResponse(BaseModel):
    """Schema for paginated audit log responses."""
    items: List[AuditEntryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
