"""Form submission and workflow Pydantic schemas."""

from datetime import datetime
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field

from formintake.models.submission import FormStatus


class AutosaveRequest(BaseModel):
    """Schema for saving draft progress."""
    template_id: int
    current_page: int = 1
    data: Dict[str, Any] = {}


class SubmitRequest(BaseModel):
    """Schema for submitting a form by template."""
    template_id: int
    data: Dict[str, Any] = {}


class SubmitDraftRequest(BaseModel):
    """Final answers merged into a draft before it is submitted."""
    data: Dict[str, Any] = {}


class AssignRequest(BaseModel):
    reviewer_id: str = Field(..., min_length=1, max_length=100)


class ApproveRequest(BaseModel):
    notes: Optional[str] = None


class ReasonRequest(BaseModel):
    """Return or rejection reason."""
    reason: str = Field(..., min_length=1)


class SubmissionResponse(BaseModel):
    """Schema for submission responses."""
    id: int
    form_template_id: int
    submitted_by: str
    data: Dict[str, Any]
    status: FormStatus
    current_page: int
    is_complete: bool
    reviewed_by: Optional[str]
    reviewed_at: Optional[datetime]
    review_notes: Optional[str]
    return_reason: Optional[str]
    is_under_review: bool
    assigned_reviewer: Optional[str]
    review_attempts: int
    revision_of_id: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]
    submitted_at: Optional[datetime]
    approved_at: Optional[datetime]
    returned_at: Optional[datetime]

    # Nested data
    template_name: Optional[str] = None

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    """Submission counts per workflow status."""
    total_submissions: int
    drafts: int
    pending_review: int
    under_review: int
    approved: int
    returned: int
    rejected: int


class ValidationErrorResponse(BaseModel):
    """Body of a 422 raised by submit."""
    detail: str
    errors: List[Dict[str, Any]]
