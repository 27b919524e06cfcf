"""Review workflow router (staff only)."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formintake.database import get_db
from formintake.models.submission import FormStatus
from formintake.schemas.submission import (
    AssignRequest,
    ApproveRequest,
    ReasonRequest,
    SubmissionResponse,
)
from formintake.schemas.user import CurrentUser
from formintake.services.auth import require_staff
from formintake.services.submission import SubmissionService
from formintake.services.workflow import WorkflowService
from formintake.routers.submissions import to_response

router = APIRouter()


@router.post("/assign-for-review/{submission_id}", response_model=SubmissionResponse)
async def assign_for_review(
    submission_id: int,
    payload: AssignRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Assign a submitted form to a reviewer."""
    submission = WorkflowService.assign_for_review(
        db, submission_id, payload.reviewer_id, performed_by=current_user.user_id
    )
    return to_response(submission)


@router.post("/approve/{submission_id}", response_model=SubmissionResponse)
async def approve(
    submission_id: int,
    payload: ApproveRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Approve a submission under review."""
    submission = WorkflowService.approve(db, submission_id, current_user.user_id, payload.notes)
    return to_response(submission)


@router.post("/return/{submission_id}", response_model=SubmissionResponse)
async def return_submission(
    submission_id: int,
    payload: ReasonRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Return a submission to its submitter for revision."""
    submission = WorkflowService.return_submission(db, submission_id, current_user.user_id, payload.reason)
    return to_response(submission)


@router.post("/reject/{submission_id}", response_model=SubmissionResponse)
async def reject(
    submission_id: int,
    payload: ReasonRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Reject a submission under review."""
    submission = WorkflowService.reject(db, submission_id, current_user.user_id, payload.reason)
    return to_response(submission)


@router.get("/submissions-by-status/{status}", response_model=List[SubmissionResponse])
async def submissions_by_status(
    status: FormStatus,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """All submissions in one workflow status."""
    submissions = SubmissionService.get_submissions(db, skip, limit, status_filter=status)
    return [to_response(s) for s in submissions]


@router.get("/my-assignments", response_model=List[SubmissionResponse])
async def my_assignments(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Submissions currently assigned to the caller."""
    return [to_response(s) for s in SubmissionService.get_assignments(db, current_user.user_id)]
