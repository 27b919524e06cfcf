"""Form submission router: autosave, submit and the submitter's own views."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from formintake.database import get_db
from formintake.models.submission import FormSubmission, FormStatus
from formintake.schemas.rendering import FormView
from formintake.schemas.submission import (
    AutosaveRequest,
    SubmitRequest,
    SubmitDraftRequest,
    SubmissionResponse,
    DashboardStats,
    ValidationErrorResponse,
)
from formintake.schemas.user import CurrentUser
from formintake.services.auth import get_current_user, require_staff
from formintake.services.rendering import RenderingService
from formintake.services.submission import SubmissionService
from formintake.services.workflow import WorkflowService

router = APIRouter()


def to_response(submission: FormSubmission) -> SubmissionResponse:
    response = SubmissionResponse.model_validate(submission)
    response.template_name = submission.template.name if submission.template else None
    return response


def _check_access(submission: FormSubmission, current_user: CurrentUser) -> None:
    if submission.submitted_by != current_user.user_id and not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this submission"
        )


@router.post("/autosave", response_model=SubmissionResponse)
async def autosave(
    payload: AutosaveRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Save draft answers and the current page, creating the draft if needed."""
    submission = WorkflowService.save_progress(
        db,
        payload.template_id,
        current_user.user_id,
        payload.data,
        payload.current_page,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return to_response(submission)


@router.post("/submit", response_model=SubmissionResponse, responses={422: {"model": ValidationErrorResponse}})
async def submit(
    payload: SubmitRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Submit the caller's draft for a template with any final answers."""
    submission = WorkflowService.submit_draft(
        db, payload.template_id, current_user.user_id, payload.data
    )
    return to_response(submission)


@router.get("", response_model=List[SubmissionResponse])
async def list_submissions(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[FormStatus] = None,
    template_id: Optional[int] = None,
    all_submissions: bool = False,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    List submissions.

    - Submitters see their own submissions
    - Staff can see everyone's with all_submissions=true
    """
    submitted_by = None if (all_submissions and current_user.is_staff) else current_user.user_id
    submissions = SubmissionService.get_submissions(
        db, skip, limit, status_filter, submitted_by, template_id
    )
    return [to_response(s) for s in submissions]


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Submission counts per status (staff only)."""
    return SubmissionService.get_dashboard_stats(db)


@router.get("/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get a submission by ID."""
    submission = SubmissionService.get_submission(db, submission_id)
    _check_access(submission, current_user)
    return to_response(submission)


@router.get("/{submission_id}/render", response_model=FormView)
async def render_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Render a submission's answers over its template."""
    submission = SubmissionService.get_submission(db, submission_id)
    _check_access(submission, current_user)
    return RenderingService.render_template(submission.template, submission)


@router.post(
    "/{submission_id}/submit",
    response_model=SubmissionResponse,
    responses={422: {"model": ValidationErrorResponse}}
)
async def submit_draft(
    submission_id: int,
    payload: SubmitDraftRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Submit a specific draft."""
    submission = WorkflowService.submit_form(db, submission_id, current_user.user_id, payload.data)
    return to_response(submission)


@router.delete("/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Discard the caller's own draft."""
    WorkflowService.discard(db, submission_id, current_user.user_id)


@router.post("/{submission_id}/revision", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def start_revision(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Start a new draft from a returned submission."""
    draft = WorkflowService.start_revision(db, submission_id, current_user.user_id)
    return to_response(draft)
