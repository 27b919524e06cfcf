"""Read-side queries over form submissions."""

from typing import Optional, List, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from formintake.errors import NotFoundError
from formintake.models.submission import FormSubmission, FormStatus


class SubmissionService:
    """Service for listing and summarizing submissions."""

    @staticmethod
    def get_submission(db: Session, submission_id: int) -> FormSubmission:
        submission = db.query(FormSubmission).options(
            joinedload(FormSubmission.template)
        ).filter(FormSubmission.id == submission_id).first()
        if not submission:
            raise NotFoundError("Submission not found")
        return submission

    @staticmethod
    def get_submissions(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        status_filter: Optional[FormStatus] = None,
        submitted_by: Optional[str] = None,
        template_id: Optional[int] = None
    ) -> List[FormSubmission]:
        """Submissions matching the filters, most recently updated first."""
        query = db.query(FormSubmission)
        if status_filter:
            query = query.filter(FormSubmission.status == status_filter)
        if submitted_by:
            query = query.filter(FormSubmission.submitted_by == submitted_by)
        if template_id:
            query = query.filter(FormSubmission.form_template_id == template_id)
        return query.options(
            joinedload(FormSubmission.template)
        ).order_by(
            FormSubmission.updated_at.desc(), FormSubmission.id.desc()
        ).offset(skip).limit(limit).all()

    @staticmethod
    def get_assignments(db: Session, reviewer_id: str) -> List[FormSubmission]:
        """Submissions currently under review by one reviewer."""
        return db.query(FormSubmission).options(
            joinedload(FormSubmission.template)
        ).filter(
            FormSubmission.assigned_reviewer == reviewer_id,
            FormSubmission.status == FormStatus.UNDER_REVIEW
        ).order_by(FormSubmission.submitted_at.asc()).all()

    @staticmethod
    def get_dashboard_stats(db: Session) -> Dict[str, int]:
        """Counts per workflow status, plus the total."""
        rows = db.query(
            FormSubmission.status, func.count(FormSubmission.id)
        ).group_by(FormSubmission.status).all()
        counts = {status: count for status, count in rows}

        return {
            "total_submissions": sum(counts.values()),
            "drafts": counts.get(FormStatus.DRAFT, 0),
            "pending_review": counts.get(FormStatus.SUBMITTED, 0),
            "under_review": counts.get(FormStatus.UNDER_REVIEW, 0),
            "approved": counts.get(FormStatus.APPROVED, 0),
            "returned": counts.get(FormStatus.RETURNED, 0),
            "rejected": counts.get(FormStatus.REJECTED, 0),
        }
