"""Submission workflow: drafts, submission and review transitions."""

import logging
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formintake.config import get_settings
from formintake.errors import (
    FieldValidationError,
    InvalidTransitionError,
    PageOutOfRangeError,
)
from formintake.models.submission import FormSubmission, FormStatus
from formintake.models.template import FormTemplate
from formintake.schemas.answers import encode_answers
from formintake.schemas.structure import FormSchema, parse_schema
from formintake.services.audit import AuditService
from formintake.services.notification import NotificationService
from formintake.services.submission import SubmissionService
from formintake.services.template import TemplateService
from formintake.services.validation import validate

logger = logging.getLogger(__name__)


class WorkflowEvent(str, PyEnum):
    """Things that can happen to a submission."""
    SAVE_PROGRESS = "save_progress"
    SUBMIT = "submit"
    ASSIGN_FOR_REVIEW = "assign_for_review"
    APPROVE = "approve"
    RETURN = "return"
    REJECT = "reject"
    DISCARD = "discard"
    START_REVISION = "start_revision"


# event -> {from status: to status}. A from status of None means no
# submission exists yet; a to status of None means the row is deleted.
# START_REVISION leaves the returned row alone and yields a new draft.
TRANSITIONS: Dict[WorkflowEvent, Dict[Optional[FormStatus], Optional[FormStatus]]] = {
    WorkflowEvent.SAVE_PROGRESS: {None: FormStatus.DRAFT, FormStatus.DRAFT: FormStatus.DRAFT},
    WorkflowEvent.SUBMIT: {FormStatus.DRAFT: FormStatus.SUBMITTED},
    WorkflowEvent.ASSIGN_FOR_REVIEW: {FormStatus.SUBMITTED: FormStatus.UNDER_REVIEW},
    WorkflowEvent.APPROVE: {FormStatus.UNDER_REVIEW: FormStatus.APPROVED},
    WorkflowEvent.RETURN: {FormStatus.UNDER_REVIEW: FormStatus.RETURNED},
    WorkflowEvent.REJECT: {FormStatus.UNDER_REVIEW: FormStatus.REJECTED},
    WorkflowEvent.DISCARD: {FormStatus.DRAFT: None},
    WorkflowEvent.START_REVISION: {FormStatus.RETURNED: FormStatus.DRAFT},
}

# Older clients return submissions that were never assigned
LEGACY_TRANSITIONS = {
    WorkflowEvent.RETURN: {FormStatus.SUBMITTED: FormStatus.RETURNED},
}


def next_status(
    current: Optional[FormStatus],
    event: WorkflowEvent,
    allow_return_from_submitted: bool = True
) -> Optional[FormStatus]:
    """
    Status a submission moves to when ``event`` happens in ``current``.

    Raises InvalidTransitionError when the table has no such edge.
    """
    allowed = dict(TRANSITIONS[event])
    if allow_return_from_submitted:
        allowed.update(LEGACY_TRANSITIONS.get(event, {}))
    if current not in allowed:
        shown = current.value if current else "none"
        raise InvalidTransitionError(
            f"Cannot {event.value.replace('_', ' ')} from status: {shown}"
        )
    return allowed[current]


class WorkflowService:
    """
    Service for submission state transitions.

    Each transition commits the status change together with its audit entry,
    then sends notifications. Notification failures are logged and dropped.
    """

    @staticmethod
    def find_draft(db: Session, template_id: int, user_id: str) -> Optional[FormSubmission]:
        """The user's open draft for a template, if any."""
        return db.query(FormSubmission).filter(
            FormSubmission.form_template_id == template_id,
            FormSubmission.submitted_by == user_id,
            FormSubmission.status == FormStatus.DRAFT
        ).first()

    @staticmethod
    def find_or_create_draft(
        db: Session,
        template_id: int,
        user_id: str,
        seed_data: Optional[Dict[str, Any]] = None,
        revision_of_id: Optional[int] = None
    ) -> Tuple[FormSubmission, bool]:
        """
        Return ``(draft, created)`` for the user's draft on a template.

        The insert runs in a savepoint; losing a race against a concurrent
        insert trips the one-draft unique index and the winner's row is
        returned instead.
        """
        draft = WorkflowService.find_draft(db, template_id, user_id)
        if draft:
            return draft, False

        try:
            with db.begin_nested():
                draft = FormSubmission(
                    form_template_id=template_id,
                    submitted_by=user_id,
                    data=dict(seed_data or {}),
                    status=FormStatus.DRAFT,
                    current_page=1,
                    is_complete=False,
                    revision_of_id=revision_of_id,
                )
                db.add(draft)
                db.flush()
        except IntegrityError:
            logger.info(f"Concurrent draft creation for template {template_id} by {user_id}; reusing existing draft")
            draft = WorkflowService.find_draft(db, template_id, user_id)
            if draft is None:
                raise
            return draft, False

        logger.info(f"Created draft submission {draft.id} for template {template_id} by {user_id}")
        return draft, True

    @staticmethod
    def _load_schema(template: FormTemplate) -> FormSchema:
        return parse_schema(template.structure_json)

    @staticmethod
    def _merge_answers(submission: FormSubmission, answers: Optional[Mapping[str, Any]]) -> None:
        if not answers:
            return
        merged = dict(submission.data or {})
        merged.update(encode_answers(answers))
        # Reassign so the JSON column is flagged dirty
        submission.data = merged

    @staticmethod
    def _require_owner(submission: FormSubmission, user_id: str, action: str) -> None:
        if submission.submitted_by != user_id:
            raise InvalidTransitionError(f"Only the submitter can {action} this submission")

    @staticmethod
    def _notify(db: Session, description: str, send: Callable[..., Any], *args: Any) -> None:
        """Run a notification send after commit; failures never propagate."""
        try:
            send(db, *args)
        except Exception:
            logger.warning(f"Failed to send {description} notification", exc_info=True)
            db.rollback()

    # Drafts

    @staticmethod
    def save_progress(
        db: Session,
        template_id: int,
        user_id: str,
        answers: Optional[Mapping[str, Any]],
        current_page: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> FormSubmission:
        """
        Autosave: merge answers into the user's draft, creating it if needed.

        Keys present in ``answers`` overwrite stored values; other stored
        answers are kept.
        """
        template = TemplateService.get_active_template(db, template_id)
        schema = WorkflowService._load_schema(template)
        if current_page < 1 or current_page > schema.total_pages:
            raise PageOutOfRangeError(current_page, schema.total_pages)

        draft, created = WorkflowService.find_or_create_draft(db, template_id, user_id)
        next_status(draft.status, WorkflowEvent.SAVE_PROGRESS)

        WorkflowService._merge_answers(draft, answers)
        draft.current_page = current_page
        draft.updated_at = datetime.utcnow()

        AuditService.record(
            db,
            user_id=user_id,
            action="SaveProgress",
            entity_type="FormSubmission",
            entity_id=draft.id,
            details=f"Saved progress on page {current_page} of {schema.total_pages}"
                    + (" (new draft)" if created else ""),
            new_values={"current_page": current_page, "fields": sorted((answers or {}).keys())},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.commit()
        db.refresh(draft)

        WorkflowService._notify(db, "progress saved", NotificationService.send_progress_saved, draft)
        return draft

    @staticmethod
    def discard(db: Session, submission_id: int, user_id: str) -> None:
        """Delete the user's own draft."""
        submission = SubmissionService.get_submission(db, submission_id)
        WorkflowService._require_owner(submission, user_id, "discard")
        next_status(submission.status, WorkflowEvent.DISCARD)

        AuditService.record(
            db,
            user_id=user_id,
            action="DiscardDraft",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=f"Discarded draft for template {submission.form_template_id}",
            old_values={"data": submission.data, "current_page": submission.current_page},
        )
        db.delete(submission)
        db.commit()
        logger.info(f"Discarded draft submission {submission_id} by {user_id}")

    @staticmethod
    def start_revision(db: Session, submission_id: int, user_id: str) -> FormSubmission:
        """
        Open a new draft from a returned submission.

        The returned row stays as history. A draft the user already has for
        the template is reused as is, only linked to the returned row.
        """
        returned = SubmissionService.get_submission(db, submission_id)
        WorkflowService._require_owner(returned, user_id, "revise")
        next_status(returned.status, WorkflowEvent.START_REVISION)
        TemplateService.get_active_template(db, returned.form_template_id)

        draft, created = WorkflowService.find_or_create_draft(
            db,
            returned.form_template_id,
            user_id,
            seed_data=returned.data,
            revision_of_id=returned.id,
        )
        if not created and draft.revision_of_id is None:
            draft.revision_of_id = returned.id

        AuditService.record(
            db,
            user_id=user_id,
            action="StartRevision",
            entity_type="FormSubmission",
            entity_id=draft.id,
            details=f"Started revision of returned submission {returned.id}",
            new_values={"revision_of_id": returned.id},
        )
        db.commit()
        db.refresh(draft)
        return draft

    # Submission

    @staticmethod
    def submit_form(
        db: Session,
        submission_id: int,
        user_id: str,
        answers: Optional[Mapping[str, Any]] = None
    ) -> FormSubmission:
        """
        Submit a draft after merging any final answers.

        When required fields are blank the merged draft is still saved and
        FieldValidationError lists the failures.
        """
        submission = SubmissionService.get_submission(db, submission_id)
        WorkflowService._require_owner(submission, user_id, "submit")
        next_status(submission.status, WorkflowEvent.SUBMIT)

        schema = WorkflowService._load_schema(submission.template)
        WorkflowService._merge_answers(submission, answers)
        submission.updated_at = datetime.utcnow()

        result = validate(schema, encode_answers(submission.data or {}))
        if not result.is_valid:
            db.commit()
            logger.info(
                f"Submission {submission.id} failed validation: {', '.join(result.failed_field_ids)}"
            )
            raise FieldValidationError(result.errors)

        submission.status = FormStatus.SUBMITTED
        submission.is_complete = True
        submission.current_page = schema.total_pages
        submission.submitted_at = datetime.utcnow()

        AuditService.record(
            db,
            user_id=user_id,
            action="SubmitForm",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=f"Submitted form {submission.template.name}",
            old_values={"status": FormStatus.DRAFT.value},
            new_values={"status": FormStatus.SUBMITTED.value},
        )
        db.commit()
        db.refresh(submission)
        logger.info(f"Submission {submission.id} submitted by {user_id}")

        WorkflowService._notify(db, "form submitted", NotificationService.send_form_submitted, submission)
        return submission

    @staticmethod
    def submit_draft(
        db: Session,
        template_id: int,
        user_id: str,
        answers: Optional[Mapping[str, Any]] = None
    ) -> FormSubmission:
        """Submit by template: find-or-create the draft, then submit it."""
        template = TemplateService.get_active_template(db, template_id)
        WorkflowService._load_schema(template)
        draft, _ = WorkflowService.find_or_create_draft(db, template_id, user_id)
        db.commit()
        return WorkflowService.submit_form(db, draft.id, user_id, answers)

    # Review

    @staticmethod
    def assign_for_review(
        db: Session,
        submission_id: int,
        reviewer_id: str,
        performed_by: str
    ) -> FormSubmission:
        """Move a submitted form under review with a named reviewer."""
        if not reviewer_id or not reviewer_id.strip():
            raise InvalidTransitionError("A reviewer must be specified")

        submission = SubmissionService.get_submission(db, submission_id)
        old_status = submission.status
        submission.status = next_status(old_status, WorkflowEvent.ASSIGN_FOR_REVIEW)
        submission.assigned_reviewer = reviewer_id.strip()
        submission.is_under_review = True
        submission.updated_at = datetime.utcnow()

        AuditService.record(
            db,
            user_id=performed_by,
            action="AssignForReview",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=f"Assigned to {submission.assigned_reviewer}",
            old_values={"status": old_status.value},
            new_values={"status": submission.status.value, "assigned_reviewer": submission.assigned_reviewer},
        )
        db.commit()
        db.refresh(submission)
        logger.info(f"Submission {submission.id} assigned to {submission.assigned_reviewer} by {performed_by}")

        WorkflowService._notify(
            db, "review assignment", NotificationService.send_assigned_for_review,
            submission, submission.assigned_reviewer
        )
        return submission

    @staticmethod
    def approve(
        db: Session,
        submission_id: int,
        reviewer_id: str,
        notes: Optional[str] = None
    ) -> FormSubmission:
        """Approve a submission under review."""
        submission = SubmissionService.get_submission(db, submission_id)
        old_status = submission.status
        submission.status = next_status(old_status, WorkflowEvent.APPROVE)

        now = datetime.utcnow()
        submission.is_under_review = False
        submission.reviewed_by = reviewer_id
        submission.reviewed_at = now
        submission.approved_at = now
        submission.review_notes = notes
        submission.updated_at = now

        AuditService.record(
            db,
            user_id=reviewer_id,
            action="ApproveForm",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=notes or "Approved",
            old_values={"status": old_status.value},
            new_values={"status": submission.status.value},
        )
        db.commit()
        db.refresh(submission)
        logger.info(f"Submission {submission.id} approved by {reviewer_id}")

        WorkflowService._notify(db, "form approved", NotificationService.send_form_approved, submission)
        return submission

    @staticmethod
    def return_submission(
        db: Session,
        submission_id: int,
        reviewer_id: str,
        reason: str
    ) -> FormSubmission:
        """Send a submission back to its submitter for revision."""
        if not reason or not reason.strip():
            raise InvalidTransitionError("A return reason is required")

        submission = SubmissionService.get_submission(db, submission_id)
        old_status = submission.status
        submission.status = next_status(
            old_status,
            WorkflowEvent.RETURN,
            get_settings().allow_return_from_submitted
        )

        now = datetime.utcnow()
        submission.is_under_review = False
        submission.review_attempts = (submission.review_attempts or 0) + 1
        submission.return_reason = reason.strip()
        submission.returned_at = now
        submission.reviewed_by = reviewer_id
        submission.reviewed_at = now
        submission.updated_at = now

        AuditService.record(
            db,
            user_id=reviewer_id,
            action="ReturnForm",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=submission.return_reason,
            old_values={"status": old_status.value},
            new_values={"status": submission.status.value, "review_attempts": submission.review_attempts},
        )
        db.commit()
        db.refresh(submission)
        logger.info(f"Submission {submission.id} returned by {reviewer_id} (attempt {submission.review_attempts})")

        WorkflowService._notify(
            db, "form returned", NotificationService.send_form_returned,
            submission, submission.return_reason
        )
        return submission

    @staticmethod
    def reject(
        db: Session,
        submission_id: int,
        reviewer_id: str,
        reason: str
    ) -> FormSubmission:
        """Reject a submission under review."""
        if not reason or not reason.strip():
            raise InvalidTransitionError("A rejection reason is required")

        submission = SubmissionService.get_submission(db, submission_id)
        old_status = submission.status
        submission.status = next_status(old_status, WorkflowEvent.REJECT)

        now = datetime.utcnow()
        submission.is_under_review = False
        submission.reviewed_by = reviewer_id
        submission.reviewed_at = now
        submission.review_notes = reason.strip()
        submission.updated_at = now

        AuditService.record(
            db,
            user_id=reviewer_id,
            action="RejectForm",
            entity_type="FormSubmission",
            entity_id=submission.id,
            details=submission.review_notes,
            old_values={"status": old_status.value},
            new_values={"status": submission.status.value},
        )
        db.commit()
        db.refresh(submission)
        logger.info(f"Submission {submission.id} rejected by {reviewer_id}")

        WorkflowService._notify(
            db, "form rejected", NotificationService.send_form_rejected,
            submission, submission.review_notes
        )
        return submission
