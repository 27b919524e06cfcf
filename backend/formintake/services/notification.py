"""In-app notifications for workflow events."""

import logging
from typing import Optional, List
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from formintake.config import get_settings
from formintake.errors import NotFoundError
from formintake.models.notification import Notification, NotificationType, NotificationStatus
from formintake.models.submission import FormSubmission

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service for notification operations.

    Every ``send_*`` method commits its own rows. The workflow calls them
    after the state change has been committed, so a failure here never
    undoes a transition.
    """

    @staticmethod
    def reviewers() -> List[str]:
        """Identities notified about new submissions."""
        return get_settings().default_reviewers_list

    @staticmethod
    def create_notification(
        db: Session,
        recipient_id: str,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        form_submission_id: Optional[int] = None,
        form_template_id: Optional[int] = None,
        action_url: Optional[str] = None,
        commit: bool = True
    ) -> Notification:
        """Create a notification for one recipient."""
        db_notification = Notification(
            recipient_id=recipient_id,
            title=title,
            message=message,
            type=notification_type,
            status=NotificationStatus.UNREAD,
            form_submission_id=form_submission_id,
            form_template_id=form_template_id,
            action_url=action_url,
        )
        db.add(db_notification)
        if commit:
            db.commit()
            db.refresh(db_notification)
        logger.info(f"Created notification for user {recipient_id}: {title}")
        return db_notification

    @staticmethod
    def get_user_notifications(
        db: Session,
        recipient_id: str,
        unread_only: bool = False,
        limit: Optional[int] = None
    ) -> List[Notification]:
        """Notifications for one recipient, newest first."""
        query = db.query(Notification).options(
            joinedload(Notification.submission)
        ).filter(Notification.recipient_id == recipient_id)
        if unread_only:
            query = query.filter(Notification.status == NotificationStatus.UNREAD)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_unread_count(db: Session, recipient_id: str) -> int:
        return db.query(Notification).filter(
            Notification.recipient_id == recipient_id,
            Notification.status == NotificationStatus.UNREAD
        ).count()

    @staticmethod
    def mark_as_read(db: Session, notification_id: int, recipient_id: str) -> Notification:
        """Mark one of the recipient's notifications read."""
        db_notification = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id
        ).first()
        if not db_notification:
            raise NotFoundError("Notification not found")

        if db_notification.status == NotificationStatus.UNREAD:
            db_notification.status = NotificationStatus.READ
            db_notification.read_at = datetime.utcnow()
            db.commit()
            db.refresh(db_notification)
        return db_notification

    @staticmethod
    def mark_all_as_read(db: Session, recipient_id: str) -> int:
        """Mark every unread notification read; returns how many changed."""
        unread = db.query(Notification).filter(
            Notification.recipient_id == recipient_id,
            Notification.status == NotificationStatus.UNREAD
        ).all()
        now = datetime.utcnow()
        for n in unread:
            n.status = NotificationStatus.READ
            n.read_at = now
        db.commit()
        return len(unread)

    # Workflow events

    @staticmethod
    def send_form_submitted(db: Session, submission: FormSubmission) -> List[Notification]:
        """Tell every configured reviewer about a new submission."""
        form_name = submission.template.name
        created = []
        for reviewer in NotificationService.reviewers():
            created.append(NotificationService.create_notification(
                db,
                reviewer,
                f"New Form Submission: {form_name}",
                f"A new form submission has been received from {submission.submitted_by}. "
                f"Form: {form_name}. Please assign for review or take appropriate action.",
                NotificationType.FORM_SUBMITTED,
                form_submission_id=submission.id,
                form_template_id=submission.form_template_id,
                action_url=f"/submissions/{submission.id}/review",
                commit=False,
            ))
        db.commit()
        logger.info(f"Sent form submitted notifications for submission {submission.id}")
        return created

    @staticmethod
    def send_assigned_for_review(db: Session, submission: FormSubmission, reviewer_id: str) -> Notification:
        form_name = submission.template.name
        notification = NotificationService.create_notification(
            db,
            reviewer_id,
            f"Form Assignment: {form_name}",
            f"You have been assigned to review a form submission from {submission.submitted_by}. "
            f"Form: {form_name}. Please review and take appropriate action.",
            NotificationType.FORM_ASSIGNED,
            form_submission_id=submission.id,
            form_template_id=submission.form_template_id,
            action_url=f"/submissions/{submission.id}/review",
        )
        logger.info(f"Form assignment notification sent to reviewer {reviewer_id} for submission {submission.id}")
        return notification

    @staticmethod
    def send_form_approved(db: Session, submission: FormSubmission) -> Notification:
        return NotificationService.create_notification(
            db,
            submission.submitted_by,
            "Form Approved",
            f"Your form submission '{submission.template.name}' has been approved.",
            NotificationType.FORM_APPROVED,
            form_submission_id=submission.id,
            form_template_id=submission.form_template_id,
            action_url=f"/submissions/{submission.id}",
        )

    @staticmethod
    def send_form_returned(db: Session, submission: FormSubmission, reason: str) -> Notification:
        return NotificationService.create_notification(
            db,
            submission.submitted_by,
            "Form Returned for Revision",
            f"Your form submission '{submission.template.name}' has been returned for revision. "
            f"Reason: {reason}",
            NotificationType.FORM_RETURNED,
            form_submission_id=submission.id,
            form_template_id=submission.form_template_id,
            action_url=f"/forms/{submission.form_template_id}/fill?revisionOf={submission.id}",
        )

    @staticmethod
    def send_form_rejected(db: Session, submission: FormSubmission, reason: str) -> Notification:
        return NotificationService.create_notification(
            db,
            submission.submitted_by,
            "Form Rejected",
            f"Your form submission '{submission.template.name}' has been rejected. Reason: {reason}",
            NotificationType.FORM_REJECTED,
            form_submission_id=submission.id,
            form_template_id=submission.form_template_id,
            action_url=f"/submissions/{submission.id}",
        )

    @staticmethod
    def send_progress_saved(db: Session, submission: FormSubmission) -> Optional[Notification]:
        """Milestone reminder on every fifth page of long forms."""
        if submission.current_page <= 1 or submission.current_page % 5 != 0:
            return None
        template = submission.template
        return NotificationService.create_notification(
            db,
            submission.submitted_by,
            "Form Progress Saved",
            f"Your progress on form '{template.name}' has been saved. "
            f"You are currently on page {submission.current_page} of {template.total_pages}.",
            NotificationType.INFO,
            form_submission_id=submission.id,
            form_template_id=submission.form_template_id,
            action_url=f"/forms/{submission.form_template_id}/fill",
        )
