"""In-app notification model."""

from datetime import datetime
from typing import Optional
from enum import Enum as PyEnum

from sqlalchemy import String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formintake.database import Base


class NotificationType(str, PyEnum):
    """Kinds of notification shown in the inbox."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    FORM_SUBMITTED = "form_submitted"
    FORM_RETURNED = "form_returned"
    FORM_APPROVED = "form_approved"
    FORM_REJECTED = "form_rejected"
    FORM_ASSIGNED = "form_assigned"


class NotificationStatus(str, PyEnum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


class Notification(Base):
    """A message addressed to one identity (submitter or reviewer)."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    recipient_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, values_callable=lambda x: [e.value for e in x], native_enum=False),
        default=NotificationType.INFO,
        nullable=False
    )
    status: Mapped[NotificationStatus] = mapped_column(
        Enum(NotificationStatus, values_callable=lambda x: [e.value for e in x], native_enum=False),
        default=NotificationStatus.UNREAD,
        nullable=False,
        index=True
    )

    # Related entities
    form_submission_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("form_submissions.id", ondelete="SET NULL"),
        nullable=True
    )
    form_template_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("form_templates.id", ondelete="SET NULL"),
        nullable=True
    )

    action_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    submission: Mapped[Optional["FormSubmission"]] = relationship("FormSubmission")

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, recipient='{self.recipient_id}', type='{self.type}')>"
