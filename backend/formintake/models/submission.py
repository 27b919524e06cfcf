"""Form submission model and workflow status."""

from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum as PyEnum

from sqlalchemy import (
    String, Text, DateTime, ForeignKey, JSON, Enum, Integer, Boolean, Index, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formintake.database import Base


class FormStatus(str, PyEnum):
    """Submission workflow states."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    RETURNED = "returned"
    REJECTED = "rejected"

    @property
    def ordinal(self) -> int:
        """Position in the workflow (draft=0 ... rejected=5)."""
        return list(FormStatus).index(self)

    @property
    def is_terminal(self) -> bool:
        """No further transitions for this submission row."""
        return self in (FormStatus.APPROVED, FormStatus.REJECTED, FormStatus.RETURNED)

    def __str__(self) -> str:
        return self.value


class FormSubmission(Base):
    """
    FormSubmission is one user's answers to one template.

    A user has at most one draft per template: the partial unique index below
    backs the find-or-create done on every autosave. Once submitted, a new
    draft may be started independently.
    """

    __tablename__ = "form_submissions"
    __table_args__ = (
        Index(
            "uq_form_submissions_one_draft",
            "form_template_id",
            "submitted_by",
            unique=True,
            sqlite_where=text("status = 'draft'"),
            postgresql_where=text("status = 'draft'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # Template reference
    form_template_id: Mapped[int] = mapped_column(
        ForeignKey("form_templates.id"),
        nullable=False,
        index=True
    )

    # Submitter identity
    submitted_by: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Working answers (field id -> string)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Status tracking
    status: Mapped[FormStatus] = mapped_column(
        Enum(FormStatus, values_callable=lambda x: [e.value for e in x], native_enum=False),
        default=FormStatus.DRAFT,
        nullable=False,
        index=True
    )
    current_page: Mapped[int] = mapped_column(Integer, default=1)
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False)

    # Review information
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    return_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Workflow tracking
    is_under_review: Mapped[bool] = mapped_column(Boolean, default=False)
    assigned_reviewer: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True
    )
    review_attempts: Mapped[int] = mapped_column(Integer, default=0)

    # Returned submission this draft revises
    revision_of_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("form_submissions.id", ondelete="SET NULL"),
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    template: Mapped["FormTemplate"] = relationship(
        "FormTemplate",
        back_populates="submissions"
    )

    def __repr__(self) -> str:
        return f"<FormSubmission(id={self.id}, template_id={self.form_template_id}, status='{self.status}')>"
