"""Form template model."""

from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, Text, DateTime, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formintake.database import Base


class FormTemplate(Base):
    """
    FormTemplate holds one form definition.

    The structure JSON (pages, fields, validation, layout) is stored as an
    opaque text blob exactly as it was accepted, either typed in by staff or
    produced by AI generation from an uploaded image or document.
    """

    __tablename__ = "form_templates"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(500), default="")
    category: Mapped[str] = mapped_column(String(100), default="General")

    # Form structure document
    structure_json: Mapped[str] = mapped_column(Text, nullable=False)
    total_pages: Mapped[int] = mapped_column(Integer, default=1)

    # AI generation metadata
    original_file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    generated_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    generated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Audit fields
    created_by: Mapped[str] = mapped_column(String(100), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    # Relationships
    submissions: Mapped[List["FormSubmission"]] = relationship(
        "FormSubmission",
        back_populates="template"
    )

    def __repr__(self) -> str:
        return f"<FormTemplate(id={self.id}, name='{self.name}', pages={self.total_pages})>"
