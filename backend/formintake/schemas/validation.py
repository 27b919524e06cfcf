"""Validation result schemas."""

from typing import List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single failed check. ``field_id`` is None for form-level errors."""
    field_id: Optional[str] = None
    label: Optional[str] = None
    page_number: Optional[int] = None
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating an answer map against a form structure."""
    errors: List[FieldError] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def failed_field_ids(self) -> List[str]:
        return [e.field_id for e in self.errors if e.field_id]
