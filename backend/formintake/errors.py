"""Domain errors raised by the form services.

Services raise these instead of ``HTTPException`` so the same code paths can
be used from scripts and tests; ``formintake.main`` maps each class to an
HTTP response.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from formintake.schemas.validation import FieldError


class FormsError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SchemaParseError(FormsError):
    """Form structure JSON is malformed or missing required structure."""


class NotFoundError(FormsError):
    """Unknown template, submission, page or notification."""


class PageOutOfRangeError(NotFoundError):
    """Page number outside ``[1, total_pages]``."""

    def __init__(self, page_number: int, total_pages: int):
        super().__init__(
            f"Invalid page number {page_number}. Form has {total_pages} pages."
        )
        self.page_number = page_number
        self.total_pages = total_pages


class FieldValidationError(FormsError):
    """One or more required fields are missing or blank."""

    def __init__(self, errors: List["FieldError"], message: Optional[str] = None):
        super().__init__(message or "Form validation failed")
        self.errors = errors


class InvalidTransitionError(FormsError):
    """A workflow guard rejected the requested transition."""


class ExternalServiceError(FormsError):
    """AI generation or document extraction collaborator failed."""


class UploadRejectedError(FormsError):
    """Uploaded file has an unsupported type or is too large."""
