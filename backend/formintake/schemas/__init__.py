"""Pydantic schemas for form structures, rendering and request/response validation."""

from formintake.schemas.user import (
    UserRole,
    CurrentUser,
)
from formintake.schemas.structure import (
    FieldType,
    FormField,
    FormPage,
    FormSchema,
    parse_schema,
    serialize_schema,
    get_page,
)
from formintake.schemas.validation import (
    FieldError,
    ValidationResult,
)
from formintake.schemas.rendering import (
    ControlKind,
    StepState,
    FieldView,
    PageView,
    ProgressView,
    FormView,
    PageRenderResponse,
)
from formintake.schemas.template import (
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    TemplateListResponse,
    FormHtmlResponse,
)
from formintake.schemas.submission import (
    AutosaveRequest,
    SubmitRequest,
    SubmitDraftRequest,
    AssignRequest,
    ApproveRequest,
    ReasonRequest,
    SubmissionResponse,
    DashboardStats,
)
from formintake.schemas.notification import (
    NotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
)
from formintake.schemas.audit import (
    AuditEntryResponse,
    AuditLogResponse,
)

__all__ = [
    # User
    "UserRole",
    "CurrentUser",
    # Structure
    "FieldType",
    "FormField",
    "FormPage",
    "FormSchema",
    "parse_schema",
    "serialize_schema",
    "get_page",
    # Validation
    "FieldError",
    "ValidationResult",
    # Rendering
    "ControlKind",
    "StepState",
    "FieldView",
    "PageView",
    "ProgressView",
    "FormView",
    "PageRenderResponse",
    # Template
    "TemplateCreate",
    "TemplateUpdate",
    "TemplateResponse",
    "TemplateListResponse",
    "FormHtmlResponse",
    # Submission
    "AutosaveRequest",
    "SubmitRequest",
    "SubmitDraftRequest",
    "AssignRequest",
    "ApproveRequest",
    "ReasonRequest",
    "SubmissionResponse",
    "DashboardStats",
    # Notification
    "NotificationResponse",
    "UnreadCountResponse",
    "MarkAllReadResponse",
    # Audit
    "AuditEntryResponse",
    "AuditLogResponse",
]
