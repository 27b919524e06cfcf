"""Service layer for business logic."""

from formintake.services.audit import AuditService
from formintake.services.document import DocumentProcessingService
from formintake.services.generation import FormGenerationService
from formintake.services.notification import NotificationService
from formintake.services.rendering import RenderingService
from formintake.services.submission import SubmissionService
from formintake.services.template import TemplateService
from formintake.services.workflow import WorkflowService

__all__ = [
    "AuditService",
    "DocumentProcessingService",
    "FormGenerationService",
    "NotificationService",
    "RenderingService",
    "SubmissionService",
    "TemplateService",
    "WorkflowService",
]
