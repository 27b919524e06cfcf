"""SQLAlchemy models for the form intake service."""

from formintake.models.template import FormTemplate
from formintake.models.submission import FormSubmission, FormStatus
from formintake.models.notification import Notification, NotificationType, NotificationStatus
from formintake.models.audit import AuditLog

__all__ = [
    "FormTemplate",
    "FormSubmission",
    "FormStatus",
    "Notification",
    "NotificationType",
    "NotificationStatus",
    "AuditLog",
]
