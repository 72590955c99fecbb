# src/echo_feedback/models/__init__.py
"""SQLAlchemy models for the Echo application."""

from .audit_log import AuditLog
from .feedback import Feedback, FeedbackLike
from .report import Report
from .user import User

__all__ = [
    "AuditLog",
    "Feedback", "FeedbackLike",
    "Report",
    "User",
]
